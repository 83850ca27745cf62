"""
Protocols (Interfaces) for the host-provided collaborators.

The client never performs I/O or UI work itself; everything goes through
these small interfaces so hosts and tests can plug their own.
"""
import logging
from typing import Any, Dict, Optional, Protocol, Sequence, runtime_checkable

from .models import TransportResponse

logger = logging.getLogger(__name__)


@runtime_checkable
class ITransport(Protocol):
    """Interface for the network primitive."""

    async def request_once(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        json_body: Optional[Any] = None,
    ) -> TransportResponse:
        """Perform one request and return status code and body."""
        ...

    async def upload_once(
        self,
        url: str,
        file_path: str,
        headers: Dict[str, str],
        field_name: str,
    ) -> str:
        """Upload one file as multipart and return the raw response text."""
        ...


@runtime_checkable
class ILoginCodeProvider(Protocol):
    """Interface for the host login handshake."""

    async def get_login_code(self) -> str:
        """Return a one-shot code to exchange for a token."""
        ...


@runtime_checkable
class IFilePicker(Protocol):
    """Interface for choosing local files."""

    async def choose_files(self) -> Sequence[str]:
        """Return chosen file paths. Raises UserCancelled when declined."""
        ...


@runtime_checkable
class IPresenter(Protocol):
    """Interface for modal dialogs, the busy toast and the batch overlay."""

    def show(self, title: str, content: str, dismiss_only: bool = True) -> None:
        """Show a modal message."""
        ...

    def show_busy(self, title: str) -> None:
        """Show the busy indicator."""
        ...

    def hide_busy(self) -> None:
        """Hide the busy indicator."""
        ...

    def show_overlay(self, title: str) -> None:
        """Show the long-lived batch overlay, independent of the busy indicator."""
        ...

    def hide_overlay(self) -> None:
        """Hide the batch overlay."""
        ...


class NullPresenter:
    """Presenter that only logs; used when the host supplies none."""

    def show(self, title: str, content: str, dismiss_only: bool = True) -> None:
        logger.warning("%s: %s", title, content)

    def show_busy(self, title: str) -> None:
        logger.debug("busy: %s", title)

    def hide_busy(self) -> None:
        logger.debug("busy hidden")

    def show_overlay(self, title: str) -> None:
        logger.debug("overlay: %s", title)

    def hide_overlay(self) -> None:
        logger.debug("overlay hidden")
