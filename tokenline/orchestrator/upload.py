"""Sequential multi-file upload through the authenticated path."""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from ..context import ClientContext
from ..errors import ApiError, TransportError, UserCancelled, error_message
from ..protocols import IFilePicker, IPresenter, ITransport
from ..services.auth import AuthCoordinator

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Picks files and uploads them one at a time.

    A single overlay covers the whole batch. It is a separate presenter
    channel, so the reference-counted loading indicator never hides it.
    """

    def __init__(
        self,
        context: ClientContext,
        auth: AuthCoordinator,
        transport: ITransport,
        presenter: IPresenter,
        file_picker: Optional[IFilePicker] = None,
    ):
        self._context = context
        self._auth = auth
        self._transport = transport
        self._presenter = presenter
        self._file_picker = file_picker

    def get_upload_url(self, endpoint: str) -> str:
        return f"{self._context.remote_root}{endpoint}"

    async def upload_file(self, endpoint: str, file_path: str) -> Any:
        """Upload one file and return the parsed JSON response."""
        url = self.get_upload_url(endpoint)
        token = await self._auth.get_token()
        logger.debug("Uploading %s to %s", file_path, url)
        try:
            text = await self._transport.upload_once(
                url,
                str(file_path),
                {"Authorization": f"bearer {token}"},
                self._context.config.upload_field_name,
            )
        except ApiError:
            raise
        except Exception as exc:
            raise TransportError(error_message(exc) or "") from exc

        try:
            return json.loads(text)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Invalid upload response for {file_path}: {exc}") from exc

    async def upload_image(self, endpoint: str) -> List[Any]:
        """
        Let the user pick files and upload them sequentially.

        Returns one parsed response per chosen file, in the chosen order. The
        first failure aborts the remaining uploads and propagates.
        """
        file_paths = await self._choose_files()
        # Log in before the overlay goes up so a login prompt is not drawn over.
        await self._auth.get_token()

        self._presenter.show_overlay(self._context.config.uploading_title)
        responses: List[Any] = []
        try:
            for file_path in file_paths:
                responses.append(await self.upload_file(endpoint, file_path))
        except Exception:
            logger.error(
                "Batch upload aborted after %d/%d files",
                len(responses),
                len(file_paths),
                exc_info=True,
            )
            raise
        finally:
            self._presenter.hide_overlay()

        logger.info("Uploaded %d files to %s", len(responses), endpoint)
        return responses

    async def _choose_files(self) -> List[str]:
        if self._file_picker is None:
            raise UserCancelled("No file picker available")
        try:
            chosen = await self._file_picker.choose_files()
        except UserCancelled:
            raise
        except Exception as exc:
            raise UserCancelled(error_message(exc) or "File selection failed") from exc
        if not chosen:
            raise UserCancelled("No files selected")
        return [str(path) for path in chosen]
