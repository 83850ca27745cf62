"""
Loading Coordinator - one shared indicator for many concurrent requests.

The indicator is reference counted: the first push arms a debounce timer,
the last pop hides it. Requests finishing before the delay never flash it.
"""
import asyncio
import logging

from ..context import ClientContext
from ..protocols import IPresenter

logger = logging.getLogger(__name__)


class LoadingCoordinator:
    """
    Reference-counted loading indicator.

    Usage:
        loading.push()          # lazy: shows after config.spinner_delay
        try:
            ...
        finally:
            loading.pop()
    """

    def __init__(self, context: ClientContext, presenter: IPresenter):
        self._context = context
        self._presenter = presenter

    @property
    def count(self) -> int:
        return self._context.loading.count

    @property
    def visible(self) -> bool:
        return self._context.loading.visible

    def push(self, instant: bool = False) -> None:
        """Register one more request wanting the indicator."""
        state = self._context.loading
        if state.count == 0:
            delay = 0 if instant else self._context.config.spinner_delay
            loop = asyncio.get_running_loop()
            state.timer = loop.call_later(delay, self._on_timer)
        state.count += 1

    def pop(self) -> None:
        """Release one request; hide the indicator when none are left."""
        state = self._context.loading
        if state.count <= 0:
            logger.warning("pop() called with no matching push()")
            return
        state.count -= 1
        if state.count == 0:
            if state.timer is not None:
                state.timer.cancel()
                state.timer = None
            if state.visible:
                state.visible = False
                self._presenter.hide_busy()

    def _on_timer(self) -> None:
        state = self._context.loading
        state.timer = None
        if state.count > 0 and not state.visible:
            state.visible = True
            self._presenter.show_busy(self._context.config.loading_title)
