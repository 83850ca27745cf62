"""
Resource Cache - derived-data accessor for UI code.

Keeps the last result per path and lets consumers subscribe to updates.
Concurrent refreshes of the same path share one request.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from ..utils.events import EventEmitter

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[Any]]


class Resource:
    """Last known data (or error) for one API path."""

    def __init__(self, path: str, fetcher: Fetcher):
        self.path = path
        self.data: Any = None
        self.error: Optional[BaseException] = None
        self._fetcher = fetcher
        self._events = EventEmitter()
        self._pending: Optional[asyncio.Task] = None

    @property
    def is_loading(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def on(self, event_name: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Subscribe to ``"update"`` (data) or ``"error"`` (exception)."""
        return self._events.on(event_name, callback)

    async def refresh(self) -> Any:
        if not self.is_loading:
            self._pending = asyncio.create_task(self._revalidate())
        return await asyncio.shield(self._pending)

    async def mutate(self, data: Any) -> None:
        """Replace the local data without a request."""
        self.data = data
        self.error = None
        await self._events.emit("update", data)

    async def _revalidate(self) -> Any:
        try:
            data = await self._fetcher(self.path)
        except Exception as exc:
            logger.debug("Revalidation of %s failed: %s", self.path, exc)
            self.error = exc
            await self._events.emit("error", exc)
            raise
        self.data = data
        self.error = None
        await self._events.emit("update", data)
        return data


class ResourceCache:
    """One Resource per path, created on first access."""

    def __init__(self, fetcher: Fetcher):
        self._fetcher = fetcher
        self._resources: Dict[str, Resource] = {}

    def get(self, path: str) -> Resource:
        resource = self._resources.get(path)
        if resource is None:
            resource = Resource(path, self._fetcher)
            self._resources[path] = resource
        return resource

    def clear(self) -> None:
        self._resources.clear()
