import asyncio
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """Minimal event emitter for resource updates."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event_name: str, callback: Listener) -> Callable[[], None]:
        """Subscribe to an event. Returns a function that unsubscribes."""
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)
        return lambda: self.off(event_name, callback)

    def off(self, event_name: str, callback: Listener) -> None:
        """Unsubscribe from an event."""
        listeners = self._listeners.get(event_name)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    async def emit(self, event_name: str, *args, **kwargs) -> None:
        """Call every listener; coroutine listeners are awaited in order."""
        for callback in list(self._listeners.get(event_name, [])):
            try:
                result = callback(*args, **kwargs)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")
