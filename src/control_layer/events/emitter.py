"""Synchronous publish/subscribe for state manager lifecycle events.

Handlers run in registration order on the emitting call. A handler that
raises is logged and skipped; the remaining handlers still run and the
operation that emitted the event is not rolled back.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from .schema import StateEvent

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]
EventName = Union[StateEvent, str]


def _event_key(event: EventName) -> str:
    if isinstance(event, StateEvent):
        return event.value
    known = {e.value for e in StateEvent}
    if event not in known:
        raise ValueError(f"Unknown event '{event}', expected one of {', '.join(sorted(known))}")
    return event


class EventEmitter:
    """Per-instance handler registry; never shared between managers."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._once: Dict[str, List[Handler]] = {}

    def on(self, event: EventName, handler: Optional[Handler] = None) -> Any:
        """Subscribe ``handler`` and return it.

        Called without a handler, returns a decorator that subscribes the
        decorated function.
        """
        key = _event_key(event)
        if handler is None:
            return lambda func: self.on(key, func)
        handlers = self._handlers.setdefault(key, [])
        if handler not in handlers:
            handlers.append(handler)
        return handler

    def once(self, event: EventName, handler: Optional[Handler] = None) -> Any:
        """Subscribe ``handler`` for the next emission only."""
        key = _event_key(event)
        if handler is None:
            return lambda func: self.once(key, func)
        self.on(key, handler)
        self._once.setdefault(key, []).append(handler)
        return handler

    def off(self, event: EventName, handler: Handler) -> None:
        """Unsubscribe ``handler``; unknown handlers are ignored."""
        key = _event_key(event)
        if handler in self._handlers.get(key, []):
            self._handlers[key].remove(handler)
        if handler in self._once.get(key, []):
            self._once[key].remove(handler)

    def listener_count(self, event: EventName) -> int:
        return len(self._handlers.get(_event_key(event), []))

    def clear(self) -> None:
        self._handlers.clear()
        self._once.clear()

    def emit(self, event: EventName, payload: Any = None) -> int:
        """Call every handler for ``event`` with ``payload``.

        Returns:
            Number of handlers that completed without raising.
        """
        key = _event_key(event)
        # Copy: handlers may subscribe/unsubscribe while we iterate.
        handlers = list(self._handlers.get(key, []))
        once = self._once.pop(key, [])
        for handler in once:
            if handler in self._handlers.get(key, []):
                self._handlers[key].remove(handler)

        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Error in '{key}' handler {handler!r}: {e}")
        return delivered
