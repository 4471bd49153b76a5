# src/sequent/core/events.py

"""
Small synchronous publish/subscribe utility.

Handlers are called in subscription order, on the publisher's stack.
A failing handler is logged and skipped: publishers never see subscriber errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .ports import EventHandler

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class _Listener:
    handler: EventHandler
    once: bool = False


class EventEmitter:
    def __init__(self) -> None:
        self._listeners: dict[str, list[_Listener]] = {}

    def on(self, event: str, handler: EventHandler) -> EventEmitter:
        """Subscribe `handler` to every future `emit(event, ...)`."""
        self._listeners.setdefault(str(event), []).append(_Listener(handler))
        return self

    def once(self, event: str, handler: EventHandler) -> EventEmitter:
        """Subscribe `handler` for the next `emit(event, ...)` only."""
        self._listeners.setdefault(str(event), []).append(_Listener(handler, once=True))
        return self

    def off(self, event: str, handler: EventHandler) -> EventEmitter:
        """Remove the most recently added subscription of `handler` (no-op if absent)."""
        listeners = self._listeners.get(str(event))
        if not listeners:
            return self
        for i in range(len(listeners) - 1, -1, -1):
            if listeners[i].handler == handler:
                del listeners[i]
                break
        if not listeners:
            del self._listeners[str(event)]
        return self

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every handler of `event` with `args`.

        Returns True if at least one handler was subscribed.
        """
        key = str(event)
        listeners = self._listeners.get(key)
        if not listeners:
            return False

        snapshot = list(listeners)
        if any(item.once for item in snapshot):
            self._listeners[key] = [item for item in listeners if not item.once]
            if not self._listeners[key]:
                del self._listeners[key]

        for item in snapshot:
            try:
                item.handler(*args)
            except Exception:
                logger.exception("Event handler failed event=%s handler=%r", key, item.handler)
        return True

    def listeners(self, event: str) -> list[EventHandler]:
        return [item.handler for item in self._listeners.get(str(event), [])]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(str(event), []))

    def remove_all_listeners(self, event: str | None = None) -> EventEmitter:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(str(event), None)
        return self
