"""
Typed event bus for loader progress notifications.

The pipeline publishes what it is doing (mods found, order resolved, scripts
run, script log output) so tools can follow along without the core knowing
about them.

Usage:
    bus = EventBus()
    bus.subscribe(LoaderEvent.SCRIPT_LOG, lambda e: print(e["message"]))

    host = ScriptHost(registry, config, events=bus)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable


logger = logging.getLogger(__name__)


class LoaderEvent(Enum):
    """Events published by the loading pipeline."""
    # Discovery
    MOD_DISCOVERED = auto()
    ORDER_RESOLVED = auto()

    # Script execution
    STAGE_STARTED = auto()
    SCRIPT_LOADED = auto()
    MODULE_LOADED = auto()
    SCRIPT_LOG = auto()

    # Conversion
    DATA_CONVERTED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether a handler has stopped propagation
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe dispatcher.

    Features:
    - Enum-keyed event types
    - Priority ordering (higher first)
    - One-shot handlers
    - Consumption stops later handlers
    - Events published from inside a handler are queued until it returns
    """

    def __init__(self):
        # event type -> list of (priority, handler, one_shot)
        self._handlers: dict[Enum, list[tuple[int, EventHandler, bool]]] = {}
        self._queue: list[Event] = []
        self._publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after its first call
        """
        handlers = self._handlers.setdefault(event_type, [])
        index = len(handlers)
        for i, (existing, _, _) in enumerate(handlers):
            if priority > existing:
                index = i
                break
        handlers.insert(index, (priority, handler, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        if event_type not in self._handlers:
            return
        self._handlers[event_type] = [
            entry for entry in self._handlers[event_type] if entry[1] != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._publishing:
            self._queue.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def handler_count(self, event_type: Enum) -> int:
        return len(self._handlers.get(event_type, ()))

    def _dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if handlers:
            self._publishing = True
            spent = []
            try:
                for entry in list(handlers):
                    _, handler, one_shot = entry
                    try:
                        handler(event)
                    except Exception:
                        logger.exception(f"Error in event handler for {event.type}")
                    if one_shot:
                        spent.append(entry)
                    if event.consumed:
                        break
            finally:
                for entry in spent:
                    if entry in handlers:
                        handlers.remove(entry)
                self._publishing = False

        while self._queue:
            self._dispatch(self._queue.pop(0))
