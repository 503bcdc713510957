"""
Typed publish/subscribe channel

A channel declares the closed set of event kinds it carries. Subscribing
to or emitting an undeclared kind is a configuration error, so the event
surface of each component is an explicit contract.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventChannel:
    """
    Synchronous event channel with a declared set of event kinds

    Listeners are invoked in registration order. A listener that raises is
    logged and does not prevent delivery to the remaining listeners.

    Usage:
        channel = EventChannel([AppEvent.UPDATED_INIT_STATE], name="web_sdk")
        channel.on(AppEvent.UPDATED_INIT_STATE, print)
        channel.emit(AppEvent.UPDATED_INIT_STATE, status)
    """

    def __init__(self, events: Iterable[Enum], name: str = "events", log: Optional[logging.Logger] = None):
        self._name = name
        self._logger = log or logger
        self._listeners: Dict[Enum, List[Listener]] = {event: [] for event in events}

    @property
    def events(self) -> List[Enum]:
        """Declared event kinds"""
        return list(self._listeners.keys())

    def supports(self, event: Enum) -> bool:
        return event in self._listeners

    def on(self, event: Enum, listener: Listener) -> None:
        """Subscribe a listener to an event kind"""
        self._check(event)
        self._listeners[event].append(listener)

    def off(self, event: Enum, listener: Listener) -> None:
        """Unsubscribe a listener (no-op if it was not subscribed)"""
        self._check(event)
        listeners = self._listeners[event]
        if listener in listeners:
            listeners.remove(listener)

    def clear(self) -> None:
        """Remove every listener"""
        for listeners in self._listeners.values():
            listeners.clear()

    def listener_count(self, event: Enum) -> int:
        self._check(event)
        return len(self._listeners[event])

    def emit(self, event: Enum, *args: Any) -> None:
        """Deliver an event to every listener of its kind"""
        self._check(event)
        for listener in tuple(self._listeners[event]):
            try:
                listener(*args)
            except Exception:
                self._logger.exception(f"[{self._name}] Listener raised during '{event.name}'")

    def _check(self, event: Enum) -> None:
        if event not in self._listeners:
            raise ConfigurationError.invalid(
                "event", f"{event!r} is not declared on channel '{self._name}'"
            )
