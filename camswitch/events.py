"""
Selection events for camswitch.

The selector publishes catalog replacements, cursor moves and activation
outcomes here; the CLI and TUI subscribe to keep their views current.
"""

import threading
from typing import Any, Callable, Dict, List, Optional
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """
    Events published by the active selector.

    ON_CATALOG_CHANGE carries the new catalog tuple, ON_SELECT and ON_ACTIVATE
    the ClassifiedDevice, and ON_ACTIVATION_FAILED the SelectionResult holding
    the error.
    """
    ON_CATALOG_CHANGE = "on_catalog_change"
    ON_SELECT = "on_select"
    ON_ACTIVATE = "on_activate"
    ON_ACTIVATION_FAILED = "on_activation_failed"


class EventManager:
    """
    Subscriber lists for selection events.

    The selector emits after releasing its own lock, so a callback may call
    back into the selector. A callback that raises is logged and skipped.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {
            event_type.value: [] for event_type in EventType
        }
        self._lock = threading.RLock()

    @staticmethod
    def _validate(event_type: str) -> None:
        valid_types = [e.value for e in EventType]
        if event_type not in valid_types:
            raise ValueError(f"Invalid event type '{event_type}'. Must be one of: {valid_types}")

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """
        Register a callback for a selection event.

        Subscribing the same callback twice has no effect.

        Args:
            event_type: An EventType value such as "on_select"
            callback: Called with the event payload

        Raises:
            ValueError: If event_type is not a valid EventType
            TypeError: If callback is not callable
        """
        if not callable(callback):
            raise TypeError("Callback must be callable")
        self._validate(event_type)

        with self._lock:
            if callback not in self._subscribers[event_type]:
                self._subscribers[event_type].append(callback)
                logger.debug(f"Subscribed callback to {event_type}")

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        """
        Remove a callback; unknown callbacks are ignored.

        Raises:
            ValueError: If event_type is not a valid EventType
        """
        self._validate(event_type)

        with self._lock:
            if callback in self._subscribers[event_type]:
                self._subscribers[event_type].remove(callback)
                logger.debug(f"Unsubscribed callback from {event_type}")

    def emit(self, event_type: str, data: Any = None) -> None:
        """
        Deliver a payload to every subscriber of an event.

        Subscribers are snapshotted first, so callbacks may subscribe or
        unsubscribe while the event is delivered.

        Args:
            event_type: An EventType value
            data: Catalog tuple or device; callbacks get no argument when None

        Raises:
            ValueError: If event_type is not a valid EventType
        """
        self._validate(event_type)

        with self._lock:
            callbacks = self._subscribers[event_type].copy()

        logger.debug(f"Emitting {event_type} event to {len(callbacks)} subscribers")

        for callback in callbacks:
            try:
                if data is not None:
                    callback(data)
                else:
                    callback()
            except Exception as e:
                logger.error(f"Error in event callback for {event_type}: {e}")

    def get_subscriber_count(self, event_type: str) -> int:
        """Number of callbacks registered for an event."""
        self._validate(event_type)

        with self._lock:
            return len(self._subscribers[event_type])

    def clear_subscribers(self, event_type: Optional[str] = None) -> None:
        """
        Drop the callbacks of one event, or of every event when none is given.

        Raises:
            ValueError: If event_type is provided but not a valid EventType
        """
        if event_type is not None:
            self._validate(event_type)
            with self._lock:
                self._subscribers[event_type].clear()
        else:
            with self._lock:
                for event_list in self._subscribers.values():
                    event_list.clear()
        logger.debug(f"Cleared subscribers for {event_type or 'all event types'}")
