"""
Active device selection.

The ActiveSelector owns the published catalog and a cursor into it, and
turns navigation requests into activation requests for the camera binder.
Every state change and binder call happens under one lock so that catalog
replacement, cycling and binding are observed in a single order.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .backends.base import CameraBinder
from .events import EventManager, EventType
from .models import ClassifiedDevice

logger = logging.getLogger(__name__)


class SelectionStatus(Enum):
    """Outcome of a selection request."""
    ACTIVATED = "activated"
    UNSUPPORTED_SOURCE = "unsupported_source"
    ACTIVATION_FAILED = "activation_failed"
    NOT_FOUND = "not_found"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    EMPTY_CATALOG = "empty_catalog"


@dataclass(frozen=True)
class SelectionResult:
    """
    Result of a selection request.

    ``device`` is the device the cursor now points at, when the request
    moved it. ``error`` carries the binder's exception for ACTIVATION_FAILED.
    """
    status: SelectionStatus
    device: Optional[ClassifiedDevice] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is SelectionStatus.ACTIVATED

    @property
    def moved(self) -> bool:
        """Whether the cursor points at a newly selected device."""
        return self.device is not None


class Cursor:
    """
    Index of the active device within a catalog.

    The index is only meaningful against a non-empty catalog; every operation
    takes the catalog length and restores ``0 <= index < length`` first.
    """

    def __init__(self, index: int = 0):
        self._index = index

    @property
    def index(self) -> int:
        return self._index

    def is_valid(self, length: int) -> bool:
        return 0 <= self._index < length

    def restore(self, length: int) -> None:
        """Reset to the first device if the index fell out of range."""
        if not self.is_valid(length):
            self._index = 0

    def step(self, delta: int, length: int) -> int:
        """Move by delta with wraparound in both directions."""
        self.restore(length)
        self._index = (self._index + delta) % length
        return self._index

    def move_to(self, index: int, length: int) -> bool:
        if not 0 <= index < length:
            return False
        self._index = index
        return True

    def __repr__(self) -> str:
        return f"Cursor(index={self._index})"


class ActiveSelector:
    """
    Holds the current catalog and keeps exactly one device active.

    Navigation always moves the cursor to the requested device. Only built-in
    devices are handed to the binder; others are reported as
    UNSUPPORTED_SOURCE so that cycling can still pass over them. A binder
    failure leaves the cursor on the requested device.
    """

    def __init__(self, binder: CameraBinder, events: Optional[EventManager] = None):
        """
        Initialize the selector with an empty catalog.

        Args:
            binder: Sink for activation requests of built-in devices
            events: Optional event manager to notify of changes
        """
        self.binder = binder
        self.events = events
        self._catalog: Tuple[ClassifiedDevice, ...] = ()
        self._cursor = Cursor()
        self._lock = threading.RLock()

    @property
    def catalog(self) -> Tuple[ClassifiedDevice, ...]:
        """Read-only view of the current catalog."""
        return self._catalog

    @property
    def index(self) -> Optional[int]:
        """Cursor position, or None when there is no active device."""
        with self._lock:
            if not self._catalog:
                return None
            return self._cursor.index

    def set_catalog(self, devices: Sequence[ClassifiedDevice]) -> None:
        """Replace the catalog. Does not activate anything."""
        with self._lock:
            self._catalog = tuple(devices)
            self._cursor.restore(len(self._catalog))
            catalog = self._catalog
        logger.debug(f"Catalog replaced with {len(catalog)} device(s)")
        self._emit(EventType.ON_CATALOG_CHANGE, catalog)

    def current(self) -> Optional[ClassifiedDevice]:
        with self._lock:
            if not self._catalog:
                return None
            self._cursor.restore(len(self._catalog))
            return self._catalog[self._cursor.index]

    def select_next(self) -> SelectionResult:
        return self._step(1)

    def select_previous(self) -> SelectionResult:
        return self._step(-1)

    def select_by_id(self, device_id: str) -> SelectionResult:
        """Activate the first device with the given id."""
        return self._select_first(lambda device: device.id == device_id, f"id {device_id!r}")

    def select_by_name(self, fragment: str) -> SelectionResult:
        """Activate the first device whose display name contains fragment."""
        return self._select_first(lambda device: fragment in device.display_name, f"name {fragment!r}")

    def select_by_index(self, index: int) -> SelectionResult:
        with self._lock:
            if not self._cursor.move_to(index, len(self._catalog)):
                logger.info(f"Index {index} out of range for {len(self._catalog)} device(s)")
                return SelectionResult(SelectionStatus.INDEX_OUT_OF_RANGE)
            result = self._activate_current()
        return self._publish(result)

    def activate_current(self) -> SelectionResult:
        """Activate the device under the cursor again, e.g. to retry a failed bind."""
        with self._lock:
            if not self._catalog:
                return SelectionResult(SelectionStatus.EMPTY_CATALOG)
            self._cursor.restore(len(self._catalog))
            result = self._activate_current()
        return self._publish(result)

    def _step(self, delta: int) -> SelectionResult:
        with self._lock:
            if not self._catalog:
                return SelectionResult(SelectionStatus.EMPTY_CATALOG)
            self._cursor.step(delta, len(self._catalog))
            result = self._activate_current()
        return self._publish(result)

    def _select_first(self, predicate: Callable[[ClassifiedDevice], bool], description: str) -> SelectionResult:
        with self._lock:
            for index, device in enumerate(self._catalog):
                if predicate(device):
                    self._cursor.move_to(index, len(self._catalog))
                    result = self._activate_current()
                    break
            else:
                logger.info(f"No camera matches {description}")
                return SelectionResult(SelectionStatus.NOT_FOUND)
        return self._publish(result)

    def _activate_current(self) -> SelectionResult:
        """Bind the device under the cursor. Caller holds the lock."""
        device = self._catalog[self._cursor.index]

        if not device.is_bindable:
            logger.info(f"{device.display_name} ({device.source.value}) cannot be bound for capture")
            return SelectionResult(SelectionStatus.UNSUPPORTED_SOURCE, device)

        try:
            self.binder.bind(device.id, device.facing)
        except Exception as e:
            logger.error(f"Failed to activate {device.display_name}: {e}")
            return SelectionResult(SelectionStatus.ACTIVATION_FAILED, device, e)

        logger.info(f"Switched to {device.display_name}")
        return SelectionResult(SelectionStatus.ACTIVATED, device)

    def _publish(self, result: SelectionResult) -> SelectionResult:
        events: List[Tuple[EventType, object]] = []
        if result.moved:
            events.append((EventType.ON_SELECT, result.device))
        if result.status is SelectionStatus.ACTIVATED:
            events.append((EventType.ON_ACTIVATE, result.device))
        elif result.status is SelectionStatus.ACTIVATION_FAILED:
            events.append((EventType.ON_ACTIVATION_FAILED, result))

        for event_type, data in events:
            self._emit(event_type, data)
        return result

    def _emit(self, event_type: EventType, data) -> None:
        if self.events is not None:
            self.events.emit(event_type.value, data)
