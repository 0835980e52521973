"""
Core data models for camswitch.

This module defines the primary data structures used throughout the camswitch
system for representing raw device records, classified catalog entries and
persisted name overrides.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class Source(Enum):
    """Transport a device was discovered through, in catalog order."""
    BUILT_IN = "built-in"
    USB = "usb"
    BLUETOOTH = "bluetooth"

    @property
    def order(self) -> int:
        """Position of this source in the catalog."""
        return list(Source).index(self)


class Facing(Enum):
    """Direction a built-in lens points, relative to the user."""
    FRONT = "front"
    BACK = "back"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DeviceRecord:
    """
    Raw device as reported by a device source.

    The id is namespaced by source (``"0"`` for a platform lens, ``"usb_3"``,
    ``"bt_AA:BB:CC:DD:EE:FF"``) and never changes meaning within a session.
    ``platform_data`` is carried along for the binder and listings but takes
    no part in equality.
    """
    id: str
    source: Source
    facing: Facing = Facing.UNKNOWN
    focal_length_mm: Optional[float] = None
    raw_capabilities: FrozenSet[int] = frozenset()
    label: Optional[str] = None
    platform_data: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ClassifiedDevice:
    """
    A device record joined with its derived names.

    ``display_name`` is the stored override when one exists, otherwise the
    classifier's ``default_name``.
    """
    record: DeviceRecord
    default_name: str
    display_name: str

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def source(self) -> Source:
        return self.record.source

    @property
    def facing(self) -> Facing:
        return self.record.facing

    @property
    def is_bindable(self) -> bool:
        """Only built-in devices can be bound for live capture."""
        return self.record.source is Source.BUILT_IN

    @property
    def has_override(self) -> bool:
        return self.display_name != self.default_name


@dataclass(eq=False)
class NameOverride:
    """
    A user-facing name entry for one device id.

    Two entries are equal when they refer to the same device id, whatever
    names they carry. Listings rely on this to drop duplicates.
    """
    device_id: str
    name: str
    default_name: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NameOverride):
            return NotImplemented
        return self.device_id == other.device_id

    def __hash__(self) -> int:
        return hash(self.device_id)

    @property
    def is_custom(self) -> bool:
        return self.name != self.default_name
