"""
camswitch - discover cameras, name them, and switch between them.

A Python library and terminal tool that lists built-in lenses, USB video
devices and paired Bluetooth cameras in one catalog, gives each a readable
name that the user can override, and keeps exactly one of them active.
"""

from .models import ClassifiedDevice, DeviceRecord, Facing, NameOverride, Source
from .classifier import DeviceClassifier
from .names import NameStore, NameStoreError, NameStoreCorruptionError
from .catalog import DeviceCatalog, DiscoveryResult
from .selector import ActiveSelector, Cursor, SelectionResult, SelectionStatus
from .manager import CameraSwitcher
from .backends import (
    ActivationFailedError,
    CameraBinder,
    DeviceSource,
    PlatformDevices,
    SourceUnavailableError,
)

__version__ = "0.1.0"
__all__ = [
    "ClassifiedDevice",
    "DeviceRecord",
    "Facing",
    "NameOverride",
    "Source",
    "DeviceClassifier",
    "NameStore",
    "NameStoreError",
    "NameStoreCorruptionError",
    "DeviceCatalog",
    "DiscoveryResult",
    "ActiveSelector",
    "Cursor",
    "SelectionResult",
    "SelectionStatus",
    "CameraSwitcher",
    "ActivationFailedError",
    "CameraBinder",
    "DeviceSource",
    "PlatformDevices",
    "SourceUnavailableError",
]
