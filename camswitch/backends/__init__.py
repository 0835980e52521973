"""
Device sources and binders.

This package contains the collaborator interfaces the catalog and selector
talk to, and their Linux implementations:
- Built-in lenses and USB video-class devices via udev
- Paired Bluetooth cameras via BlueZ
- Capture-node binding via video4linux
"""

from .base import CameraBinder, DeviceSource, PlatformDevices, advertises_camera
from .exceptions import (
    ActivationFailedError,
    CamSwitchError,
    SourceUnavailableError,
    UnsupportedPlatformError,
)
from .linux import LinuxBluetoothSource, LinuxBuiltInSource, LinuxUsbSource, V4L2Binder

__all__ = [
    "CameraBinder",
    "DeviceSource",
    "PlatformDevices",
    "advertises_camera",
    "ActivationFailedError",
    "CamSwitchError",
    "SourceUnavailableError",
    "UnsupportedPlatformError",
    "LinuxBluetoothSource",
    "LinuxBuiltInSource",
    "LinuxUsbSource",
    "V4L2Binder",
]
