"""
Base classes and interfaces for device sources and camera binders.
"""

import platform
from abc import ABC, abstractmethod
from typing import List

from ..models import DeviceRecord, Facing, Source
from .exceptions import UnsupportedPlatformError


def advertises_camera(name) -> bool:
    """Check whether an advertised device name mentions a camera."""
    return bool(name) and "camera" in name.lower()


class DeviceSource(ABC):
    """
    Abstract base class for one kind of device enumeration.

    Each source reports raw records for a single transport. Sources fail
    independently: a failing source raises SourceUnavailableError and the
    catalog carries on with the others.
    """

    @property
    @abstractmethod
    def kind(self) -> Source:
        """The transport this source enumerates."""
        pass

    @abstractmethod
    def enumerate(self) -> List[DeviceRecord]:
        """
        Enumerate the devices currently visible through this source.

        Returns:
            List[DeviceRecord]: Records in platform enumeration order

        Raises:
            SourceUnavailableError: If the source cannot be queried
        """
        pass

    @property
    def name(self) -> str:
        """Human-readable source name used in warnings."""
        return self.kind.value


class CameraBinder(ABC):
    """
    Abstract sink for activation requests.

    A binder knows how to start streaming from a built-in device. Only one
    device is bound at a time; binding a new one releases the previous one.
    """

    @abstractmethod
    def bind(self, device_id: str, facing: Facing) -> None:
        """
        Bind the given device for capture.

        Raises:
            ActivationFailedError: If the device cannot be bound
        """
        pass

    def release(self) -> None:
        """Release the currently bound device, if any."""
        pass


class PlatformDevices:
    """
    Selects the device sources and binder for the current platform.

    Sources are returned in catalog order: built-in, USB, Bluetooth.
    """

    def __init__(self):
        """Initialize with the sources and binder of the running platform."""
        self._sources, self._binder = self._get_platform_backend()

    @property
    def sources(self) -> List[DeviceSource]:
        return list(self._sources)

    @property
    def binder(self) -> CameraBinder:
        return self._binder

    def _get_platform_backend(self):
        """
        Instantiate the sources and binder for the current platform.

        Raises:
            UnsupportedPlatformError: If the current platform is not supported
        """
        system = platform.system().lower()

        if system == "linux":
            from .linux import (
                LinuxBluetoothSource, LinuxBuiltInSource, LinuxUsbSource, V4L2Binder
            )
            sources = [LinuxBuiltInSource(), LinuxUsbSource(), LinuxBluetoothSource()]
            return sources, V4L2Binder()
        else:
            raise UnsupportedPlatformError(f"Unsupported platform: {system}", platform=system)
