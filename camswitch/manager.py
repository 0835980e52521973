"""
CameraSwitcher - main orchestrator for the camswitch system.

This module contains the CameraSwitcher class that wires the name store,
device catalog, active selector and event handling into one API for the
presentation layers.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .backends import CameraBinder, DeviceSource, PlatformDevices
from .catalog import DeviceCatalog, DiscoveryResult
from .events import EventManager
from .models import ClassifiedDevice, NameOverride
from .names import NameStore
from .selector import ActiveSelector, SelectionResult

logger = logging.getLogger(__name__)


class CameraSwitcher:
    """
    Main camswitch manager class that orchestrates all system components.

    Discovery publishes a fresh catalog to the selector; navigation and
    renaming go through the selector and catalog respectively.
    """

    def __init__(
        self,
        names_path: Optional[Path] = None,
        sources: Optional[Sequence[DeviceSource]] = None,
        binder: Optional[CameraBinder] = None,
        parallel_discovery: bool = True
    ):
        """
        Initialize the camera switcher.

        Args:
            names_path: Optional custom path for the name store file
            sources: Device sources, defaults to the current platform's
            binder: Camera binder, defaults to the current platform's
            parallel_discovery: Query sources concurrently during discovery

        Raises:
            UnsupportedPlatformError: If defaults are needed on an unsupported platform
        """
        if sources is None or binder is None:
            platform_devices = PlatformDevices()
            sources = platform_devices.sources if sources is None else sources
            binder = platform_devices.binder if binder is None else binder

        self.names = NameStore(names_path)
        self.events = EventManager()
        self.catalog = DeviceCatalog(sources, self.names, parallel=parallel_discovery)
        self.selector = ActiveSelector(binder, self.events)

        logger.info("Camera switcher initialized")

    @property
    def devices(self) -> Tuple[ClassifiedDevice, ...]:
        """The catalog currently used for navigation."""
        return self.selector.catalog

    def discover(self, activate: bool = False) -> DiscoveryResult:
        """
        Run a discovery pass and publish its catalog.

        Args:
            activate: Also activate the device under the cursor afterwards

        Returns:
            DiscoveryResult: The new catalog and any per-source warnings
        """
        result = self.catalog.discover()
        self.selector.set_catalog(result.devices)
        if activate and not result.empty:
            self.selector.activate_current()
        return result

    def current(self) -> Optional[ClassifiedDevice]:
        return self.selector.current()

    def select_next(self) -> SelectionResult:
        return self.selector.select_next()

    def select_previous(self) -> SelectionResult:
        return self.selector.select_previous()

    def select_by_id(self, device_id: str) -> SelectionResult:
        return self.selector.select_by_id(device_id)

    def select_by_name(self, fragment: str) -> SelectionResult:
        return self.selector.select_by_name(fragment)

    def select_by_index(self, index: int) -> SelectionResult:
        return self.selector.select_by_index(index)

    def retry_activation(self) -> SelectionResult:
        return self.selector.activate_current()

    def rename(self, device_id: str, name: Optional[str]) -> str:
        """
        Rename a device and refresh the published catalog's names.

        Returns:
            str: The display name now in effect
        """
        display_name = self.catalog.rename(device_id, name)
        self._refresh_names()
        return display_name

    def reset(self, device_id: str) -> str:
        default_name = self.catalog.reset(device_id)
        self._refresh_names()
        return default_name

    def reset_all(self) -> None:
        self.catalog.reset_all()
        self._refresh_names()

    def name_entries(self) -> List[NameOverride]:
        return self.catalog.name_entries()

    def on(self, event_type: str, callback: Callable) -> None:
        """
        Subscribe to selection events.

        Args:
            event_type: on_catalog_change, on_select, on_activate or on_activation_failed
            callback: Function to call when the event occurs

        Raises:
            ValueError: If event_type is invalid
            TypeError: If callback is not callable
        """
        self.events.subscribe(event_type, callback)

    def close(self) -> None:
        """Release the bound camera."""
        try:
            self.selector.binder.release()
        except Exception as e:
            logger.warning(f"Failed to release camera: {e}")

    def _refresh_names(self) -> None:
        self.selector.set_catalog(self.catalog.refresh_names())

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - release the bound camera."""
        self.close()
