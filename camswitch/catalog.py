"""
Device catalog built from all discovery sources.

A discovery pass queries every source, joins them, names every record and
publishes the ordered result as a whole. Catalogs are always replaced, never
patched.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .backends.base import DeviceSource, advertises_camera
from .backends.exceptions import SourceUnavailableError
from .classifier import DeviceClassifier
from .models import ClassifiedDevice, DeviceRecord, NameOverride, Source
from .names import NameStore, NameStoreError

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """Outcome of one discovery pass."""
    devices: Tuple[ClassifiedDevice, ...]
    warnings: List[SourceUnavailableError] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.devices


class DeviceCatalog:
    """
    Runs discovery passes and applies stored name overrides.

    Sources are consulted in catalog order (built-in, USB, Bluetooth; sources
    of the same kind keep their configured order). A failing source only
    contributes a warning.
    """

    def __init__(
        self,
        sources: Sequence[DeviceSource],
        name_store: NameStore,
        classifier: Optional[DeviceClassifier] = None,
        parallel: bool = True
    ):
        """
        Initialize the catalog.

        Args:
            sources: Device sources to query on every pass
            name_store: Store holding user-chosen names
            classifier: Naming heuristic, defaults to DeviceClassifier()
            parallel: Query sources concurrently before joining them
        """
        self.sources = sorted(sources, key=lambda s: s.kind.order)
        self.name_store = name_store
        self.classifier = classifier or DeviceClassifier()
        self.parallel = parallel
        self._devices: Tuple[ClassifiedDevice, ...] = ()
        self._lock = threading.Lock()

    @property
    def devices(self) -> Tuple[ClassifiedDevice, ...]:
        """The catalog published by the last discovery pass."""
        with self._lock:
            return self._devices

    def discover(self) -> DiscoveryResult:
        """
        Run one discovery pass across all sources.

        Returns:
            DiscoveryResult: The new catalog and any per-source warnings
        """
        warnings: List[SourceUnavailableError] = []
        records: List[DeviceRecord] = []

        for source, outcome in zip(self.sources, self._query_sources()):
            if isinstance(outcome, SourceUnavailableError):
                warnings.append(outcome)
                continue
            records.extend(self._accepted_records(source, outcome))

        overrides = self._load_overrides(warnings)
        devices = tuple(
            ClassifiedDevice(
                record=record,
                default_name=default_name,
                display_name=overrides.get(record.id, default_name)
            )
            for record, default_name in self.classifier.classify_pass(self._unique(records))
        )

        with self._lock:
            self._devices = devices

        if devices:
            logger.info(f"Discovered {len(devices)} camera(s)")
        else:
            logger.warning("No cameras found")
        return DiscoveryResult(devices=devices, warnings=warnings)

    def _query_sources(self) -> list:
        """Enumerate every source; all queries finish before this returns."""
        if self.parallel and len(self.sources) > 1:
            with ThreadPoolExecutor(max_workers=len(self.sources), thread_name_prefix="discovery") as pool:
                futures = [pool.submit(self._query_source, source) for source in self.sources]
                return [future.result() for future in futures]
        return [self._query_source(source) for source in self.sources]

    def _query_source(self, source: DeviceSource):
        try:
            return list(source.enumerate())
        except SourceUnavailableError as e:
            return e
        except Exception as e:
            return SourceUnavailableError(
                f"{source.name} source failed: {e}", source=source.name, cause=e
            )

    def _accepted_records(self, source: DeviceSource, records: List[DeviceRecord]) -> List[DeviceRecord]:
        accepted = []
        for record in records:
            if record.source is not source.kind:
                logger.warning(f"Ignoring {record.id}: {source.name} source reported a {record.source.value} device")
                continue
            if record.source is Source.BLUETOOTH and not advertises_camera(record.label):
                logger.debug(f"Ignoring Bluetooth device {record.id}: not a camera")
                continue
            accepted.append(record)
        return accepted

    @staticmethod
    def _unique(records: List[DeviceRecord]) -> List[DeviceRecord]:
        """Keep the first record of every id, in catalog order."""
        seen = set()
        unique = []
        for record in records:
            if record.id in seen:
                logger.warning(f"Ignoring duplicate {record.source.value} device {record.id}")
                continue
            seen.add(record.id)
            unique.append(record)
        return unique

    def _load_overrides(self, warnings: List[SourceUnavailableError]) -> dict:
        try:
            return self.name_store.items()
        except NameStoreError as e:
            warnings.append(SourceUnavailableError(
                f"Stored camera names unavailable: {e}", source="names", cause=e
            ))
            return {}

    def refresh_names(self) -> Tuple[ClassifiedDevice, ...]:
        """
        Reapply stored overrides to the current catalog and publish it.

        Records and default names are kept; only display names change.

        Returns:
            tuple: The republished catalog
        """
        with self._lock:
            stored = self.name_store.items()
            self._devices = tuple(
                ClassifiedDevice(
                    record=device.record,
                    default_name=device.default_name,
                    display_name=stored.get(device.id, device.default_name)
                )
                for device in self._devices
            )
            return self._devices

    def default_name_for(self, device_id: str) -> str:
        """Default name of a device from the last pass, or a guess from its id."""
        for device in self.devices:
            if device.id == device_id:
                return device.default_name
        return self.classifier.guess_default_name(device_id)

    def rename(self, device_id: str, name: Optional[str]) -> str:
        """
        Set the display name of a device.

        A name that is blank after trimming, or equal to the device's default
        name, removes the override instead of storing it.

        Returns:
            str: The display name now in effect
        """
        default_name = self.default_name_for(device_id)
        trimmed = (name or "").strip()

        if not trimmed or trimmed == default_name:
            self.name_store.remove(device_id)
            logger.info(f"Reverted {device_id} to default name {default_name!r}")
            return default_name

        self.name_store.set(device_id, trimmed)
        logger.info(f"Renamed {device_id} to {trimmed!r}")
        return trimmed

    def reset(self, device_id: str) -> str:
        """Drop the override of one device and return its default name."""
        self.name_store.remove(device_id)
        return self.default_name_for(device_id)

    def reset_all(self) -> None:
        self.name_store.clear()

    def name_entries(self) -> List[NameOverride]:
        """
        List the naming state of every known device.

        Discovered devices come first in catalog order, followed by stored
        overrides for ids that were not discovered in the last pass.
        """
        stored = self.name_store.items()
        entries = [
            NameOverride(device.id, stored.get(device.id, device.default_name), device.default_name)
            for device in self.devices
        ]
        for device_id, name in stored.items():
            entry = NameOverride(device_id, name, self.classifier.guess_default_name(device_id))
            if entry not in entries:
                entries.append(entry)
        return entries
