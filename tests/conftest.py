"""
Pytest configuration and shared fixtures for camswitch tests.

This module provides common test fixtures, fake collaborators and utilities
used across all test modules for consistent testing setup.
"""

import sys
import threading
from pathlib import Path
from typing import List, Optional

import pytest

# Add the project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from camswitch import CameraSwitcher, DeviceRecord, Facing, Source
from camswitch.backends import ActivationFailedError, CameraBinder, DeviceSource
from camswitch.names import NameStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "linux: marks tests of the Linux sources and binder")
    config.addinivalue_line("markers", "tui: marks tests that require TUI components")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file names."""
    for item in items:
        if "test_manager" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        if "test_backends" in item.nodeid:
            item.add_marker(pytest.mark.linux)
        if "test_tui" in item.nodeid:
            item.add_marker(pytest.mark.tui)


class StaticSource(DeviceSource):
    """Device source returning a fixed list of records, or failing."""

    def __init__(self, kind: Source, records: Optional[List[DeviceRecord]] = None, error: Optional[Exception] = None):
        self._kind = kind
        self.records = list(records or [])
        self.error = error
        self.calls = 0
        self.threads = []

    @property
    def kind(self) -> Source:
        return self._kind

    def enumerate(self) -> List[DeviceRecord]:
        self.calls += 1
        self.threads.append(threading.current_thread().name)
        if self.error is not None:
            raise self.error
        return list(self.records)


class RecordingBinder(CameraBinder):
    """Binder that records bind requests and can refuse chosen ids."""

    def __init__(self, fail_ids=()):
        self.fail_ids = set(fail_ids)
        self.bound = []
        self.releases = 0

    def bind(self, device_id: str, facing: Facing) -> None:
        if device_id in self.fail_ids:
            raise ActivationFailedError(f"Device {device_id} is busy", device_id=device_id)
        self.bound.append((device_id, facing))

    def release(self) -> None:
        self.releases += 1

    @property
    def bound_ids(self) -> List[str]:
        return [device_id for device_id, _ in self.bound]


def built_in(device_id: str, facing: Facing, focal_length_mm: Optional[float] = None) -> DeviceRecord:
    return DeviceRecord(id=device_id, source=Source.BUILT_IN, facing=facing, focal_length_mm=focal_length_mm)


def usb(number: int, label: str = "HD USB Camera") -> DeviceRecord:
    return DeviceRecord(id=f"usb_{number}", source=Source.USB, label=label)


def bluetooth(address: str, label: str = "Action Camera") -> DeviceRecord:
    return DeviceRecord(id=f"bt_{address}", source=Source.BLUETOOTH, label=label)


@pytest.fixture
def store_path(tmp_path):
    """Path for a name store file inside a per-test directory."""
    return tmp_path / "camswitch" / "names.json"


@pytest.fixture
def name_store(store_path):
    """A fresh NameStore backed by a temporary file."""
    return NameStore(store_path)


@pytest.fixture
def phone_records():
    """Front lens, two back lenses without focal data, one USB and one Bluetooth camera."""
    return {
        Source.BUILT_IN: [
            built_in("0", Facing.FRONT),
            built_in("1", Facing.BACK),
            built_in("2", Facing.BACK),
        ],
        Source.USB: [usb(7)],
        Source.BLUETOOTH: [bluetooth("AA:BB:CC:DD:EE:FF")],
    }


@pytest.fixture
def phone_sources(phone_records):
    """One StaticSource per kind, built from phone_records."""
    return [StaticSource(kind, records) for kind, records in phone_records.items()]


@pytest.fixture
def binder():
    return RecordingBinder()


@pytest.fixture
def switcher(store_path, phone_sources, binder):
    """A CameraSwitcher wired to fake sources and a recording binder."""
    with CameraSwitcher(names_path=store_path, sources=phone_sources, binder=binder) as instance:
        yield instance
