"""
Linux device sources using udev, BlueZ and video4linux.

Built-in and USB cameras are enumerated through udev (pyudev); paired
Bluetooth devices are listed with ``bluetoothctl``. The V4L2 binder claims a
capture node by holding it open.
"""

import logging
import os
import re
import shutil
import subprocess
from typing import Any, List, Optional

from ..models import DeviceRecord, Facing, Source
from .base import CameraBinder, DeviceSource, advertises_camera
from .exceptions import ActivationFailedError, SourceUnavailableError

logger = logging.getLogger(__name__)

USB_CLASS_VIDEO = "0e"

# Device-tree "orientation" property values (video-interface-devices binding)
DT_ORIENTATION_FRONT = 0
DT_ORIENTATION_BACK = 1


def _node_number(device: Any) -> int:
    match = re.search(r'(\d+)$', device.sys_name or "")
    return int(match.group(1)) if match else -1


def _attribute(device: Any, name: str) -> Optional[str]:
    """Read a sysfs attribute as text, or None when it is absent."""
    try:
        value = device.attributes.asstring(name)
    except (KeyError, UnicodeDecodeError):
        return None
    value = value.strip()
    return value or None


def _is_fixed_port(usb_device: Any) -> bool:
    """Integrated webcams sit on USB ports the firmware reports as fixed."""
    return _attribute(usb_device, 'removable') == 'fixed'


class _UdevSource(DeviceSource):
    """Shared pyudev plumbing for udev-backed sources."""

    def __init__(self):
        self._pyudev = None

        try:
            import pyudev
            self._pyudev = pyudev
        except ImportError:
            logger.debug("pyudev is not installed")

    def _context(self):
        if self._pyudev is None:
            raise SourceUnavailableError(
                f"Cannot enumerate {self.name} cameras: pyudev is not installed",
                source=self.name
            )
        try:
            return self._pyudev.Context()
        except Exception as e:
            raise SourceUnavailableError(
                f"Cannot open udev context: {e}", source=self.name, cause=e
            )


class LinuxBuiltInSource(_UdevSource):
    """
    Enumerates platform camera lenses.

    A capture node counts as built-in when it is not behind a USB device, or
    when its USB port is reported as fixed (an integrated laptop webcam). The
    record id is the node number, so ``/dev/video2`` becomes ``"2"``.
    """

    @property
    def kind(self) -> Source:
        return Source.BUILT_IN

    def enumerate(self) -> List[DeviceRecord]:
        context = self._context()
        try:
            nodes = sorted(context.list_devices(subsystem='video4linux'), key=_node_number)
        except Exception as e:
            raise SourceUnavailableError(
                f"Failed to list video4linux devices: {e}", source=self.name, cause=e
            )

        records = []
        for device in nodes:
            try:
                record = self._create_record(device)
            except Exception as e:
                # Nodes can vanish between listing and reading
                logger.warning(f"Skipping video node {device.sys_name}: {e}")
                continue
            if record:
                records.append(record)

        logger.debug(f"Found {len(records)} built-in camera(s)")
        return records

    def _is_capture_node(self, device: Any) -> bool:
        # Secondary nodes (metadata, index > 0) belong to the same lens
        index = _attribute(device, 'index')
        if index is not None and index != '0':
            return False
        capabilities = device.properties.get('ID_V4L_CAPABILITIES')
        if capabilities is not None and ':capture:' not in capabilities:
            return False
        return True

    def _create_record(self, device: Any) -> Optional[DeviceRecord]:
        if not self._is_capture_node(device):
            return None

        usb_device = device.find_parent('usb', 'usb_device')
        if usb_device is not None and not _is_fixed_port(usb_device):
            return None

        number = _node_number(device)
        if number < 0:
            return None

        return DeviceRecord(
            id=str(number),
            source=Source.BUILT_IN,
            facing=self._read_facing(device, usb_device),
            label=_attribute(device, 'name'),
            platform_data={
                'device_path': device.device_node,
                'bus': 'usb' if usb_device is not None else 'platform',
            }
        )

    def _read_facing(self, device: Any, usb_device: Any) -> Facing:
        orientation_path = os.path.join(device.sys_path, 'device', 'of_node', 'orientation')
        if os.path.exists(orientation_path):
            try:
                with open(orientation_path, 'rb') as f:
                    value = int.from_bytes(f.read(4), 'big')
            except OSError as e:
                logger.debug(f"Cannot read orientation for {device.sys_name}: {e}")
                return Facing.UNKNOWN
            if value == DT_ORIENTATION_FRONT:
                return Facing.FRONT
            if value == DT_ORIENTATION_BACK:
                return Facing.BACK
            return Facing.UNKNOWN

        if usb_device is not None:
            return Facing.FRONT
        return Facing.UNKNOWN


class LinuxUsbSource(_UdevSource):
    """
    Enumerates removable USB video-class devices.

    A device qualifies when one of its interfaces has the video class, or when
    its product string mentions a camera.
    """

    @property
    def kind(self) -> Source:
        return Source.USB

    def enumerate(self) -> List[DeviceRecord]:
        context = self._context()
        try:
            usb_devices = list(context.list_devices(subsystem='usb', DEVTYPE='usb_device'))
        except Exception as e:
            raise SourceUnavailableError(
                f"Failed to list USB devices: {e}", source=self.name, cause=e
            )

        records = []
        for device in usb_devices:
            if _is_fixed_port(device) or not self._is_camera(device):
                continue
            records.append(DeviceRecord(
                # Port path such as 2-1.3, unique across buses
                id=f"usb_{device.sys_name}",
                source=Source.USB,
                label=_attribute(device, 'product'),
                platform_data={
                    'vendor_id': _attribute(device, 'idVendor'),
                    'product_id': _attribute(device, 'idProduct'),
                    'devnum': _attribute(device, 'devnum'),
                    'port_path': device.sys_path,
                }
            ))

        logger.debug(f"Found {len(records)} USB camera(s)")
        return records

    def _is_camera(self, device: Any) -> bool:
        for child in device.children:
            if child.device_type != 'usb_interface':
                continue
            if (_attribute(child, 'bInterfaceClass') or '').lower() == USB_CLASS_VIDEO:
                return True
        return advertises_camera(_attribute(device, 'product'))


class LinuxBluetoothSource(DeviceSource):
    """
    Lists paired Bluetooth devices whose name mentions a camera.

    A missing ``bluetoothctl``, a missing adapter or a powered-off adapter
    yields no devices rather than an error.
    """

    BLUETOOTHCTL = "bluetoothctl"
    DEVICE_LINE = re.compile(r'^Device\s+([0-9A-Fa-f:]{17})\s+(.+)$')

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    @property
    def kind(self) -> Source:
        return Source.BLUETOOTH

    def enumerate(self) -> List[DeviceRecord]:
        if shutil.which(self.BLUETOOTHCTL) is None:
            logger.debug("bluetoothctl not found, skipping Bluetooth cameras")
            return []

        show = self._run(['show'])
        if show.returncode != 0 or 'Powered: yes' not in show.stdout:
            logger.debug("No powered Bluetooth adapter")
            return []

        result = self._run(['devices', 'Paired'])
        if result.returncode != 0:
            # BlueZ before 5.65 only knows the older command
            result = self._run(['paired-devices'])
        if result.returncode != 0:
            raise SourceUnavailableError(
                f"Failed to list paired Bluetooth devices: {result.stderr.strip()}",
                source=self.name
            )

        records = []
        for line in result.stdout.splitlines():
            match = self.DEVICE_LINE.match(line.strip())
            if not match:
                continue
            address, device_name = match.group(1).upper(), match.group(2).strip()
            if not advertises_camera(device_name):
                continue
            records.append(DeviceRecord(
                id=f"bt_{address}",
                source=Source.BLUETOOTH,
                label=device_name,
                platform_data={'address': address}
            ))

        logger.debug(f"Found {len(records)} Bluetooth camera(s)")
        return records

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                [self.BLUETOOTHCTL] + args,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise SourceUnavailableError(
                f"bluetoothctl {' '.join(args)} timed out", source=self.name, cause=e
            )
        except OSError as e:
            raise SourceUnavailableError(
                f"Cannot run bluetoothctl: {e}", source=self.name, cause=e
            )


class V4L2Binder(CameraBinder):
    """
    Binds a built-in camera by holding its capture node open.

    Built-in record ids are node numbers, so device ``"2"`` is bound through
    ``/dev/video2``.
    """

    def __init__(self, device_root: str = "/dev"):
        self.device_root = device_root
        self._fd: Optional[int] = None
        self._bound_id: Optional[str] = None

    @property
    def bound_id(self) -> Optional[str]:
        return self._bound_id

    def bind(self, device_id: str, facing: Facing) -> None:
        if not device_id.isdigit():
            raise ActivationFailedError(
                f"Not a video4linux device id: {device_id}", device_id=device_id
            )

        device_path = os.path.join(self.device_root, f"video{device_id}")
        self.release()

        try:
            self._fd = os.open(device_path, os.O_RDWR | os.O_NONBLOCK)
        except OSError as e:
            raise ActivationFailedError(
                f"Cannot open {device_path}: {e.strerror}", device_id=device_id, cause=e
            )

        self._bound_id = device_id
        logger.info(f"Bound {device_path} ({facing.value})")

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            os.close(self._fd)
        except OSError as e:
            logger.warning(f"Failed to close video device {self._bound_id}: {e}")
        finally:
            self._fd = None
            self._bound_id = None
