"""
Default naming heuristic for discovered devices.

Platforms rarely say which physical lens a built-in camera id refers to, so
names are inferred from facing, focal length and position within the
discovery pass. The heuristic may mis-name lenses; it is only required to be
deterministic.
"""

from collections import Counter
from typing import Hashable, Iterable, List, Optional, Tuple

from .models import DeviceRecord, Facing, Source

# Focal length brackets in millimetres, checked in this order
MACRO_BELOW_MM = 2.0
WIDE_RANGE_MM = (1.5, 2.5)
TELEPHOTO_ABOVE_MM = 3.0


class DeviceClassifier:
    """Turns raw device records into default display names."""

    def kind_of(self, record: DeviceRecord) -> Optional[Hashable]:
        """
        Get the sibling group a record is numbered within.

        USB and Bluetooth devices are numbered per source; back-facing
        built-in lenses share one ordinal. Other records are not numbered.
        """
        if record.source in (Source.USB, Source.BLUETOOTH):
            return record.source
        if record.source is Source.BUILT_IN and record.facing is Facing.BACK:
            return (Source.BUILT_IN, Facing.BACK)
        return None

    def default_name(self, record: DeviceRecord, prior_count: int = 0) -> str:
        """
        Name a record.

        Args:
            record: The record to name
            prior_count: Number of records of the same kind already
                classified earlier in the current pass

        Returns:
            str: The default display name
        """
        if record.source is Source.USB:
            return f"USB Camera {prior_count + 1}"

        if record.source is Source.BLUETOOTH:
            return f"Bluetooth Camera {prior_count + 1}"

        if record.source is Source.BUILT_IN and record.facing is Facing.FRONT:
            return "Front Camera"

        if record.source is Source.BUILT_IN and record.facing is Facing.BACK:
            if record.focal_length_mm is not None:
                return self._name_for_focal_length(record.focal_length_mm)
            return self._name_for_back_ordinal(prior_count)

        return "Unknown Camera"

    def classify_pass(self, records: Iterable[DeviceRecord]) -> List[Tuple[DeviceRecord, str]]:
        """
        Name every record of one discovery pass, in order.

        Returns:
            List[Tuple[DeviceRecord, str]]: Each record with its default name
        """
        seen = Counter()
        named = []
        for record in records:
            kind = self.kind_of(record)
            named.append((record, self.default_name(record, seen[kind])))
            if kind is not None:
                seen[kind] += 1
        return named

    def guess_default_name(self, device_id: str) -> str:
        """
        Name a device known only by id, such as a stored override for a
        device that was not discovered in this pass.
        """
        if device_id.startswith("usb_"):
            return "USB Camera"
        if device_id.startswith("bt_"):
            return "Bluetooth Camera"
        if device_id == "0":
            return "Front Camera"
        if device_id == "1":
            return "Main Camera"
        return f"Camera {device_id}"

    @staticmethod
    def _name_for_focal_length(focal_length_mm: float) -> str:
        # The wide bracket overlaps the macro one; macro wins below 2.0 mm
        if focal_length_mm < MACRO_BELOW_MM:
            return "Macro Camera"
        if WIDE_RANGE_MM[0] <= focal_length_mm <= WIDE_RANGE_MM[1]:
            return "Wide Camera"
        if focal_length_mm > TELEPHOTO_ABOVE_MM:
            return "Telephoto Camera"
        return "Main Camera"

    @staticmethod
    def _name_for_back_ordinal(ordinal: int) -> str:
        if ordinal == 0:
            return "Main Camera"
        if ordinal == 1:
            return "Wide Camera"
        return f"Back Camera {ordinal + 1}"
