"""Recovery scanner — reads a category back from the first slot holding valid data."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from datakeeper.application.services.storage_layout import (
    SlotRole,
    StorageAreas,
    StorageSlot,
    get_layout,
)
from datakeeper.domain.entities import DataCategory, parse_timestamp
from datakeeper.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """The value treated as current, and where it came from.

    ``found`` is False when no slot held valid data; ``data`` is then the
    category default.
    """

    data: Any
    slot: StorageSlot | None = None
    found: bool = False

    @property
    def from_primary(self) -> bool:
        return self.slot is not None and self.slot.role is SlotRole.PRIMARY


class RecoveryScanner:
    """Checks a category's slots in fixed priority order.

    Corrupt values and unreadable areas count as "no data here" and the scan
    moves on. Timestamps are never compared across slots.
    """

    def __init__(self, areas: StorageAreas):
        self._areas = areas

    def _read_slot(self, slot: StorageSlot) -> Any | None:
        try:
            raw = self._areas.for_scope(slot.scope).get_item(slot.key)
        except StorageError as exc:
            logger.warning("Could not read %s: %s", slot.label, exc)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt value at %s", slot.label)
            return None

    def scan(self, category: DataCategory | str) -> ScanResult:
        layout = get_layout(category)
        for slot in layout.scan_order:
            value = self._read_slot(slot)
            if value is not None and layout.is_valid(value):
                if slot.role is not SlotRole.PRIMARY:
                    logger.info("Recovered %s data from %s", layout.category.value, slot.label)
                return ScanResult(data=value, slot=slot, found=True)

        logger.debug("No valid %s data in any slot — using default", layout.category.value)
        return ScanResult(data=layout.default_factory())

    def load(self, category: DataCategory | str) -> Any:
        return self.scan(category).data

    def has_any_data(self, category: DataCategory | str) -> bool:
        return self.scan(category).found

    def last_updated(self, category: DataCategory | str) -> datetime | None:
        layout = get_layout(category)
        try:
            raw = self._areas.local.get_item(layout.updated_at_key)
        except StorageError as exc:
            logger.warning("Could not read %s: %s", layout.updated_at_key, exc)
            return None
        return parse_timestamp(raw)
