"""Redundant key/value writer — fans one entity out to every known slot of its category."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from datakeeper.application.services.storage_layout import (
    StorageAreas,
    StorageScope,
    StorageSlot,
    get_layout,
)
from datakeeper.domain.entities import DataCategory
from datakeeper.domain.exceptions import InvalidEntityError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Per-slot outcome of a fan-out write. Succeeds if any slot was written."""

    category: str
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    timestamp: datetime | None = None

    @property
    def success(self) -> bool:
        return bool(self.written)

    @property
    def partial(self) -> bool:
        return bool(self.written) and bool(self.failed)


@dataclass
class StorageSnapshot:
    """Raw values of a category's keys at one moment (None = absent)."""

    category: str
    values: dict[tuple[StorageScope, str], str | None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RedundantWriter:
    """Writes the same serialized value under every key of a category.

    Individual slot failures (quota, unavailable medium) are logged and
    swallowed. When at least one slot succeeds, the failed slots are
    emptied so no older copy outranks the new one during a scan; there is
    no rollback beyond that. The category's "last updated" key is refreshed after
    any successful write so readers can detect staleness.
    """

    def __init__(self, areas: StorageAreas, clock: Callable[[], datetime] = _utcnow):
        self._areas = areas
        self._clock = clock

    def write(self, category: DataCategory | str, entity: Any) -> WriteResult:
        layout = get_layout(category)
        result = WriteResult(category=layout.category.value)
        failed_slots: list[StorageSlot] = []

        try:
            serialized = json.dumps(entity)
        except (TypeError, ValueError) as exc:
            raise InvalidEntityError(
                f"{layout.category.value} data is not JSON-serializable: {exc}"
            ) from exc

        for slot in layout.slots:
            area = self._areas.for_scope(slot.scope)
            try:
                area.set_item(slot.key, serialized)
                result.written.append(slot.label)
            except StorageError as exc:
                logger.warning("Write to %s failed: %s", slot.label, exc)
                result.failed.append(slot.label)
                failed_slots.append(slot)

        if not result.success:
            logger.error(
                "Could not save %s data to any of %d slots",
                layout.category.value,
                len(layout.slots),
            )
            return result

        # Stale copies in failed slots would shadow the new value on scan
        for slot in failed_slots:
            self._evict(slot)

        result.timestamp = self._clock()
        try:
            self._areas.local.set_item(layout.updated_at_key, result.timestamp.isoformat())
        except StorageError as exc:
            logger.warning("Could not update %s: %s", layout.updated_at_key, exc)

        if result.partial:
            logger.warning(
                "Saved %s data to %d of %d slots",
                layout.category.value,
                len(result.written),
                len(layout.slots),
            )
        else:
            logger.debug("Saved %s data to all %d slots", layout.category.value, len(result.written))
        return result

    def _evict(self, slot: StorageSlot) -> None:
        try:
            self._areas.for_scope(slot.scope).remove_item(slot.key)
        except StorageError as exc:
            logger.warning("Could not remove stale copy in %s: %s", slot.label, exc)

    def clear(self, category: DataCategory | str) -> None:
        """Remove every slot of a category plus its timestamp key."""
        layout = get_layout(category)
        for slot in layout.slots:
            try:
                self._areas.for_scope(slot.scope).remove_item(slot.key)
            except StorageError as exc:
                logger.warning("Could not clear %s: %s", slot.label, exc)
        try:
            self._areas.local.remove_item(layout.updated_at_key)
        except StorageError as exc:
            logger.warning("Could not clear %s: %s", layout.updated_at_key, exc)
        logger.info("Cleared all stored copies of %s data", layout.category.value)

    def snapshot(self, category: DataCategory | str) -> StorageSnapshot:
        layout = get_layout(category)
        values: dict[tuple[StorageScope, str], str | None] = {}
        for slot in layout.slots:
            values[(slot.scope, slot.key)] = self._areas.for_scope(slot.scope).get_item(slot.key)
        values[(StorageScope.LOCAL, layout.updated_at_key)] = self._areas.local.get_item(
            layout.updated_at_key
        )
        return StorageSnapshot(category=layout.category.value, values=values)

    def restore_snapshot(self, snapshot: StorageSnapshot) -> None:
        """Put every key back to its snapshot value. Best-effort per key."""
        for (scope, key), value in snapshot.values.items():
            area = self._areas.for_scope(scope)
            try:
                if value is None:
                    area.remove_item(key)
                else:
                    area.set_item(key, value)
            except StorageError as exc:
                logger.error("Could not roll back %s:%s: %s", scope.value, key, exc)
