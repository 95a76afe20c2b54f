"""Application service for the append-only version history of each category."""

import json
import logging
from collections import Counter
from typing import Any

from datakeeper.application.interfaces import VersionHistoryRepository
from datakeeper.application.services.event_bus import (
    CHANGED_EVENTS,
    DATA_VERSION_RESTORED,
    EventBus,
)
from datakeeper.application.services.redundant_writer import RedundantWriter
from datakeeper.domain.entities import DataCategory, VersionEntry
from datakeeper.domain.entities.version_entry import DEFAULT_VERSION_DESCRIPTION
from datakeeper.domain.exceptions import (
    EntityNotFoundError,
    InvalidEntityError,
    VersionHistoryError,
    VersionRestoreError,
)

logger = logging.getLogger(__name__)

# Bookkeeping keys that never count as a user-visible change
_IGNORED_FIELDS = frozenset({"_meta", "_id", "_version"})


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def get_changed_fields(old: Any, new: Any, prefix: str = "") -> list[str]:
    """Dotted paths whose values differ between two snapshots.

    Nested mappings are compared key by key; lists and scalars are compared
    whole.
    """
    if not isinstance(old, dict) or not isinstance(new, dict):
        if _canonical(old) != _canonical(new):
            return [prefix] if prefix else []
        return []

    changed: list[str] = []
    for key in sorted(set(old) | set(new)):
        if key in _IGNORED_FIELDS:
            continue
        path = f"{prefix}.{key}" if prefix else key
        old_value, new_value = old.get(key), new.get(key)
        if isinstance(old_value, dict) and isinstance(new_value, dict):
            changed.extend(get_changed_fields(old_value, new_value, path))
        elif _canonical(old_value) != _canonical(new_value):
            changed.append(path)
    return changed


def group_changed_fields(changed_fields: list[str]) -> dict[str, int]:
    """Count changed paths per top-level field, e.g. for "3 fields in bankingDetails"."""
    return dict(Counter(path.split(".", 1)[0] for path in changed_fields))


class VersionHistoryService:
    """Records a version for every save and restores old versions by appending."""

    def __init__(
        self,
        repository: VersionHistoryRepository,
        writer: RedundantWriter,
        bus: EventBus,
    ):
        self._repository = repository
        self._writer = writer
        self._bus = bus

    async def record_version(
        self,
        category: DataCategory | str,
        data: Any,
        description: str | None = None,
        user_name: str | None = None,
        restored_from_version: int | None = None,
    ) -> VersionEntry:
        category = DataCategory(category)
        latest = await self._repository.get_latest(category.value)

        if latest is None:
            changed = get_changed_fields({}, data) if isinstance(data, dict) else []
            version = 1
        else:
            changed = get_changed_fields(latest.data, data)
            version = latest.version + 1

        entry = VersionEntry(
            category=category.value,
            version=version,
            data=data,
            changed_fields=changed,
            description=description or DEFAULT_VERSION_DESCRIPTION,
            user_name=user_name,
            restored_from_version=restored_from_version,
        )
        entry = await self._repository.append(entry)
        logger.info(
            "Recorded %s version %d (%d changed fields)",
            category.value,
            entry.version,
            len(entry.changed_fields),
        )
        return entry

    async def try_record_version(
        self,
        category: DataCategory | str,
        data: Any,
        description: str | None = None,
        user_name: str | None = None,
    ) -> VersionEntry | None:
        """Like ``record_version`` but logs and returns None when history is unavailable.

        Used after a save has already reached storage.
        """
        try:
            return await self.record_version(
                category, data, description=description, user_name=user_name
            )
        except VersionHistoryError as exc:
            logger.error(
                "Saved %s data without a history entry: %s", DataCategory(category).value, exc
            )
            return None

    async def list_versions(
        self, category: DataCategory | str, *, skip: int = 0, limit: int = 50
    ) -> list[VersionEntry]:
        return await self._repository.list_for_category(
            DataCategory(category).value, skip=skip, limit=limit
        )

    async def get_version(self, category: DataCategory | str, version_id: str) -> VersionEntry:
        entry = await self._repository.get_by_id(DataCategory(category).value, version_id)
        if entry is None:
            raise EntityNotFoundError("VersionEntry", version_id)
        return entry

    async def restore_version(
        self,
        category: DataCategory | str,
        version_id: str,
        user_name: str | None = None,
    ) -> VersionEntry:
        """Make an old entry current again and append a restore entry.

        If the data cannot be written, or the new entry cannot be appended,
        the stored copies are put back and nothing is added to the history.
        """
        category = DataCategory(category)
        target = await self.get_version(category, version_id)
        snapshot = self._writer.snapshot(category)

        try:
            result = self._writer.write(category, target.data)
        except InvalidEntityError as exc:
            raise VersionRestoreError(category.value, version_id, str(exc)) from exc
        if not result.success:
            self._writer.restore_snapshot(snapshot)
            raise VersionRestoreError(
                category.value, version_id, "no storage location accepted the data"
            )

        try:
            entry = await self.record_version(
                category,
                target.data,
                description=f"Restored from version {target.version}",
                user_name=user_name,
                restored_from_version=target.version,
            )
        except VersionHistoryError as exc:
            self._writer.restore_snapshot(snapshot)
            logger.error("Could not append restore entry for %s: %s", category.value, exc)
            raise VersionRestoreError(category.value, version_id, str(exc)) from exc

        payload = {
            "category": category.value,
            "version": entry.version,
            "restoredFromVersion": target.version,
        }
        self._bus.publish(DATA_VERSION_RESTORED, payload)
        self._bus.publish(CHANGED_EVENTS[category.value], {"source": "version-restore"})
        logger.info(
            "Restored %s to version %d as version %d",
            category.value,
            target.version,
            entry.version,
        )
        return entry
