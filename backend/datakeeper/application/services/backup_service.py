"""Backup service — point-in-time copies of every category, kept locally and in the cloud.

Storage layout (local area):
    backup_history         — JSON list of metadata, newest first, capped
    backup_meta_<id>       — metadata of one backup
    backup_data_<id>       — payload of one backup
"""

import hashlib
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from datakeeper.application.interfaces import BackupRepository
from datakeeper.application.services.event_bus import BACKUP_CREATED, EventBus
from datakeeper.application.services.recovery_scanner import RecoveryScanner
from datakeeper.application.services.redundant_writer import RedundantWriter
from datakeeper.application.services.storage_layout import StorageAreas
from datakeeper.domain.entities import (
    DATA_STRUCTURE_VERSION,
    BackupLocation,
    BackupMetadata,
    BackupStatus,
    DataCategory,
    RestoreResult,
    StoredEnvelope,
    VersionSource,
)
from datakeeper.domain.exceptions import (
    BackupNotAvailableError,
    EntityNotFoundError,
    InvalidEntityError,
    StorageError,
)

logger = logging.getLogger(__name__)

HISTORY_KEY = "backup_history"
META_PREFIX = "backup_meta_"
DATA_PREFIX = "backup_data_"


def payload_hash(payload: dict[str, Any]) -> str:
    """SHA-256 over the category data of a payload, independent of key order."""
    data = payload.get("data", {})
    return hashlib.sha256(json.dumps(data, sort_keys=True).encode("utf-8")).hexdigest()


class BackupService:
    """Creates, lists, restores and prunes backups.

    Local copies live in the persistent storage area; the optional cloud copy
    goes through the ``BackupRepository`` port. Restoring prefers the local
    copy and writes each category back through the redundant writer.
    """

    def __init__(
        self,
        areas: StorageAreas,
        scanner: RecoveryScanner,
        writer: RedundantWriter,
        bus: EventBus,
        repository: BackupRepository | None = None,
        *,
        app_version: str = "1.0.0",
        max_local_backups: int = 10,
        history_limit: int = 20,
        backup_interval_seconds: int = 24 * 60 * 60,
    ):
        self._local = areas.local
        self._scanner = scanner
        self._writer = writer
        self._bus = bus
        self._repository = repository
        self._app_version = app_version
        self._max_local = max_local_backups
        self._history_limit = history_limit
        self._interval = timedelta(seconds=backup_interval_seconds)

    # ── History ─────────────────────────────────────────────────────

    def _read_json(self, key: str) -> Any | None:
        raw = self._local.get_item(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt backup entry %s", key)
            return None

    def list_backups(self) -> list[BackupMetadata]:
        """Backups from history, newest first."""
        raw = self._read_json(HISTORY_KEY)
        if not isinstance(raw, list):
            return []
        backups = []
        for item in raw:
            try:
                backups.append(BackupMetadata.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed backup history entry")
        return backups

    def get_backup(self, backup_id: str) -> BackupMetadata:
        for metadata in self.list_backups():
            if metadata.id == backup_id:
                return metadata
        raw = self._read_json(f"{META_PREFIX}{backup_id}")
        if isinstance(raw, dict):
            return BackupMetadata.from_dict(raw)
        raise EntityNotFoundError("Backup", backup_id)

    def _save_history(self, backups: list[BackupMetadata]) -> None:
        trimmed = backups[: self._history_limit]
        self._local.set_item(HISTORY_KEY, json.dumps([b.to_dict() for b in trimmed]))

    # ── Create ──────────────────────────────────────────────────────

    def _collect(self, categories: list[DataCategory]) -> tuple[dict[str, Any], list[str]]:
        data: dict[str, Any] = {}
        missing: list[str] = []
        for category in categories:
            result = self._scanner.scan(category)
            if result.found:
                data[category.value] = result.data
            else:
                missing.append(category.value)
        return data, missing

    async def create_backup(
        self, categories: list[DataCategory | str] | None = None
    ) -> BackupMetadata:
        selected = [DataCategory(c) for c in categories] if categories else list(DataCategory)
        data, missing = self._collect(selected)

        metadata = BackupMetadata(categories=list(data))
        payload = {
            "data": data,
            "dataStructureVersion": DATA_STRUCTURE_VERSION,
            "appVersion": self._app_version,
            "timestamp": metadata.timestamp.isoformat(),
        }
        serialized = json.dumps(payload)
        metadata.size = len(serialized)
        metadata.hash = payload_hash(payload)
        errors = [f"no data for {name}" for name in missing]

        if data:
            try:
                self._local.set_item(f"{DATA_PREFIX}{metadata.id}", serialized)
                metadata.locations.append(BackupLocation.LOCAL)
            except StorageError as exc:
                logger.warning("Local backup copy failed: %s", exc)
                errors.append(f"local: {exc.message}")

            if self._repository is not None:
                try:
                    await self._repository.save(metadata, payload)
                    metadata.locations.append(BackupLocation.CLOUD)
                    pruned = await self._repository.prune(self._history_limit)
                    if pruned:
                        logger.debug("Pruned %d cloud backups", len(pruned))
                except Exception as exc:
                    logger.warning("Cloud backup copy failed: %s", exc)
                    errors.append(f"cloud: {exc}")

        if not metadata.locations:
            metadata.status = BackupStatus.FAILED
        elif missing or len(metadata.locations) < (2 if self._repository else 1):
            metadata.status = BackupStatus.PARTIAL
        else:
            metadata.status = BackupStatus.COMPLETE
        metadata.error_details = "; ".join(errors) or None

        try:
            self._local.set_item(f"{META_PREFIX}{metadata.id}", json.dumps(metadata.to_dict()))
            self._save_history([metadata, *self.list_backups()])
        except StorageError as exc:
            logger.error("Could not record backup %s in history: %s", metadata.id, exc)

        self._prune_local()
        self._bus.publish(BACKUP_CREATED, metadata.to_dict())
        logger.info(
            "Backup %s %s (%d categories, %d bytes)",
            metadata.id,
            metadata.status.value,
            len(metadata.categories),
            metadata.size,
        )
        return metadata

    def _prune_local(self) -> None:
        """Drop local payloads beyond the newest ``max_local_backups``."""
        local_ids = [
            b.id for b in self.list_backups() if BackupLocation.LOCAL in b.locations
        ]
        for backup_id in local_ids[self._max_local :]:
            self._local.remove_item(f"{DATA_PREFIX}{backup_id}")
            self._local.remove_item(f"{META_PREFIX}{backup_id}")
            self._update_locations(backup_id, remove=BackupLocation.LOCAL)
            logger.debug("Pruned local copy of backup %s", backup_id)

    def _update_locations(self, backup_id: str, remove: BackupLocation) -> None:
        backups = self.list_backups()
        for metadata in backups:
            if metadata.id == backup_id and remove in metadata.locations:
                metadata.locations.remove(remove)
        self._save_history(backups)

    # ── Restore ─────────────────────────────────────────────────────

    async def _load_payload(self, metadata: BackupMetadata) -> dict[str, Any] | None:
        payload = self._read_json(f"{DATA_PREFIX}{metadata.id}")
        if isinstance(payload, dict):
            return payload
        if self._repository is not None and BackupLocation.CLOUD in metadata.locations:
            logger.info("Local copy of backup %s missing — trying cloud", metadata.id)
            return await self._repository.get_payload(metadata.id)
        return None

    async def restore_backup(self, backup_id: str) -> RestoreResult:
        metadata = self.get_backup(backup_id)
        payload = await self._load_payload(metadata)
        if payload is None:
            raise BackupNotAvailableError(backup_id)

        if metadata.hash and payload_hash(payload) != metadata.hash:
            logger.warning("Backup %s hash mismatch — restoring anyway", backup_id)

        result = RestoreResult(backup_id=backup_id)
        for name, data in (payload.get("data") or {}).items():
            try:
                category = DataCategory(name)
                written = self._writer.write(category, data)
            except (ValueError, InvalidEntityError) as exc:
                logger.warning("Cannot restore %s from backup %s: %s", name, backup_id, exc)
                result.failed.append(name)
                continue
            (result.restored if written.success else result.failed).append(name)

        logger.info(
            "Restored backup %s: %d restored, %d failed",
            backup_id,
            len(result.restored),
            len(result.failed),
        )
        return result

    async def delete_backup(self, backup_id: str) -> bool:
        metadata = self.get_backup(backup_id)
        self._local.remove_item(f"{DATA_PREFIX}{backup_id}")
        self._local.remove_item(f"{META_PREFIX}{backup_id}")
        self._save_history([b for b in self.list_backups() if b.id != backup_id])
        if self._repository is not None and BackupLocation.CLOUD in metadata.locations:
            await self._repository.delete(backup_id)
        logger.info("Deleted backup %s", backup_id)
        return True

    # ── Queries ─────────────────────────────────────────────────────

    def latest_envelope(self, category: DataCategory | str) -> StoredEnvelope | None:
        """The category's data in the newest local backup that contains it."""
        category = DataCategory(category)
        for metadata in self.list_backups():
            if category.value not in metadata.categories:
                continue
            payload = self._read_json(f"{DATA_PREFIX}{metadata.id}")
            if not isinstance(payload, dict):
                continue
            data = (payload.get("data") or {}).get(category.value)
            if data is not None:
                return StoredEnvelope(
                    data=data, timestamp=metadata.timestamp, source=VersionSource.BACKUP
                )
        return None

    def is_backup_due(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        backups = self.list_backups()
        if not backups:
            return True
        return now - backups[0].timestamp >= self._interval
