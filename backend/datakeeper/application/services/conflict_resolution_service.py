"""Conflict presenter — compares the local, server and backup copies of a category.

Candidates are gathered as ``StoredEnvelope`` objects. Picking one is a pure
function of the envelopes and the caller's options; committing a pick is
all-or-nothing: local slots are snapshotted first and put back if the write
or the server push fails.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from datakeeper.application.interfaces import RemoteDataClient
from datakeeper.application.services.backup_service import BackupService
from datakeeper.application.services.event_bus import (
    CHANGED_EVENTS,
    DATA_CONFLICT_RESOLVED,
    EventBus,
)
from datakeeper.application.services.recovery_scanner import RecoveryScanner
from datakeeper.application.services.redundant_writer import RedundantWriter
from datakeeper.domain.entities import (
    ConflictResolutionOptions,
    DataCategory,
    StoredEnvelope,
    VersionSource,
    parse_timestamp,
)
from datakeeper.domain.exceptions import (
    ConflictResolutionError,
    InvalidEntityError,
    RemoteBackendError,
    StorageWriteError,
)
from datakeeper.domain.field_names import keys_to_camel, keys_to_snake

logger = logging.getLogger(__name__)


def _find(envelopes: list[StoredEnvelope], source: VersionSource) -> StoredEnvelope | None:
    return next((e for e in envelopes if e.source is source), None)


def choose_envelope(
    envelopes: list[StoredEnvelope], options: ConflictResolutionOptions
) -> StoredEnvelope | None:
    """Pick the winning copy. Returns None for manual resolution or no candidates."""
    if options.manual or not envelopes:
        return None
    if options.prefer_local and (hit := _find(envelopes, VersionSource.LOCAL)):
        return hit
    if options.prefer_server and (hit := _find(envelopes, VersionSource.SERVER)):
        return hit
    if options.prefer_backup and (hit := _find(envelopes, VersionSource.BACKUP)):
        return hit
    if options.prefer_newer:
        # max() keeps the first of equal keys, so ties go to the earlier source
        return max(envelopes, key=StoredEnvelope.sort_key)
    return _find(envelopes, VersionSource.LOCAL) or envelopes[0]


def _canonical(data: Any) -> str:
    return json.dumps(keys_to_camel(keys_to_snake(data)), sort_keys=True)


def _same_data(a: StoredEnvelope, b: StoredEnvelope) -> bool:
    """Equal once both sides went through the remote key casing."""
    return _canonical(a.data) == _canonical(b.data)


@dataclass
class RecoveryReport:
    recovered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


class ConflictResolutionService:
    """Orchestrates envelope collection, conflict detection and resolution."""

    def __init__(
        self,
        scanner: RecoveryScanner,
        writer: RedundantWriter,
        bus: EventBus,
        remote: RemoteDataClient | None = None,
        backups: BackupService | None = None,
        conflict_window_seconds: int = 300,
    ):
        self._scanner = scanner
        self._writer = writer
        self._bus = bus
        self._remote = remote
        self._backups = backups
        self._window = timedelta(seconds=conflict_window_seconds)

    async def get_versions(self, category: DataCategory | str) -> list[StoredEnvelope]:
        """Local, server and backup copies, in that order, where they exist."""
        category = DataCategory(category)
        envelopes: list[StoredEnvelope] = []

        scan = self._scanner.scan(category)
        if scan.found:
            timestamp = self._scanner.last_updated(category)
            if timestamp is None and isinstance(scan.data, dict):
                timestamp = parse_timestamp(scan.data.get("updatedAt"))
            envelopes.append(StoredEnvelope(scan.data, timestamp, VersionSource.LOCAL))

        if self._remote is not None:
            try:
                remote = await self._remote.fetch(category.value)
            except RemoteBackendError as exc:
                logger.warning("Server copy of %s unavailable: %s", category.value, exc)
                remote = None
            if remote is not None and remote.data is not None:
                envelopes.append(
                    StoredEnvelope(remote.data, remote.updated_at, VersionSource.SERVER)
                )

        if self._backups is not None:
            backup = self._backups.latest_envelope(category)
            if backup is not None:
                envelopes.append(backup)

        return envelopes

    def has_conflict(self, envelopes: list[StoredEnvelope]) -> bool:
        """Local and server differ and were both written within the conflict window."""
        local = _find(envelopes, VersionSource.LOCAL)
        server = _find(envelopes, VersionSource.SERVER)
        if local is None or server is None or _same_data(local, server):
            return False
        if local.timestamp is None or server.timestamp is None:
            return False
        return abs(local.timestamp - server.timestamp) <= self._window

    async def detect_conflicts(self, category: DataCategory | str) -> bool:
        return self.has_conflict(await self.get_versions(category))

    async def resolve(
        self, category: DataCategory | str, options: ConflictResolutionOptions
    ) -> StoredEnvelope | None:
        """Commit the chosen copy locally and on the server, or change nothing."""
        category = DataCategory(category)
        envelopes = await self.get_versions(category)
        if not envelopes:
            raise ConflictResolutionError(category.value, "no stored copies found")

        chosen = choose_envelope(envelopes, options)
        if chosen is None:
            logger.info("Manual resolution requested for %s — nothing written", category.value)
            return None

        snapshot = self._writer.snapshot(category)
        try:
            result = self._writer.write(category, chosen.data)
            if not result.success:
                raise StorageWriteError(category.value, result.failed)
            if self._remote is not None:
                await self._remote.save(category.value, chosen.data)
        except (StorageWriteError, RemoteBackendError, InvalidEntityError) as exc:
            self._writer.restore_snapshot(snapshot)
            logger.error("Resolving %s conflict failed, rolled back: %s", category.value, exc)
            self._bus.notify(
                "Conflict resolution failed",
                f"Your {category.value} data was left unchanged: {exc}",
                variant="destructive",
            )
            raise ConflictResolutionError(category.value, str(exc)) from exc

        payload = {"category": category.value, "source": chosen.source.value}
        self._bus.publish(DATA_CONFLICT_RESOLVED, payload)
        self._bus.publish(CHANGED_EVENTS[category.value], {"source": "conflict-resolution"})
        logger.info("Resolved %s conflict using the %s copy", category.value, chosen.source.value)
        return chosen

    async def recover(self, category: DataCategory | str) -> StoredEnvelope | None:
        """Write the newest available copy back to every local slot."""
        category = DataCategory(category)
        envelopes = await self.get_versions(category)
        newest = choose_envelope(envelopes, ConflictResolutionOptions(prefer_newer=True))
        if newest is None:
            logger.info("Nothing to recover for %s", category.value)
            return None

        result = self._writer.write(category, newest.data)
        if not result.success:
            raise StorageWriteError(category.value, result.failed)
        self._bus.publish(CHANGED_EVENTS[category.value], {"source": "recovery"})
        logger.info("Recovered %s from the %s copy", category.value, newest.source.value)
        return newest

    async def full_recovery(self) -> RecoveryReport:
        report = RecoveryReport()
        for category in DataCategory:
            try:
                recovered = await self.recover(category)
            except (StorageWriteError, InvalidEntityError) as exc:
                logger.error("Recovery of %s failed: %s", category.value, exc)
                report.failed.append(category.value)
                continue
            if recovered is None:
                report.skipped.append(category.value)
            else:
                report.recovered.append(category.value)
        return report
