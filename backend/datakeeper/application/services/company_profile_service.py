"""Application service (use case) for the company profile."""

import logging
from dataclasses import replace
from typing import Any

from datakeeper.application.interfaces import RemoteDataClient
from datakeeper.application.services.event_bus import (
    COMPANY_DATA_CHANGED,
    COMPANY_DATA_RESTORED,
    EventBus,
)
from datakeeper.application.services.recovery_scanner import RecoveryScanner
from datakeeper.application.services.redundant_writer import RedundantWriter
from datakeeper.application.services.remote_sync import SaveResult, push_to_remote
from datakeeper.application.services.version_history_service import VersionHistoryService
from datakeeper.domain.entities import CompanyProfile, DataCategory, is_valid_company_data
from datakeeper.domain.exceptions import RemoteBackendError, StorageWriteError

logger = logging.getLogger(__name__)

_CATEGORY = DataCategory.COMPANY


class CompanyProfileService:
    """Loads, saves and syncs the company profile across all storage locations."""

    def __init__(
        self,
        scanner: RecoveryScanner,
        writer: RedundantWriter,
        history: VersionHistoryService,
        bus: EventBus,
        remote: RemoteDataClient | None = None,
    ):
        self._scanner = scanner
        self._writer = writer
        self._history = history
        self._bus = bus
        self._remote = remote

    async def get_profile(self, heal: bool = True) -> CompanyProfile:
        """Current profile, or an empty one if nothing valid is stored.

        With ``heal``, a profile found only in a fallback slot is written back
        to every slot so the primary copy is repopulated.
        """
        scan = self._scanner.scan(_CATEGORY)
        if heal and scan.found and not scan.from_primary:
            result = self._writer.write(_CATEGORY, scan.data)
            logger.info(
                "Re-populated company profile from %s (%d slots)",
                scan.slot.label,
                len(result.written),
            )
        return CompanyProfile.from_dict(scan.data)

    async def has_company_data(self) -> bool:
        return self._scanner.has_any_data(_CATEGORY)

    async def save_profile(
        self, profile: CompanyProfile, user_name: str | None = None
    ) -> SaveResult:
        profile.touch()
        data = profile.to_dict()

        result = self._writer.write(_CATEGORY, data)
        if not result.success:
            raise StorageWriteError(_CATEGORY.value, result.failed)
        logger.debug("Saved company profile %s", profile.redacted())

        version = await self._history.try_record_version(
            _CATEGORY, data, description="Company profile updated", user_name=user_name
        )
        self._bus.publish(
            COMPANY_DATA_CHANGED,
            {"source": "save", "version": version.version if version else None},
        )

        synced = await push_to_remote(self._remote, self._bus, _CATEGORY.value, data)
        return SaveResult(data=data, write=result, version=version, remote_synced=synced)

    async def update_profile(
        self, changes: dict[str, Any], user_name: str | None = None
    ) -> SaveResult:
        """Merge ``changes`` (snake_case fields) over the stored profile and save it.

        Fields left out keep their stored values; ``extra`` keys are merged.
        """
        current = await self.get_profile(heal=False)
        changes = dict(changes)
        if "extra" in changes:
            changes["extra"] = {**current.extra, **(changes["extra"] or {})}
        return await self.save_profile(replace(current, **changes), user_name=user_name)

    async def clear_profile(self) -> bool:
        """Remove the profile from every local slot and from the server."""
        self._writer.clear(_CATEGORY)
        remote_cleared = False
        if self._remote is not None:
            try:
                remote_cleared = await self._remote.delete(_CATEGORY.value)
            except RemoteBackendError as exc:
                logger.warning("Could not delete server copy of company profile: %s", exc)
                self._bus.notify(
                    "Sync failed",
                    "The company profile was cleared on this device but not on the server.",
                    variant="destructive",
                )
        self._bus.publish(COMPANY_DATA_CHANGED, {"source": "clear"})
        return remote_cleared

    async def pull_from_server(self) -> CompanyProfile | None:
        """Adopt the server profile if local is missing or names a different company.

        Returns the adopted profile, or None when nothing changed.
        """
        if self._remote is None:
            return None
        try:
            snapshot = await self._remote.fetch(_CATEGORY.value)
        except RemoteBackendError as exc:
            logger.warning("Could not fetch company profile from server: %s", exc)
            self._bus.notify(
                "Sync failed",
                "Could not load your company profile from the server.",
                variant="destructive",
            )
            return None

        if snapshot is None or not is_valid_company_data(snapshot.data):
            return None

        local = self._scanner.scan(_CATEGORY)
        if local.found and local.data.get("name") == snapshot.data.get("name"):
            return None

        result = self._writer.write(_CATEGORY, snapshot.data)
        if not result.success:
            raise StorageWriteError(_CATEGORY.value, result.failed)

        profile = CompanyProfile.from_dict(snapshot.data)
        self._bus.publish(COMPANY_DATA_RESTORED, {"source": "server"})
        logger.info("Adopted company profile from %s", self._remote.backend_name)
        return profile
