"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from datakeeper.application.interfaces import BackupRepository, RemoteDataClient
from datakeeper.application.services import (
    BackupService,
    ClientRosterService,
    CompanyProfileService,
    ConflictResolutionService,
    EventBus,
    RecoveryScanner,
    RedundantWriter,
    SSEManager,
    StorageAreas,
    VersionHistoryService,
)
from datakeeper.config import Settings, get_settings
from datakeeper.infrastructure.database.session import async_session_factory, get_db_session
from datakeeper.infrastructure.database.repositories import (
    SQLAlchemyAppDataRepository,
    SQLAlchemyBackupRepository,
    SQLAlchemyVersionHistoryRepository,
)
from datakeeper.infrastructure.remote import SupabaseRestClient
from datakeeper.infrastructure.storage.json_file_storage_area import JsonFileStorageArea
from datakeeper.infrastructure.storage.memory_storage_area import MemoryStorageArea


# ── Process-wide singletons ──────────────────────────────────────────


@lru_cache
def get_storage_areas() -> StorageAreas:
    """The persistent (file) area and the session (memory) area."""
    settings = get_settings()
    quota = settings.storage_quota_bytes or None
    local = JsonFileStorageArea(
        Path(settings.storage_dir) / "local.json", name="local", quota_bytes=quota
    )
    session = MemoryStorageArea(name="session", quota_bytes=quota)
    return StorageAreas(local=local, session=session)


@lru_cache
def get_event_bus() -> EventBus:
    return EventBus()


@lru_cache
def get_sse_manager() -> SSEManager:
    return SSEManager()


def get_redundant_writer() -> RedundantWriter:
    return RedundantWriter(get_storage_areas())


def get_recovery_scanner() -> RecoveryScanner:
    return RecoveryScanner(get_storage_areas())


# ── Per-session builders ─────────────────────────────────────────────


def build_remote_client(session: AsyncSession, settings: Settings) -> RemoteDataClient | None:
    """The configured remote backend, or None when running local-only."""
    if settings.remote_backend == "supabase":
        return SupabaseRestClient(
            base_url=settings.supabase_url,
            api_key=settings.supabase_api_key,
            data_id=settings.remote_data_id,
        )
    if settings.remote_backend == "database":
        return SQLAlchemyAppDataRepository(session, data_id=settings.remote_data_id)
    return None


def build_backup_repository(session: AsyncSession, settings: Settings) -> BackupRepository | None:
    if not settings.store_cloud_backups:
        return None
    return SQLAlchemyBackupRepository(session)


def build_version_history_service(session: AsyncSession) -> VersionHistoryService:
    return VersionHistoryService(
        SQLAlchemyVersionHistoryRepository(session),
        get_redundant_writer(),
        get_event_bus(),
    )


def build_backup_service(session: AsyncSession) -> BackupService:
    settings = get_settings()
    return BackupService(
        get_storage_areas(),
        get_recovery_scanner(),
        get_redundant_writer(),
        get_event_bus(),
        build_backup_repository(session, settings),
        app_version=settings.app_version,
        max_local_backups=settings.max_local_backups,
        history_limit=settings.backup_history_limit,
        backup_interval_seconds=settings.backup_interval_seconds,
    )


@asynccontextmanager
async def backup_service_scope() -> AsyncIterator[BackupService]:
    """A BackupService bound to its own session — used by the BackupScheduler."""
    async with async_session_factory() as session:
        try:
            yield build_backup_service(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── FastAPI providers ────────────────────────────────────────────────


async def get_version_history_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[VersionHistoryService, None]:
    """Provides a VersionHistoryService with its repository wired up."""
    yield build_version_history_service(session)


async def get_company_profile_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[CompanyProfileService, None]:
    """Provides a CompanyProfileService with storage, history and remote wired up."""
    yield CompanyProfileService(
        get_recovery_scanner(),
        get_redundant_writer(),
        build_version_history_service(session),
        get_event_bus(),
        build_remote_client(session, get_settings()),
    )


async def get_client_roster_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ClientRosterService, None]:
    """Provides a ClientRosterService with storage, history and remote wired up."""
    yield ClientRosterService(
        get_recovery_scanner(),
        get_redundant_writer(),
        build_version_history_service(session),
        get_event_bus(),
        build_remote_client(session, get_settings()),
    )


async def get_backup_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[BackupService, None]:
    yield build_backup_service(session)


async def get_conflict_resolution_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ConflictResolutionService, None]:
    """Provides a ConflictResolutionService comparing local, server and backup copies."""
    settings = get_settings()
    yield ConflictResolutionService(
        get_recovery_scanner(),
        get_redundant_writer(),
        get_event_bus(),
        remote=build_remote_client(session, settings),
        backups=build_backup_service(session),
        conflict_window_seconds=settings.conflict_window_seconds,
    )
