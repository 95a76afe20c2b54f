"""Shared fixtures — in-memory storage areas, fakes for the ports, an in-memory database."""

import os

# Must be set before datakeeper.config is first imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_BACKUP_ENABLED", "false")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from datakeeper.application.interfaces import (  # noqa: E402
    BackupRepository,
    RemoteDataClient,
    RemoteSnapshot,
    StorageArea,
    VersionHistoryRepository,
)
from datakeeper.application.services import (  # noqa: E402
    EventBus,
    RecoveryScanner,
    RedundantWriter,
    StorageAreas,
    VersionHistoryService,
)
from datakeeper.domain.entities import BackupMetadata, VersionEntry  # noqa: E402
from datakeeper.domain.exceptions import (  # noqa: E402
    RemoteBackendError,
    StorageUnavailableError,
    VersionHistoryError,
)
from datakeeper.infrastructure.database.base import Base  # noqa: E402
from datakeeper.infrastructure.storage.memory_storage_area import MemoryStorageArea  # noqa: E402


# ── Fakes ────────────────────────────────────────────────────────────


class FailingStorageArea(StorageArea):
    """Accepts reads, refuses every write — a full or unavailable medium."""

    def __init__(self, name: str = "broken", entries: dict[str, str] | None = None):
        self._name = name
        self._entries = dict(entries or {})

    @property
    def name(self) -> str:
        return self._name

    def get_item(self, key: str) -> str | None:
        return self._entries.get(key)

    def set_item(self, key: str, value: str) -> None:
        raise StorageUnavailableError(self._name, key, "medium unavailable")

    def remove_item(self, key: str) -> None:
        raise StorageUnavailableError(self._name, key, "medium unavailable")

    def keys(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> None:
        raise StorageUnavailableError(self._name, "*", "medium unavailable")


class FakeVersionHistoryRepository(VersionHistoryRepository):
    """In-memory append-only history."""

    def __init__(self):
        self.entries: list[VersionEntry] = []

    async def append(self, entry: VersionEntry) -> VersionEntry:
        self.entries.append(entry)
        return entry

    async def get_by_id(self, category: str, version_id: str) -> VersionEntry | None:
        for entry in self.entries:
            if entry.id == version_id and entry.category == category:
                return entry
        return None

    async def get_latest(self, category: str) -> VersionEntry | None:
        matching = [e for e in self.entries if e.category == category]
        return max(matching, key=lambda e: e.version) if matching else None

    async def list_for_category(
        self, category: str, *, skip: int = 0, limit: int = 50
    ) -> list[VersionEntry]:
        matching = sorted(
            (e for e in self.entries if e.category == category),
            key=lambda e: e.version,
            reverse=True,
        )
        return matching[skip : skip + limit]


class UnavailableVersionHistoryRepository(FakeVersionHistoryRepository):
    """History store whose every read and append fails."""

    async def append(self, entry: VersionEntry) -> VersionEntry:
        raise VersionHistoryError(entry.category, "database is locked")

    async def get_latest(self, category: str) -> VersionEntry | None:
        raise VersionHistoryError(category, "database is locked")


class FakeRemoteDataClient(RemoteDataClient):
    """In-memory server. Set ``fail`` to make every call raise."""

    def __init__(self):
        self.rows: dict[str, RemoteSnapshot] = {}
        self.fail = False
        self.save_calls = 0

    @property
    def backend_name(self) -> str:
        return "fake"

    def _check(self) -> None:
        if self.fail:
            raise RemoteBackendError("fake", 503, "server unreachable")

    def seed(self, category: str, data: Any, updated_at: datetime | None = None) -> None:
        self.rows[category] = RemoteSnapshot(data, updated_at or datetime.now(timezone.utc))

    async def fetch(self, category: str) -> RemoteSnapshot | None:
        self._check()
        return self.rows.get(category)

    async def save(self, category: str, data: Any) -> RemoteSnapshot:
        self.save_calls += 1
        self._check()
        snapshot = RemoteSnapshot(data, datetime.now(timezone.utc))
        self.rows[category] = snapshot
        return snapshot

    async def delete(self, category: str) -> bool:
        self._check()
        return self.rows.pop(category, None) is not None


class FakeBackupRepository(BackupRepository):
    def __init__(self):
        self.backups: dict[str, tuple[BackupMetadata, dict[str, Any]]] = {}

    async def save(self, metadata: BackupMetadata, payload: dict[str, Any]) -> None:
        self.backups[metadata.id] = (metadata, payload)

    async def get_payload(self, backup_id: str) -> dict[str, Any] | None:
        stored = self.backups.get(backup_id)
        return stored[1] if stored else None

    async def delete(self, backup_id: str) -> bool:
        return self.backups.pop(backup_id, None) is not None

    async def prune(self, keep: int) -> list[str]:
        ordered = sorted(self.backups.values(), key=lambda b: b[0].timestamp, reverse=True)
        stale = [metadata.id for metadata, _ in ordered[keep:]]
        for backup_id in stale:
            del self.backups[backup_id]
        return stale


class StepClock:
    """Deterministic clock for the writer — each call advances one second."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def areas() -> StorageAreas:
    return StorageAreas(local=MemoryStorageArea("local"), session=MemoryStorageArea("session"))


@pytest.fixture
def writer(areas: StorageAreas) -> RedundantWriter:
    return RedundantWriter(areas, clock=StepClock())


@pytest.fixture
def scanner(areas: StorageAreas) -> RecoveryScanner:
    return RecoveryScanner(areas)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def history_repo() -> FakeVersionHistoryRepository:
    return FakeVersionHistoryRepository()


@pytest.fixture
def history(history_repo, writer, bus) -> VersionHistoryService:
    return VersionHistoryService(history_repo, writer, bus)


@pytest.fixture
def broken_history(writer, bus) -> VersionHistoryService:
    return VersionHistoryService(UnavailableVersionHistoryRepository(), writer, bus)


@pytest.fixture
def remote() -> FakeRemoteDataClient:
    return FakeRemoteDataClient()


@pytest.fixture
def recorded_events(bus: EventBus) -> list[tuple[str, dict]]:
    """Every event published on the bus, in order."""
    from datakeeper.application.services.event_bus import ALL_EVENTS

    events: list[tuple[str, dict]] = []
    for name in ALL_EVENTS:
        bus.subscribe(name, lambda event, payload: events.append((event, payload)))
    return events


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A session on a fresh in-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def backup_repo() -> FakeBackupRepository:
    return FakeBackupRepository()


@pytest.fixture
def broken_areas() -> StorageAreas:
    """Both areas refuse writes."""
    return StorageAreas(local=FailingStorageArea("local"), session=FailingStorageArea("session"))


@pytest.fixture
def session_only_areas() -> StorageAreas:
    """The persistent area refuses writes; the session area works."""
    return StorageAreas(local=FailingStorageArea("local"), session=MemoryStorageArea("session"))
