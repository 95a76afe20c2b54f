"""Integration tests for the SQLAlchemy repositories on an in-memory SQLite database."""

from datetime import datetime, timedelta, timezone

import pytest

from datakeeper.domain.entities import BackupMetadata, BackupStatus, VersionEntry
from datakeeper.domain.exceptions import VersionHistoryError
from datakeeper.infrastructure.database.repositories import (
    SQLAlchemyAppDataRepository,
    SQLAlchemyBackupRepository,
    SQLAlchemyVersionHistoryRepository,
)


# ── app_data ──


@pytest.mark.asyncio
async def test_app_data_round_trip_converts_field_names(db_session):
    repo = SQLAlchemyAppDataRepository(db_session)

    assert await repo.fetch("company") is None

    await repo.save("company", {"name": "Acme Co", "contactEmail": "a@acme.test"})
    snapshot = await repo.fetch("company")

    assert snapshot.data == {"name": "Acme Co", "contactEmail": "a@acme.test"}
    assert snapshot.updated_at.tzinfo is not None


@pytest.mark.asyncio
async def test_app_data_save_replaces_existing_row(db_session):
    repo = SQLAlchemyAppDataRepository(db_session)
    await repo.save("company", {"name": "Acme Co"})
    await repo.save("company", {"name": "Acme Holdings"})

    snapshot = await repo.fetch("company")
    assert snapshot.data == {"name": "Acme Holdings"}


@pytest.mark.asyncio
async def test_app_data_rows_are_scoped_by_owner(db_session):
    first = SQLAlchemyAppDataRepository(db_session, data_id="first")
    second = SQLAlchemyAppDataRepository(db_session, data_id="second")
    await first.save("company", {"name": "Acme Co"})

    assert await second.fetch("company") is None
    assert await second.delete("company") is False
    assert await first.delete("company") is True
    assert await first.fetch("company") is None


# ── Version history ──


@pytest.mark.asyncio
async def test_version_history_append_and_query(db_session):
    repo = SQLAlchemyVersionHistoryRepository(db_session)
    first = await repo.append(
        VersionEntry(category="company", version=1, data={"name": "Acme Co"}, changed_fields=["name"])
    )
    await repo.append(
        VersionEntry(
            category="company",
            version=2,
            data={"name": "Acme Holdings"},
            changed_fields=["name"],
            user_name="Thandi",
        )
    )
    await repo.append(VersionEntry(category="clients", version=1, data={"companies": []}))

    latest = await repo.get_latest("company")
    assert latest.version == 2
    assert latest.user_name == "Thandi"
    assert latest.timestamp.tzinfo is not None

    listed = await repo.list_for_category("company")
    assert [e.version for e in listed] == [2, 1]
    assert [e.version for e in await repo.list_for_category("company", skip=1, limit=1)] == [1]

    fetched = await repo.get_by_id("company", first.id)
    assert fetched.data == {"name": "Acme Co"}
    assert await repo.get_by_id("clients", first.id) is None
    assert await repo.get_latest("missing") is None


@pytest.mark.asyncio
async def test_version_history_append_failure_is_a_domain_error(db_session):
    repo = SQLAlchemyVersionHistoryRepository(db_session)
    await repo.append(VersionEntry(category="company", version=1, data={"name": "Acme Co"}))

    with pytest.raises(VersionHistoryError):
        await repo.append(VersionEntry(category="company", version=1, data={"name": "Acme Co"}))


# ── Backups ──


def _metadata(offset_minutes: int) -> BackupMetadata:
    return BackupMetadata(
        timestamp=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=offset_minutes),
        categories=["company"],
        status=BackupStatus.COMPLETE,
    )


@pytest.mark.asyncio
async def test_backup_save_get_and_delete(db_session):
    repo = SQLAlchemyBackupRepository(db_session)
    metadata = _metadata(0)
    payload = {"data": {"company": {"name": "Acme Co"}}, "dataStructureVersion": "1"}

    await repo.save(metadata, payload)

    assert await repo.get_payload(metadata.id) == payload
    assert await repo.delete(metadata.id) is True
    assert await repo.get_payload(metadata.id) is None
    assert await repo.delete(metadata.id) is False


@pytest.mark.asyncio
async def test_backup_prune_keeps_newest(db_session):
    repo = SQLAlchemyBackupRepository(db_session)
    backups = [_metadata(minutes) for minutes in range(4)]
    for metadata in backups:
        await repo.save(metadata, {"data": {}})

    pruned = await repo.prune(2)

    assert set(pruned) == {backups[0].id, backups[1].id}
    assert await repo.get_payload(backups[3].id) == {"data": {}}
    assert await repo.get_payload(backups[0].id) is None
