"""Unit tests for the BackupService and BackupScheduler."""

import json
from contextlib import asynccontextmanager
from datetime import timedelta

import pytest

from datakeeper.application.services import BackupScheduler, BackupService
from datakeeper.application.services.backup_service import DATA_PREFIX, HISTORY_KEY
from datakeeper.application.services.event_bus import BACKUP_CREATED
from datakeeper.domain.entities import BackupLocation, BackupStatus, VersionSource
from datakeeper.domain.exceptions import BackupNotAvailableError, EntityNotFoundError

ACME = {"name": "Acme Co", "contactEmail": "a@acme.test"}
ROSTER = {"companies": [{"id": "c1", "name": "Beta Co", "type": "company"}], "individuals": [], "vendors": []}


@pytest.fixture
def service(areas, scanner, writer, bus, backup_repo) -> BackupService:
    return BackupService(areas, scanner, writer, bus, backup_repo, max_local_backups=2, history_limit=3)


@pytest.mark.asyncio
async def test_create_complete_backup(service, writer, backup_repo, areas, recorded_events):
    writer.write("company", ACME)
    writer.write("clients", ROSTER)

    metadata = await service.create_backup()

    assert metadata.status is BackupStatus.COMPLETE
    assert sorted(metadata.categories) == ["clients", "company"]
    assert metadata.locations == [BackupLocation.LOCAL, BackupLocation.CLOUD]
    assert len(metadata.hash) == 64
    assert metadata.id in backup_repo.backups

    payload = json.loads(areas.local.get_item(f"{DATA_PREFIX}{metadata.id}"))
    assert payload["dataStructureVersion"] == "1"
    assert payload["data"]["company"] == ACME
    assert recorded_events[-1][0] == BACKUP_CREATED


@pytest.mark.asyncio
async def test_missing_category_makes_backup_partial(service, writer):
    writer.write("company", ACME)
    metadata = await service.create_backup()

    assert metadata.status is BackupStatus.PARTIAL
    assert metadata.categories == ["company"]
    assert "clients" in metadata.error_details


@pytest.mark.asyncio
async def test_backup_with_no_data_fails(service):
    metadata = await service.create_backup()
    assert metadata.status is BackupStatus.FAILED
    assert metadata.locations == []


@pytest.mark.asyncio
async def test_history_is_capped_and_local_copies_pruned(service, writer, areas):
    writer.write("company", ACME)
    created = [await service.create_backup() for _ in range(4)]

    history = service.list_backups()
    assert [b.id for b in history] == [b.id for b in reversed(created)][:3]
    assert len(json.loads(areas.local.get_item(HISTORY_KEY))) == 3

    local_payloads = [k for k in areas.local.keys() if k.startswith(DATA_PREFIX)]
    assert len(local_payloads) == 2
    assert BackupLocation.LOCAL not in history[2].locations


@pytest.mark.asyncio
async def test_restore_after_data_loss(service, writer, scanner):
    writer.write("company", ACME)
    writer.write("clients", ROSTER)
    metadata = await service.create_backup()
    writer.clear("company")
    writer.clear("clients")

    result = await service.restore_backup(metadata.id)

    assert result.success
    assert sorted(result.restored) == ["clients", "company"]
    assert scanner.scan("company").data == ACME
    assert scanner.scan("clients").data == ROSTER


@pytest.mark.asyncio
async def test_restore_falls_back_to_cloud_copy(service, writer, scanner, areas):
    writer.write("company", ACME)
    metadata = await service.create_backup()
    areas.local.remove_item(f"{DATA_PREFIX}{metadata.id}")
    writer.clear("company")

    result = await service.restore_backup(metadata.id)

    assert result.restored == ["company"]
    assert scanner.scan("company").data == ACME


@pytest.mark.asyncio
async def test_restore_with_tampered_payload_still_restores(service, writer, scanner, areas):
    writer.write("company", ACME)
    metadata = await service.create_backup()
    key = f"{DATA_PREFIX}{metadata.id}"
    payload = json.loads(areas.local.get_item(key))
    payload["data"]["company"]["name"] = "Tampered Co"
    areas.local.set_item(key, json.dumps(payload))

    result = await service.restore_backup(metadata.id)

    assert result.restored == ["company"]
    assert scanner.scan("company").data["name"] == "Tampered Co"


@pytest.mark.asyncio
async def test_restore_errors(areas, scanner, writer, bus):
    service = BackupService(areas, scanner, writer, bus, repository=None)
    with pytest.raises(EntityNotFoundError):
        await service.restore_backup("backup_missing")

    writer.write("company", ACME)
    metadata = await service.create_backup()
    areas.local.remove_item(f"{DATA_PREFIX}{metadata.id}")
    with pytest.raises(BackupNotAvailableError):
        await service.restore_backup(metadata.id)


@pytest.mark.asyncio
async def test_delete_backup(service, writer, backup_repo):
    writer.write("company", ACME)
    metadata = await service.create_backup()

    assert await service.delete_backup(metadata.id)
    assert service.list_backups() == []
    assert metadata.id not in backup_repo.backups
    with pytest.raises(EntityNotFoundError):
        service.get_backup(metadata.id)


@pytest.mark.asyncio
async def test_latest_envelope_and_due_check(service, writer):
    assert service.latest_envelope("company") is None
    assert service.is_backup_due()

    writer.write("company", ACME)
    metadata = await service.create_backup()

    envelope = service.latest_envelope("company")
    assert envelope.source is VersionSource.BACKUP
    assert envelope.data == ACME
    assert not service.is_backup_due(metadata.timestamp + timedelta(hours=1))
    assert service.is_backup_due(metadata.timestamp + timedelta(days=1))


@pytest.mark.asyncio
async def test_scheduler_runs_backup_only_when_due(service, writer):
    writer.write("company", ACME)

    @asynccontextmanager
    async def factory():
        yield service

    scheduler = BackupScheduler(service_factory=factory, check_interval=3600)
    assert await scheduler.run_once() is True
    assert await scheduler.run_once() is False
    assert len(service.list_backups()) == 1


@pytest.mark.asyncio
async def test_scheduler_start_and_stop(service):
    @asynccontextmanager
    async def factory():
        yield service

    scheduler = BackupScheduler(service_factory=factory, check_interval=3600)
    await scheduler.start()
    assert scheduler.running
    await scheduler.stop()
    assert not scheduler.running
