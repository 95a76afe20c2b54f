"""Unit tests for the VersionHistoryService."""

import pytest

from datakeeper.application.services import RedundantWriter, VersionHistoryService
from datakeeper.application.services.event_bus import DATA_VERSION_RESTORED
from datakeeper.application.services.version_history_service import (
    get_changed_fields,
    group_changed_fields,
)
from datakeeper.domain.exceptions import EntityNotFoundError, VersionRestoreError


def test_changed_fields_recurse_into_mappings_and_skip_bookkeeping():
    old = {"name": "Acme", "banking": {"bank": "FNB", "branch": "1"}, "tags": [1, 2], "_meta": 1}
    new = {"name": "Acme", "banking": {"bank": "ABSA", "branch": "1"}, "tags": [1, 3], "_meta": 2}

    assert get_changed_fields(old, new) == ["banking.bank", "tags"]


def test_changed_fields_include_added_and_removed_keys():
    assert get_changed_fields({"a": 1}, {"b": 2}) == ["a", "b"]


def test_group_changed_fields_counts_per_top_level_field():
    groups = group_changed_fields(["banking.bank", "banking.branch", "name"])
    assert groups == {"banking": 2, "name": 1}


@pytest.mark.asyncio
async def test_record_version_numbers_and_diffs(history: VersionHistoryService):
    first = await history.record_version("company", {"name": "Acme Co", "city": "Durban"})
    second = await history.record_version("company", {"name": "Acme Co", "city": "Cape Town"})

    assert (first.version, second.version) == (1, 2)
    assert first.changed_fields == ["city", "name"]
    assert second.changed_fields == ["city"]
    assert second.description == "Data updated"


@pytest.mark.asyncio
async def test_list_versions_newest_first(history: VersionHistoryService):
    for name in ("A", "B", "C"):
        await history.record_version("company", {"name": name})
    await history.record_version("clients", {"companies": [], "individuals": [], "vendors": []})

    versions = await history.list_versions("company")
    assert [v.version for v in versions] == [3, 2, 1]


@pytest.mark.asyncio
async def test_restore_appends_and_keeps_history(history, history_repo, scanner, recorded_events):
    v1 = await history.record_version("company", {"name": "Acme Co"})
    await history.record_version("company", {"name": "Acme Holdings"})

    restored = await history.restore_version("company", v1.id, user_name="Thandi")

    assert restored.version == 3
    assert restored.restored_from_version == 1
    assert restored.is_restore
    assert restored.data == {"name": "Acme Co"}
    assert [e.version for e in history_repo.entries] == [1, 2, 3]
    assert scanner.scan("company").data == {"name": "Acme Co"}
    assert (DATA_VERSION_RESTORED, {"category": "company", "version": 3, "restoredFromVersion": 1}) in recorded_events


@pytest.mark.asyncio
async def test_restore_unknown_version(history):
    with pytest.raises(EntityNotFoundError):
        await history.restore_version("company", "missing")


@pytest.mark.asyncio
async def test_restore_write_failure_appends_nothing(history_repo, broken_areas, bus):
    service = VersionHistoryService(history_repo, RedundantWriter(broken_areas), bus)
    entry = await service.record_version("company", {"name": "Acme Co"})

    with pytest.raises(VersionRestoreError):
        await service.restore_version("company", entry.id)
    assert len(history_repo.entries) == 1
