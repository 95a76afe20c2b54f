"""Application service (use case) for the client roster."""

import logging
from typing import Any

from datakeeper.application.interfaces import RemoteDataClient
from datakeeper.application.services.event_bus import CLIENTS_DATA_CHANGED, EventBus
from datakeeper.application.services.recovery_scanner import RecoveryScanner
from datakeeper.application.services.redundant_writer import RedundantWriter
from datakeeper.application.services.remote_sync import SaveResult, push_to_remote
from datakeeper.application.services.version_history_service import VersionHistoryService
from datakeeper.domain.entities import (
    BaseClient,
    ClientRoster,
    ClientType,
    DataCategory,
    client_from_dict,
)
from datakeeper.domain.exceptions import EntityNotFoundError, StorageWriteError

logger = logging.getLogger(__name__)

_CATEGORY = DataCategory.CLIENTS


class ClientRosterService:
    """Orchestrates client CRUD on top of the redundant store."""

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

    async def get_roster(self) -> ClientRoster:
        return ClientRoster.from_dict(self._scanner.load(_CATEGORY))

    async def has_clients(self) -> bool:
        return self._scanner.has_any_data(_CATEGORY)

    async def get_client(self, client_type: ClientType | str, client_id: str) -> BaseClient:
        roster = await self.get_roster()
        client = roster.find(client_id, ClientType(client_type))
        if client is None:
            raise EntityNotFoundError("Client", client_id)
        return client

    async def _commit(
        self, roster: ClientRoster, description: str, user_name: str | None
    ) -> SaveResult:
        data = roster.to_dict()
        result = self._writer.write(_CATEGORY, data)
        if not result.success:
            raise StorageWriteError(_CATEGORY.value, result.failed)

        version = await self._history.try_record_version(
            _CATEGORY, data, description=description, user_name=user_name
        )
        self._bus.publish(CLIENTS_DATA_CHANGED, {"source": "save", "count": roster.count()})

        synced = await push_to_remote(self._remote, self._bus, _CATEGORY.value, data)
        return SaveResult(data=data, write=result, version=version, remote_synced=synced)

    async def add_client(self, client: BaseClient, user_name: str | None = None) -> SaveResult:
        roster = await self.get_roster()
        roster.add(client)
        logger.info("Adding %s client %s", client.client_type.value, client.id)
        return await self._commit(roster, f"Added client {client.name}", user_name)

    async def update_client(
        self,
        client_type: ClientType | str,
        client_id: str,
        changes: dict[str, Any],
        user_name: str | None = None,
    ) -> SaveResult:
        client_type = ClientType(client_type)
        roster = await self.get_roster()
        existing = roster.find(client_id, client_type)
        if existing is None:
            raise EntityNotFoundError("Client", client_id)

        merged = {**existing.to_dict(), **changes, "id": client_id}
        updated = client_from_dict(merged, client_type)
        updated.touch()
        roster.update(updated)
        return await self._commit(roster, f"Updated client {updated.name}", user_name)

    async def delete_client(
        self,
        client_type: ClientType | str,
        client_id: str,
        user_name: str | None = None,
    ) -> SaveResult:
        roster = await self.get_roster()
        removed = roster.remove(client_id, ClientType(client_type))
        logger.info("Deleting %s client %s", removed.client_type.value, client_id)
        return await self._commit(roster, f"Deleted client {removed.name}", user_name)
