"""Concrete repository implementation for cloud backups backed by SQLAlchemy."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from datakeeper.application.interfaces import BackupRepository
from datakeeper.domain.entities import BackupMetadata
from datakeeper.infrastructure.database.models import DataBackupModel


class SQLAlchemyBackupRepository(BackupRepository):
    """Implements the BackupRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, metadata: BackupMetadata, payload: dict[str, Any]) -> None:
        model = await self._session.get(DataBackupModel, metadata.id)
        if model is None:
            model = DataBackupModel(id=metadata.id)
            self._session.add(model)
        model.timestamp = metadata.timestamp
        model.categories = list(metadata.categories)
        model.size = metadata.size
        model.hash = metadata.hash
        model.status = metadata.status.value
        model.error_details = metadata.error_details
        model.payload = payload
        await self._session.flush()

    async def get_payload(self, backup_id: str) -> dict[str, Any] | None:
        model = await self._session.get(DataBackupModel, backup_id)
        return model.payload if model else None

    async def delete(self, backup_id: str) -> bool:
        model = await self._session.get(DataBackupModel, backup_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def prune(self, keep: int) -> list[str]:
        stmt = (
            select(DataBackupModel.id)
            .order_by(DataBackupModel.timestamp.desc())
            .offset(keep)
        )
        result = await self._session.execute(stmt)
        stale = list(result.scalars().all())
        for backup_id in stale:
            await self.delete(backup_id)
        return stale
