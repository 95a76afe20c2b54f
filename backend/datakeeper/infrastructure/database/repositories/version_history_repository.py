"""Concrete repository implementation for VersionEntry backed by SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from datakeeper.application.interfaces import VersionHistoryRepository
from datakeeper.domain.entities import VersionEntry, parse_timestamp
from datakeeper.domain.exceptions import VersionHistoryError
from datakeeper.infrastructure.database.models import VersionHistoryModel


class SQLAlchemyVersionHistoryRepository(VersionHistoryRepository):
    """Implements the VersionHistoryRepository port. Insert and select only."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: VersionHistoryModel) -> VersionEntry:
        """Map ORM model → domain entity."""
        return VersionEntry(
            id=model.id,
            category=model.category,
            version=model.version,
            data=model.data,
            changed_fields=list(model.changed_fields or []),
            description=model.description,
            user_name=model.user_name,
            restored_from_version=model.restored_from_version,
            timestamp=parse_timestamp(model.timestamp),
        )

    def _to_model(self, entity: VersionEntry) -> VersionHistoryModel:
        """Map domain entity → ORM model (for creation)."""
        return VersionHistoryModel(
            id=entity.id,
            category=entity.category,
            version=entity.version,
            data=entity.data,
            changed_fields=entity.changed_fields,
            description=entity.description,
            user_name=entity.user_name,
            restored_from_version=entity.restored_from_version,
            timestamp=entity.timestamp,
        )

    async def append(self, entry: VersionEntry) -> VersionEntry:
        model = self._to_model(entry)
        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise VersionHistoryError(entry.category, str(exc)) from exc
        return self._to_entity(model)

    async def get_by_id(self, category: str, version_id: str) -> VersionEntry | None:
        model = await self._session.get(VersionHistoryModel, version_id)
        if model is None or model.category != category:
            return None
        return self._to_entity(model)

    async def get_latest(self, category: str) -> VersionEntry | None:
        stmt = (
            select(VersionHistoryModel)
            .where(VersionHistoryModel.category == category)
            .order_by(VersionHistoryModel.version.desc())
            .limit(1)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise VersionHistoryError(category, str(exc)) from exc
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_for_category(
        self, category: str, *, skip: int = 0, limit: int = 50
    ) -> list[VersionEntry]:
        stmt = (
            select(VersionHistoryModel)
            .where(VersionHistoryModel.category == category)
            .order_by(VersionHistoryModel.version.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]
