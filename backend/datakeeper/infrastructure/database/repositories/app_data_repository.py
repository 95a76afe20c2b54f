"""Remote backend backed by the 'app_data' table (SQLite or Postgres)."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from datakeeper.application.interfaces import RemoteDataClient, RemoteSnapshot
from datakeeper.domain.entities import parse_timestamp
from datakeeper.domain.exceptions import RemoteBackendError
from datakeeper.domain.field_names import keys_to_camel, keys_to_snake
from datakeeper.infrastructure.database.models import AppDataModel

logger = logging.getLogger(__name__)

_BACKEND = "database"


class SQLAlchemyAppDataRepository(RemoteDataClient):
    """Implements the RemoteDataClient port using SQLAlchemy async sessions.

    Rows hold the snake_case representation; callers see camelCase.
    """

    def __init__(self, session: AsyncSession, data_id: str = "default"):
        self._session = session
        self._data_id = data_id

    @property
    def backend_name(self) -> str:
        return _BACKEND

    def _to_snapshot(self, model: AppDataModel) -> RemoteSnapshot:
        """Map ORM model → remote snapshot."""
        return RemoteSnapshot(
            data=keys_to_camel(model.data),
            updated_at=parse_timestamp(model.updated_at),
        )

    async def _get(self, category: str) -> AppDataModel | None:
        stmt = select(AppDataModel).where(
            AppDataModel.type == category,
            AppDataModel.data_id == self._data_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def fetch(self, category: str) -> RemoteSnapshot | None:
        try:
            model = await self._get(category)
        except SQLAlchemyError as exc:
            raise RemoteBackendError(_BACKEND, 500, str(exc)) from exc
        return self._to_snapshot(model) if model else None

    async def save(self, category: str, data: Any) -> RemoteSnapshot:
        now = datetime.now(timezone.utc)
        try:
            model = await self._get(category)
            if model is None:
                model = AppDataModel(
                    id=str(uuid4()),
                    type=category,
                    data_id=self._data_id,
                    created_at=now,
                )
                self._session.add(model)
            model.data = keys_to_snake(data)
            model.updated_at = now
            await self._session.flush()
        except SQLAlchemyError as exc:
            raise RemoteBackendError(_BACKEND, 500, str(exc)) from exc
        logger.debug("Stored %s in app_data for %s", category, self._data_id)
        return self._to_snapshot(model)

    async def delete(self, category: str) -> bool:
        stmt = delete(AppDataModel).where(
            AppDataModel.type == category,
            AppDataModel.data_id == self._data_id,
        )
        try:
            result = await self._session.execute(stmt)
            await self._session.flush()
        except SQLAlchemyError as exc:
            raise RemoteBackendError(_BACKEND, 500, str(exc)) from exc
        return result.rowcount > 0
