from .base import Base
from .session import engine, async_session_factory, get_db_session
from .models import AppDataModel, VersionHistoryModel, DataBackupModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "AppDataModel",
    "VersionHistoryModel",
    "DataBackupModel",
]
