from .app_data_repository import SQLAlchemyAppDataRepository
from .version_history_repository import SQLAlchemyVersionHistoryRepository
from .backup_repository import SQLAlchemyBackupRepository

__all__ = [
    "SQLAlchemyAppDataRepository",
    "SQLAlchemyVersionHistoryRepository",
    "SQLAlchemyBackupRepository",
]
