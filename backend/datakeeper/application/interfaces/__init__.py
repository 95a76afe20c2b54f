from .storage_area import StorageArea
from .remote_data_client import RemoteDataClient, RemoteSnapshot
from .version_history_repository import VersionHistoryRepository
from .backup_repository import BackupRepository

__all__ = [
    "StorageArea",
    "RemoteDataClient",
    "RemoteSnapshot",
    "VersionHistoryRepository",
    "BackupRepository",
]
