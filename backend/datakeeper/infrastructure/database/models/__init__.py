from .app_data import AppDataModel
from .version_history import VersionHistoryModel
from .data_backup import DataBackupModel

__all__ = [
    "AppDataModel",
    "VersionHistoryModel",
    "DataBackupModel",
]
