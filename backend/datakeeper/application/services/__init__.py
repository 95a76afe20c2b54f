from .storage_layout import StorageAreas, StorageScope, SlotRole, StorageSlot, get_layout
from .redundant_writer import RedundantWriter, WriteResult
from .recovery_scanner import RecoveryScanner, ScanResult
from .event_bus import EventBus, Subscription
from .sse_manager import SSEManager
from .version_history_service import VersionHistoryService
from .backup_service import BackupService
from .backup_scheduler import BackupScheduler
from .conflict_resolution_service import ConflictResolutionService, RecoveryReport
from .company_profile_service import CompanyProfileService
from .client_roster_service import ClientRosterService
from .remote_sync import SaveResult

__all__ = [
    "StorageAreas",
    "StorageScope",
    "SlotRole",
    "StorageSlot",
    "get_layout",
    "RedundantWriter",
    "WriteResult",
    "RecoveryScanner",
    "ScanResult",
    "EventBus",
    "Subscription",
    "SSEManager",
    "VersionHistoryService",
    "BackupService",
    "BackupScheduler",
    "ConflictResolutionService",
    "RecoveryReport",
    "CompanyProfileService",
    "ClientRosterService",
    "SaveResult",
]
