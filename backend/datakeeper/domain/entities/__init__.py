from .company_profile import CompanyProfile, is_valid_company_data, redact_company_data
from .client import (
    BaseClient,
    ClientRoster,
    ClientType,
    CompanyClient,
    IndividualClient,
    VendorClient,
    client_from_dict,
    empty_roster_data,
    is_valid_client_data,
)
from .envelope import (
    ConflictResolutionOptions,
    DataCategory,
    StoredEnvelope,
    VersionSource,
    parse_timestamp,
)
from .version_entry import VersionEntry
from .backup import (
    BackupLocation,
    BackupMetadata,
    BackupStatus,
    RestoreResult,
    DATA_STRUCTURE_VERSION,
)

__all__ = [
    "CompanyProfile",
    "is_valid_company_data",
    "redact_company_data",
    "BaseClient",
    "ClientRoster",
    "ClientType",
    "CompanyClient",
    "IndividualClient",
    "VendorClient",
    "client_from_dict",
    "empty_roster_data",
    "is_valid_client_data",
    "ConflictResolutionOptions",
    "DataCategory",
    "StoredEnvelope",
    "VersionSource",
    "parse_timestamp",
    "VersionEntry",
    "BackupLocation",
    "BackupMetadata",
    "BackupStatus",
    "RestoreResult",
    "DATA_STRUCTURE_VERSION",
]
