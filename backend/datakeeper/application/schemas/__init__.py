from .company_profile import (
    CompanyProfileSchema,
    CompanyProfileUpdate,
    CompanyProfileSaveResponse,
    CompanySyncResponse,
    CompanyClearResponse,
    SaveResponse,
)
from .client import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientRosterResponse,
    ClientSaveResponse,
)
from .data_versions import (
    EnvelopeSchema,
    ConflictResponse,
    ResolveRequest,
    ResolveResponse,
    RecoveryReportResponse,
    VersionEntryResponse,
    VersionRestoreRequest,
)
from .backup import BackupCreateRequest, BackupMetadataResponse, RestoreResultResponse

__all__ = [
    "CompanyProfileSchema",
    "CompanyProfileUpdate",
    "CompanyProfileSaveResponse",
    "CompanySyncResponse",
    "CompanyClearResponse",
    "SaveResponse",
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    "ClientRosterResponse",
    "ClientSaveResponse",
    "EnvelopeSchema",
    "ConflictResponse",
    "ResolveRequest",
    "ResolveResponse",
    "RecoveryReportResponse",
    "VersionEntryResponse",
    "VersionRestoreRequest",
    "BackupCreateRequest",
    "BackupMetadataResponse",
    "RestoreResultResponse",
]
