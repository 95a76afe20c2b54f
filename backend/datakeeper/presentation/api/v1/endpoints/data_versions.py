"""Stored copies, conflict resolution, recovery and version history endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from datakeeper.application.schemas.data_versions import (
    ConflictResponse,
    EnvelopeSchema,
    RecoveryReportResponse,
    ResolveRequest,
    ResolveResponse,
    VersionEntryResponse,
    VersionRestoreRequest,
)
from datakeeper.application.services import ConflictResolutionService, VersionHistoryService
from datakeeper.application.services.version_history_service import group_changed_fields
from datakeeper.domain.entities import ConflictResolutionOptions, DataCategory, VersionEntry
from datakeeper.domain.exceptions import (
    ConflictResolutionError,
    EntityNotFoundError,
    StorageWriteError,
    VersionRestoreError,
)
from datakeeper.infrastructure.dependencies import (
    get_conflict_resolution_service,
    get_version_history_service,
)

router = APIRouter(prefix="/data", tags=["Data Versions"])


def _entry_response(entry: VersionEntry) -> VersionEntryResponse:
    response = VersionEntryResponse.model_validate(entry, from_attributes=True)
    response.changed_field_groups = group_changed_fields(entry.changed_fields)
    return response


# ── Recovery (all categories) ────────────────────────────────────────


@router.post("/recover", response_model=RecoveryReportResponse)
async def recover_all(
    service: ConflictResolutionService = Depends(get_conflict_resolution_service),
) -> RecoveryReportResponse:
    """Write the newest available copy of every category back to local storage."""
    report = await service.full_recovery()
    return RecoveryReportResponse.model_validate(report, from_attributes=True)


# ── Stored copies & conflicts ────────────────────────────────────────


@router.get("/{category}/versions", response_model=list[EnvelopeSchema])
async def list_stored_copies(
    category: DataCategory,
    service: ConflictResolutionService = Depends(get_conflict_resolution_service),
) -> list[EnvelopeSchema]:
    """Local, server and backup copies of a category."""
    envelopes = await service.get_versions(category)
    return [EnvelopeSchema.model_validate(e, from_attributes=True) for e in envelopes]


@router.get("/{category}/conflict", response_model=ConflictResponse)
async def get_conflict(
    category: DataCategory,
    service: ConflictResolutionService = Depends(get_conflict_resolution_service),
) -> ConflictResponse:
    """Whether local and server copies disagree, with all candidates."""
    envelopes = await service.get_versions(category)
    return ConflictResponse(
        category=category.value,
        has_conflict=service.has_conflict(envelopes),
        versions=[EnvelopeSchema.model_validate(e, from_attributes=True) for e in envelopes],
    )


@router.post("/{category}/resolve", response_model=ResolveResponse)
async def resolve_conflict(
    category: DataCategory,
    options: ResolveRequest,
    service: ConflictResolutionService = Depends(get_conflict_resolution_service),
) -> ResolveResponse:
    """Commit the chosen copy everywhere, or leave everything unchanged on failure."""
    try:
        chosen = await service.resolve(
            category, ConflictResolutionOptions(**options.model_dump())
        )
    except ConflictResolutionError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return ResolveResponse(
        category=category.value,
        resolved=chosen is not None,
        chosen=EnvelopeSchema.model_validate(chosen, from_attributes=True) if chosen else None,
    )


@router.post("/{category}/recover", response_model=ResolveResponse)
async def recover_category(
    category: DataCategory,
    service: ConflictResolutionService = Depends(get_conflict_resolution_service),
) -> ResolveResponse:
    """Write the newest available copy of one category back to local storage."""
    try:
        chosen = await service.recover(category)
    except StorageWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return ResolveResponse(
        category=category.value,
        resolved=chosen is not None,
        chosen=EnvelopeSchema.model_validate(chosen, from_attributes=True) if chosen else None,
    )


# ── Version history ──────────────────────────────────────────────────


@router.get("/{category}/history", response_model=list[VersionEntryResponse])
async def list_history(
    category: DataCategory,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    service: VersionHistoryService = Depends(get_version_history_service),
) -> list[VersionEntryResponse]:
    """Version history of a category, newest first."""
    entries = await service.list_versions(category, skip=skip, limit=limit)
    return [_entry_response(e) for e in entries]


@router.post(
    "/{category}/history/{version_id}/restore",
    response_model=VersionEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def restore_history_version(
    category: DataCategory,
    version_id: str,
    body: VersionRestoreRequest | None = None,
    service: VersionHistoryService = Depends(get_version_history_service),
) -> VersionEntryResponse:
    """Make an old version current again. Returns the newly appended entry."""
    try:
        entry = await service.restore_version(
            category, version_id, user_name=body.user_name if body else None
        )
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except VersionRestoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _entry_response(entry)
