"""Backup endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from datakeeper.application.schemas.backup import (
    BackupCreateRequest,
    BackupMetadataResponse,
    RestoreResultResponse,
)
from datakeeper.application.services import BackupService
from datakeeper.domain.exceptions import BackupNotAvailableError, EntityNotFoundError
from datakeeper.infrastructure.dependencies import get_backup_service

router = APIRouter(prefix="/backups", tags=["Backups"])


@router.get("", response_model=list[BackupMetadataResponse])
async def list_backups(
    service: BackupService = Depends(get_backup_service),
) -> list[BackupMetadataResponse]:
    """Backup history, newest first."""
    return [
        BackupMetadataResponse.model_validate(b, from_attributes=True)
        for b in service.list_backups()
    ]


@router.post("", response_model=BackupMetadataResponse, status_code=status.HTTP_201_CREATED)
async def create_backup(
    data: BackupCreateRequest | None = None,
    service: BackupService = Depends(get_backup_service),
) -> BackupMetadataResponse:
    """Create a backup of the selected (default: all) categories."""
    metadata = await service.create_backup(data.categories if data else None)
    return BackupMetadataResponse.model_validate(metadata, from_attributes=True)


@router.post("/{backup_id}/restore", response_model=RestoreResultResponse)
async def restore_backup(
    backup_id: str,
    service: BackupService = Depends(get_backup_service),
) -> RestoreResultResponse:
    """Write every category of a backup back to local storage."""
    try:
        result = await service.restore_backup(backup_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BackupNotAvailableError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e))
    return RestoreResultResponse.model_validate(result, from_attributes=True)


@router.delete("/{backup_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_backup(
    backup_id: str,
    service: BackupService = Depends(get_backup_service),
) -> None:
    """Delete a backup from history and from every location."""
    try:
        await service.delete_backup(backup_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
