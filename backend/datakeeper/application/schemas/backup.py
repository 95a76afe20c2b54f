"""Pydantic schemas for the backups API."""

from datetime import datetime

from pydantic import BaseModel

from datakeeper.domain.entities import BackupLocation, BackupStatus, DataCategory


class BackupCreateRequest(BaseModel):
    """Request body for a manual backup. Omitting categories backs up all of them."""

    categories: list[DataCategory] | None = None


class BackupMetadataResponse(BaseModel):
    id: str
    timestamp: datetime
    categories: list[str]
    size: int
    hash: str
    status: BackupStatus
    error_details: str | None
    locations: list[BackupLocation]

    model_config = {"from_attributes": True}


class RestoreResultResponse(BaseModel):
    backup_id: str
    restored: list[str]
    failed: list[str]
    success: bool

    model_config = {"from_attributes": True}
