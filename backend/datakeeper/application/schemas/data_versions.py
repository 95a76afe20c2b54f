"""Pydantic schemas for stored copies, conflicts, recovery and version history."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from datakeeper.domain.entities import VersionSource


# ── Envelopes & conflicts ────────────────────────────────────────────


class EnvelopeSchema(BaseModel):
    """One stored copy of a category."""

    data: Any
    timestamp: datetime | None
    source: VersionSource

    model_config = {"from_attributes": True}


class ConflictResponse(BaseModel):
    category: str
    has_conflict: bool
    versions: list[EnvelopeSchema]


class ResolveRequest(BaseModel):
    """Which copy should win. With nothing set the local copy is kept."""

    prefer_local: bool = False
    prefer_server: bool = False
    prefer_backup: bool = False
    prefer_newer: bool = False
    manual: bool = False


class ResolveResponse(BaseModel):
    category: str
    resolved: bool
    chosen: EnvelopeSchema | None = None


class RecoveryReportResponse(BaseModel):
    recovered: list[str]
    failed: list[str]
    skipped: list[str]

    model_config = {"from_attributes": True}


# ── Version history ──────────────────────────────────────────────────


class VersionEntryResponse(BaseModel):
    """A version history entry with its changed-field summary."""

    id: str
    category: str
    version: int
    data: Any
    changed_fields: list[str]
    changed_field_groups: dict[str, int] = {}
    description: str
    user_name: str | None
    restored_from_version: int | None
    timestamp: datetime

    model_config = {"from_attributes": True}


class VersionRestoreRequest(BaseModel):
    user_name: str | None = None
