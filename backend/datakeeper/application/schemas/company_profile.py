"""Pydantic DTOs (Data Transfer Objects) for the company profile feature."""

from typing import Any

from pydantic import BaseModel, Field


class CompanyProfileSchema(BaseModel):
    """Company profile as exchanged with the API."""

    name: str = Field("", max_length=255, examples=["Acme Co"])
    contact_email: str | None = Field("", examples=["a@acme.test"])
    contact_phone: str | None = ""
    address: str | None = ""
    address_line2: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    vat_number: str | None = None
    registration_number: str | None = None
    tax_number: str | None = None
    csd_registration_number: str | None = None
    website: str | None = None
    industry: str | None = None
    director_first_name: str | None = None
    director_last_name: str | None = None
    banking_details: str | None = None
    logo: str | None = None
    stamp: str | None = None
    signature: str | None = None
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class CompanyProfileUpdate(CompanyProfileSchema):
    """Request body for saving the profile — a company name is required."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Acme Co"])


class SaveResponse(BaseModel):
    """Outcome of a redundant save."""

    version: int | None
    remote_synced: bool
    written_slots: list[str]
    failed_slots: list[str]


class CompanyProfileSaveResponse(SaveResponse):
    profile: CompanyProfileSchema


class CompanySyncResponse(BaseModel):
    """Result of pulling the profile from the server."""

    adopted: bool
    profile: CompanyProfileSchema | None = None


class CompanyClearResponse(BaseModel):
    cleared: bool = True
    remote_cleared: bool
