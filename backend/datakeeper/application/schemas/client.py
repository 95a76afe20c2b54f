"""Pydantic DTOs for the client roster feature."""

from pydantic import BaseModel, Field

from datakeeper.application.schemas.company_profile import SaveResponse
from datakeeper.domain.entities import ClientType


class ClientFields(BaseModel):
    """Fields accepted for any client type; type-specific ones are ignored elsewhere."""

    email: str | None = None
    phone: str | None = None
    address: str | None = None
    address_line2: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    credit: float | None = None
    outstanding: float | None = None
    overdue: float | None = None
    last_interaction: str | None = None
    # company / vendor
    contact_person: str | None = None
    vat_number: str | None = None
    registration_number: str | None = None
    vendor_category: str | None = None
    vendor_code: str | None = None
    # individual
    first_name: str | None = None
    last_name: str | None = None


class ClientCreate(ClientFields):
    """Request body for adding a client."""

    type: ClientType = Field(..., examples=["company"])
    name: str = Field(..., min_length=1, max_length=255)
    id: str | None = Field(None, max_length=64)


class ClientUpdate(ClientFields):
    """Request body for updating a client — all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)


class ClientResponse(ClientFields):
    """Client returned to the caller."""

    id: str
    client_type: ClientType
    name: str
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class ClientRosterResponse(BaseModel):
    companies: list[ClientResponse]
    individuals: list[ClientResponse]
    vendors: list[ClientResponse]
    total: int


class ClientSaveResponse(SaveResponse):
    roster: ClientRosterResponse
