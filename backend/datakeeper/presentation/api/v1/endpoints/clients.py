"""Client roster endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from datakeeper.application.schemas.client import (
    ClientCreate,
    ClientResponse,
    ClientRosterResponse,
    ClientSaveResponse,
    ClientUpdate,
)
from datakeeper.application.services import ClientRosterService, SaveResult
from datakeeper.domain.entities import ClientRoster, ClientType, client_from_dict
from datakeeper.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    StorageWriteError,
)
from datakeeper.infrastructure.dependencies import get_client_roster_service

router = APIRouter(prefix="/clients", tags=["Clients"])


def _roster_response(roster: ClientRoster) -> ClientRosterResponse:
    def convert(clients) -> list[ClientResponse]:
        return [ClientResponse.model_validate(c, from_attributes=True) for c in clients]

    return ClientRosterResponse(
        companies=convert(roster.companies),
        individuals=convert(roster.individuals),
        vendors=convert(roster.vendors),
        total=roster.count(),
    )


def _save_response(result: SaveResult) -> ClientSaveResponse:
    return ClientSaveResponse(
        roster=_roster_response(ClientRoster.from_dict(result.data)),
        version=result.version.version if result.version else None,
        remote_synced=result.remote_synced,
        written_slots=result.write.written,
        failed_slots=result.write.failed,
    )


@router.get("", response_model=ClientRosterResponse)
async def list_clients(
    service: ClientRosterService = Depends(get_client_roster_service),
) -> ClientRosterResponse:
    """All clients, grouped by type."""
    return _roster_response(await service.get_roster())


@router.post("", response_model=ClientSaveResponse, status_code=status.HTTP_201_CREATED)
async def add_client(
    data: ClientCreate,
    user_name: str | None = Query(None, max_length=255),
    service: ClientRosterService = Depends(get_client_roster_service),
) -> ClientSaveResponse:
    """Add a company, individual or vendor client."""
    client = client_from_dict(data.model_dump(exclude_none=True), data.type)
    try:
        result = await service.add_client(client, user_name=user_name)
    except DuplicateEntityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StorageWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _save_response(result)


@router.put("/{client_type}/{client_id}", response_model=ClientSaveResponse)
async def update_client(
    client_type: ClientType,
    client_id: str,
    data: ClientUpdate,
    user_name: str | None = Query(None, max_length=255),
    service: ClientRosterService = Depends(get_client_roster_service),
) -> ClientSaveResponse:
    """Update an existing client."""
    try:
        result = await service.update_client(
            client_type, client_id, data.model_dump(exclude_unset=True), user_name=user_name
        )
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _save_response(result)


@router.delete("/{client_type}/{client_id}", response_model=ClientSaveResponse)
async def delete_client(
    client_type: ClientType,
    client_id: str,
    user_name: str | None = Query(None, max_length=255),
    service: ClientRosterService = Depends(get_client_roster_service),
) -> ClientSaveResponse:
    """Delete a client by type and ID."""
    try:
        result = await service.delete_client(client_type, client_id, user_name=user_name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _save_response(result)
