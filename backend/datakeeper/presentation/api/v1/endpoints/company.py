"""Company profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from datakeeper.application.schemas.company_profile import (
    CompanyClearResponse,
    CompanyProfileSaveResponse,
    CompanyProfileSchema,
    CompanyProfileUpdate,
    CompanySyncResponse,
)
from datakeeper.application.services import CompanyProfileService
from datakeeper.domain.entities import CompanyProfile
from datakeeper.domain.exceptions import StorageWriteError
from datakeeper.infrastructure.dependencies import get_company_profile_service

router = APIRouter(prefix="/company", tags=["Company"])


@router.get("", response_model=CompanyProfileSchema)
async def get_company_profile(
    service: CompanyProfileService = Depends(get_company_profile_service),
) -> CompanyProfileSchema:
    """Current company profile — empty if nothing has been saved yet."""
    profile = await service.get_profile()
    return CompanyProfileSchema.model_validate(profile, from_attributes=True)


@router.put("", response_model=CompanyProfileSaveResponse)
async def save_company_profile(
    data: CompanyProfileUpdate,
    user_name: str | None = Query(None, max_length=255),
    service: CompanyProfileService = Depends(get_company_profile_service),
) -> CompanyProfileSaveResponse:
    """Update the profile (omitted fields are kept), save it everywhere and sync it."""
    try:
        result = await service.update_profile(
            data.model_dump(exclude_unset=True), user_name=user_name
        )
    except StorageWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return CompanyProfileSaveResponse(
        profile=CompanyProfileSchema.model_validate(
            CompanyProfile.from_dict(result.data), from_attributes=True
        ),
        version=result.version.version if result.version else None,
        remote_synced=result.remote_synced,
        written_slots=result.write.written,
        failed_slots=result.write.failed,
    )


@router.delete("", response_model=CompanyClearResponse)
async def clear_company_profile(
    service: CompanyProfileService = Depends(get_company_profile_service),
) -> CompanyClearResponse:
    """Remove the profile from this device and from the server."""
    remote_cleared = await service.clear_profile()
    return CompanyClearResponse(remote_cleared=remote_cleared)


@router.post("/sync", response_model=CompanySyncResponse)
async def sync_company_profile(
    service: CompanyProfileService = Depends(get_company_profile_service),
) -> CompanySyncResponse:
    """Pull the server profile and adopt it if the local one is missing or differs."""
    try:
        profile = await service.pull_from_server()
    except StorageWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if profile is None:
        return CompanySyncResponse(adopted=False)
    return CompanySyncResponse(
        adopted=True,
        profile=CompanyProfileSchema.model_validate(profile, from_attributes=True),
    )
