from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.core.exceptions import ResourceNotFound
from schoolpay.models.enums import UserRole
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from schoolpay.schemas.user import ProfileCreate, ProfileResponse, ProfileUpdate
from schoolpay.services.profile_service import ProfileService
from schoolpay.services.session_service import SessionBootstrap

router = APIRouter()


@router.get("", response_model=PaginatedResponse[ProfileResponse])
async def list_profiles(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    current_user: CurrentUser = Depends(deps.require_super_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    profiles, total = await ProfileService.list_profiles(
        db, skip=(page - 1) * limit, limit=limit, role=role, search=search
    )
    return PaginatedResponse(
        data=[ProfileResponse.model_validate(p) for p in profiles],
        meta=PaginationMeta.build(page, limit, total),
    )


@router.get("/{profile_id}", response_model=SuccessResponse[ProfileResponse])
async def get_profile(
    profile_id: UUID,
    current_user: CurrentUser = Depends(deps.require_super_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    profile = await ProfileService.get_by_id(db, profile_id)
    if profile is None:
        raise ResourceNotFound("Profile not found")
    return SuccessResponse(data=ProfileResponse.model_validate(profile))


@router.post("", response_model=SuccessResponse[ProfileResponse])
async def create_profile(
    profile_in: ProfileCreate,
    current_user: CurrentUser = Depends(deps.require_super_admin),
    bootstrap: SessionBootstrap = Depends(deps.get_session_bootstrap),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Link an auth identity to a profile; its next request picks up the new role."""
    profile = await ProfileService.create_profile(db, profile_in)
    bootstrap.invalidate(profile.user_id)
    return SuccessResponse(data=ProfileResponse.model_validate(profile), message="Profile created")


@router.put("/{profile_id}", response_model=SuccessResponse[ProfileResponse])
async def update_profile(
    profile_id: UUID,
    profile_in: ProfileUpdate,
    current_user: CurrentUser = Depends(deps.require_super_admin),
    bootstrap: SessionBootstrap = Depends(deps.get_session_bootstrap),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    profile = await ProfileService.update_profile(db, profile_id, profile_in)
    bootstrap.invalidate(profile.user_id)
    return SuccessResponse(data=ProfileResponse.model_validate(profile), message="Profile updated")


@router.delete("/{profile_id}", response_model=SuccessResponse)
async def delete_profile(
    profile_id: UUID,
    current_user: CurrentUser = Depends(deps.require_super_admin),
    bootstrap: SessionBootstrap = Depends(deps.get_session_bootstrap),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    profile = await ProfileService.delete_profile(db, profile_id)
    bootstrap.invalidate(profile.user_id)
    return SuccessResponse(message="Profile deleted")
