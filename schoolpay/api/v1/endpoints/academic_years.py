from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.core.exceptions import ResourceNotFound
from schoolpay.schemas.academic import AcademicYearCreate, AcademicYearResponse, AcademicYearUpdate
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.academic_service import AcademicService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[AcademicYearResponse]])
async def list_academic_years(
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    years = await AcademicService.list_academic_years(db)
    return SuccessResponse(data=[AcademicYearResponse.model_validate(y) for y in years])


@router.get("/active", response_model=SuccessResponse[AcademicYearResponse])
async def get_active_academic_year(
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    year = await AcademicService.get_active_year(db)
    if year is None:
        raise ResourceNotFound("No active academic year")
    return SuccessResponse(data=AcademicYearResponse.model_validate(year))


@router.post("", response_model=SuccessResponse[AcademicYearResponse])
async def create_academic_year(
    year_in: AcademicYearCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Create a year. Creating it as active deactivates every other year."""
    year = await AcademicService.create_academic_year(db, year_in)
    return SuccessResponse(data=AcademicYearResponse.model_validate(year), message="Academic year created")


@router.put("/{year_id}", response_model=SuccessResponse[AcademicYearResponse])
async def update_academic_year(
    year_id: UUID,
    year_in: AcademicYearUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    year = await AcademicService.update_academic_year(db, year_id, year_in)
    return SuccessResponse(data=AcademicYearResponse.model_validate(year), message="Academic year updated")


@router.post("/{year_id}/activate", response_model=SuccessResponse[AcademicYearResponse])
async def activate_academic_year(
    year_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    year = await AcademicService.activate_academic_year(db, year_id)
    return SuccessResponse(data=AcademicYearResponse.model_validate(year), message="Academic year activated")


@router.delete("/{year_id}", response_model=SuccessResponse)
async def delete_academic_year(
    year_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await AcademicService.delete_academic_year(db, year_id)
    return SuccessResponse(message="Academic year deleted")
