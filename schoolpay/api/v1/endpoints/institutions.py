from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.schemas.academic import InstitutionCreate, InstitutionResponse, InstitutionUpdate
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.academic_service import AcademicService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[InstitutionResponse]])
async def list_institutions(
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    institutions = await AcademicService.list_institutions(db)
    return SuccessResponse(data=[InstitutionResponse.model_validate(i) for i in institutions])


@router.post("", response_model=SuccessResponse[InstitutionResponse])
async def create_institution(
    institution_in: InstitutionCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    institution = await AcademicService.create_institution(db, institution_in)
    return SuccessResponse(data=InstitutionResponse.model_validate(institution), message="Institution created")


@router.put("/{institution_id}", response_model=SuccessResponse[InstitutionResponse])
async def update_institution(
    institution_id: UUID,
    institution_in: InstitutionUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    institution = await AcademicService.update_institution(db, institution_id, institution_in)
    return SuccessResponse(data=InstitutionResponse.model_validate(institution), message="Institution updated")


@router.delete("/{institution_id}", response_model=SuccessResponse)
async def delete_institution(
    institution_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await AcademicService.delete_institution(db, institution_id)
    return SuccessResponse(message="Institution deleted")
