from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.schemas.academic import ClassCreate, ClassResponse, ClassUpdate, ClassWithStats
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.academic_service import AcademicService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[ClassWithStats]])
async def list_classes(
    institution_id: Optional[UUID] = None,
    academic_year_id: Optional[UUID] = None,
    level: Optional[int] = Query(None, ge=1, le=12),
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Classes with student counts, ordered by level."""
    rows = await AcademicService.list_classes(
        db, institution_id=institution_id, academic_year_id=academic_year_id, level=level
    )
    data = [
        ClassWithStats(**ClassResponse.model_validate(c).model_dump(), student_count=count)
        for c, count in rows
    ]
    return SuccessResponse(data=data)


@router.get("/{class_id}", response_model=SuccessResponse[ClassResponse])
async def get_class(
    class_id: UUID,
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    school_class = await AcademicService.get_class(db, class_id)
    return SuccessResponse(data=ClassResponse.model_validate(school_class))


@router.post("", response_model=SuccessResponse[ClassResponse])
async def create_class(
    class_in: ClassCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    school_class = await AcademicService.create_class(db, class_in)
    return SuccessResponse(data=ClassResponse.model_validate(school_class), message="Class created")


@router.put("/{class_id}", response_model=SuccessResponse[ClassResponse])
async def update_class(
    class_id: UUID,
    class_in: ClassUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    school_class = await AcademicService.update_class(db, class_id, class_in)
    return SuccessResponse(data=ClassResponse.model_validate(school_class), message="Class updated")


@router.delete("/{class_id}", response_model=SuccessResponse)
async def delete_class(
    class_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Delete a class. Its students stay, without a class."""
    await AcademicService.delete_class(db, class_id)
    return SuccessResponse(message="Class deleted")
