from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.schemas.scholarship import (
    ScholarshipCategoryCreate,
    ScholarshipCategoryResponse,
    ScholarshipCategoryUpdate,
    StudentScholarshipCreate,
    StudentScholarshipResponse,
)
from schoolpay.services.scholarship_service import ScholarshipService

router = APIRouter()


@router.get("/categories", response_model=SuccessResponse[List[ScholarshipCategoryResponse]])
async def list_categories(
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    categories = await ScholarshipService.list_categories(db)
    return SuccessResponse(data=[ScholarshipCategoryResponse.model_validate(c) for c in categories])


@router.post("/categories", response_model=SuccessResponse[ScholarshipCategoryResponse])
async def create_category(
    category_in: ScholarshipCategoryCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    category = await ScholarshipService.create_category(db, category_in)
    return SuccessResponse(data=ScholarshipCategoryResponse.model_validate(category), message="Category created")


@router.put("/categories/{category_id}", response_model=SuccessResponse[ScholarshipCategoryResponse])
async def update_category(
    category_id: UUID,
    category_in: ScholarshipCategoryUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    category = await ScholarshipService.update_category(db, category_id, category_in)
    return SuccessResponse(data=ScholarshipCategoryResponse.model_validate(category), message="Category updated")


@router.delete("/categories/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await ScholarshipService.delete_category(db, category_id)
    return SuccessResponse(message="Category deleted")


@router.get("/assignments", response_model=SuccessResponse[List[StudentScholarshipResponse]])
async def list_assignments(
    student_id: Optional[UUID] = None,
    category_id: Optional[UUID] = None,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    assignments = await ScholarshipService.list_assignments(db, student_id=student_id, category_id=category_id)
    return SuccessResponse(data=[StudentScholarshipResponse.model_validate(a) for a in assignments])


@router.post("/assignments", response_model=SuccessResponse[StudentScholarshipResponse])
async def assign_scholarship(
    assignment_in: StudentScholarshipCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Grant a scholarship. Without an amount, the category's amount is used."""
    assignment = await ScholarshipService.assign(db, assignment_in, created_by=current_user.id)
    return SuccessResponse(data=StudentScholarshipResponse.model_validate(assignment), message="Scholarship granted")


@router.post("/assignments/{assignment_id}/revoke", response_model=SuccessResponse[StudentScholarshipResponse])
async def revoke_scholarship(
    assignment_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    assignment = await ScholarshipService.revoke(db, assignment_id)
    return SuccessResponse(data=StudentScholarshipResponse.model_validate(assignment), message="Scholarship revoked")
