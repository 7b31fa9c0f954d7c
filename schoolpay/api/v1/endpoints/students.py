from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.models.enums import StudentStatus
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from schoolpay.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from schoolpay.services.student_service import StudentService

router = APIRouter()


@router.get("", response_model=PaginatedResponse[StudentResponse])
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    search: Optional[str] = None,
    class_id: Optional[UUID] = None,
    status: Optional[StudentStatus] = None,
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    List students.
    ``search`` matches name or NIS.
    """
    students, total = await StudentService.list_students(
        db,
        skip=(page - 1) * limit,
        limit=limit,
        search=search,
        class_id=class_id,
        status=status,
    )
    return PaginatedResponse(
        data=[StudentResponse.model_validate(s) for s in students],
        meta=PaginationMeta.build(page, limit, total),
    )


@router.get("/{student_id}", response_model=SuccessResponse[StudentResponse])
async def get_student(
    student_id: UUID,
    current_user: CurrentUser = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    student = await StudentService.get_student(db, student_id)
    return SuccessResponse(data=StudentResponse.model_validate(student))


@router.post("", response_model=SuccessResponse[StudentResponse])
async def create_student(
    student_in: StudentCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    student = await StudentService.create_student(db, student_in)
    return SuccessResponse(data=StudentResponse.model_validate(student), message="Student created")


@router.put("/{student_id}", response_model=SuccessResponse[StudentResponse])
async def update_student(
    student_id: UUID,
    student_in: StudentUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    student = await StudentService.update_student(db, student_id, student_in)
    return SuccessResponse(data=StudentResponse.model_validate(student), message="Student updated")


@router.delete("/{student_id}", response_model=SuccessResponse)
async def delete_student(
    student_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await StudentService.delete_student(db, student_id)
    return SuccessResponse(message="Student deleted")
