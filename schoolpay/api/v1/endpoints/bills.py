from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.models.enums import AssignmentOutcome, RecordStatus
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.billing import (
    BillAssignmentRequest,
    BillAssignmentResult,
    BillCreate,
    BillResponse,
    BillUpdate,
    MonthlyBillRow,
    MonthlyBillSave,
    MonthlyBillSaveResult,
)
from schoolpay.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from schoolpay.services.bill_assignment_service import BillAssignmentService
from schoolpay.services.bill_service import BillService
from schoolpay.services.monthly_bill_service import MonthlyBillService

router = APIRouter()

ASSIGNMENT_MESSAGES = {
    AssignmentOutcome.NO_STUDENTS: "No students found for the selected target",
    AssignmentOutcome.NOTHING_TO_DO: "All student bills already exist; nothing to generate",
    AssignmentOutcome.COMPLETED: "Student bills generated",
}


@router.get("", response_model=PaginatedResponse[BillResponse])
async def list_bills(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    search: Optional[str] = None,
    status: Optional[RecordStatus] = None,
    academic_year_id: Optional[UUID] = None,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """List bill templates. ``search`` matches name, code or category."""
    bills, total = await BillService.list_bills(
        db,
        skip=(page - 1) * limit,
        limit=limit,
        search=search,
        status=status,
        academic_year_id=academic_year_id,
    )
    return PaginatedResponse(
        data=[BillResponse.model_validate(b) for b in bills],
        meta=PaginationMeta.build(page, limit, total),
    )


@router.post("", response_model=SuccessResponse[BillResponse])
async def create_bill(
    bill_in: BillCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    bill = await BillService.create_bill(db, bill_in)
    return SuccessResponse(data=BillResponse.model_validate(bill), message="Bill created")


@router.get("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def get_bill(
    bill_id: UUID,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    bill = await BillService.get_bill(db, bill_id)
    return SuccessResponse(data=BillResponse.model_validate(bill))


@router.put("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def update_bill(
    bill_id: UUID,
    bill_in: BillUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Update a template. Student bills generated earlier keep their amounts."""
    bill = await BillService.update_bill(db, bill_id, bill_in)
    return SuccessResponse(data=BillResponse.model_validate(bill), message="Bill updated")


@router.delete("/{bill_id}", response_model=SuccessResponse)
async def delete_bill(
    bill_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await BillService.delete_bill(db, bill_id)
    return SuccessResponse(message="Bill deleted")


@router.post("/{bill_id}/assign", response_model=SuccessResponse[BillAssignmentResult])
async def assign_bill(
    bill_id: UUID,
    assignment: BillAssignmentRequest,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Generate student bills from this template for all students or one class,
    for one month or a run of consecutive months.
    """
    bill = await BillService.get_bill(db, bill_id)
    result = await BillAssignmentService.assign(db, bill, assignment)
    return SuccessResponse(data=result, message=ASSIGNMENT_MESSAGES[result.outcome])


@router.get("/{bill_id}/monthly", response_model=SuccessResponse[List[MonthlyBillRow]])
async def list_monthly_amounts(
    bill_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """One row per month with the most common amount billed that month."""
    bill = await BillService.get_bill(db, bill_id)
    rows = await MonthlyBillService.list_months(db, bill)
    return SuccessResponse(data=rows)


@router.put("/{bill_id}/monthly", response_model=SuccessResponse[MonthlyBillSaveResult])
async def save_monthly_amounts(
    bill_id: UUID,
    payload: MonthlyBillSave,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Set the amount of every unpaid student bill in each edited month."""
    bill = await BillService.get_bill(db, bill_id)
    result = await MonthlyBillService.save_months(db, bill, payload)
    return SuccessResponse(data=result, message="Monthly amounts saved")
