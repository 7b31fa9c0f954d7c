from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.billing import (
    OutstandingBillsResponse,
    PaymentCreate,
    PaymentResponse,
    StudentBillResponse,
)
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.payment_service import PaymentService

router = APIRouter()


@router.get("/students/{student_id}/bills", response_model=SuccessResponse[OutstandingBillsResponse])
async def outstanding_bills(
    student_id: UUID,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Pending and overdue bills of one student, with the outstanding total."""
    bills, total = await PaymentService.outstanding_bills(db, student_id)
    return SuccessResponse(
        data=OutstandingBillsResponse(
            student_id=student_id,
            bills=[StudentBillResponse.model_validate(b) for b in bills],
            total_outstanding=total,
        )
    )


@router.post("", response_model=SuccessResponse[List[PaymentResponse]])
async def pay_bills(
    payment_in: PaymentCreate,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Pay one or more student bills in full. Either every bill is paid or none is."""
    payments = await PaymentService.pay_bills(db, payment_in, processed_by=current_user.id)
    return SuccessResponse(
        data=[PaymentResponse.model_validate(p) for p in payments],
        message=f"{len(payments)} bill(s) paid",
    )


@router.post("/student-bills/{student_bill_id}/cancel", response_model=SuccessResponse[StudentBillResponse])
async def cancel_student_bill(
    student_bill_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    bill = await PaymentService.cancel_bill(db, student_bill_id)
    return SuccessResponse(data=StudentBillResponse.model_validate(bill), message="Bill cancelled")


@router.post("/mark-overdue", response_model=SuccessResponse)
async def mark_overdue(
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Flag pending bills from earlier months as overdue."""
    count = await PaymentService.mark_overdue(db)
    return SuccessResponse(data={"updated": count}, message=f"{count} bill(s) marked overdue")
