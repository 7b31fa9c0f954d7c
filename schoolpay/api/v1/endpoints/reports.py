from datetime import date
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.billing import PaymentReport, PaymentResponse
from schoolpay.schemas.finance import FinancialReport
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.finance_service import FinanceService
from schoolpay.services.payment_service import PaymentService

router = APIRouter()


@router.get("/payments", response_model=SuccessResponse[PaymentReport])
async def payment_report(
    start_date: date,
    end_date: date,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Payments received between two dates, inclusive."""
    payments, total = await PaymentService.payments_between(db, start_date, end_date)
    return SuccessResponse(
        data=PaymentReport(
            start_date=start_date,
            end_date=end_date,
            payments=[PaymentResponse.model_validate(p) for p in payments],
            total_amount=total,
            count=len(payments),
        )
    )


@router.get("/finance", response_model=SuccessResponse[FinancialReport])
async def financial_report(
    start_date: date,
    end_date: date,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Cash book income, expense and balance by category for a date range."""
    report = await FinanceService.financial_report(db, start_date, end_date)
    return SuccessResponse(data=report)
