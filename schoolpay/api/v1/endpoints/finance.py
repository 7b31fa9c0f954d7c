from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.models.enums import TransactionType
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.finance import (
    CashBookEntryCreate,
    CashBookEntryResponse,
    FinancialCategoryCreate,
    FinancialCategoryResponse,
    FinancialCategoryUpdate,
)
from schoolpay.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from schoolpay.services.finance_service import FinanceService

router = APIRouter()


# Categories
@router.get("/categories", response_model=SuccessResponse[List[FinancialCategoryResponse]])
async def list_categories(
    type: Optional[TransactionType] = None,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    categories = await FinanceService.list_categories(db, entry_type=type)
    return SuccessResponse(data=[FinancialCategoryResponse.model_validate(c) for c in categories])


@router.post("/categories", response_model=SuccessResponse[FinancialCategoryResponse])
async def create_category(
    category_in: FinancialCategoryCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    category = await FinanceService.create_category(db, category_in)
    return SuccessResponse(data=FinancialCategoryResponse.model_validate(category), message="Category created")


@router.put("/categories/{category_id}", response_model=SuccessResponse[FinancialCategoryResponse])
async def update_category(
    category_id: UUID,
    category_in: FinancialCategoryUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    category = await FinanceService.update_category(db, category_id, category_in)
    return SuccessResponse(data=FinancialCategoryResponse.model_validate(category), message="Category updated")


@router.delete("/categories/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await FinanceService.delete_category(db, category_id)
    return SuccessResponse(message="Category deleted")


# Cash book
@router.get("/cash-book", response_model=PaginatedResponse[CashBookEntryResponse])
async def list_cash_book(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Optional[TransactionType] = None,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Cash book entries, newest first, each with its running balance."""
    entries, total = await FinanceService.list_entries(
        db,
        skip=(page - 1) * limit,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        entry_type=type,
    )
    return PaginatedResponse(
        data=[CashBookEntryResponse.model_validate(e) for e in entries],
        meta=PaginationMeta.build(page, limit, total),
    )


@router.post("/cash-book", response_model=SuccessResponse[CashBookEntryResponse])
async def add_cash_book_entry(
    entry_in: CashBookEntryCreate,
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    entry = await FinanceService.add_entry(db, entry_in, processed_by=current_user.id)
    return SuccessResponse(data=CashBookEntryResponse.model_validate(entry), message="Entry recorded")


@router.delete("/cash-book/{entry_id}", response_model=SuccessResponse)
async def delete_cash_book_entry(
    entry_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await FinanceService.delete_entry(db, entry_id)
    return SuccessResponse(message="Entry deleted")


@router.get("/balance", response_model=SuccessResponse)
async def current_balance(
    current_user: CurrentUser = Depends(deps.require_cashier),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    balance = await FinanceService.current_balance(db)
    return SuccessResponse(data={"balance": str(balance)})
