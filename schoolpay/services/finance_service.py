"""Finance Service - categories, cash book and financial reports"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.models.enums import TransactionType
from schoolpay.models.finance import CashBookEntry, FinancialCategory
from schoolpay.schemas.finance import (
    CashBookEntryCreate,
    CategoryTotal,
    FinancialCategoryCreate,
    FinancialCategoryUpdate,
    FinancialReport,
)
from schoolpay.utils.time import get_utc_now

logger = get_logger(__name__)

ZERO = Decimal("0")


def signed_amount(entry_type: TransactionType, amount: Decimal) -> Decimal:
    return Decimal(amount) if entry_type == TransactionType.INCOME else -Decimal(amount)


class FinanceService:
    # Categories
    @staticmethod
    async def list_categories(
        db: AsyncSession, entry_type: Optional[TransactionType] = None
    ) -> List[FinancialCategory]:
        stmt = select(FinancialCategory).order_by(FinancialCategory.name)
        if entry_type is not None:
            stmt = stmt.where(FinancialCategory.type == entry_type)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_category(db: AsyncSession, category_id: UUID) -> FinancialCategory:
        category = await db.get(FinancialCategory, category_id)
        if category is None:
            raise ResourceNotFound("Financial category not found")
        return category

    @staticmethod
    async def create_category(db: AsyncSession, data: FinancialCategoryCreate) -> FinancialCategory:
        category = FinancialCategory(**data.model_dump())
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def update_category(
        db: AsyncSession, category_id: UUID, data: FinancialCategoryUpdate
    ) -> FinancialCategory:
        category = await FinanceService.get_category(db, category_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: UUID) -> None:
        category = await FinanceService.get_category(db, category_id)
        await db.delete(category)
        await db.commit()

    # Cash book
    @staticmethod
    async def recompute_balances(db: AsyncSession) -> None:
        """Rewrite the running balance of every entry in (date, created_at) order."""
        result = await db.execute(
            select(CashBookEntry).order_by(CashBookEntry.date, CashBookEntry.created_at)
        )
        balance = ZERO
        for entry in result.scalars().all():
            balance += signed_amount(entry.type, entry.amount)
            entry.balance = balance

    @staticmethod
    async def list_entries(
        db: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        entry_type: Optional[TransactionType] = None,
    ) -> Tuple[List[CashBookEntry], int]:
        stmt = select(CashBookEntry)
        if start_date is not None:
            stmt = stmt.where(CashBookEntry.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(CashBookEntry.date <= end_date)
        if entry_type is not None:
            stmt = stmt.where(CashBookEntry.type == entry_type)

        total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await db.execute(
            stmt.order_by(CashBookEntry.date.desc(), CashBookEntry.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def add_entry(db: AsyncSession, data: CashBookEntryCreate, processed_by: str) -> CashBookEntry:
        if data.category_id is not None:
            category = await FinanceService.get_category(db, data.category_id)
            if category.type != data.type:
                raise ValidationRejected(
                    f"Category '{category.name}' is for {category.type.value} entries"
                )

        entry = CashBookEntry(**data.model_dump(), processed_by=processed_by)
        db.add(entry)
        await db.flush()
        await FinanceService.recompute_balances(db)
        await db.commit()
        await db.refresh(entry)
        logger.info(
            "Cash book entry added",
            extra={"entry_id": str(entry.id), "type": entry.type.value, "amount": str(entry.amount)},
        )
        return entry

    @staticmethod
    async def delete_entry(db: AsyncSession, entry_id: UUID) -> None:
        entry = await db.get(CashBookEntry, entry_id)
        if entry is None:
            raise ResourceNotFound("Cash book entry not found")
        await db.delete(entry)
        await db.flush()
        await FinanceService.recompute_balances(db)
        await db.commit()

    @staticmethod
    async def current_balance(db: AsyncSession) -> Decimal:
        income = await db.scalar(
            select(func.coalesce(func.sum(CashBookEntry.amount), 0))
            .where(CashBookEntry.type == TransactionType.INCOME)
        )
        expense = await db.scalar(
            select(func.coalesce(func.sum(CashBookEntry.amount), 0))
            .where(CashBookEntry.type == TransactionType.EXPENSE)
        )
        return Decimal(income or 0) - Decimal(expense or 0)

    # Reports
    @staticmethod
    async def financial_report(db: AsyncSession, start_date: date, end_date: date) -> FinancialReport:
        """Income, expense and balance for a date range, broken down by category."""
        if end_date < start_date:
            raise ValidationRejected("end_date must not be before start_date")

        result = await db.execute(
            select(
                CashBookEntry.category_id,
                FinancialCategory.name,
                CashBookEntry.type,
                func.sum(CashBookEntry.amount),
            )
            .outerjoin(FinancialCategory, FinancialCategory.id == CashBookEntry.category_id)
            .where(CashBookEntry.date >= start_date, CashBookEntry.date <= end_date)
            .group_by(CashBookEntry.category_id, FinancialCategory.name, CashBookEntry.type)
            .order_by(CashBookEntry.type, FinancialCategory.name)
        )

        by_category = []
        total_income = ZERO
        total_expense = ZERO
        for category_id, category_name, entry_type, total in result.all():
            total = Decimal(total or 0)
            by_category.append(CategoryTotal(
                category_id=category_id,
                category_name=category_name or "Uncategorized",
                type=entry_type,
                total=total,
            ))
            if entry_type == TransactionType.INCOME:
                total_income += total
            else:
                total_expense += total

        return FinancialReport(
            start_date=start_date,
            end_date=end_date,
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
            by_category=by_category,
            generated_at=get_utc_now(),
        )
