"""Bill Service - bill template registry"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound
from schoolpay.core.logging import get_logger
from schoolpay.models.billing import Bill
from schoolpay.models.enums import RecordStatus
from schoolpay.schemas.billing import BillCreate, BillUpdate

logger = get_logger(__name__)


class BillService:
    @staticmethod
    async def get_bill(db: AsyncSession, bill_id: UUID) -> Bill:
        bill = await db.get(Bill, bill_id)
        if bill is None:
            raise ResourceNotFound("Bill not found", {"bill_id": str(bill_id)})
        return bill

    @staticmethod
    async def list_bills(
        db: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        search: Optional[str] = None,
        status: Optional[RecordStatus] = None,
        academic_year_id: Optional[UUID] = None,
    ) -> Tuple[List[Bill], int]:
        """Search matches name, code or category (case-insensitive substring)."""
        stmt = select(Bill)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(
                Bill.name.ilike(pattern),
                Bill.code.ilike(pattern),
                Bill.category.ilike(pattern),
            ))
        if status is not None:
            stmt = stmt.where(Bill.status == status)
        if academic_year_id is not None:
            stmt = stmt.where(Bill.academic_year_id == academic_year_id)

        total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await db.execute(stmt.order_by(Bill.created_at.desc()).offset(skip).limit(limit))
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def create_bill(db: AsyncSession, data: BillCreate) -> Bill:
        bill = Bill(**data.model_dump())
        db.add(bill)
        await db.commit()
        await db.refresh(bill)
        logger.info("Bill created", extra={"bill_id": str(bill.id), "code": bill.code})
        return bill

    @staticmethod
    async def update_bill(db: AsyncSession, bill_id: UUID, data: BillUpdate) -> Bill:
        """Template edits never propagate to student bills already generated."""
        bill = await BillService.get_bill(db, bill_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(bill, field, value)
        await db.commit()
        await db.refresh(bill)
        return bill

    @staticmethod
    async def delete_bill(db: AsyncSession, bill_id: UUID) -> None:
        bill = await BillService.get_bill(db, bill_id)
        await db.delete(bill)
        await db.commit()
        logger.info("Bill deleted", extra={"bill_id": str(bill_id)})
