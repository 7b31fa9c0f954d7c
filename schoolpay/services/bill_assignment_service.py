"""Bill Assignment Service - materializes student bills from a bill template"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.config import settings
from schoolpay.core.exceptions import BackendCallFailed, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.models.billing import Bill, StudentBill
from schoolpay.models.enums import AssignmentOutcome, AssignmentTarget, PaymentStatus
from schoolpay.models.student import Student
from schoolpay.schemas.billing import BillAssignmentRequest, BillAssignmentResult
from schoolpay.utils.months import MonthKey, add_months, clamp_months, month_key, month_sequence

logger = get_logger(__name__)

# Keeps "IN (...)" lists well below asyncpg's bind-parameter limit
LOOKUP_CHUNK_SIZE = 1000


def _chunks(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


@dataclass
class AssignmentPlan:
    """Writes decided for one assignment run, before anything touches the database."""
    inserts: List[Dict[str, Any]] = field(default_factory=list)
    updates: List[Tuple[UUID, Dict[str, Any]]] = field(default_factory=list)
    skipped: int = 0
    protected: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.inserts and not self.updates


class BillAssignmentService:
    @staticmethod
    def target_months(
        start_date: date,
        repeat_monthly: bool,
        months_count: int,
        max_months: int = 24,
    ) -> List[date]:
        """First-of-month dates covered by a run: one month, or a clamped run of months."""
        count = clamp_months(months_count, max_months) if repeat_monthly else 1
        return month_sequence(start_date, count)

    @staticmethod
    def plan(
        bill_id: UUID,
        amount: Decimal,
        student_ids: Iterable[UUID],
        months: Sequence[date],
        existing_rows: Iterable[Any],
        overwrite_existing: bool,
    ) -> AssignmentPlan:
        """
        Decide insert/update/skip for every (student, month) pair.

        ``existing_rows`` need ``id``, ``student_id``, ``due_date`` and
        ``status``. When several rows share a (student, month) key only the
        first one is considered, so callers should pass them ordered by
        due_date. Paid and cancelled rows are never overwritten.
        """
        existing: Dict[Tuple[UUID, MonthKey], Any] = {}
        for row in existing_rows:
            existing.setdefault((row.student_id, month_key(row.due_date)), row)

        plan = AssignmentPlan()
        for student_id in student_ids:
            for month in months:
                row = existing.get((student_id, month_key(month)))
                if row is None:
                    plan.inserts.append({
                        "student_id": student_id,
                        "bill_id": bill_id,
                        "amount": amount,
                        "due_date": month,
                        "status": PaymentStatus.PENDING,
                    })
                elif not overwrite_existing:
                    plan.skipped += 1
                elif row.status in PaymentStatus.settled():
                    plan.protected += 1
                else:
                    plan.updates.append((row.id, {
                        "amount": amount,
                        "due_date": month,
                        "status": PaymentStatus.PENDING,
                    }))
        return plan

    @staticmethod
    async def resolve_student_ids(
        db: AsyncSession,
        target: AssignmentTarget,
        class_id: Optional[UUID] = None,
    ) -> List[UUID]:
        stmt = select(Student.id).order_by(Student.nis)
        if target == AssignmentTarget.CLASS:
            stmt = stmt.where(Student.class_id == class_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def fetch_existing(
        db: AsyncSession,
        bill_id: UUID,
        student_ids: Sequence[UUID],
        first_month: date,
        last_month: date,
    ) -> List[Any]:
        """Existing rows for this bill, the given students and the [first, last] month range."""
        rows: List[Any] = []
        range_end = add_months(last_month, 1)
        for chunk in _chunks(list(student_ids), LOOKUP_CHUNK_SIZE):
            result = await db.execute(
                select(StudentBill.id, StudentBill.student_id, StudentBill.due_date, StudentBill.status)
                .where(
                    StudentBill.bill_id == bill_id,
                    StudentBill.student_id.in_(chunk),
                    StudentBill.due_date >= first_month,
                    StudentBill.due_date < range_end,
                )
                .order_by(StudentBill.due_date, StudentBill.created_at)
            )
            rows.extend(result.all())
        return rows

    @staticmethod
    async def insert_batches(db: AsyncSession, rows: Sequence[Dict[str, Any]], batch_size: int) -> int:
        """
        Insert in batches; keys that appeared since the read (a concurrent run)
        are left alone by ON CONFLICT DO NOTHING and not counted.
        """
        inserted = 0
        for batch in _chunks(list(rows), batch_size):
            stmt = (
                pg_insert(StudentBill)
                .values(list(batch))
                .on_conflict_do_nothing(constraint="uq_student_bills_student_bill_due")
                .returning(StudentBill.id)
            )
            result = await db.execute(stmt)
            inserted += len(result.all())
        return inserted

    @staticmethod
    async def apply_updates(db: AsyncSession, updates: Sequence[Tuple[UUID, Dict[str, Any]]]) -> int:
        for row_id, values in updates:
            await db.execute(
                update(StudentBill).where(StudentBill.id == row_id).values(**values)
            )
        return len(updates)

    @staticmethod
    async def assign(
        db: AsyncSession,
        bill: Bill,
        request: BillAssignmentRequest,
        batch_size: Optional[int] = None,
        max_months: Optional[int] = None,
    ) -> BillAssignmentResult:
        """
        Expand ``bill`` into student bills for the requested population and months.

        Re-running with ``overwrite_existing=False`` converges on the same rows.
        All writes of one run share a transaction; a failure rolls the whole
        run back and raises BackendCallFailed.
        """
        batch_size = batch_size or settings.BILL_INSERT_BATCH_SIZE
        max_months = max_months or settings.MAX_REPEAT_MONTHS

        if bill.amount is None or Decimal(bill.amount) <= 0:
            raise ValidationRejected("Bill amount must be positive", {"bill_id": str(bill.id)})
        if request.target == AssignmentTarget.CLASS and request.class_id is None:
            raise ValidationRejected("Select a class before assigning to a class")

        student_ids = await BillAssignmentService.resolve_student_ids(db, request.target, request.class_id)
        if not student_ids:
            logger.info(
                "No students in assignment target",
                extra={"bill_id": str(bill.id), "target": request.target.value},
            )
            return BillAssignmentResult(outcome=AssignmentOutcome.NO_STUDENTS)

        months = BillAssignmentService.target_months(
            request.start_date, request.repeat_monthly, request.months_count, max_months
        )
        existing = await BillAssignmentService.fetch_existing(
            db, bill.id, student_ids, months[0], months[-1]
        )
        plan = BillAssignmentService.plan(
            bill.id, bill.amount, student_ids, months, existing, request.overwrite_existing
        )

        result = BillAssignmentResult(
            outcome=AssignmentOutcome.NOTHING_TO_DO,
            months=months,
            student_count=len(student_ids),
            skipped=plan.skipped,
            protected=plan.protected,
        )
        if plan.is_empty:
            return result

        try:
            result.inserted = await BillAssignmentService.insert_batches(db, plan.inserts, batch_size)
            result.updated = await BillAssignmentService.apply_updates(db, plan.updates)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "Bill assignment failed, run rolled back",
                extra={"bill_id": str(bill.id), "planned_inserts": len(plan.inserts)},
                exc_info=True,
            )
            raise BackendCallFailed("Failed to generate student bills") from exc

        result.outcome = AssignmentOutcome.COMPLETED
        logger.info(
            "Student bills generated",
            extra={
                "bill_id": str(bill.id),
                "inserted": result.inserted,
                "updated": result.updated,
                "months": len(months),
                "students": len(student_ids),
            },
        )
        return result
