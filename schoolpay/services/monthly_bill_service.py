"""Monthly Bill Service - per-month view and bulk amount edits for one bill"""

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import PartialUpdateFailed
from schoolpay.core.logging import get_logger
from schoolpay.models.academic import SchoolClass
from schoolpay.models.billing import Bill, StudentBill
from schoolpay.models.enums import PaymentStatus
from schoolpay.models.student import Student
from schoolpay.schemas.billing import MonthlyBillRow, MonthlyBillSave, MonthlyBillSaveResult
from schoolpay.services.academic_service import AcademicService
from schoolpay.utils.months import add_months, first_of_month, months_between

logger = get_logger(__name__)


def representative_amount(amounts: Iterable[Decimal]) -> Optional[Decimal]:
    """
    Most frequent amount; on a tie, the one seen first.

    >>> representative_amount([Decimal("100"), Decimal("150"), Decimal("150")])
    Decimal('150')
    """
    counts = Counter(amounts)
    if not counts:
        return None
    # max() keeps the first maximal key, and Counter keeps insertion order
    return max(counts, key=lambda amount: counts[amount])


def _population_filter(class_id: Optional[UUID], level: Optional[int]):
    """Subquery of student ids for the optional class/level filter, or None."""
    if class_id is None and level is None:
        return None
    stmt = select(Student.id)
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    if level is not None:
        stmt = stmt.join(SchoolClass, SchoolClass.id == Student.class_id).where(SchoolClass.level == level)
    return stmt


class MonthlyBillService:
    @staticmethod
    def _filtered(stmt, class_id: Optional[UUID], level: Optional[int]):
        population = _population_filter(class_id, level)
        if population is not None:
            stmt = stmt.where(StudentBill.student_id.in_(population))
        return stmt

    @staticmethod
    async def list_months(db: AsyncSession, bill: Bill) -> List[MonthlyBillRow]:
        """
        One row per month: the representative amount and how many students are billed.

        With an active academic year every month of that year is listed, and
        months without rows show the template amount. Without one, only
        months that already have rows are listed. Reading covers every
        student billed; the class/level filter only narrows what a save writes.
        """
        active_year = await AcademicService.get_active_year(db)

        stmt = (
            select(StudentBill.due_date, StudentBill.amount, StudentBill.student_id)
            .where(StudentBill.bill_id == bill.id)
            .order_by(StudentBill.due_date, StudentBill.created_at)
        )
        if active_year is not None:
            stmt = stmt.where(
                StudentBill.due_date >= first_of_month(active_year.start_date),
                StudentBill.due_date < add_months(active_year.end_date, 1),
            )
        result = await db.execute(stmt)

        amounts: Dict[date, List[Decimal]] = {}
        students: Dict[date, Set[UUID]] = {}
        for due_date, amount, student_id in result.all():
            month = first_of_month(due_date)
            amounts.setdefault(month, []).append(amount)
            students.setdefault(month, set()).add(student_id)

        if active_year is not None:
            months = months_between(active_year.start_date, active_year.end_date)
        else:
            months = sorted(amounts)

        rows = []
        for month in months:
            if month in amounts:
                rows.append(MonthlyBillRow(
                    due_date=month,
                    amount=representative_amount(amounts[month]),
                    student_count=len(students[month]),
                ))
            else:
                rows.append(MonthlyBillRow(due_date=month, amount=bill.amount, student_count=0))
        return rows

    @staticmethod
    async def save_months(db: AsyncSession, bill: Bill, payload: MonthlyBillSave) -> MonthlyBillSaveResult:
        """
        Apply edited amounts month by month, committing each month.

        Only ``amount`` changes; paid and cancelled rows are left alone. A
        failing month stops the run with PartialUpdateFailed; earlier months
        stay saved.
        """
        months_applied = 0
        rows_updated = 0
        total = len(payload.months)

        for edit in payload.months:
            month = first_of_month(edit.due_date)
            stmt = (
                update(StudentBill)
                .where(
                    StudentBill.bill_id == bill.id,
                    StudentBill.due_date >= month,
                    StudentBill.due_date < add_months(month, 1),
                    StudentBill.status.notin_(PaymentStatus.settled()),
                )
                .values(amount=edit.amount)
                .execution_options(synchronize_session=False)
            )
            stmt = MonthlyBillService._filtered(stmt, payload.class_id, payload.level)

            try:
                result = await db.execute(stmt)
                await db.commit()
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.error(
                    "Monthly bill update failed",
                    extra={
                        "bill_id": str(bill.id),
                        "month": month.isoformat(),
                        "months_applied": months_applied,
                    },
                    exc_info=True,
                )
                raise PartialUpdateFailed(
                    f"Saved {months_applied} of {total} months before an error",
                    {"months_applied": months_applied, "failed_month": month.isoformat()},
                ) from exc

            months_applied += 1
            rows_updated += result.rowcount or 0

        logger.info(
            "Monthly bill amounts saved",
            extra={"bill_id": str(bill.id), "months": months_applied, "rows": rows_updated},
        )
        return MonthlyBillSaveResult(months_updated=months_applied, rows_updated=rows_updated)
