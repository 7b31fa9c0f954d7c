"""Payment Service - settling student bills"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import BackendCallFailed, ResourceNotFound, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.core.security import generate_receipt_number
from schoolpay.models.billing import Payment, StudentBill
from schoolpay.models.enums import PaymentStatus
from schoolpay.models.student import Student
from schoolpay.schemas.billing import PaymentCreate
from schoolpay.utils.months import first_of_month
from schoolpay.utils.time import get_utc_now, get_utc_today

logger = get_logger(__name__)


class PaymentService:
    @staticmethod
    async def outstanding_bills(db: AsyncSession, student_id: UUID) -> Tuple[List[StudentBill], Decimal]:
        """Pending and overdue bills of a student, oldest first, with their total."""
        if await db.get(Student, student_id) is None:
            raise ResourceNotFound("Student not found")

        result = await db.execute(
            select(StudentBill)
            .where(
                StudentBill.student_id == student_id,
                StudentBill.status.in_(PaymentStatus.payable()),
            )
            .order_by(StudentBill.due_date)
        )
        bills = list(result.scalars().all())
        total = sum((Decimal(bill.amount) for bill in bills), Decimal("0"))
        return bills, total

    @staticmethod
    async def pay_bills(db: AsyncSession, data: PaymentCreate, processed_by: str) -> List[Payment]:
        """
        Pay every listed bill in full, in one transaction.

        All bills must exist and be pending or overdue, otherwise nothing is
        written. Each bill gets its own Payment and receipt number.
        """
        bill_ids = list(dict.fromkeys(data.student_bill_ids))
        result = await db.execute(
            select(StudentBill).where(StudentBill.id.in_(bill_ids)).with_for_update()
        )
        bills = {bill.id: bill for bill in result.scalars().all()}

        missing = [str(bill_id) for bill_id in bill_ids if bill_id not in bills]
        if missing:
            await db.rollback()
            raise ResourceNotFound("Student bill not found", {"student_bill_ids": missing})

        settled = [str(bill.id) for bill in bills.values() if not bill.is_payable]
        if settled:
            await db.rollback()
            raise ValidationRejected(
                "Only pending or overdue bills can be paid", {"student_bill_ids": settled}
            )

        paid_at = get_utc_now()
        payments = []
        try:
            for bill_id in bill_ids:
                bill = bills[bill_id]
                payment = Payment(
                    student_bill_id=bill.id,
                    amount=bill.amount,
                    payment_method=data.payment_method.value,
                    notes=data.notes,
                    payment_date=paid_at,
                    receipt_number=generate_receipt_number(),
                    processed_by=processed_by,
                )
                db.add(payment)
                bill.status = PaymentStatus.PAID
                payments.append(payment)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Payment failed", extra={"student_bill_ids": [str(i) for i in bill_ids]}, exc_info=True)
            raise BackendCallFailed("Failed to record payment") from exc

        for payment in payments:
            await db.refresh(payment)
        logger.info(
            "Payment recorded",
            extra={"bills": len(payments), "processed_by": processed_by},
        )
        return payments

    @staticmethod
    async def cancel_bill(db: AsyncSession, student_bill_id: UUID) -> StudentBill:
        bill = await db.get(StudentBill, student_bill_id)
        if bill is None:
            raise ResourceNotFound("Student bill not found")
        if not bill.is_payable:
            raise ValidationRejected(f"Cannot cancel a bill that is {bill.status.value}")

        bill.status = PaymentStatus.CANCELLED
        await db.commit()
        await db.refresh(bill)
        return bill

    @staticmethod
    async def mark_overdue(db: AsyncSession, today: Optional[date] = None) -> int:
        """Pending bills due in a month before the current one become overdue."""
        current_month = first_of_month(today or get_utc_today())
        result = await db.execute(
            update(StudentBill)
            .where(
                StudentBill.status == PaymentStatus.PENDING,
                StudentBill.due_date < current_month,
            )
            .values(status=PaymentStatus.OVERDUE)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        count = result.rowcount or 0
        logger.info("Overdue bills marked", extra={"count": count})
        return count

    @staticmethod
    async def payments_between(db: AsyncSession, start_date: date, end_date: date) -> Tuple[List[Payment], Decimal]:
        """Payments whose payment_date falls within [start_date, end_date], inclusive."""
        if end_date < start_date:
            raise ValidationRejected("end_date must not be before start_date")

        result = await db.execute(
            select(Payment)
            .where(
                Payment.payment_date >= datetime.combine(start_date, time.min),
                Payment.payment_date < datetime.combine(end_date + timedelta(days=1), time.min),
            )
            .order_by(Payment.payment_date)
        )
        payments = list(result.scalars().all())
        total = sum((Decimal(payment.amount) for payment in payments), Decimal("0"))
        return payments, total
