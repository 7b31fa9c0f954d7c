"""Billing Models: bill templates, per-student bills and payments"""

from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel, pg_enum
from schoolpay.models.enums import PaymentStatus, RecordStatus
from schoolpay.utils.time import get_utc_now


class Bill(BaseModel):
    """
    Reusable charge definition (SPP, exam fee, uniform...).
    Editing or deleting a template never touches generated student bills.
    """
    __tablename__ = "bills"

    code = Column(String(50), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String(100), nullable=False)
    status = Column(pg_enum(RecordStatus, "record_status"), default=RecordStatus.ACTIVE, nullable=False)
    due_date = Column(Date, nullable=True)
    academic_year_id = Column(
        UUID(as_uuid=True), ForeignKey("academic_years.id", ondelete="SET NULL"), nullable=True, index=True
    )

    student_bills = relationship("StudentBill", back_populates="bill", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Bill {self.code} {self.amount}>"


class StudentBill(BaseModel):
    """One student's obligation for one bill template in one month."""
    __tablename__ = "student_bills"
    __table_args__ = (
        UniqueConstraint("student_id", "bill_id", "due_date", name="uq_student_bills_student_bill_due"),
    )

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    bill_id = Column(UUID(as_uuid=True), ForeignKey("bills.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(
        pg_enum(PaymentStatus, "payment_status"), default=PaymentStatus.PENDING, nullable=False, index=True
    )

    student = relationship("Student", back_populates="bills")
    bill = relationship("Bill", back_populates="student_bills")
    payments = relationship("Payment", back_populates="student_bill")

    @property
    def is_payable(self) -> bool:
        return self.status in PaymentStatus.payable()

    def __repr__(self) -> str:
        return f"<StudentBill {self.student_id} {self.due_date} {self.status}>"


class Payment(BaseModel):
    """Full payment of one student bill."""
    __tablename__ = "payments"

    student_bill_id = Column(
        UUID(as_uuid=True), ForeignKey("student_bills.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    amount = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    payment_date = Column(DateTime, default=get_utc_now, nullable=False, index=True)
    receipt_number = Column(String(50), nullable=False, unique=True)
    processed_by = Column(String(255), nullable=True)

    student_bill = relationship("StudentBill", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment {self.receipt_number} {self.amount}>"
