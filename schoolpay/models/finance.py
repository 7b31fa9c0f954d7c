"""Finance Models: categories, cash book and activity budgeting"""

from sqlalchemy import Column, String, Text, Date, Numeric, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel, pg_enum
from schoolpay.models.enums import TransactionType, RecordStatus, ActivityStatus


class FinancialCategory(BaseModel):
    __tablename__ = "financial_categories"

    name = Column(String(255), nullable=False)
    type = Column(pg_enum(TransactionType, "transaction_type"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(pg_enum(RecordStatus, "record_status"), default=RecordStatus.ACTIVE, nullable=False)

    entries = relationship("CashBookEntry", back_populates="category")

    def __repr__(self) -> str:
        return f"<FinancialCategory {self.name} ({self.type})>"


class CashBookEntry(BaseModel):
    """
    General cash book line. ``balance`` is the running balance after this
    entry, recomputed by the service on every write.
    """
    __tablename__ = "cash_book"

    date = Column(Date, nullable=False, index=True)
    description = Column(String(500), nullable=False)
    type = Column(pg_enum(TransactionType, "transaction_type"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    balance = Column(Numeric(16, 2), nullable=True)
    category_id = Column(
        UUID(as_uuid=True), ForeignKey("financial_categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    reference_number = Column(String(100), nullable=True)
    processed_by = Column(String(255), nullable=True)

    category = relationship("FinancialCategory", back_populates="entries")

    def __repr__(self) -> str:
        return f"<CashBookEntry {self.date} {self.type} {self.amount}>"


class ActivityPlan(BaseModel):
    __tablename__ = "activity_plans"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(
        UUID(as_uuid=True), ForeignKey("financial_categories.id", ondelete="SET NULL"), nullable=True
    )
    budget = Column(Numeric(14, 2), nullable=True)
    planned_date = Column(Date, nullable=True)
    status = Column(pg_enum(ActivityStatus, "activity_status"), default=ActivityStatus.PLANNED, nullable=False)
    created_by = Column(String(255), nullable=True)

    realizations = relationship("ActivityRealization", back_populates="plan", passive_deletes=True)


class ActivityRealization(BaseModel):
    __tablename__ = "activity_realizations"

    activity_plan_id = Column(
        UUID(as_uuid=True), ForeignKey("activity_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    actual_cost = Column(Numeric(14, 2), nullable=True)
    actual_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(pg_enum(ActivityStatus, "activity_status"), default=ActivityStatus.COMPLETED, nullable=False)
    created_by = Column(String(255), nullable=True)

    plan = relationship("ActivityPlan", back_populates="realizations")
