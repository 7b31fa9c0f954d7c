"""Billing schemas: templates, assignment, monthly editor, payments"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, computed_field, model_validator

from schoolpay.models.enums import (
    AssignmentOutcome,
    AssignmentTarget,
    PaymentMethod,
    PaymentStatus,
    RecordStatus,
)


# Bill templates
class BillBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=2, max_length=255)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    status: RecordStatus = RecordStatus.ACTIVE
    due_date: Optional[date] = None
    academic_year_id: Optional[UUID] = None


class BillCreate(BillBase):
    pass


class BillUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[RecordStatus] = None
    due_date: Optional[date] = None
    academic_year_id: Optional[UUID] = None


class BillResponse(BillBase):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Assignment / generation
class BillAssignmentRequest(BaseModel):
    """
    Parameters for materializing student bills from a template.

    ``months_count`` is only read when ``repeat_monthly`` is set and is
    clamped to [1, 24] by the service, so out-of-range values are accepted.
    """
    target: AssignmentTarget = AssignmentTarget.ALL
    class_id: Optional[UUID] = None
    repeat_monthly: bool = False
    start_date: date
    months_count: int = 1
    overwrite_existing: bool = False

    @model_validator(mode="after")
    def class_required_for_class_target(self) -> "BillAssignmentRequest":
        if self.target == AssignmentTarget.CLASS and self.class_id is None:
            raise ValueError("class_id is required when target is 'class'")
        return self


class BillAssignmentResult(BaseModel):
    outcome: AssignmentOutcome
    months: List[date] = []
    student_count: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    protected: int = 0

    @computed_field
    @property
    def affected(self) -> int:
        return self.inserted + self.updated


# Monthly editor
class MonthlyBillRow(BaseModel):
    due_date: date
    amount: Decimal
    student_count: int = 0


class MonthlyBillEdit(BaseModel):
    due_date: date
    amount: Decimal = Field(..., gt=0, decimal_places=2)


class MonthlyBillSave(BaseModel):
    """Edited months plus an optional population filter."""
    months: List[MonthlyBillEdit] = Field(..., min_length=1)
    class_id: Optional[UUID] = None
    level: Optional[int] = Field(None, ge=1, le=12)


class MonthlyBillSaveResult(BaseModel):
    months_updated: int
    rows_updated: int


# Student bills & payments
class StudentBillResponse(BaseModel):
    id: UUID
    student_id: UUID
    bill_id: Optional[UUID] = None
    amount: Decimal
    due_date: date
    status: PaymentStatus

    model_config = ConfigDict(from_attributes=True)


class OutstandingBillsResponse(BaseModel):
    student_id: UUID
    bills: List[StudentBillResponse]
    total_outstanding: Decimal


class PaymentCreate(BaseModel):
    student_bill_ids: List[UUID] = Field(..., min_length=1)
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = Field(None, max_length=500)


class PaymentResponse(BaseModel):
    id: UUID
    student_bill_id: UUID
    amount: Decimal
    payment_method: str
    notes: Optional[str] = None
    payment_date: datetime
    receipt_number: str
    processed_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentReport(BaseModel):
    start_date: date
    end_date: date
    payments: List[PaymentResponse]
    total_amount: Decimal
    count: int
