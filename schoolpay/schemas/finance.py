"""Finance schemas: categories, cash book, activities, reports"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

from schoolpay.models.enums import ActivityStatus, RecordStatus, TransactionType


class FinancialCategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    type: TransactionType
    description: Optional[str] = Field(None, max_length=500)
    status: RecordStatus = RecordStatus.ACTIVE


class FinancialCategoryCreate(FinancialCategoryBase):
    pass


class FinancialCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[RecordStatus] = None


class FinancialCategoryResponse(FinancialCategoryBase):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class CashBookEntryCreate(BaseModel):
    date: date
    description: str = Field(..., min_length=1, max_length=500)
    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category_id: Optional[UUID] = None
    reference_number: Optional[str] = Field(None, max_length=100)


class CashBookEntryResponse(CashBookEntryCreate):
    id: UUID
    balance: Optional[Decimal] = None
    processed_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityPlanBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    budget: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    planned_date: Optional[date] = None
    status: ActivityStatus = ActivityStatus.PLANNED


class ActivityPlanCreate(ActivityPlanBase):
    pass


class ActivityPlanUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    budget: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    planned_date: Optional[date] = None
    status: Optional[ActivityStatus] = None


class ActivityPlanResponse(ActivityPlanBase):
    id: UUID
    created_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityRealizationCreate(BaseModel):
    activity_plan_id: UUID
    actual_cost: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    actual_date: Optional[date] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    status: ActivityStatus = ActivityStatus.COMPLETED


class ActivityRealizationResponse(ActivityRealizationCreate):
    id: UUID
    created_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryTotal(BaseModel):
    category_id: Optional[UUID] = None
    category_name: str
    type: TransactionType
    total: Decimal


class FinancialReport(BaseModel):
    start_date: date
    end_date: date
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    by_category: List[CategoryTotal] = []
    generated_at: datetime
