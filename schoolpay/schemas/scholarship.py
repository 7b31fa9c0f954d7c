from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

from schoolpay.models.enums import RecordStatus


class ScholarshipCategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    criteria: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=500)
    status: RecordStatus = RecordStatus.ACTIVE


class ScholarshipCategoryCreate(ScholarshipCategoryBase):
    pass


class ScholarshipCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    criteria: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[RecordStatus] = None


class ScholarshipCategoryResponse(ScholarshipCategoryBase):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class StudentScholarshipCreate(BaseModel):
    student_id: UUID
    scholarship_category_id: UUID
    # Defaults to the category amount when omitted
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None


class StudentScholarshipResponse(BaseModel):
    id: UUID
    student_id: UUID
    scholarship_category_id: UUID
    amount: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: RecordStatus
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
