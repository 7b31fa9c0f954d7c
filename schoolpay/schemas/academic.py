from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, EmailStr, model_validator
from uuid import UUID
from datetime import datetime, date

from schoolpay.models.enums import RecordStatus, PromotionStatus


class InstitutionBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    email: Optional[EmailStr] = None
    principal: Optional[str] = None
    status: RecordStatus = RecordStatus.ACTIVE


class InstitutionCreate(InstitutionBase):
    pass


class InstitutionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    email: Optional[EmailStr] = None
    principal: Optional[str] = None
    status: Optional[RecordStatus] = None


class InstitutionResponse(InstitutionBase):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AcademicYearBase(BaseModel):
    code: str = Field(..., min_length=4, max_length=20)  # e.g. "2024/2025"
    description: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    is_active: bool = False

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AcademicYearCreate(AcademicYearBase):
    pass


class AcademicYearUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=4, max_length=20)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None


class AcademicYearResponse(AcademicYearBase):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class ClassBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    level: int = Field(..., ge=1, le=12)
    capacity: Optional[int] = Field(None, ge=1)
    homeroom_teacher: Optional[str] = None
    institution_id: Optional[UUID] = None
    academic_year_id: Optional[UUID] = None


class ClassCreate(ClassBase):
    pass


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    level: Optional[int] = Field(None, ge=1, le=12)
    capacity: Optional[int] = Field(None, ge=1)
    homeroom_teacher: Optional[str] = None
    institution_id: Optional[UUID] = None
    academic_year_id: Optional[UUID] = None


class ClassResponse(ClassBase):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class ClassWithStats(ClassResponse):
    student_count: int = 0


# Class promotion
class GenerateClassesRequest(BaseModel):
    institution_id: UUID
    source_academic_year_id: UUID
    target_academic_year_id: UUID

    @model_validator(mode="after")
    def years_differ(self):
        if self.source_academic_year_id == self.target_academic_year_id:
            raise ValueError("source and target academic years must differ")
        return self


class GenerateClassesResult(BaseModel):
    created: List[ClassResponse] = []
    final_level: int
    skipped_existing: int = 0


class PromotionRequest(BaseModel):
    """Move every student of ``from_class_id`` to ``to_class_id``, or graduate them."""
    from_class_id: UUID
    to_class_id: Optional[UUID] = None
    graduate: bool = False
    academic_year_id: Optional[UUID] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def target_required_unless_graduating(self):
        if self.graduate:
            return self
        if self.to_class_id is None:
            raise ValueError("to_class_id is required unless graduating")
        if self.to_class_id == self.from_class_id:
            raise ValueError("source and target classes must differ")
        return self


class PromotionResult(BaseModel):
    status: PromotionStatus
    moved: int
