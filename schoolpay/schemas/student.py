from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import date, datetime

from schoolpay.models.enums import StudentStatus


class StudentBase(BaseModel):
    nis: str = Field(..., min_length=1, max_length=30)
    name: str = Field(..., min_length=2, max_length=100)
    class_id: Optional[UUID] = None
    status: StudentStatus = StudentStatus.ACTIVE
    gender: Optional[str] = None
    birth_place: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    admission_date: Optional[date] = None


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    nis: Optional[str] = Field(None, min_length=1, max_length=30)
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    class_id: Optional[UUID] = None
    status: Optional[StudentStatus] = None
    gender: Optional[str] = None
    birth_place: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    admission_date: Optional[date] = None


class StudentResponse(StudentBase):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
