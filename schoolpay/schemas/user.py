"""User profile schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, ConfigDict

from schoolpay.models.enums import UserRole


class ProfileBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    address: Optional[str] = None
    role: UserRole = UserRole.CASHIER
    is_active: bool = True


class ProfileCreate(ProfileBase):
    """Links an existing auth identity to an application profile."""
    user_id: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^[0-9+\-\s()]+$")
    address: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ProfileResponse(ProfileBase):
    id: UUID
    user_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
