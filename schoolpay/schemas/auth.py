"""Authentication and session schemas"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from schoolpay.models.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthIdentity(BaseModel):
    """Identity as reported by the remote auth service."""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user: AuthIdentity


class CurrentUser(BaseModel):
    """The caller as seen by route guards."""
    id: str
    identity_id: str
    email: str
    name: str
    role: UserRole
    is_fallback: bool = False


class SessionState(BaseModel):
    """What the dashboard shell needs to render: who, and whether the backend answered."""
    user: Optional[CurrentUser] = None
    is_authenticated: bool = False
    is_loading: bool = False
    backend_unreachable: bool = False
    session_expired: bool = False


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: CurrentUser
