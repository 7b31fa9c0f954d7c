"""User Profile Model"""

from sqlalchemy import Column, String, Text

from schoolpay.models.base import BaseModel, StatusMixin, pg_enum
from schoolpay.models.enums import UserRole


class Profile(BaseModel, StatusMixin):
    """
    Application profile for a remote-auth identity.
    Credentials live in the auth service; this row only carries role and name.
    """
    __tablename__ = "profiles"

    user_id = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    role = Column(pg_enum(UserRole, "user_role"), default=UserRole.CASHIER, nullable=False, index=True)

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.SUPER_ADMIN, UserRole.ADMIN)

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.role})>"
