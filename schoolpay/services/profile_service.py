"""Profile Service - application profiles for remote-auth identities"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.models.enums import UserRole
from schoolpay.models.user import Profile
from schoolpay.schemas.user import ProfileCreate, ProfileUpdate

logger = get_logger(__name__)


class ProfileService:
    """Service layer for profile-related operations"""

    @staticmethod
    async def get_by_user_id(db: AsyncSession, user_id: str) -> Optional[Profile]:
        result = await db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_id(db: AsyncSession, profile_id: UUID) -> Optional[Profile]:
        result = await db.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_profiles(
        db: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Profile], int]:
        """Paginated profiles, optionally filtered by role and name/email substring."""
        stmt = select(Profile)
        if role is not None:
            stmt = stmt.where(Profile.role == role)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Profile.name.ilike(pattern), Profile.email.ilike(pattern)))

        total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await db.execute(stmt.order_by(Profile.name).offset(skip).limit(limit))
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def create_profile(db: AsyncSession, data: ProfileCreate) -> Profile:
        if await ProfileService.get_by_user_id(db, data.user_id):
            raise ValidationRejected("A profile already exists for this user", {"user_id": data.user_id})

        profile = Profile(**data.model_dump())
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
        logger.info("Profile created", extra={"profile_id": str(profile.id), "role": profile.role.value})
        return profile

    @staticmethod
    async def update_profile(db: AsyncSession, profile_id: UUID, data: ProfileUpdate) -> Profile:
        profile = await ProfileService.get_by_id(db, profile_id)
        if profile is None:
            raise ResourceNotFound("Profile not found")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)
        await db.commit()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def delete_profile(db: AsyncSession, profile_id: UUID) -> Profile:
        profile = await ProfileService.get_by_id(db, profile_id)
        if profile is None:
            raise ResourceNotFound("Profile not found")
        await db.delete(profile)
        await db.commit()
        return profile
