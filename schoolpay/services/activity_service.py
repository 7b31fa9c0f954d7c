"""Activity Service - budgeted activity plans and their realizations"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.models.enums import ActivityStatus
from schoolpay.models.finance import ActivityPlan, ActivityRealization
from schoolpay.schemas.finance import ActivityPlanCreate, ActivityPlanUpdate, ActivityRealizationCreate


class ActivityService:
    @staticmethod
    async def list_plans(db: AsyncSession, status: Optional[ActivityStatus] = None) -> List[ActivityPlan]:
        stmt = select(ActivityPlan).order_by(ActivityPlan.planned_date.desc().nullslast(), ActivityPlan.name)
        if status is not None:
            stmt = stmt.where(ActivityPlan.status == status)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_plan(db: AsyncSession, plan_id: UUID) -> ActivityPlan:
        plan = await db.get(ActivityPlan, plan_id)
        if plan is None:
            raise ResourceNotFound("Activity plan not found")
        return plan

    @staticmethod
    async def create_plan(db: AsyncSession, data: ActivityPlanCreate, created_by: str) -> ActivityPlan:
        plan = ActivityPlan(**data.model_dump(), created_by=created_by)
        db.add(plan)
        await db.commit()
        await db.refresh(plan)
        return plan

    @staticmethod
    async def update_plan(db: AsyncSession, plan_id: UUID, data: ActivityPlanUpdate) -> ActivityPlan:
        plan = await ActivityService.get_plan(db, plan_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(plan, field, value)
        await db.commit()
        await db.refresh(plan)
        return plan

    @staticmethod
    async def delete_plan(db: AsyncSession, plan_id: UUID) -> None:
        plan = await ActivityService.get_plan(db, plan_id)
        await db.delete(plan)
        await db.commit()

    @staticmethod
    async def list_realizations(db: AsyncSession, plan_id: Optional[UUID] = None) -> List[ActivityRealization]:
        stmt = select(ActivityRealization).order_by(ActivityRealization.created_at.desc())
        if plan_id is not None:
            stmt = stmt.where(ActivityRealization.activity_plan_id == plan_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def record_realization(
        db: AsyncSession, data: ActivityRealizationCreate, created_by: str
    ) -> ActivityRealization:
        """Record what an activity actually cost; the plan takes the realization's status."""
        plan = await ActivityService.get_plan(db, data.activity_plan_id)
        if plan.status == ActivityStatus.CANCELLED:
            raise ValidationRejected("Cannot realize a cancelled activity")

        realization = ActivityRealization(**data.model_dump(), created_by=created_by)
        db.add(realization)
        plan.status = data.status
        await db.commit()
        await db.refresh(realization)
        return realization
