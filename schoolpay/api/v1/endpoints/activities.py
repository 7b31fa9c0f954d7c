from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.models.enums import ActivityStatus
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.finance import (
    ActivityPlanCreate,
    ActivityPlanResponse,
    ActivityPlanUpdate,
    ActivityRealizationCreate,
    ActivityRealizationResponse,
)
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.activity_service import ActivityService

router = APIRouter()


@router.get("/plans", response_model=SuccessResponse[List[ActivityPlanResponse]])
async def list_plans(
    status: Optional[ActivityStatus] = None,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    plans = await ActivityService.list_plans(db, status=status)
    return SuccessResponse(data=[ActivityPlanResponse.model_validate(p) for p in plans])


@router.post("/plans", response_model=SuccessResponse[ActivityPlanResponse])
async def create_plan(
    plan_in: ActivityPlanCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    plan = await ActivityService.create_plan(db, plan_in, created_by=current_user.id)
    return SuccessResponse(data=ActivityPlanResponse.model_validate(plan), message="Activity plan created")


@router.put("/plans/{plan_id}", response_model=SuccessResponse[ActivityPlanResponse])
async def update_plan(
    plan_id: UUID,
    plan_in: ActivityPlanUpdate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    plan = await ActivityService.update_plan(db, plan_id, plan_in)
    return SuccessResponse(data=ActivityPlanResponse.model_validate(plan), message="Activity plan updated")


@router.delete("/plans/{plan_id}", response_model=SuccessResponse)
async def delete_plan(
    plan_id: UUID,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await ActivityService.delete_plan(db, plan_id)
    return SuccessResponse(message="Activity plan deleted")


@router.get("/realizations", response_model=SuccessResponse[List[ActivityRealizationResponse]])
async def list_realizations(
    plan_id: Optional[UUID] = None,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    realizations = await ActivityService.list_realizations(db, plan_id=plan_id)
    return SuccessResponse(data=[ActivityRealizationResponse.model_validate(r) for r in realizations])


@router.post("/realizations", response_model=SuccessResponse[ActivityRealizationResponse])
async def record_realization(
    realization_in: ActivityRealizationCreate,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    realization = await ActivityService.record_realization(db, realization_in, created_by=current_user.id)
    return SuccessResponse(
        data=ActivityRealizationResponse.model_validate(realization),
        message="Activity realization recorded",
    )
