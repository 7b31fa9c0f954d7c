from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.schemas.academic import (
    ClassResponse,
    GenerateClassesRequest,
    GenerateClassesResult,
    PromotionRequest,
    PromotionResult,
)
from schoolpay.schemas.auth import CurrentUser
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.promotion_service import PromotionService

router = APIRouter()


@router.post("/generate-classes", response_model=SuccessResponse[GenerateClassesResult])
async def generate_classes(
    request_in: GenerateClassesRequest,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Create next year's classes one level up.
    Final-level classes are not copied; classes already in the target year are skipped.
    """
    created, final_level, skipped = await PromotionService.generate_classes(db, request_in)
    return SuccessResponse(
        data=GenerateClassesResult(
            created=[ClassResponse.model_validate(c) for c in created],
            final_level=final_level,
            skipped_existing=skipped,
        ),
        message=f"{len(created)} class(es) created",
    )


@router.post("/process", response_model=SuccessResponse[PromotionResult])
async def process_promotion(
    request_in: PromotionRequest,
    current_user: CurrentUser = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Move all students of a class to another class, or graduate them."""
    status, moved = await PromotionService.process(db, request_in, processed_by=current_user.id)
    return SuccessResponse(
        data=PromotionResult(status=status, moved=moved),
        message=f"{moved} student(s) {status.value}",
    )
