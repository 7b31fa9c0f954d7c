"""Promotion Service - new-year class generation and student promotion"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import BackendCallFailed, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.models.academic import ClassPromotion, SchoolClass
from schoolpay.models.enums import PromotionStatus, StudentStatus
from schoolpay.models.student import Student
from schoolpay.schemas.academic import GenerateClassesRequest, PromotionRequest
from schoolpay.services.academic_service import AcademicService
from schoolpay.utils.time import get_utc_today

logger = get_logger(__name__)


def infer_final_level(max_level: int) -> int:
    """
    Final grade of the curriculum band the classes belong to.

    Elementary ends at 6, junior high at 9, senior high at 12.
    """
    if max_level >= 10:
        return 12
    if max_level >= 7:
        return 9
    if max_level >= 1:
        return 6
    return max_level


class PromotionService:
    @staticmethod
    async def _institution_classes(
        db: AsyncSession, institution_id: UUID, academic_year_id: Optional[UUID]
    ) -> List[SchoolClass]:
        stmt = select(SchoolClass).where(SchoolClass.institution_id == institution_id)
        if academic_year_id is not None:
            stmt = stmt.where(SchoolClass.academic_year_id == academic_year_id)
        result = await db.execute(stmt.order_by(SchoolClass.level, SchoolClass.name))
        return list(result.scalars().all())

    @staticmethod
    async def generate_classes(
        db: AsyncSession, data: GenerateClassesRequest
    ) -> Tuple[List[SchoolClass], int, int]:
        """
        Copy an institution's classes into the target year one level up.

        Returns (created classes, inferred final level, classes skipped
        because the same name and level already exist in the target year).
        Classes at the final level are not copied.
        """
        await AcademicService.get_institution(db, data.institution_id)
        await AcademicService.get_academic_year(db, data.source_academic_year_id)
        await AcademicService.get_academic_year(db, data.target_academic_year_id)

        source = await PromotionService._institution_classes(
            db, data.institution_id, data.source_academic_year_id
        )
        if not source:
            # Classes created before years were tracked have no academic_year_id
            source = await PromotionService._institution_classes(db, data.institution_id, None)
        if not source:
            return [], 0, 0

        final_level = infer_final_level(max(c.level or 0 for c in source))
        promotable = [c for c in source if (c.level or 0) < final_level]

        existing = await PromotionService._institution_classes(
            db, data.institution_id, data.target_academic_year_id
        )
        taken = {(c.name, c.level) for c in existing}

        created = []
        skipped = 0
        for school_class in promotable:
            key = (school_class.name, (school_class.level or 0) + 1)
            if key in taken:
                skipped += 1
                continue
            taken.add(key)
            created.append(SchoolClass(
                name=key[0],
                level=key[1],
                capacity=school_class.capacity,
                institution_id=data.institution_id,
                academic_year_id=data.target_academic_year_id,
            ))

        if created:
            db.add_all(created)
            await db.commit()
            for school_class in created:
                await db.refresh(school_class)

        logger.info(
            "Classes generated for new academic year",
            extra={
                "institution_id": str(data.institution_id),
                "created": len(created),
                "skipped": skipped,
                "final_level": final_level,
            },
        )
        return created, final_level, skipped

    @staticmethod
    async def process(db: AsyncSession, data: PromotionRequest, processed_by: str) -> Tuple[PromotionStatus, int]:
        """Move every student of a class to another class, or graduate them all."""
        from_class = await AcademicService.get_class(db, data.from_class_id)
        to_class = None
        if not data.graduate:
            to_class = await AcademicService.get_class(db, data.to_class_id)
            if to_class.id == from_class.id:
                raise ValidationRejected("Source and target classes must differ")

        result = await db.execute(select(Student.id).where(Student.class_id == from_class.id))
        student_ids = list(result.scalars().all())
        status = PromotionStatus.GRADUATED if data.graduate else PromotionStatus.PROMOTED
        if not student_ids:
            return status, 0

        values = {"class_id": None, "status": StudentStatus.GRADUATED} if data.graduate else {"class_id": to_class.id}
        academic_year_id = data.academic_year_id or (to_class.academic_year_id if to_class else None)
        today = get_utc_today()

        try:
            await db.execute(
                update(Student)
                .where(Student.id.in_(student_ids))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            db.add_all([
                ClassPromotion(
                    student_id=student_id,
                    from_class_id=from_class.id,
                    to_class_id=to_class.id if to_class else None,
                    academic_year_id=academic_year_id,
                    promotion_date=today,
                    status=status,
                    notes=data.notes,
                    created_by=processed_by,
                )
                for student_id in student_ids
            ])
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Promotion failed", extra={"from_class_id": str(from_class.id)}, exc_info=True)
            raise BackendCallFailed("Failed to process promotion") from exc

        logger.info(
            "Students promoted",
            extra={"from_class_id": str(from_class.id), "status": status.value, "count": len(student_ids)},
        )
        return status, len(student_ids)
