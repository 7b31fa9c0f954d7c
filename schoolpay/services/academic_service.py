from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.models.academic import AcademicYear, Institution, SchoolClass
from schoolpay.models.student import Student
from schoolpay.schemas.academic import (
    AcademicYearCreate,
    AcademicYearUpdate,
    ClassCreate,
    ClassUpdate,
    InstitutionCreate,
    InstitutionUpdate,
)

logger = get_logger(__name__)


class AcademicService:
    # Institutions
    @staticmethod
    async def list_institutions(db: AsyncSession) -> List[Institution]:
        result = await db.execute(select(Institution).order_by(Institution.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_institution(db: AsyncSession, institution_id: UUID) -> Institution:
        institution = await db.get(Institution, institution_id)
        if institution is None:
            raise ResourceNotFound("Institution not found")
        return institution

    @staticmethod
    async def create_institution(db: AsyncSession, data: InstitutionCreate) -> Institution:
        institution = Institution(**data.model_dump())
        db.add(institution)
        await db.commit()
        await db.refresh(institution)
        return institution

    @staticmethod
    async def update_institution(db: AsyncSession, institution_id: UUID, data: InstitutionUpdate) -> Institution:
        institution = await AcademicService.get_institution(db, institution_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(institution, field, value)
        await db.commit()
        await db.refresh(institution)
        return institution

    @staticmethod
    async def delete_institution(db: AsyncSession, institution_id: UUID) -> None:
        institution = await AcademicService.get_institution(db, institution_id)
        await db.delete(institution)
        await db.commit()

    # Academic years
    @staticmethod
    async def list_academic_years(db: AsyncSession) -> List[AcademicYear]:
        result = await db.execute(select(AcademicYear).order_by(AcademicYear.start_date.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_academic_year(db: AsyncSession, year_id: UUID) -> AcademicYear:
        year = await db.get(AcademicYear, year_id)
        if year is None:
            raise ResourceNotFound("Academic year not found")
        return year

    @staticmethod
    async def get_active_year(db: AsyncSession) -> Optional[AcademicYear]:
        """The active academic year; the latest-starting one wins if several are flagged."""
        result = await db.execute(
            select(AcademicYear)
            .where(AcademicYear.is_active.is_(True))
            .order_by(AcademicYear.start_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _deactivate_other_years(db: AsyncSession, keep_id: Optional[UUID]) -> None:
        stmt = update(AcademicYear).where(AcademicYear.is_active.is_(True))
        if keep_id is not None:
            stmt = stmt.where(AcademicYear.id != keep_id)
        await db.execute(stmt.values(is_active=False).execution_options(synchronize_session=False))

    @staticmethod
    async def create_academic_year(db: AsyncSession, data: AcademicYearCreate) -> AcademicYear:
        existing = await db.execute(select(AcademicYear.id).where(AcademicYear.code == data.code))
        if existing.first():
            raise ValidationRejected(f"Academic year {data.code} already exists")

        if data.is_active:
            await AcademicService._deactivate_other_years(db, keep_id=None)
        year = AcademicYear(**data.model_dump())
        db.add(year)
        await db.commit()
        await db.refresh(year)
        return year

    @staticmethod
    async def update_academic_year(db: AsyncSession, year_id: UUID, data: AcademicYearUpdate) -> AcademicYear:
        year = await AcademicService.get_academic_year(db, year_id)
        changes = data.model_dump(exclude_unset=True)

        start = changes.get("start_date", year.start_date)
        end = changes.get("end_date", year.end_date)
        if end <= start:
            raise ValidationRejected("end_date must be after start_date")

        if changes.get("is_active"):
            await AcademicService._deactivate_other_years(db, keep_id=year.id)
        for field, value in changes.items():
            setattr(year, field, value)
        await db.commit()
        await db.refresh(year)
        return year

    @staticmethod
    async def activate_academic_year(db: AsyncSession, year_id: UUID) -> AcademicYear:
        year = await AcademicService.get_academic_year(db, year_id)
        await AcademicService._deactivate_other_years(db, keep_id=year.id)
        year.is_active = True
        await db.commit()
        await db.refresh(year)
        logger.info("Academic year activated", extra={"academic_year": year.code})
        return year

    @staticmethod
    async def delete_academic_year(db: AsyncSession, year_id: UUID) -> None:
        year = await AcademicService.get_academic_year(db, year_id)
        await db.delete(year)
        await db.commit()

    # Classes
    @staticmethod
    async def get_class(db: AsyncSession, class_id: UUID) -> SchoolClass:
        school_class = await db.get(SchoolClass, class_id)
        if school_class is None:
            raise ResourceNotFound("Class not found")
        return school_class

    @staticmethod
    async def list_classes(
        db: AsyncSession,
        institution_id: Optional[UUID] = None,
        academic_year_id: Optional[UUID] = None,
        level: Optional[int] = None,
    ) -> List[Tuple[SchoolClass, int]]:
        """Classes with their student counts, ordered by level then name."""
        student_count = (
            select(func.count(Student.id))
            .where(Student.class_id == SchoolClass.id)
            .correlate(SchoolClass)
            .scalar_subquery()
        )
        stmt = select(SchoolClass, student_count)
        if institution_id is not None:
            stmt = stmt.where(SchoolClass.institution_id == institution_id)
        if academic_year_id is not None:
            stmt = stmt.where(SchoolClass.academic_year_id == academic_year_id)
        if level is not None:
            stmt = stmt.where(SchoolClass.level == level)

        result = await db.execute(stmt.order_by(SchoolClass.level, SchoolClass.name))
        return [(row[0], row[1] or 0) for row in result.all()]

    @staticmethod
    async def create_class(db: AsyncSession, data: ClassCreate) -> SchoolClass:
        school_class = SchoolClass(**data.model_dump())
        db.add(school_class)
        await db.commit()
        await db.refresh(school_class)
        return school_class

    @staticmethod
    async def update_class(db: AsyncSession, class_id: UUID, data: ClassUpdate) -> SchoolClass:
        school_class = await AcademicService.get_class(db, class_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(school_class, field, value)
        await db.commit()
        await db.refresh(school_class)
        return school_class

    @staticmethod
    async def delete_class(db: AsyncSession, class_id: UUID) -> None:
        school_class = await AcademicService.get_class(db, class_id)
        await db.delete(school_class)
        await db.commit()
