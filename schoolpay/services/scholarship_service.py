from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.models.enums import RecordStatus
from schoolpay.models.scholarship import ScholarshipCategory, StudentScholarship
from schoolpay.models.student import Student
from schoolpay.schemas.scholarship import (
    ScholarshipCategoryCreate,
    ScholarshipCategoryUpdate,
    StudentScholarshipCreate,
)


class ScholarshipService:
    @staticmethod
    async def list_categories(db: AsyncSession) -> List[ScholarshipCategory]:
        result = await db.execute(select(ScholarshipCategory).order_by(ScholarshipCategory.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_category(db: AsyncSession, category_id: UUID) -> ScholarshipCategory:
        category = await db.get(ScholarshipCategory, category_id)
        if category is None:
            raise ResourceNotFound("Scholarship category not found")
        return category

    @staticmethod
    async def create_category(db: AsyncSession, data: ScholarshipCategoryCreate) -> ScholarshipCategory:
        category = ScholarshipCategory(**data.model_dump())
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def update_category(
        db: AsyncSession, category_id: UUID, data: ScholarshipCategoryUpdate
    ) -> ScholarshipCategory:
        category = await ScholarshipService.get_category(db, category_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: UUID) -> None:
        category = await ScholarshipService.get_category(db, category_id)
        in_use = await db.execute(
            select(StudentScholarship.id).where(StudentScholarship.scholarship_category_id == category_id).limit(1)
        )
        if in_use.first():
            raise ValidationRejected("Scholarship category is assigned to students")
        await db.delete(category)
        await db.commit()

    @staticmethod
    async def list_assignments(
        db: AsyncSession,
        student_id: Optional[UUID] = None,
        category_id: Optional[UUID] = None,
    ) -> List[StudentScholarship]:
        stmt = select(StudentScholarship).order_by(StudentScholarship.created_at.desc())
        if student_id is not None:
            stmt = stmt.where(StudentScholarship.student_id == student_id)
        if category_id is not None:
            stmt = stmt.where(StudentScholarship.scholarship_category_id == category_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def assign(db: AsyncSession, data: StudentScholarshipCreate, created_by: str) -> StudentScholarship:
        """Grant a scholarship; the amount defaults to the category's amount."""
        if await db.get(Student, data.student_id) is None:
            raise ResourceNotFound("Student not found")
        category = await ScholarshipService.get_category(db, data.scholarship_category_id)
        if category.status != RecordStatus.ACTIVE:
            raise ValidationRejected("Scholarship category is inactive")

        amount = data.amount if data.amount is not None else category.amount
        if amount is None:
            raise ValidationRejected("Amount is required when the category has no default amount")
        if data.start_date and data.end_date and data.end_date < data.start_date:
            raise ValidationRejected("end_date must not be before start_date")

        assignment = StudentScholarship(
            student_id=data.student_id,
            scholarship_category_id=category.id,
            amount=amount,
            start_date=data.start_date,
            end_date=data.end_date,
            notes=data.notes,
            created_by=created_by,
        )
        db.add(assignment)
        await db.commit()
        await db.refresh(assignment)
        return assignment

    @staticmethod
    async def revoke(db: AsyncSession, assignment_id: UUID) -> StudentScholarship:
        assignment = await db.get(StudentScholarship, assignment_id)
        if assignment is None:
            raise ResourceNotFound("Student scholarship not found")
        assignment.status = RecordStatus.INACTIVE
        await db.commit()
        await db.refresh(assignment)
        return assignment
