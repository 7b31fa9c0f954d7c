"""Student Service - student records"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.core.logging import get_logger
from schoolpay.models.billing import Payment, StudentBill
from schoolpay.models.enums import StudentStatus
from schoolpay.models.student import Student
from schoolpay.schemas.student import StudentCreate, StudentUpdate

logger = get_logger(__name__)


class StudentService:
    @staticmethod
    async def get_student(db: AsyncSession, student_id: UUID) -> Student:
        student = await db.get(Student, student_id)
        if student is None:
            raise ResourceNotFound("Student not found")
        return student

    @staticmethod
    async def get_by_nis(db: AsyncSession, nis: str) -> Optional[Student]:
        result = await db.execute(select(Student).where(Student.nis == nis))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_students(
        db: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        search: Optional[str] = None,
        class_id: Optional[UUID] = None,
        status: Optional[StudentStatus] = None,
    ) -> Tuple[List[Student], int]:
        """Paginated students; ``search`` matches name or NIS."""
        stmt = select(Student)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Student.name.ilike(pattern), Student.nis.ilike(pattern)))
        if class_id is not None:
            stmt = stmt.where(Student.class_id == class_id)
        if status is not None:
            stmt = stmt.where(Student.status == status)

        total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await db.execute(stmt.order_by(Student.name).offset(skip).limit(limit))
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def create_student(db: AsyncSession, data: StudentCreate) -> Student:
        if await StudentService.get_by_nis(db, data.nis):
            raise ValidationRejected(f"Student number {data.nis} already exists")

        student = Student(**data.model_dump())
        db.add(student)
        await db.commit()
        await db.refresh(student)
        logger.info("Student created", extra={"student_id": str(student.id)})
        return student

    @staticmethod
    async def update_student(db: AsyncSession, student_id: UUID, data: StudentUpdate) -> Student:
        student = await StudentService.get_student(db, student_id)
        changes = data.model_dump(exclude_unset=True)

        new_nis = changes.get("nis")
        if new_nis and new_nis != student.nis and await StudentService.get_by_nis(db, new_nis):
            raise ValidationRejected(f"Student number {new_nis} already exists")

        for field, value in changes.items():
            setattr(student, field, value)
        await db.commit()
        await db.refresh(student)
        return student

    @staticmethod
    async def delete_student(db: AsyncSession, student_id: UUID) -> None:
        """Unpaid bills go with the student; a student with payments must be deactivated instead."""
        student = await StudentService.get_student(db, student_id)
        paid = await db.scalar(
            select(func.count(Payment.id))
            .join(StudentBill, StudentBill.id == Payment.student_bill_id)
            .where(StudentBill.student_id == student_id)
        )
        if paid:
            raise ValidationRejected(
                "Student has recorded payments; set the status to inactive instead",
                {"payments": paid},
            )
        await db.delete(student)
        await db.commit()
        logger.info("Student deleted", extra={"student_id": str(student_id)})
