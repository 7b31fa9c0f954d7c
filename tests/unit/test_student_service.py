"""Unit tests for StudentService."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import ResourceNotFound, ValidationRejected
from schoolpay.models.student import Student
from schoolpay.services.student_service import StudentService


@pytest.mark.asyncio
async def test_delete_student_with_payments_is_rejected():
    db = AsyncMock(spec=AsyncSession)
    db.get.return_value = Student(id=uuid4(), nis="2024001", name="Siswa")
    db.scalar.return_value = 2

    with pytest.raises(ValidationRejected) as exc_info:
        await StudentService.delete_student(db, uuid4())

    assert exc_info.value.details == {"payments": 2}
    assert not db.delete.called


@pytest.mark.asyncio
async def test_delete_student_without_payments():
    db = AsyncMock(spec=AsyncSession)
    student = Student(id=uuid4(), nis="2024002", name="Siswa")
    db.get.return_value = student
    db.scalar.return_value = 0

    await StudentService.delete_student(db, student.id)

    db.delete.assert_awaited_once_with(student)
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_missing_student():
    db = AsyncMock(spec=AsyncSession)
    db.get.return_value = None

    with pytest.raises(ResourceNotFound):
        await StudentService.get_student(db, uuid4())
