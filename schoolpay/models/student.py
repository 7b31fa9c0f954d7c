"""Student Model"""

from sqlalchemy import Column, String, Text, Date, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel, pg_enum
from schoolpay.models.enums import StudentStatus


class Student(BaseModel):
    """
    Enrolled student. ``nis`` is the institutional student number.
    ``class_id`` is cleared on graduation.
    """
    __tablename__ = "students"

    nis = Column(String(30), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(
        pg_enum(StudentStatus, "student_status"), default=StudentStatus.ACTIVE, nullable=False, index=True
    )

    gender = Column(String(20), nullable=True)
    birth_place = Column(String(100), nullable=True)
    birth_date = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    parent_name = Column(String(255), nullable=True)
    parent_phone = Column(String(50), nullable=True)
    admission_date = Column(Date, nullable=True)

    school_class = relationship("SchoolClass", back_populates="students")
    bills = relationship("StudentBill", back_populates="student", passive_deletes=True)
    scholarships = relationship("StudentScholarship", back_populates="student", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Student {self.nis} {self.name}>"
