"""Scholarship Models"""

from sqlalchemy import Column, String, Text, Date, Numeric, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel, pg_enum
from schoolpay.models.enums import RecordStatus


class ScholarshipCategory(BaseModel):
    __tablename__ = "scholarship_categories"

    name = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=True)
    criteria = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(pg_enum(RecordStatus, "record_status"), default=RecordStatus.ACTIVE, nullable=False)

    assignments = relationship("StudentScholarship", back_populates="category")


class StudentScholarship(BaseModel):
    __tablename__ = "student_scholarships"

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    scholarship_category_id = Column(
        UUID(as_uuid=True), ForeignKey("scholarship_categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    amount = Column(Numeric(14, 2), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(pg_enum(RecordStatus, "record_status"), default=RecordStatus.ACTIVE, nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)

    student = relationship("Student", back_populates="scholarships")
    category = relationship("ScholarshipCategory", back_populates="assignments")
