"""Institutions, academic years, classes and class promotions"""

from sqlalchemy import Column, String, Text, Date, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel, StatusMixin, pg_enum
from schoolpay.models.enums import RecordStatus, PromotionStatus


class Institution(BaseModel):
    """A school unit (SD, SMP, SMA...) that owns classes."""
    __tablename__ = "institutions"

    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    principal = Column(String(255), nullable=True)
    status = Column(pg_enum(RecordStatus, "record_status"), default=RecordStatus.ACTIVE, nullable=False)

    classes = relationship("SchoolClass", back_populates="institution")

    def __repr__(self) -> str:
        return f"<Institution {self.name}>"


class AcademicYear(BaseModel, StatusMixin):
    """
    School year, e.g. code "2024/2025".
    At most one row is active; the service layer deactivates the others.
    """
    __tablename__ = "academic_years"

    code = Column(String(20), nullable=False, unique=True)
    description = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    classes = relationship("SchoolClass", back_populates="academic_year")

    def __repr__(self) -> str:
        return f"<AcademicYear {self.code}>"


class SchoolClass(BaseModel):
    """A class/rombel such as "VII A" at level 7."""
    __tablename__ = "classes"

    name = Column(String(100), nullable=False)
    level = Column(Integer, nullable=False, index=True)
    capacity = Column(Integer, nullable=True)
    homeroom_teacher = Column(String(255), nullable=True)
    institution_id = Column(
        UUID(as_uuid=True), ForeignKey("institutions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    academic_year_id = Column(
        UUID(as_uuid=True), ForeignKey("academic_years.id", ondelete="SET NULL"), nullable=True, index=True
    )

    institution = relationship("Institution", back_populates="classes")
    academic_year = relationship("AcademicYear", back_populates="classes")
    students = relationship("Student", back_populates="school_class")

    def __repr__(self) -> str:
        return f"<SchoolClass {self.name} (level {self.level})>"


class ClassPromotion(BaseModel):
    """Audit row written for every student moved or graduated."""
    __tablename__ = "class_promotions"

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    from_class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    to_class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    academic_year_id = Column(UUID(as_uuid=True), ForeignKey("academic_years.id", ondelete="SET NULL"), nullable=True)
    promotion_date = Column(Date, nullable=False)
    status = Column(pg_enum(PromotionStatus, "promotion_status"), nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<ClassPromotion {self.student_id} {self.status}>"
