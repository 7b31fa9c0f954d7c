"""Models Package - Export all models for easy imports"""

from schoolpay.models.base import BaseModel, StatusMixin
from schoolpay.models.enums import *
from schoolpay.models.academic import Institution, AcademicYear, SchoolClass, ClassPromotion
from schoolpay.models.student import Student
from schoolpay.models.billing import Bill, StudentBill, Payment
from schoolpay.models.finance import FinancialCategory, CashBookEntry, ActivityPlan, ActivityRealization
from schoolpay.models.scholarship import ScholarshipCategory, StudentScholarship
from schoolpay.models.user import Profile


__all__ = [
    # Base classes
    "BaseModel",
    "StatusMixin",

    # Academic
    "Institution",
    "AcademicYear",
    "SchoolClass",
    "ClassPromotion",
    "Student",

    # Billing
    "Bill",
    "StudentBill",
    "Payment",

    # Finance
    "FinancialCategory",
    "CashBookEntry",
    "ActivityPlan",
    "ActivityRealization",

    # Scholarships
    "ScholarshipCategory",
    "StudentScholarship",

    # Users
    "Profile",
]
