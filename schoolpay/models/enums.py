"""Centralized Enum Definitions"""

import enum


# Users & Authentication
class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    CASHIER = "cashier"
    TEACHER = "teacher"


class AuthEvent(str, enum.Enum):
    """Auth state changes fed into the session bootstrap"""
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


# Master data
class RecordStatus(str, enum.Enum):
    """Generic active/inactive flag for institutions, bills and categories"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    DROPPED_OUT = "dropped_out"


# Billing
class PaymentStatus(str, enum.Enum):
    """Student bill status"""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"

    @classmethod
    def payable(cls) -> tuple:
        return (cls.PENDING, cls.OVERDUE)

    @classmethod
    def settled(cls) -> tuple:
        return (cls.PAID, cls.CANCELLED)


class AssignmentTarget(str, enum.Enum):
    """Population a bill template is assigned to"""
    ALL = "all"
    CLASS = "class"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    QRIS = "qris"
    OTHER = "other"


# Finance
class TransactionType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ActivityStatus(str, enum.Enum):
    PLANNED = "planned"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Promotions
class PromotionStatus(str, enum.Enum):
    PROMOTED = "promoted"
    GRADUATED = "graduated"


class AssignmentOutcome(str, enum.Enum):
    """Result of a bill assignment run"""
    NO_STUDENTS = "no_students"
    NOTHING_TO_DO = "nothing_to_do"
    COMPLETED = "completed"
