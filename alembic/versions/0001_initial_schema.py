"""initial schema: master data, billing, payments, finance

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "user_role": ("super_admin", "admin", "cashier", "teacher"),
    "record_status": ("active", "inactive"),
    "student_status": ("active", "inactive", "graduated", "dropped_out"),
    "payment_status": ("pending", "paid", "overdue", "cancelled"),
    "transaction_type": ("income", "expense"),
    "activity_status": ("planned", "ongoing", "completed", "cancelled"),
    "promotion_status": ("promoted", "graduated"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns():
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _index(table: str, *columns: str, unique: bool = False) -> None:
    for column in columns:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=unique)


def upgrade() -> None:
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(op.get_bind(), checkfirst=True)

    op.create_table(
        "institutions",
        *_base_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("principal", sa.String(255), nullable=True),
        sa.Column("status", _enum("record_status"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("institutions", "id")

    op.create_table(
        "academic_years",
        *_base_columns(),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )
    _index("academic_years", "id", "is_active")

    op.create_table(
        "profiles",
        *_base_columns(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("profiles", "id", "email", "role", "is_active")
    _index("profiles", "user_id", unique=True)

    op.create_table(
        "classes",
        *_base_columns(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("homeroom_teacher", sa.String(255), nullable=True),
        sa.Column("institution_id", sa.UUID(), nullable=True),
        sa.Column("academic_year_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("classes", "id", "level", "institution_id", "academic_year_id")

    op.create_table(
        "students",
        *_base_columns(),
        sa.Column("nis", sa.String(30), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("class_id", sa.UUID(), nullable=True),
        sa.Column("status", _enum("student_status"), nullable=False),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("birth_place", sa.String(100), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("parent_name", sa.String(255), nullable=True),
        sa.Column("parent_phone", sa.String(50), nullable=True),
        sa.Column("admission_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("students", "id", "class_id", "status")
    _index("students", "nis", unique=True)

    op.create_table(
        "bills",
        *_base_columns(),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("status", _enum("record_status"), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("academic_year_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("bills", "id", "code", "academic_year_id")

    op.create_table(
        "student_bills",
        *_base_columns(),
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("bill_id", sa.UUID(), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", _enum("payment_status"), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["bill_id"], ["bills.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "bill_id", "due_date", name="uq_student_bills_student_bill_due"),
    )
    _index("student_bills", "id", "student_id", "bill_id", "due_date", "status")

    op.create_table(
        "payments",
        *_base_columns(),
        sa.Column("student_bill_id", sa.UUID(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("payment_date", sa.DateTime(), nullable=False),
        sa.Column("receipt_number", sa.String(50), nullable=False),
        sa.Column("processed_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["student_bill_id"], ["student_bills.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("receipt_number"),
    )
    _index("payments", "id", "student_bill_id", "payment_date")

    op.create_table(
        "financial_categories",
        *_base_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", _enum("transaction_type"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", _enum("record_status"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("financial_categories", "id", "type")

    op.create_table(
        "cash_book",
        *_base_columns(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("type", _enum("transaction_type"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("balance", sa.Numeric(16, 2), nullable=True),
        sa.Column("category_id", sa.UUID(), nullable=True),
        sa.Column("reference_number", sa.String(100), nullable=True),
        sa.Column("processed_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["financial_categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("cash_book", "id", "date", "type", "category_id")

    op.create_table(
        "activity_plans",
        *_base_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.UUID(), nullable=True),
        sa.Column("budget", sa.Numeric(14, 2), nullable=True),
        sa.Column("planned_date", sa.Date(), nullable=True),
        sa.Column("status", _enum("activity_status"), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["financial_categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("activity_plans", "id")

    op.create_table(
        "activity_realizations",
        *_base_columns(),
        sa.Column("activity_plan_id", sa.UUID(), nullable=False),
        sa.Column("actual_cost", sa.Numeric(14, 2), nullable=True),
        sa.Column("actual_date", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", _enum("activity_status"), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["activity_plan_id"], ["activity_plans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("activity_realizations", "id", "activity_plan_id")

    op.create_table(
        "scholarship_categories",
        *_base_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("criteria", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", _enum("record_status"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("scholarship_categories", "id")

    op.create_table(
        "student_scholarships",
        *_base_columns(),
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("scholarship_category_id", sa.UUID(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", _enum("record_status"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["scholarship_category_id"], ["scholarship_categories.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("student_scholarships", "id", "student_id", "scholarship_category_id")

    op.create_table(
        "class_promotions",
        *_base_columns(),
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("from_class_id", sa.UUID(), nullable=True),
        sa.Column("to_class_id", sa.UUID(), nullable=True),
        sa.Column("academic_year_id", sa.UUID(), nullable=True),
        sa.Column("promotion_date", sa.Date(), nullable=False),
        sa.Column("status", _enum("promotion_status"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["from_class_id"], ["classes.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["to_class_id"], ["classes.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("class_promotions", "id", "student_id")


def downgrade() -> None:
    for table in (
        "class_promotions",
        "student_scholarships",
        "scholarship_categories",
        "activity_realizations",
        "activity_plans",
        "cash_book",
        "financial_categories",
        "payments",
        "student_bills",
        "bills",
        "students",
        "classes",
        "profiles",
        "academic_years",
        "institutions",
    ):
        op.drop_table(table)
    for name in ENUMS:
        op.execute(f"DROP TYPE IF EXISTS {name}")
