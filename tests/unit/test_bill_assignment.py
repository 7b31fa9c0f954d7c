"""Unit tests for BillAssignmentService: planning is pure, assign() runs against a mocked session."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import BackendCallFailed, ValidationRejected
from schoolpay.models.billing import Bill
from schoolpay.models.enums import AssignmentOutcome, AssignmentTarget, PaymentStatus
from schoolpay.schemas.billing import BillAssignmentRequest
from schoolpay.services.bill_assignment_service import BillAssignmentService

SERVICE = "schoolpay.services.bill_assignment_service.BillAssignmentService"


def _row(student_id, due_date, status=PaymentStatus.PENDING):
    return SimpleNamespace(id=uuid4(), student_id=student_id, due_date=due_date, status=status)


# ---------------------------------------------------------------------------
# target_months
# ---------------------------------------------------------------------------

def test_target_months_single():
    months = BillAssignmentService.target_months(date(2024, 7, 20), False, 12)
    assert months == [date(2024, 7, 1)]


def test_target_months_repeat_is_clamped():
    months = BillAssignmentService.target_months(date(2024, 7, 1), True, 99, max_months=24)
    assert len(months) == 24
    assert months[-1] == date(2026, 6, 1)

    assert BillAssignmentService.target_months(date(2024, 7, 1), True, 0) == [date(2024, 7, 1)]


# ---------------------------------------------------------------------------
# plan
# ---------------------------------------------------------------------------

def test_plan_inserts_every_missing_pair():
    bill_id = uuid4()
    students = [uuid4(), uuid4()]
    months = [date(2024, 7, 1), date(2024, 8, 1), date(2024, 9, 1)]

    plan = BillAssignmentService.plan(bill_id, Decimal("150000"), students, months, [], False)

    assert len(plan.inserts) == 6
    assert plan.updates == []
    assert {(r["student_id"], r["due_date"]) for r in plan.inserts} == {
        (s, m) for s in students for m in months
    }
    assert all(r["status"] == PaymentStatus.PENDING for r in plan.inserts)
    assert all(r["bill_id"] == bill_id for r in plan.inserts)


def test_plan_rerun_without_overwrite_is_noop():
    student = uuid4()
    months = [date(2024, 7, 1), date(2024, 8, 1)]
    existing = [_row(student, date(2024, 7, 10)), _row(student, date(2024, 8, 1))]

    plan = BillAssignmentService.plan(uuid4(), Decimal("100"), [student], months, existing, False)

    assert plan.is_empty
    assert plan.skipped == 2


def test_plan_matches_existing_by_month_not_day():
    student = uuid4()
    existing = [_row(student, date(2024, 7, 25))]

    plan = BillAssignmentService.plan(
        uuid4(), Decimal("100"), [student], [date(2024, 7, 1)], existing, False
    )

    assert plan.inserts == []
    assert plan.skipped == 1


def test_plan_overwrite_updates_unpaid_rows():
    student = uuid4()
    row = _row(student, date(2024, 7, 25), PaymentStatus.OVERDUE)

    plan = BillAssignmentService.plan(
        uuid4(), Decimal("175000"), [student], [date(2024, 7, 1)], [row], True
    )

    assert plan.inserts == []
    assert plan.updates == [
        (row.id, {"amount": Decimal("175000"), "due_date": date(2024, 7, 1), "status": PaymentStatus.PENDING})
    ]


def test_plan_overwrite_never_touches_settled_rows():
    paid_student, cancelled_student = uuid4(), uuid4()
    month = date(2024, 7, 1)
    existing = [
        _row(paid_student, month, PaymentStatus.PAID),
        _row(cancelled_student, month, PaymentStatus.CANCELLED),
    ]

    plan = BillAssignmentService.plan(
        uuid4(), Decimal("100"), [paid_student, cancelled_student], [month], existing, True
    )

    assert plan.is_empty
    assert plan.protected == 2


def test_plan_first_duplicate_row_wins():
    student = uuid4()
    first = _row(student, date(2024, 7, 1))
    second = _row(student, date(2024, 7, 15))

    plan = BillAssignmentService.plan(
        uuid4(), Decimal("100"), [student], [date(2024, 7, 1)], [first, second], True
    )

    assert [row_id for row_id, _ in plan.updates] == [first.id]


# ---------------------------------------------------------------------------
# assign
# ---------------------------------------------------------------------------

def _bill(amount="150000"):
    return Bill(id=uuid4(), code="SPP", name="SPP Bulanan", amount=Decimal(amount), category="SPP")


@pytest.mark.asyncio
async def test_assign_rejects_non_positive_amount():
    db = AsyncMock(spec=AsyncSession)
    request = BillAssignmentRequest(start_date=date(2024, 7, 1))

    with pytest.raises(ValidationRejected):
        await BillAssignmentService.assign(db, _bill("0"), request)
    assert not db.execute.called


@pytest.mark.asyncio
async def test_assign_no_students():
    db = AsyncMock(spec=AsyncSession)
    request = BillAssignmentRequest(target=AssignmentTarget.CLASS, class_id=uuid4(), start_date=date(2024, 7, 1))

    with patch(f"{SERVICE}.resolve_student_ids", new_callable=AsyncMock) as mock_students:
        mock_students.return_value = []
        result = await BillAssignmentService.assign(db, _bill(), request)

    assert result.outcome == AssignmentOutcome.NO_STUDENTS
    assert result.affected == 0
    assert not db.commit.called


@pytest.mark.asyncio
async def test_assign_nothing_to_do_when_all_exist():
    db = AsyncMock(spec=AsyncSession)
    bill = _bill()
    student = uuid4()
    request = BillAssignmentRequest(start_date=date(2024, 7, 9))

    with patch(f"{SERVICE}.resolve_student_ids", new_callable=AsyncMock) as mock_students, \
            patch(f"{SERVICE}.fetch_existing", new_callable=AsyncMock) as mock_existing, \
            patch(f"{SERVICE}.insert_batches", new_callable=AsyncMock) as mock_insert:
        mock_students.return_value = [student]
        mock_existing.return_value = [_row(student, date(2024, 7, 1))]
        result = await BillAssignmentService.assign(db, bill, request)

    assert result.outcome == AssignmentOutcome.NOTHING_TO_DO
    assert result.skipped == 1
    assert not mock_insert.called
    assert not db.commit.called


@pytest.mark.asyncio
async def test_assign_completed_commits_once():
    db = AsyncMock(spec=AsyncSession)
    bill = _bill()
    students = [uuid4(), uuid4(), uuid4()]
    request = BillAssignmentRequest(start_date=date(2024, 7, 15), repeat_monthly=True, months_count=12)

    with patch(f"{SERVICE}.resolve_student_ids", new_callable=AsyncMock) as mock_students, \
            patch(f"{SERVICE}.fetch_existing", new_callable=AsyncMock) as mock_existing, \
            patch(f"{SERVICE}.insert_batches", new_callable=AsyncMock) as mock_insert:
        mock_students.return_value = students
        mock_existing.return_value = []
        mock_insert.return_value = 36
        result = await BillAssignmentService.assign(db, bill, request, batch_size=10)

    assert result.outcome == AssignmentOutcome.COMPLETED
    assert result.inserted == 36
    assert result.student_count == 3
    assert result.months[0] == date(2024, 7, 1)
    assert result.months[-1] == date(2025, 6, 1)
    rows, batch_size = mock_insert.call_args.args[1:]
    assert len(rows) == 36
    assert batch_size == 10
    first_month, last_month = mock_existing.call_args.args[3:]
    assert (first_month, last_month) == (date(2024, 7, 1), date(2025, 6, 1))
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_assign_rolls_back_whole_run_on_error():
    db = AsyncMock(spec=AsyncSession)
    request = BillAssignmentRequest(start_date=date(2024, 7, 1), repeat_monthly=True, months_count=3)

    with patch(f"{SERVICE}.resolve_student_ids", new_callable=AsyncMock) as mock_students, \
            patch(f"{SERVICE}.fetch_existing", new_callable=AsyncMock) as mock_existing, \
            patch(f"{SERVICE}.insert_batches", new_callable=AsyncMock) as mock_insert:
        mock_students.return_value = [uuid4()]
        mock_existing.return_value = []
        mock_insert.side_effect = OperationalError("INSERT", {}, Exception("connection reset"))

        with pytest.raises(BackendCallFailed):
            await BillAssignmentService.assign(db, _bill(), request)

    db.rollback.assert_awaited_once()
    assert not db.commit.called


# ---------------------------------------------------------------------------
# statement helpers
# ---------------------------------------------------------------------------

def _compiled(stmt):
    return stmt.compile(dialect=postgresql.dialect())


def _returning(count):
    result = MagicMock()
    result.all.return_value = [(uuid4(),) for _ in range(count)]
    return result


def _insert_rows(count):
    bill_id = uuid4()
    return [
        {
            "student_id": uuid4(),
            "bill_id": bill_id,
            "amount": Decimal("150000"),
            "due_date": date(2024, 7, 1),
            "status": PaymentStatus.PENDING,
        }
        for _ in range(count)
    ]


@pytest.mark.asyncio
async def test_insert_batches_splits_rows_by_batch_size():
    db = AsyncMock(spec=AsyncSession)
    db.execute.side_effect = [_returning(500), _returning(500), _returning(201)]

    inserted = await BillAssignmentService.insert_batches(db, _insert_rows(1201), 500)

    assert inserted == 1201
    assert db.execute.await_count == 3
    batch_sizes = []
    for call in db.execute.await_args_list:
        compiled = _compiled(call.args[0])
        sql = str(compiled)
        assert sql.startswith("INSERT INTO student_bills")
        assert "ON CONFLICT ON CONSTRAINT uq_student_bills_student_bill_due DO NOTHING" in sql
        assert "RETURNING student_bills.id" in sql
        batch_sizes.append(sum(1 for key in compiled.params if key.startswith("student_id")))
    assert batch_sizes == [500, 500, 201]


@pytest.mark.asyncio
async def test_insert_batches_counts_only_returned_rows():
    db = AsyncMock(spec=AsyncSession)
    # Two keys were written by a concurrent run between the read and the insert
    db.execute.return_value = _returning(3)

    inserted = await BillAssignmentService.insert_batches(db, _insert_rows(5), 500)

    assert inserted == 3
    db.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_apply_updates_issues_one_statement_per_row():
    db = AsyncMock(spec=AsyncSession)
    updates = [
        (uuid4(), {"amount": Decimal("175000"), "due_date": date(2024, 7, 1), "status": PaymentStatus.PENDING})
        for _ in range(3)
    ]

    updated = await BillAssignmentService.apply_updates(db, updates)

    assert updated == 3
    assert db.execute.await_count == 3
    for call, (row_id, _) in zip(db.execute.await_args_list, updates):
        compiled = _compiled(call.args[0])
        assert str(compiled).startswith("UPDATE student_bills SET")
        assert "WHERE student_bills.id = " in str(compiled)
        assert row_id in compiled.params.values()


@pytest.mark.asyncio
async def test_fetch_existing_scopes_by_bill_students_and_month_range():
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = _rows_result([])
    bill_id = uuid4()

    await BillAssignmentService.fetch_existing(db, bill_id, [uuid4(), uuid4()], date(2024, 7, 1), date(2024, 9, 1))

    db.execute.assert_awaited_once()
    compiled = _compiled(db.execute.await_args.args[0])
    sql = str(compiled)
    assert "student_bills.bill_id = " in sql
    assert "student_bills.student_id IN" in sql
    params = compiled.params
    assert bill_id in params.values()
    assert date(2024, 7, 1) in params.values()
    # Upper bound is exclusive: the month after the last target month
    assert date(2024, 10, 1) in params.values()


def _rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result
