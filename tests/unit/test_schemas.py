"""Unit tests for request/response schemas."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from schoolpay.models.enums import AssignmentOutcome, AssignmentTarget
from schoolpay.schemas.auth import LoginRequest, SessionState
from schoolpay.schemas.billing import (
    BillAssignmentRequest,
    BillAssignmentResult,
    BillCreate,
    MonthlyBillSave,
)
from schoolpay.schemas.responses import PaginationMeta


def test_assignment_request_defaults():
    request = BillAssignmentRequest(start_date=date(2024, 7, 1))
    assert request.target == AssignmentTarget.ALL
    assert request.repeat_monthly is False
    assert request.overwrite_existing is False


def test_assignment_request_class_target_needs_class_id():
    with pytest.raises(ValidationError):
        BillAssignmentRequest(target=AssignmentTarget.CLASS, start_date=date(2024, 7, 1))
    request = BillAssignmentRequest(target="class", class_id=uuid4(), start_date=date(2024, 7, 1))
    assert request.target == AssignmentTarget.CLASS


def test_assignment_request_accepts_out_of_range_months():
    request = BillAssignmentRequest(start_date=date(2024, 7, 1), repeat_monthly=True, months_count=60)
    assert request.months_count == 60


def test_assignment_result_affected():
    result = BillAssignmentResult(outcome=AssignmentOutcome.COMPLETED, inserted=10, updated=4, skipped=3)
    assert result.affected == 14
    assert result.model_dump()["affected"] == 14


def test_bill_amount_must_be_positive():
    with pytest.raises(ValidationError):
        BillCreate(code="SPP", name="SPP Bulanan", amount=Decimal("0"), category="SPP")


def test_monthly_save_needs_months():
    with pytest.raises(ValidationError):
        MonthlyBillSave(months=[])


def test_login_email_is_normalized():
    login = LoginRequest(email="Kasir@Sekolah.SCH.id", password="rahasia123")
    assert login.email == "kasir@sekolah.sch.id"


def test_session_state_defaults_to_anonymous():
    state = SessionState()
    assert state.user is None
    assert not state.is_authenticated
    assert not state.backend_unreachable


def test_pagination_meta_build():
    meta = PaginationMeta.build(page=2, page_size=50, total=120)
    assert meta.total_pages == 3
    assert PaginationMeta.build(page=1, page_size=50, total=0).total_pages == 0
