"""API tests with the session bootstrap and database replaced through dependency overrides."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import AsyncClient

from schoolpay.core.exceptions import AuthRejected, ResourceNotFound
from schoolpay.models.enums import AssignmentOutcome, AuthEvent, UserRole
from schoolpay.models.user import Profile
from schoolpay.schemas.auth import AuthIdentity, AuthSession, SessionState
from schoolpay.schemas.billing import BillAssignmentResult
from tests.conftest import signed_in

BILLS = "schoolpay.api.v1.endpoints.bills"


# ---------------------------------------------------------------------------
# Session and auth
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_session_without_token_is_anonymous(async_client: AsyncClient, api_base: str, app_state):
    resp = await async_client.get(f"{api_base}/auth/session")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["is_authenticated"] is False
    assert data["user"] is None


@pytest.mark.asyncio
async def test_session_reports_unreachable_backend(async_client: AsyncClient, api_base: str, app_state):
    app_state.state = SessionState(backend_unreachable=True)
    resp = await async_client.get(f"{api_base}/auth/session", headers={"Authorization": "Bearer t"})
    assert resp.status_code == 200
    assert resp.json()["data"]["backend_unreachable"] is True


@pytest.mark.asyncio
async def test_me_requires_token(async_client: AsyncClient, api_base: str, app_state):
    resp = await async_client.get(f"{api_base}/auth/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_when_auth_service_down(async_client: AsyncClient, api_base: str, app_state):
    app_state.state = SessionState(backend_unreachable=True)
    resp = await async_client.get(f"{api_base}/auth/me", headers={"Authorization": "Bearer t"})
    assert resp.status_code == 503


@pytest.mark.asyncio
async def test_me_after_inactivity(async_client: AsyncClient, api_base: str, app_state):
    app_state.state = SessionState(session_expired=True)
    resp = await async_client.get(f"{api_base}/auth/me", headers={"Authorization": "Bearer t"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Session expired"


@pytest.mark.asyncio
async def test_login_success(async_client: AsyncClient, api_base: str, app_state, auth_client):
    signed_in(app_state, UserRole.CASHIER)
    identity = AuthIdentity(id=app_state.state.user.identity_id, email="kasir@sekolah.sch.id")
    auth_client.sign_in.return_value = AuthSession(access_token="at", refresh_token="rt", user=identity)

    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": "kasir@sekolah.sch.id", "password": "rahasia123"},
    )

    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["access_token"] == "at"
    assert data["user"]["role"] == "cashier"
    assert app_state.events == [(AuthEvent.SIGNED_IN, identity)]


@pytest.mark.asyncio
async def test_login_rate_limited_after_failures(
    async_client: AsyncClient, api_base: str, app_state, auth_client
):
    auth_client.sign_in.side_effect = AuthRejected("invalid_grant")
    body = {"email": "kasir@sekolah.sch.id", "password": "salah-sandi"}

    codes = [
        (await async_client.post(f"{api_base}/auth/login", json=body)).status_code
        for _ in range(3)
    ]
    assert codes == [401, 401, 401]

    resp = await async_client.post(f"{api_base}/auth/login", json=body)
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "RATE_LIMITED"
    assert auth_client.sign_in.await_count == 3


@pytest.mark.asyncio
async def test_logout_survives_remote_failure(async_client: AsyncClient, api_base: str, app_state, auth_client):
    headers = signed_in(app_state, UserRole.ADMIN)
    auth_client.sign_out.side_effect = AuthRejected("token already revoked")

    resp = await async_client.post(f"{api_base}/auth/logout", headers=headers)

    assert resp.status_code == 200
    assert app_state.events[-1][0] == AuthEvent.SIGNED_OUT


# ---------------------------------------------------------------------------
# Role gating
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cashier_cannot_create_bill(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.CASHIER)
    resp = await async_client.post(
        f"{api_base}/bills",
        headers=headers,
        json={"code": "SPP", "name": "SPP Bulanan", "amount": "150000", "category": "SPP"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_teacher_cannot_take_payments(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.TEACHER)
    resp = await async_client.post(
        f"{api_base}/payments", headers=headers, json={"student_bill_ids": [str(uuid4())]}
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_profiles_are_super_admin_only(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.ADMIN)
    resp = await async_client.get(f"{api_base}/profiles", headers=headers)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_assign_class_target_without_class_is_422(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.ADMIN)
    resp = await async_client.post(
        f"{api_base}/bills/{uuid4()}/assign",
        headers=headers,
        json={"target": "class", "start_date": "2024-07-01"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_assign_returns_outcome_message(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.ADMIN)
    result = BillAssignmentResult(
        outcome=AssignmentOutcome.COMPLETED,
        months=[date(2024, 7, 1)],
        student_count=30,
        inserted=30,
    )

    with patch(f"{BILLS}.BillService.get_bill", new_callable=AsyncMock), \
            patch(f"{BILLS}.BillAssignmentService.assign", new_callable=AsyncMock) as mock_assign:
        mock_assign.return_value = result
        resp = await async_client.post(
            f"{api_base}/bills/{uuid4()}/assign",
            headers=headers,
            json={"target": "all", "start_date": "2024-07-15", "repeat_monthly": False},
        )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["message"] == "Student bills generated"
    assert body["data"]["affected"] == 30
    request = mock_assign.call_args.args[2]
    assert request.start_date == date(2024, 7, 15)


@pytest.mark.asyncio
async def test_missing_bill_uses_error_envelope(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.ADMIN)
    with patch(f"{BILLS}.BillService.get_bill", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = ResourceNotFound("Bill not found")
        resp = await async_client.get(f"{api_base}/bills/{uuid4()}/monthly", headers=headers)

    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_profile_update_invalidates_cached_user(async_client: AsyncClient, api_base: str, app_state):
    headers = signed_in(app_state, UserRole.SUPER_ADMIN)
    profile = Profile(
        id=uuid4(),
        user_id="identity-42",
        email="guru@sekolah.sch.id",
        name="Pak Guru",
        role=UserRole.TEACHER,
        is_active=True,
        created_at=datetime.now(tz=timezone.utc),
    )

    with patch(
        "schoolpay.api.v1.endpoints.profiles.ProfileService.update_profile", new_callable=AsyncMock
    ) as mock_update:
        mock_update.return_value = profile
        resp = await async_client.put(
            f"{api_base}/profiles/{profile.id}", headers=headers, json={"role": "teacher"}
        )

    assert resp.status_code == 200, resp.text
    assert app_state.invalidated == ["identity-42"]
