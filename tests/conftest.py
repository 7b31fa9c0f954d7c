"""Shared pytest fixtures for unit and integration tests."""

import os
import uuid
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv

# Load .env so DATABASE_URL / AUTH_* are available for the requires_db check
load_dotenv()
os.environ.setdefault("ENVIRONMENT", "test")
# The slowapi default limit would otherwise throttle the suite itself
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.api import deps
from schoolpay.config import settings
from schoolpay.core.security import LoginAttemptPolicy, SecurityPolicy, SessionTimeoutPolicy
from schoolpay.main import app
from schoolpay.models.enums import UserRole
from schoolpay.schemas.auth import CurrentUser, SessionState

# Integration tests talk to a real PostgreSQL and a real (or local-JWT) auth service
requires_db = pytest.mark.skipif(
    not os.getenv("DATABASE_URL") or not os.getenv("TEST_ACCESS_TOKEN"),
    reason="DATABASE_URL and TEST_ACCESS_TOKEN must be set",
)


@pytest.fixture
def api_base() -> str:
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(api_base: str):
    """In-process client. ASGITransport does not run the lifespan; see app_state."""
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()


@pytest.fixture
def unique_suffix() -> str:
    return str(uuid.uuid4())[:8]


def make_user(role: UserRole = UserRole.ADMIN, **overrides) -> CurrentUser:
    identity_id = overrides.pop("identity_id", str(uuid.uuid4()))
    values = dict(
        id=str(uuid.uuid4()),
        identity_id=identity_id,
        email=f"{role.value}@sekolah.sch.id",
        name=role.value.title(),
        role=role,
    )
    values.update(overrides)
    return CurrentUser(**values)


class FakeBootstrap:
    """Stands in for SessionBootstrap: every token resolves to ``state``."""

    def __init__(self, state: Optional[SessionState] = None):
        self.state = state or SessionState()
        self.events = []
        self.invalidated = []

    async def resolve(self, access_token: Optional[str]) -> SessionState:
        if not access_token:
            return SessionState()
        return self.state

    async def handle_auth_event(self, event, identity):
        self.events.append((event, identity))
        return self.state.user

    def invalidate(self, identity_id: str) -> None:
        self.invalidated.append(identity_id)


@pytest.fixture
def db_session():
    """AsyncSession double handed to endpoints through get_db."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def security_policy() -> SecurityPolicy:
    return SecurityPolicy(
        login_attempts=LoginAttemptPolicy(max_attempts=3, window_seconds=60),
        session_timeouts=SessionTimeoutPolicy(timeout_seconds=3600),
    )


@pytest.fixture
def auth_client():
    return AsyncMock()


@pytest.fixture
def bootstrap() -> FakeBootstrap:
    return FakeBootstrap()


@pytest.fixture
def app_state(db_session, security_policy, auth_client, bootstrap):
    """
    Wire the lifespan-owned objects through dependency overrides.

    Tests set ``bootstrap.state`` to choose who is calling.
    """
    async def _get_db():
        yield db_session

    app.dependency_overrides[deps.get_db] = _get_db
    app.dependency_overrides[deps.get_security_policy] = lambda: security_policy
    app.dependency_overrides[deps.get_auth_client] = lambda: auth_client
    app.dependency_overrides[deps.get_session_bootstrap] = lambda: bootstrap
    yield bootstrap
    app.dependency_overrides.clear()
    security_policy.close()


def signed_in(bootstrap: FakeBootstrap, role: UserRole) -> dict:
    """Make ``bootstrap`` resolve to a user with ``role``; returns auth headers."""
    bootstrap.state = SessionState(user=make_user(role), is_authenticated=True)
    return {"Authorization": "Bearer test-token"}
