"""Unit tests for login rate limiting, inactivity timers and receipt numbers."""

import asyncio
import re

import pytest

from schoolpay.config import Settings
from schoolpay.core.security import (
    LoginAttemptPolicy,
    SecurityPolicy,
    SessionTimeoutPolicy,
    generate_receipt_number,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_login_attempts_block_after_max():
    policy = LoginAttemptPolicy(max_attempts=3, window_seconds=60, clock=FakeClock())
    assert [policy.check("kasir@sekolah.sch.id") for _ in range(4)] == [True, True, True, False]
    assert policy.remaining("kasir@sekolah.sch.id") == 0


def test_login_attempts_are_per_identifier():
    policy = LoginAttemptPolicy(max_attempts=1, window_seconds=60, clock=FakeClock())
    assert policy.check("a@sekolah.sch.id")
    assert not policy.check("a@sekolah.sch.id")
    assert policy.check("b@sekolah.sch.id")


def test_login_attempts_window_resets():
    clock = FakeClock()
    policy = LoginAttemptPolicy(max_attempts=2, window_seconds=60, clock=clock)
    policy.check("x")
    policy.check("x")
    assert not policy.check("x")

    clock.now += 61
    assert policy.check("x")
    assert policy.remaining("x") == 1


def test_login_attempts_clear_on_success():
    policy = LoginAttemptPolicy(max_attempts=2, window_seconds=60, clock=FakeClock())
    policy.check("x")
    policy.check("x")
    policy.clear("x")
    assert policy.check("x")


def test_security_policy_from_settings_uses_milliseconds():
    config = Settings(MAX_LOGIN_ATTEMPTS=7, RATE_LIMIT_WINDOW=30000, SESSION_TIMEOUT=900000)
    policy = SecurityPolicy.from_settings(config)
    assert policy.login_attempts.max_attempts == 7
    assert policy.login_attempts.window_seconds == 30.0
    assert policy.session_timeouts.timeout_seconds == 900.0


@pytest.mark.asyncio
async def test_session_timeout_fires_once():
    expired = []
    timeouts = SessionTimeoutPolicy(timeout_seconds=0.01)
    timeouts.arm("user-1", expired.append)
    assert timeouts.is_armed("user-1")

    await asyncio.sleep(0.05)

    assert expired == ["user-1"]
    assert not timeouts.is_armed("user-1")


@pytest.mark.asyncio
async def test_session_timeout_rearm_pushes_deadline():
    expired = []
    timeouts = SessionTimeoutPolicy(timeout_seconds=0.2)
    timeouts.arm("user-1", expired.append)
    await asyncio.sleep(0.12)
    timeouts.arm("user-1", expired.append)
    await asyncio.sleep(0.12)

    assert expired == []
    timeouts.disarm_all()


@pytest.mark.asyncio
async def test_session_timeout_disarm():
    expired = []
    timeouts = SessionTimeoutPolicy(timeout_seconds=0.01)
    timeouts.arm("user-1", expired.append)
    timeouts.disarm("user-1")
    await asyncio.sleep(0.03)
    assert expired == []


def test_receipt_number_format():
    receipt = generate_receipt_number()
    assert re.fullmatch(r"RCP-\d{8}-[A-Z2-9]{6}", receipt)
    assert not set(receipt.split("-")[-1]) & set("O0I1")
