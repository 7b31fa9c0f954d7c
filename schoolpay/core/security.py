"""Security and Authentication Utilities"""

import asyncio
import secrets
import string
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from jose import JWTError, jwt

from schoolpay.config import Settings, settings
from schoolpay.core.logging import get_logger
from schoolpay.utils.time import get_utc_now

logger = get_logger(__name__)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and validate an access token issued by the auth service.

    Args:
        token: Bearer token from the Authorization header

    Returns:
        Decoded claims, or None if the signature, audience or expiry is invalid
    """
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError:
        return None


def log_security_event(event: str, **details: Any) -> None:
    """Audit log for auth-related events (LOGIN_SUCCESS, SESSION_TIMEOUT, ...)."""
    logger.warning(
        "Security event",
        extra={"event": event, "details": details, "timestamp": get_utc_now().isoformat()},
    )


def generate_receipt_number(length: int = 6) -> str:
    """
    Generate a payment receipt number such as RCP-20240115-7K3QZP.

    Similar-looking characters are excluded so the code can be read aloud at
    the cashier's desk.
    """
    alphabet = string.ascii_uppercase + string.digits
    alphabet = alphabet.replace('O', '').replace('0', '').replace('I', '').replace('1', '')
    code = ''.join(secrets.choice(alphabet) for _ in range(length))
    return f"RCP-{get_utc_now():%Y%m%d}-{code}"


@dataclass
class LoginAttempt:
    timestamp: float
    count: int


class LoginAttemptPolicy:
    """Fixed-window login rate limiting keyed by identifier (normally the email)."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: Dict[str, LoginAttempt] = {}

    def check(self, identifier: str) -> bool:
        """Record an attempt and return False if the identifier is over its limit."""
        now = self._clock()
        attempt = self._attempts.get(identifier)

        if attempt is None or now - attempt.timestamp > self.window_seconds:
            self._attempts[identifier] = LoginAttempt(timestamp=now, count=1)
            return True

        if attempt.count >= self.max_attempts:
            return False

        attempt.count += 1
        return True

    def clear(self, identifier: str) -> None:
        self._attempts.pop(identifier, None)

    def remaining(self, identifier: str) -> int:
        attempt = self._attempts.get(identifier)
        if attempt is None or self._clock() - attempt.timestamp > self.window_seconds:
            return self.max_attempts
        return max(0, self.max_attempts - attempt.count)

    def reset(self) -> None:
        self._attempts.clear()


class SessionTimeoutPolicy:
    """
    Per-identity inactivity timers.

    Arming an identity that already has a timer replaces it, so every
    authenticated request pushes the deadline out again.
    """

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def arm(self, identity_id: str, on_expire: Callable[[str], None]) -> asyncio.TimerHandle:
        self.disarm(identity_id)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(self.timeout_seconds, self._fire, identity_id, on_expire)
        self._handles[identity_id] = handle
        return handle

    def _fire(self, identity_id: str, on_expire: Callable[[str], None]) -> None:
        self._handles.pop(identity_id, None)
        on_expire(identity_id)

    def disarm(self, identity_id: str) -> None:
        handle = self._handles.pop(identity_id, None)
        if handle is not None:
            handle.cancel()

    def is_armed(self, identity_id: str) -> bool:
        return identity_id in self._handles

    def disarm_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()


class SecurityPolicy:
    """
    Login and session policy owned by the application lifespan.

    Created once at startup, stored on ``app.state.security`` and closed on
    shutdown.
    """

    def __init__(self, login_attempts: LoginAttemptPolicy, session_timeouts: SessionTimeoutPolicy):
        self.login_attempts = login_attempts
        self.session_timeouts = session_timeouts

    @classmethod
    def from_settings(cls, config: Settings) -> "SecurityPolicy":
        return cls(
            login_attempts=LoginAttemptPolicy(
                max_attempts=config.MAX_LOGIN_ATTEMPTS,
                window_seconds=config.rate_limit_window_seconds,
            ),
            session_timeouts=SessionTimeoutPolicy(config.session_timeout_seconds),
        )

    def close(self) -> None:
        self.session_timeouts.disarm_all()
        self.login_attempts.reset()
