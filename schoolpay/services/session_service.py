"""Session Bootstrap - resolves the caller behind a bearer token"""

import asyncio
from typing import Callable, Dict, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.config import Settings, settings
from schoolpay.core.exceptions import AuthRejected, AuthUnavailable
from schoolpay.core.logging import get_logger
from schoolpay.core.security import SecurityPolicy, log_security_event
from schoolpay.models.enums import AuthEvent, UserRole
from schoolpay.models.user import Profile
from schoolpay.schemas.auth import AuthIdentity, CurrentUser, SessionState
from schoolpay.services.auth_client import RemoteAuthClient
from schoolpay.services.profile_service import ProfileService

logger = get_logger(__name__)


class SessionBootstrap:
    """
    Turns an access token into a SessionState.

    Owned by the application lifespan. Holds the per-identity cache of
    resolved users, the locks that let concurrent requests share one
    profile lookup, and the set of identities whose session expired from
    inactivity.
    """

    def __init__(
        self,
        auth_client: RemoteAuthClient,
        session_factory: Callable[[], AsyncSession],
        security: SecurityPolicy,
        config: Settings = settings,
    ):
        self.auth = auth_client
        self.security = security
        self._session_factory = session_factory
        self.session_check_timeout = config.SESSION_CHECK_TIMEOUT_SECONDS
        self.profile_lookup_timeout = config.PROFILE_LOOKUP_TIMEOUT_SECONDS
        # Known administrative addresses, matched exactly; every other fallback identity is a cashier
        self.fallback_roles = {
            config.FALLBACK_SUPER_ADMIN_EMAIL: UserRole.SUPER_ADMIN,
            config.FALLBACK_CASHIER_EMAIL: UserRole.CASHIER,
        }

        self._resolved: Dict[str, CurrentUser] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._expired: Set[str] = set()

    async def resolve(self, access_token: Optional[str]) -> SessionState:
        """Never raises: every failure degrades to an anonymous state."""
        if not access_token:
            return SessionState()
        try:
            return await asyncio.wait_for(self._resolve(access_token), timeout=self.session_check_timeout)
        except asyncio.TimeoutError:
            logger.warning("Session check timed out", extra={"timeout": self.session_check_timeout})
            return SessionState()

    async def _resolve(self, access_token: str) -> SessionState:
        try:
            identity = await self.auth.get_user(access_token)
        except AuthUnavailable:
            return SessionState(backend_unreachable=True)
        except AuthRejected:
            return SessionState()

        if identity.id in self._expired:
            return SessionState(session_expired=True)

        user = await self.load_user(identity)
        self._arm(user)
        return SessionState(user=user, is_authenticated=True)

    async def load_user(self, identity: AuthIdentity) -> CurrentUser:
        """Cached per identity; concurrent callers for one identity wait on a single lookup."""
        cached = self._resolved.get(identity.id)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(identity.id, asyncio.Lock())
        try:
            async with lock:
                cached = self._resolved.get(identity.id)
                if cached is not None:
                    return cached
                user, cacheable = await self._lookup(identity)
                if cacheable:
                    self._resolved[identity.id] = user
                return user
        finally:
            # Waiters keep their own reference; later callers hit the cache or start a new lock
            if not lock.locked() and self._locks.get(identity.id) is lock:
                del self._locks[identity.id]

    async def _lookup(self, identity: AuthIdentity) -> Tuple[CurrentUser, bool]:
        """Returns the user and whether the answer is stable enough to cache."""
        try:
            profile = await asyncio.wait_for(
                self._fetch_profile(identity.id), timeout=self.profile_lookup_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Profile lookup timed out", extra={"identity_id": identity.id})
            return self.fallback_user(identity), False
        except (SQLAlchemyError, OSError) as exc:
            logger.warning(
                "Profile lookup failed, using fallback identity",
                extra={"identity_id": identity.id, "error": str(exc)},
            )
            return self.fallback_user(identity), False

        if profile is None or not profile.is_active:
            return self.fallback_user(identity), True

        return CurrentUser(
            id=str(profile.id),
            identity_id=identity.id,
            email=profile.email,
            name=profile.name,
            role=profile.role,
        ), True

    async def _fetch_profile(self, identity_id: str) -> Optional[Profile]:
        async with self._session_factory() as db:
            return await ProfileService.get_by_user_id(db, identity_id)

    def fallback_user(self, identity: AuthIdentity) -> CurrentUser:
        """Deterministic identity used when no usable profile exists."""
        email = identity.email or ""
        name = identity.user_metadata.get("name") or email.split("@")[0] or "User"

        return CurrentUser(
            id=identity.id,
            identity_id=identity.id,
            email=email,
            name=name,
            role=self.fallback_roles.get(email, UserRole.CASHIER),
            is_fallback=True,
        )

    async def handle_auth_event(
        self, event: AuthEvent, identity: Optional[AuthIdentity]
    ) -> Optional[CurrentUser]:
        """
        SIGNED_IN reloads the profile and arms the timer for profile-backed users;
        SIGNED_OUT clears everything. A profile load that outlasts the session
        check yields the fallback identity.
        """
        if identity is None:
            return None

        if event == AuthEvent.SIGNED_IN:
            self._expired.discard(identity.id)
            self.invalidate(identity.id)
            try:
                user = await asyncio.wait_for(self.load_user(identity), timeout=self.session_check_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Profile load after sign-in timed out, using fallback identity",
                    extra={"identity_id": identity.id},
                )
                user = self.fallback_user(identity)
            self._arm(user)
            return user

        self.security.session_timeouts.disarm(identity.id)
        self.invalidate(identity.id)
        return None

    def _arm(self, user: CurrentUser) -> None:
        """Only identities backed by an active profile get an inactivity timer."""
        if not user.is_fallback:
            self.security.session_timeouts.arm(user.identity_id, self._expire)

    def invalidate(self, identity_id: str) -> None:
        self._resolved.pop(identity_id, None)

    def is_expired(self, identity_id: str) -> bool:
        return identity_id in self._expired

    def _expire(self, identity_id: str) -> None:
        self._expired.add(identity_id)
        self.invalidate(identity_id)
        log_security_event("SESSION_TIMEOUT", user_id=identity_id)

    def close(self) -> None:
        self._resolved.clear()
        self._locks.clear()
        self._expired.clear()
