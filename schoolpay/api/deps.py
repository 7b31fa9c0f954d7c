"""API Dependencies"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from schoolpay.database import get_db  # noqa: F401  re-exported for endpoints
from schoolpay.core.security import SecurityPolicy
from schoolpay.models.enums import UserRole
from schoolpay.schemas.auth import CurrentUser, SessionState
from schoolpay.services.auth_client import RemoteAuthClient
from schoolpay.services.session_service import SessionBootstrap

# Security scheme for bearer token; a missing header resolves to an anonymous session
security = HTTPBearer(auto_error=False)


def get_security_policy(request: Request) -> SecurityPolicy:
    return request.app.state.security


def get_auth_client(request: Request) -> RemoteAuthClient:
    return request.app.state.auth_client


def get_session_bootstrap(request: Request) -> SessionBootstrap:
    return request.app.state.session_bootstrap


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_session_state(
    token: Optional[str] = Depends(get_bearer_token),
    bootstrap: SessionBootstrap = Depends(get_session_bootstrap),
) -> SessionState:
    return await bootstrap.resolve(token)


async def get_current_user(
    state: SessionState = Depends(get_session_state),
) -> CurrentUser:
    """
    Get the authenticated caller.

    Raises:
        HTTPException: 503 if the auth service is unreachable, 401 if the
            session expired or the token is missing/invalid
    """
    if state.backend_unreachable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        )
    if state.session_expired:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not state.is_authenticated or state.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return state.user


def require_roles(*roles: UserRole):
    """Dependency factory admitting only the given roles."""

    async def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return checker


require_super_admin = require_roles(UserRole.SUPER_ADMIN)
require_admin = require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN)
require_cashier = require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.CASHIER)
require_staff = require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.CASHIER, UserRole.TEACHER)
