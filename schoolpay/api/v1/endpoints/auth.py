from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from schoolpay.api import deps
from schoolpay.core.exceptions import AuthRejected, AuthUnavailable, RateLimited
from schoolpay.core.logging import get_logger
from schoolpay.core.security import SecurityPolicy, log_security_event
from schoolpay.models.enums import AuthEvent
from schoolpay.schemas.auth import AuthIdentity, CurrentUser, LoginRequest, LoginResponse, SessionState
from schoolpay.schemas.responses import SuccessResponse
from schoolpay.services.auth_client import RemoteAuthClient
from schoolpay.services.session_service import SessionBootstrap

router = APIRouter()
logger = get_logger(__name__)


@router.get("/session", response_model=SuccessResponse[SessionState])
async def get_session(
    state: SessionState = Depends(deps.get_session_state),
) -> Any:
    """
    Resolve the current session.
    Never fails: an unknown, expired or unverifiable token yields an anonymous state.
    """
    return SuccessResponse(data=state)


@router.post("/login", response_model=SuccessResponse[LoginResponse])
async def login(
    login_data: LoginRequest,
    security_policy: SecurityPolicy = Depends(deps.get_security_policy),
    auth_client: RemoteAuthClient = Depends(deps.get_auth_client),
    bootstrap: SessionBootstrap = Depends(deps.get_session_bootstrap),
) -> Any:
    """
    Sign in with email and password.
    Attempts are rate limited per email.
    """
    if not security_policy.login_attempts.check(login_data.email):
        log_security_event("RATE_LIMIT_EXCEEDED", email=login_data.email)
        raise RateLimited("Too many login attempts. Please try again later.")

    try:
        session = await auth_client.sign_in(login_data.email, login_data.password)
    except AuthRejected:
        log_security_event(
            "LOGIN_FAILED",
            email=login_data.email,
            remaining=security_policy.login_attempts.remaining(login_data.email),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    security_policy.login_attempts.clear(login_data.email)
    user = await bootstrap.handle_auth_event(AuthEvent.SIGNED_IN, session.user)
    log_security_event("LOGIN_SUCCESS", user_id=session.user.id, email=login_data.email)

    return SuccessResponse(
        data=LoginResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            expires_in=session.expires_in,
            user=user,
        ),
        message="Login successful",
    )


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    token: Optional[str] = Depends(deps.get_bearer_token),
    current_user: CurrentUser = Depends(deps.get_current_user),
    auth_client: RemoteAuthClient = Depends(deps.get_auth_client),
    bootstrap: SessionBootstrap = Depends(deps.get_session_bootstrap),
) -> Any:
    """
    Sign out: stop the inactivity timer, drop the cached user and revoke the
    remote session. Local state is cleared even if the auth service fails.
    """
    identity = AuthIdentity(id=current_user.identity_id, email=current_user.email)
    await bootstrap.handle_auth_event(AuthEvent.SIGNED_OUT, identity)

    try:
        await auth_client.sign_out(token)
    except (AuthRejected, AuthUnavailable) as exc:
        logger.warning(
            "Remote sign-out failed",
            extra={"user_id": current_user.identity_id, "error": exc.message},
        )

    log_security_event("LOGOUT", user_id=current_user.identity_id)
    return SuccessResponse(message="Logged out")


@router.get("/me", response_model=SuccessResponse[CurrentUser])
async def read_me(
    current_user: CurrentUser = Depends(deps.get_current_user),
) -> Any:
    return SuccessResponse(data=current_user)
