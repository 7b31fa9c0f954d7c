"""Remote Auth Client - thin httpx wrapper around the GoTrue-style auth API"""

from typing import Optional

import httpx

from schoolpay.config import Settings
from schoolpay.core.exceptions import AuthRejected, AuthUnavailable
from schoolpay.core.logging import get_logger
from schoolpay.core.security import decode_access_token
from schoolpay.schemas.auth import AuthIdentity, AuthSession

logger = get_logger(__name__)


class RemoteAuthClient:
    """
    Talks to the external auth service.

    Every call raises AuthRejected when the service answers with a 4xx and
    AuthUnavailable when it cannot be reached or answers with a 5xx.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        verify_locally: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.verify_locally = verify_locally
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"apikey": api_key},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "RemoteAuthClient":
        return cls(
            base_url=config.AUTH_URL,
            api_key=config.AUTH_API_KEY,
            timeout=config.AUTH_HTTP_TIMEOUT_SECONDS,
            verify_locally=bool(config.AUTH_JWT_SECRET),
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("Auth service unreachable", extra={"path": path, "error": str(exc)})
            raise AuthUnavailable("Auth service is unreachable") from exc

        if response.status_code >= 500:
            logger.warning(
                "Auth service error",
                extra={"path": path, "status_code": response.status_code},
            )
            raise AuthUnavailable("Auth service is unavailable", {"status_code": response.status_code})
        if response.status_code >= 400:
            raise AuthRejected("Authentication rejected", {"status_code": response.status_code})
        return response

    async def get_user(self, access_token: str) -> AuthIdentity:
        """Identity behind an access token."""
        if self.verify_locally:
            claims = decode_access_token(access_token)
            if not claims or not claims.get("sub"):
                raise AuthRejected("Invalid or expired token")
            return AuthIdentity(
                id=claims["sub"],
                email=claims.get("email"),
                user_metadata=claims.get("user_metadata") or {},
            )

        response = await self._request(
            "GET", "/user", headers={"Authorization": f"Bearer {access_token}"}
        )
        return AuthIdentity.model_validate(response.json())

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return AuthSession.model_validate(response.json())

    async def sign_out(self, access_token: str) -> None:
        await self._request(
            "POST", "/logout", headers={"Authorization": f"Bearer {access_token}"}
        )

    async def aclose(self) -> None:
        await self._client.aclose()
