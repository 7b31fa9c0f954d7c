"""Unit tests for RemoteAuthClient against an in-memory httpx transport."""

import httpx
import pytest
from unittest.mock import patch

from schoolpay.core.exceptions import AuthRejected, AuthUnavailable
from schoolpay.services.auth_client import RemoteAuthClient

USER = {"id": "0b8d6c1e-identity", "email": "kasir@sekolah.sch.id", "user_metadata": {"name": "Kasir"}}


def _client(handler) -> RemoteAuthClient:
    return RemoteAuthClient(
        base_url="http://auth.test/auth/v1",
        api_key="anon-key",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_user_sends_bearer_and_apikey():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["apikey"] = request.headers.get("apikey")
        return httpx.Response(200, json=USER)

    client = _client(handler)
    identity = await client.get_user("access-token")
    await client.aclose()

    assert identity.id == USER["id"]
    assert identity.user_metadata["name"] == "Kasir"
    assert seen == {"path": "/auth/v1/user", "auth": "Bearer access-token", "apikey": "anon-key"}


@pytest.mark.asyncio
async def test_sign_in_uses_password_grant():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["grant_type"] == "password"
        return httpx.Response(200, json={
            "access_token": "at",
            "refresh_token": "rt",
            "expires_in": 3600,
            "token_type": "bearer",
            "user": USER,
        })

    client = _client(handler)
    session = await client.sign_in("kasir@sekolah.sch.id", "rahasia123")
    await client.aclose()

    assert session.access_token == "at"
    assert session.user.email == "kasir@sekolah.sch.id"


@pytest.mark.asyncio
async def test_4xx_is_rejected():
    client = _client(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
    with pytest.raises(AuthRejected):
        await client.sign_in("kasir@sekolah.sch.id", "salah-sandi")
    await client.aclose()


@pytest.mark.asyncio
async def test_5xx_is_unavailable():
    client = _client(lambda request: httpx.Response(503))
    with pytest.raises(AuthUnavailable):
        await client.get_user("token")
    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_is_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(AuthUnavailable):
        await client.get_user("token")
    await client.aclose()


@pytest.mark.asyncio
async def test_local_verification_skips_network():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = RemoteAuthClient(
        base_url="http://auth.test", api_key="k", verify_locally=True, transport=httpx.MockTransport(handler)
    )
    claims = {"sub": "identity-1", "email": "admin@sekolah.sch.id", "user_metadata": {}}
    with patch("schoolpay.services.auth_client.decode_access_token", return_value=claims):
        identity = await client.get_user("jwt")
    with patch("schoolpay.services.auth_client.decode_access_token", return_value=None):
        with pytest.raises(AuthRejected):
            await client.get_user("expired-jwt")
    await client.aclose()

    assert identity.id == "identity-1"
