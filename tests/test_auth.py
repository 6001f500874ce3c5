"""
============================================================================
FILE: test_auth.py
LOCATION: tests/test_auth.py
============================================================================

PURPOSE:
    Unit tests for API key checks, token verification and uid resolution.

KEY COMPONENTS:
    - verify_api_key: Optional shared key enforcement
    - verify_firebase_token: Mock and real-branch error mapping
    - get_current_uid: Bearer token -> uid

DEPENDENCIES:
    - External: pytest, fastapi, firebase_admin
    - Internal: gateway.auth

USAGE:
    pytest tests/test_auth.py -v
============================================================================
"""

import typing

import fastapi
from fastapi.security import HTTPAuthorizationCredentials
import pytest

import gateway.auth as auth_module


class FakeAuthClient:
    """Fake Firebase auth client."""

    def __init__(self, claims: typing.Optional[dict], error: typing.Optional[Exception]) -> None:
        self._claims = claims
        self._error = error

    def verify_id_token(self, token: str, clock_skew_seconds: int = 0) -> dict:
        if self._error:
            raise self._error
        return self._claims


def _set_real_firebase_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TESTING", "false")
    monkeypatch.setenv("USE_REAL_FIREBASE", "true")


def _set_mock_firebase_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TESTING", "true")
    monkeypatch.setenv("USE_REAL_FIREBASE", "false")


@pytest.mark.asyncio
async def test_api_key_not_required_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth_module.config, "GATEWAY_API_KEY", "")
    assert await auth_module.verify_api_key(None) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("provided", [None, "", "wrong"])
async def test_api_key_rejected(monkeypatch: pytest.MonkeyPatch, provided) -> None:
    monkeypatch.setattr(auth_module.config, "GATEWAY_API_KEY", "secret")
    with pytest.raises(fastapi.HTTPException) as exc:
        await auth_module.verify_api_key(provided)
    assert exc.value.status_code == fastapi.status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_api_key_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth_module.config, "GATEWAY_API_KEY", "secret")
    assert await auth_module.verify_api_key("secret") is None


@pytest.mark.asyncio
async def test_verify_mock_token(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_mock_firebase_env(monkeypatch)
    claims = await auth_module.verify_firebase_token("mock-token-user-42")
    assert claims["uid"] == "user-42"


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["invalid-token", "mock-token-"])
async def test_verify_mock_token_invalid(monkeypatch: pytest.MonkeyPatch, token: str) -> None:
    _set_mock_firebase_env(monkeypatch)
    with pytest.raises(fastapi.HTTPException) as exc:
        await auth_module.verify_firebase_token(token)
    assert exc.value.status_code == fastapi.status.HTTP_401_UNAUTHORIZED
    assert exc.value.detail == "Invalid mock token"


@pytest.mark.asyncio
async def test_verify_real_token_success(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_real_firebase_env(monkeypatch)
    client = FakeAuthClient({"uid": "user-1"}, None)
    monkeypatch.setattr(auth_module.config, "get_auth", lambda: client)
    claims = await auth_module.verify_firebase_token("real-token")
    assert claims["uid"] == "user-1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("exc_name", "detail_prefix"),
    [
        ("InvalidIdTokenError", "Invalid authentication token:"),
        ("ExpiredIdTokenError", "Authentication token has expired:"),
        ("RevokedIdTokenError", "Authentication token has been revoked:"),
    ],
)
async def test_verify_real_token_error_mapping(
    monkeypatch: pytest.MonkeyPatch,
    exc_name: str,
    detail_prefix: str,
) -> None:
    class FakeTokenError(Exception):
        """Fake token exception for auth mapping tests."""

    _set_real_firebase_env(monkeypatch)
    monkeypatch.setattr(auth_module.auth, exc_name, FakeTokenError)
    client = FakeAuthClient(None, FakeTokenError("bad-token"))
    monkeypatch.setattr(auth_module.config, "get_auth", lambda: client)

    with pytest.raises(fastapi.HTTPException) as exc:
        await auth_module.verify_firebase_token("real-token")

    assert exc.value.status_code == fastapi.status.HTTP_401_UNAUTHORIZED
    assert detail_prefix in exc.value.detail
    assert exc.value.headers == {"WWW-Authenticate": "Bearer"}


@pytest.mark.asyncio
async def test_verify_real_token_generic_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_real_firebase_env(monkeypatch)
    client = FakeAuthClient(None, Exception("boom"))
    monkeypatch.setattr(auth_module.config, "get_auth", lambda: client)

    with pytest.raises(fastapi.HTTPException) as exc:
        await auth_module.verify_firebase_token("real-token")

    assert exc.value.detail.startswith("Authentication failed:")


@pytest.mark.asyncio
async def test_get_current_uid(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_mock_firebase_env(monkeypatch)
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="mock-token-u7")
    assert await auth_module.get_current_uid(credentials, None) == "u7"


@pytest.mark.asyncio
async def test_get_current_uid_missing_credentials() -> None:
    with pytest.raises(fastapi.HTTPException) as exc:
        await auth_module.get_current_uid(None, None)
    assert exc.value.status_code == fastapi.status.HTTP_401_UNAUTHORIZED
    assert exc.value.detail == "Missing bearer token"


@pytest.mark.asyncio
async def test_get_current_uid_missing_claim(monkeypatch: pytest.MonkeyPatch) -> None:
    async def no_uid(token: str) -> dict:
        return {"email": "x@example.com"}

    monkeypatch.setattr(auth_module, "verify_firebase_token", no_uid)
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="anything")

    with pytest.raises(fastapi.HTTPException) as exc:
        await auth_module.get_current_uid(credentials, None)
    assert exc.value.detail == "Token missing uid claim"
