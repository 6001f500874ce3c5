"""
============================================================================
FILE: auth.py
LOCATION: gateway/auth.py
============================================================================

PURPOSE:
    Request authentication for the gated routes: an optional shared API key
    plus a Firebase ID token identifying the calling user.

ROLE IN PROJECT:
    Provides FastAPI dependencies. The uid resolved here is the subject of
    the per-user daily quota.

KEY COMPONENTS:
    - verify_api_key(): Check X-API-Key against GATEWAY_API_KEY when set
    - verify_firebase_token(): Verify a Firebase ID token, return claims
    - get_current_uid(): Dependency returning the authenticated uid

DEPENDENCIES:
    - External: firebase_admin.auth, fastapi
    - Internal: config.py

USAGE:
    from gateway.auth import get_current_uid

    @router.post("/contact")
    async def contact(uid: str = Depends(get_current_uid)):
        ...
============================================================================
"""

import hmac
import os
from typing import Optional

from firebase_admin import auth
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from gateway import config
from gateway.logging_config import get_logger


logger = get_logger("auth")

security = HTTPBearer(auto_error=False)
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Security(api_key_header)) -> None:
    """Reject the request unless X-API-Key matches GATEWAY_API_KEY.

    No key is required when GATEWAY_API_KEY is empty.
    """
    expected = config.GATEWAY_API_KEY
    if not expected:
        return
    if not api_key or not hmac.compare_digest(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token and return decoded claims.

    Args:
        token: The Firebase ID token (JWT)

    Returns:
        dict: Decoded token claims containing uid, email, etc.

    Raises:
        HTTPException: If token is invalid or expired
    """
    use_real_firebase = os.getenv("USE_REAL_FIREBASE", "false").lower() == "true"
    is_testing = os.getenv("TESTING", "false").lower() == "true"

    if is_testing and not use_real_firebase:
        return _verify_mock_token(token)

    try:
        auth_client = config.get_auth()
        # Allow 10 seconds of clock skew to prevent "Token used too early" errors
        return auth_client.verify_id_token(token, clock_skew_seconds=10)
    except auth.ExpiredIdTokenError as exc:
        logger.info(f"Expired token: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Authentication token has expired: {str(exc)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.RevokedIdTokenError as exc:
        logger.info(f"Revoked token: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Authentication token has been revoked: {str(exc)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError as exc:
        logger.info(f"Invalid token: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {str(exc)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except Exception as exc:
        logger.warning(f"Token verification failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Authentication failed: {str(exc)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _verify_mock_token(token: str) -> dict:
    """Mock token verification for test-only usage: mock-token-<uid>."""
    prefix = "mock-token-"
    if token.startswith(prefix) and len(token) > len(prefix):
        uid = token[len(prefix):]
        return {"uid": uid, "email": f"{uid}@endlessforge.test"}

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid mock token",
    )


async def get_current_uid(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    _api_key: None = Depends(verify_api_key),
) -> str:
    """Return the uid of the authenticated caller."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    decoded_token = await verify_firebase_token(credentials.credentials)
    uid = decoded_token.get("uid")

    if not uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing uid claim",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return uid
