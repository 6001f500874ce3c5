"""
============================================================================
FILE: rate_limit.py
LOCATION: gateway/rate_limit.py
============================================================================

PURPOSE:
    FastAPI glue between the routes and the QuotaEnforcer.

ROLE IN PROJECT:
    enforce_limit(action) is declared as a dependency on every quota-gated
    route. It consumes one unit of the caller's daily quota before the
    route body runs and turns each failure mode into a distinct HTTP error:
    429 when the daily cap is reached, 404 for an unknown user and 500 when
    the quota store failed.

KEY COMPONENTS:
    - get_quota_enforcer(): Shared QuotaEnforcer dependency
    - enforce_limit(): Dependency factory for one action kind
    - seconds_until_reset(): Retry-After value for 429 responses

DEPENDENCIES:
    - External: fastapi
    - Internal: auth.py, config.py, quota.py, models.py

USAGE:
    @router.post("/contact")
    async def contact(decision=Depends(enforce_limit(ActionKind.MAIL))):
        ...
============================================================================
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status

from gateway import config
from gateway.auth import get_current_uid
from gateway.logging_config import get_logger
from gateway.models import ActionKind, QuotaDecision
from gateway.quota import (
    QuotaEnforcer,
    QuotaStoreError,
    UnknownActionError,
    UserNotFoundError,
)


logger = get_logger("rate_limit")

LIMIT_MESSAGES = {
    ActionKind.MAIL: "Daily email limit reached",
    ActionKind.PROFILE_CHANGE: "Daily profile change limit reached",
}

_enforcer: Optional[QuotaEnforcer] = None


def get_quota_enforcer() -> QuotaEnforcer:
    global _enforcer
    if _enforcer is None:
        _enforcer = QuotaEnforcer(config.get_user_store(), config.get_plan_policy())
    return _enforcer


def seconds_until_reset(now: Optional[datetime] = None) -> int:
    """Seconds until the next UTC midnight, when every window rolls over."""
    now = now or datetime.now(timezone.utc)
    tomorrow = (now + timedelta(days=1)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return max(int((tomorrow - now).total_seconds()), 1)


def enforce_limit(action: ActionKind):
    """Build a dependency that consumes one `action` unit for the caller."""

    async def dependency(
        uid: str = Depends(get_current_uid),
        enforcer: QuotaEnforcer = Depends(get_quota_enforcer),
    ) -> QuotaDecision:
        try:
            decision = await enforcer.check_and_consume(uid, action)
        except UserNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        except QuotaStoreError:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Rate limit enforcement failed",
            )
        except UnknownActionError:
            logger.error(f"Route declared unknown quota action {action!r}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Rate limit enforcement failed",
            )

        if not decision.allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=LIMIT_MESSAGES[decision.action],
                headers={
                    "Retry-After": str(seconds_until_reset()),
                    "X-Quota-Limit": str(decision.limit),
                    "X-Quota-Remaining": "0",
                },
            )
        return decision

    return dependency
