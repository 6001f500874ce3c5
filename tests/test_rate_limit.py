"""
============================================================================
FILE: test_rate_limit.py
LOCATION: tests/test_rate_limit.py
============================================================================

PURPOSE:
    Tests for the enforce_limit dependency's mapping of quota outcomes to
    HTTP responses.

KEY COMPONENTS:
    - TestEnforceLimit: Allow / 429 / 404 / 500 mapping
    - TestSecondsUntilReset: Retry-After computation

DEPENDENCIES:
    - External: pytest, pytest-asyncio, fastapi
    - Internal: gateway.rate_limit, gateway.quota, gateway.mock_firestore

USAGE:
    Run with: pytest tests/test_rate_limit.py -v
============================================================================
"""

from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from gateway.mock_firestore import MockUserStore
from gateway.models import ActionKind
from gateway.quota import QuotaEnforcer
from gateway.rate_limit import enforce_limit, seconds_until_reset
from gateway.user_store import StoreError


TODAY = "2026-10-19"


class UnavailableStore(MockUserStore):
    async def transact(self, uid, fn):
        raise StoreError("store unavailable")


def _enforcer(store) -> QuotaEnforcer:
    return QuotaEnforcer(store, today=lambda: TODAY)


class TestEnforceLimit:
    """Tests for the quota dependency."""

    @pytest.mark.asyncio
    async def test_allowed_returns_decision(self) -> None:
        store = MockUserStore()
        store.seed("u1", {})
        dependency = enforce_limit(ActionKind.MAIL)

        decision = await dependency(uid="u1", enforcer=_enforcer(store))

        assert decision.allowed is True
        assert decision.used == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("action", "limits", "message"),
        [
            (ActionKind.MAIL, {"mailsToday": 5}, "Daily email limit reached"),
            (
                ActionKind.PROFILE_CHANGE,
                {"profileChangesToday": 3},
                "Daily profile change limit reached",
            ),
        ],
    )
    async def test_limit_reached_is_429(self, action, limits, message) -> None:
        store = MockUserStore()
        store.seed("u1", {"limits": {"date": TODAY, **limits}})
        dependency = enforce_limit(action)

        with pytest.raises(HTTPException) as exc:
            await dependency(uid="u1", enforcer=_enforcer(store))

        assert exc.value.status_code == 429
        assert exc.value.detail == message
        assert int(exc.value.headers["Retry-After"]) > 0
        assert exc.value.headers["X-Quota-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self) -> None:
        dependency = enforce_limit(ActionKind.MAIL)

        with pytest.raises(HTTPException) as exc:
            await dependency(uid="ghost", enforcer=_enforcer(MockUserStore()))

        assert exc.value.status_code == 404

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self) -> None:
        dependency = enforce_limit(ActionKind.MAIL)

        with pytest.raises(HTTPException) as exc:
            await dependency(uid="u1", enforcer=_enforcer(UnavailableStore()))

        assert exc.value.status_code == 500
        assert exc.value.detail == "Rate limit enforcement failed"

    @pytest.mark.asyncio
    async def test_unknown_action_is_500(self) -> None:
        store = MockUserStore()
        store.seed("u1", {})
        dependency = enforce_limit("upload")

        with pytest.raises(HTTPException) as exc:
            await dependency(uid="u1", enforcer=_enforcer(store))

        assert exc.value.status_code == 500
        assert store.writes == 0


class TestSecondsUntilReset:
    """Tests for the Retry-After value."""

    def test_midday(self) -> None:
        now = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
        assert seconds_until_reset(now) == 12 * 3600

    def test_just_before_midnight(self) -> None:
        now = datetime(2026, 10, 19, 23, 59, 59, 500000, tzinfo=timezone.utc)
        assert seconds_until_reset(now) == 1

    def test_at_midnight(self) -> None:
        now = datetime(2026, 10, 19, 0, 0, 0, tzinfo=timezone.utc)
        assert seconds_until_reset(now) == 24 * 3600
