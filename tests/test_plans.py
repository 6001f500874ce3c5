"""
============================================================================
FILE: test_plans.py
LOCATION: tests/test_plans.py
============================================================================

PURPOSE:
    Unit tests for the subscription tier -> daily caps lookup.

KEY COMPONENTS:
    - TestDefaultTable: Built-in caps and fallback behavior
    - TestCustomTables: Injected and JSON/env-provided tables

DEPENDENCIES:
    - External: pytest
    - Internal: gateway.plans, gateway.models

USAGE:
    Run with: pytest tests/test_plans.py -v
============================================================================
"""

import pytest

from gateway.models import ActionKind, PlanLimits
from gateway.plans import DEFAULT_PLAN_LIMITS, PlanPolicy


class TestDefaultTable:
    """Tests for the built-in plan table."""

    def test_known_plans(self) -> None:
        policy = PlanPolicy()
        assert policy.limits_for("free") == PlanLimits(mails=5, profileChanges=3)
        assert policy.limits_for("standard") == PlanLimits(mails=10, profileChanges=5)
        assert policy.limits_for("premium") == PlanLimits(mails=25, profileChanges=10)
        assert policy.limits_for("deluxe") == PlanLimits(mails=100, profileChanges=20)

    @pytest.mark.parametrize("plan", ["free", "standard", "premium", "deluxe", "gold", None])
    @pytest.mark.parametrize("action", list(ActionKind))
    def test_caps_are_non_negative(self, plan, action) -> None:
        assert PlanPolicy().limits_for(plan).cap_for(action) >= 0

    @pytest.mark.parametrize("plan", ["Premium", "PREMIUM", "  premium "])
    def test_lookup_is_case_insensitive(self, plan: str) -> None:
        assert PlanPolicy().limits_for(plan).mails == 25

    @pytest.mark.parametrize("plan", ["gold", "", None, 42, "enterprise"])
    def test_unknown_plan_falls_back_to_free(self, plan) -> None:
        policy = PlanPolicy()
        assert policy.limits_for(plan) == policy.limits_for("free")
        assert policy.resolve(plan) == "free"

    def test_default_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_PLAN_LIMITS["free"] = PlanLimits(mails=0, profileChanges=0)


class TestCustomTables:
    """Tests for injected plan tables."""

    def test_table_requires_free_tier(self) -> None:
        with pytest.raises(ValueError):
            PlanPolicy({"premium": PlanLimits(mails=1, profileChanges=1)})

    def test_table_keys_are_normalized(self) -> None:
        policy = PlanPolicy({"FREE": PlanLimits(mails=1, profileChanges=2)})
        assert policy.limits_for("free").profileChanges == 2

    def test_from_json(self) -> None:
        policy = PlanPolicy.from_json(
            '{"free": {"mails": 1, "profileChanges": 1},'
            ' "pro": {"mails": 50, "profile_changes": 7}}'
        )
        assert policy.limits_for("pro") == PlanLimits(mails=50, profileChanges=7)
        assert policy.limits_for("deluxe") == policy.limits_for("free")

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[1, 2]",
            '{"free": {"mails": -1, "profileChanges": 1}}',
            '{"pro": {"mails": 1, "profileChanges": 1}}',
        ],
    )
    def test_from_json_rejects_bad_tables(self, raw: str) -> None:
        with pytest.raises(ValueError):
            PlanPolicy.from_json(raw)

    def test_from_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLAN_LIMITS_JSON", '{"free": {"mails": 2, "profileChanges": 0}}')
        policy = PlanPolicy.from_env()
        assert policy.limits_for("free") == PlanLimits(mails=2, profileChanges=0)

    def test_from_env_invalid_keeps_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLAN_LIMITS_JSON", "{broken")
        assert PlanPolicy.from_env().plans == PlanPolicy().plans

    def test_from_env_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PLAN_LIMITS_JSON", raising=False)
        assert PlanPolicy.from_env().limits_for("deluxe").mails == 100
