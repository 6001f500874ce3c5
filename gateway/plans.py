"""
============================================================================
FILE: plans.py
LOCATION: gateway/plans.py
============================================================================

PURPOSE:
    Map a subscription tier name to its daily caps per quota-gated action.

ROLE IN PROJECT:
    Read-only policy table consulted by the QuotaEnforcer. Built once at
    startup (optionally from PLAN_LIMITS_JSON) and never mutated.

KEY COMPONENTS:
    - DEFAULT_PLAN_LIMITS: Built-in free/standard/premium/deluxe table
    - PlanPolicy.limits_for(): Case-insensitive lookup with `free` fallback
    - PlanPolicy.from_env(): Table with optional JSON override

DEPENDENCIES:
    - External: pydantic
    - Internal: models.py, logging_config.py

USAGE:
    from gateway.plans import PlanPolicy

    policy = PlanPolicy()
    policy.limits_for("Premium").mails  # 25
============================================================================
"""

import json
import os
from types import MappingProxyType
from typing import Any, Mapping, Optional

import pydantic

from gateway.logging_config import get_logger
from gateway.models import PlanLimits


logger = get_logger("plans")

FALLBACK_PLAN = "free"

DEFAULT_PLAN_LIMITS: Mapping[str, PlanLimits] = MappingProxyType({
    "free": PlanLimits(mails=5, profileChanges=3),
    "standard": PlanLimits(mails=10, profileChanges=5),
    "premium": PlanLimits(mails=25, profileChanges=10),
    "deluxe": PlanLimits(mails=100, profileChanges=20),
})


def normalize_plan_name(plan_name: Any) -> str:
    """Lower-case a stored plan name; anything unusable becomes `free`."""
    if not isinstance(plan_name, str) or not plan_name.strip():
        return FALLBACK_PLAN
    return plan_name.strip().lower()


class PlanPolicy:
    """Pure lookup over a fixed tier table."""

    def __init__(self, table: Optional[Mapping[str, PlanLimits]] = None):
        table = dict(table if table is not None else DEFAULT_PLAN_LIMITS)
        normalized = {name.lower(): limits for name, limits in table.items()}
        if FALLBACK_PLAN not in normalized:
            raise ValueError(f"Plan table must define a '{FALLBACK_PLAN}' tier")
        self._table = MappingProxyType(normalized)

    @property
    def plans(self) -> Mapping[str, PlanLimits]:
        return self._table

    def resolve(self, plan_name: Any) -> str:
        """Return the tier name that applies to `plan_name`."""
        name = normalize_plan_name(plan_name)
        return name if name in self._table else FALLBACK_PLAN

    def limits_for(self, plan_name: Any) -> PlanLimits:
        return self._table[self.resolve(plan_name)]

    @classmethod
    def from_json(cls, raw: str) -> "PlanPolicy":
        """Build a policy from a JSON object of {plan: {mails, profileChanges}}.

        Raises:
            ValueError: If the JSON is malformed, a cap is negative or the
                `free` tier is missing.
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid plan table JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Plan table JSON must be an object")
        try:
            table = {
                str(name): PlanLimits.model_validate(limits)
                for name, limits in data.items()
            }
        except pydantic.ValidationError as exc:
            raise ValueError(f"Invalid plan limits: {exc}") from exc
        return cls(table)

    @classmethod
    def from_env(cls, env_var: str = "PLAN_LIMITS_JSON") -> "PlanPolicy":
        """Default table, or the JSON override in `env_var` when it is valid."""
        raw = os.getenv(env_var)
        if not raw:
            return cls()
        try:
            policy = cls.from_json(raw)
        except ValueError as exc:
            logger.warning(f"Ignoring {env_var}, using default plan table: {exc}")
            return cls()
        logger.info(f"Loaded plan table from {env_var}: {sorted(policy.plans)}")
        return policy
