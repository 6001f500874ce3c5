"""
============================================================================
FILE: __init__.py
LOCATION: gateway/__init__.py
============================================================================

PURPOSE:
    Package initialization for the Endless Forge API gateway.

EXPORTS:
    - QuotaEnforcer: Per-user daily quota enforcement
    - PlanPolicy: Subscription tier -> daily caps lookup
    - ActionKind, PlanLimits, QuotaDecision: Quota data models

USAGE:
    from gateway import QuotaEnforcer, PlanPolicy
    from gateway.main import app
============================================================================
"""

from .models import ActionKind, PlanLimits, QuotaDecision
from .plans import PlanPolicy
from .quota import QuotaEnforcer

__all__ = [
    "ActionKind",
    "PlanLimits",
    "PlanPolicy",
    "QuotaDecision",
    "QuotaEnforcer",
]
