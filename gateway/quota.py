"""
============================================================================
FILE: quota.py
LOCATION: gateway/quota.py
============================================================================

PURPOSE:
    Per-user daily quota enforcement for quota-gated actions (sending a
    contact mail, changing the profile).

ROLE IN PROJECT:
    Called before the gated work. Reads the user's `limits` sub-document,
    rolls the window over on a new UTC day, compares the action's counter
    with the plan cap and, only when allowed, persists the incremented
    counter. The read and the write happen inside one UserStore.transact()
    call so concurrent requests for the same user cannot lose updates.

KEY COMPONENTS:
    - QuotaEnforcer.check_and_consume(): Atomic check-and-increment
    - QuotaEnforcer.check_and_consume_unguarded(): Fetch-then-write variant,
      not safe under concurrency
    - QuotaError, UserNotFoundError, QuotaStoreError, UnknownActionError

DEPENDENCIES:
    - External: pydantic
    - Internal: models.py, plans.py, user_store.py, logging_config.py

USAGE:
    enforcer = QuotaEnforcer(get_user_store(), get_plan_policy())
    decision = await enforcer.check_and_consume(uid, ActionKind.MAIL)
    if not decision.allowed:
        ...  # respond 429
============================================================================
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

import pydantic

from gateway.logging_config import get_logger
from gateway.models import ActionKind, DailyLimits, QuotaDecision
from gateway.plans import PlanPolicy
from gateway.user_store import DocumentNotFound, StoreError, UserStore


logger = get_logger("quota")

LIMIT_REACHED = "limit reached"


class QuotaError(Exception):
    """Base class for quota enforcement failures."""


class UserNotFoundError(QuotaError):
    """The user id does not resolve to a user document."""

    def __init__(self, uid: str):
        super().__init__(f"User '{uid}' not found")
        self.uid = uid


class QuotaStoreError(QuotaError):
    """Reading or persisting the quota counters failed. Nothing was consumed."""


class UnknownActionError(QuotaError, ValueError):
    """The action kind is not one of the quota-gated kinds."""


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def parse_action(action: Union[ActionKind, str]) -> ActionKind:
    try:
        return ActionKind(action)
    except ValueError:
        raise UnknownActionError(f"Unknown action kind: {action!r}") from None


def plan_name_of(record: Dict[str, Any]) -> Any:
    """Stored documents carry the tier as `selectedPlan`; `plan` is accepted too."""
    plan = record.get("selectedPlan")
    if plan is None:
        plan = record.get("plan")
    return plan


def current_window(raw_limits: Any, today: str) -> Tuple[DailyLimits, bool]:
    """Return the limits for today's window and whether a rollover happened.

    A missing, stale or malformed `limits` object is treated as a fresh
    window with both counters at zero. Unrelated keys stored under `limits`
    survive the reset.
    """
    if not isinstance(raw_limits, dict):
        return DailyLimits.fresh(today), True
    extra = {
        key: value
        for key, value in raw_limits.items()
        if key not in DailyLimits.model_fields
    }
    try:
        limits = DailyLimits.model_validate(raw_limits)
    except pydantic.ValidationError:
        logger.warning(f"Malformed limits {raw_limits!r}, resetting window")
        return DailyLimits.fresh(today, **extra), True
    if limits.date != today:
        return DailyLimits.fresh(today, **extra), True
    return limits, False


class QuotaEnforcer:
    """Check-and-consume daily quotas against the user store."""

    def __init__(
        self,
        store: UserStore,
        policy: Optional[PlanPolicy] = None,
        today: Callable[[], str] = utc_today,
    ):
        self._store = store
        self._policy = policy or PlanPolicy()
        self._today = today

    @property
    def policy(self) -> PlanPolicy:
        return self._policy

    def evaluate(
        self,
        record: Dict[str, Any],
        action: ActionKind,
        today: str,
    ) -> Tuple[QuotaDecision, Optional[Dict[str, Any]]]:
        """Decide on one action for one user document.

        Returns the decision and the fields to persist (None for no write).
        An allowed action writes the whole `limits` object. A denial inside
        the current window writes nothing; a denial that follows a rollover
        still persists the reset window so a stale date never lingers.
        """
        plan = self._policy.resolve(plan_name_of(record))
        cap = self._policy.limits_for(plan).cap_for(action)
        limits, rolled_over = current_window(record.get("limits"), today)
        used = limits.used(action)

        if used >= cap:
            decision = QuotaDecision(
                allowed=False,
                action=action,
                plan=plan,
                used=used,
                limit=cap,
                date=today,
                reason=LIMIT_REACHED,
            )
            fields = {"limits": limits.model_dump()} if rolled_over else None
            return decision, fields

        limits = limits.consumed(action)
        decision = QuotaDecision(
            allowed=True,
            action=action,
            plan=plan,
            used=limits.used(action),
            limit=cap,
            date=today,
        )
        return decision, {"limits": limits.model_dump()}

    async def check_and_consume(
        self,
        uid: str,
        action: Union[ActionKind, str],
    ) -> QuotaDecision:
        """Consume one unit of `action` quota for `uid` if the cap allows it.

        Raises:
            UnknownActionError: If `action` is not a quota-gated kind.
            UserNotFoundError: If the user document does not exist.
            QuotaStoreError: If the store read, write or commit fails.
        """
        kind = parse_action(action)
        today = self._today()

        try:
            decision = await self._store.transact(
                uid,
                lambda record: self.evaluate(record, kind, today),
            )
        except DocumentNotFound as exc:
            logger.info(f"Quota check for unknown user {uid}")
            raise UserNotFoundError(uid) from exc
        except StoreError as exc:
            logger.error(f"Quota check failed for {uid} ({kind.value}): {exc}", exc_info=True)
            raise QuotaStoreError(str(exc)) from exc

        self._log_decision(uid, decision)
        return decision

    async def check_and_consume_unguarded(
        self,
        uid: str,
        action: Union[ActionKind, str],
    ) -> QuotaDecision:
        """Same decision as check_and_consume() with a separate fetch and write.

        Two concurrent calls can both read the same counter and both write
        `counter + 1`, so more than `cap` calls may be allowed in a day. Only
        use this where a single caller per user is guaranteed.
        """
        kind = parse_action(action)
        today = self._today()

        try:
            record = await self._store.get(uid)
        except StoreError as exc:
            logger.error(f"Quota read failed for {uid}: {exc}", exc_info=True)
            raise QuotaStoreError(str(exc)) from exc
        if record is None:
            raise UserNotFoundError(uid)

        decision, fields = self.evaluate(record, kind, today)
        if fields is not None:
            try:
                await self._store.update(uid, fields)
            except DocumentNotFound as exc:
                raise UserNotFoundError(uid) from exc
            except StoreError as exc:
                logger.error(f"Quota write failed for {uid}: {exc}", exc_info=True)
                raise QuotaStoreError(str(exc)) from exc

        self._log_decision(uid, decision)
        return decision

    def _log_decision(self, uid: str, decision: QuotaDecision) -> None:
        fields = {
            "uid": uid,
            "action": decision.action.value,
            "plan": decision.plan,
            "used": decision.used,
            "limit": decision.limit,
            "window": decision.date,
        }
        if decision.allowed:
            logger.debug(f"Quota {decision.action.value} allowed for {uid}", extra=fields)
        else:
            logger.info(f"Quota {decision.action.value} denied for {uid}", extra=fields)
