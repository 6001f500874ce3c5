"""
============================================================================
FILE: models.py
LOCATION: gateway/models.py
============================================================================

PURPOSE:
    Pydantic models for the quota sub-document, plan caps, quota decisions
    and the gateway's request/response payloads.

ROLE IN PROJECT:
    Centralizes schema definitions shared by the quota enforcer, the
    plan policy and the HTTP routes.

KEY COMPONENTS:
    - ActionKind: Quota-gated action categories (mail, profileChange)
    - PlanLimits: Daily caps for one subscription tier
    - DailyLimits: The persisted `limits` sub-object of a user document
    - QuotaDecision: Outcome of a check-and-consume call
    - UpdateProfileNameInput, ContactInput: Request bodies

DEPENDENCIES:
    - External: pydantic
    - Internal: None

USAGE:
    from gateway.models import ActionKind, DailyLimits, QuotaDecision
============================================================================
"""

import enum
import typing

import pydantic


class ActionKind(str, enum.Enum):
    """Category of a quota-gated operation."""

    MAIL = "mail"
    PROFILE_CHANGE = "profileChange"


class PlanLimits(pydantic.BaseModel):
    """Maximum daily count per action kind for one tier."""

    model_config = pydantic.ConfigDict(populate_by_name=True, frozen=True)

    mails: int = pydantic.Field(..., ge=0, description="Mails per day")
    profileChanges: int = pydantic.Field(
        ...,
        ge=0,
        validation_alias=pydantic.AliasChoices("profileChanges", "profile_changes"),
        description="Profile changes per day",
    )

    def cap_for(self, action: ActionKind) -> int:
        if action is ActionKind.MAIL:
            return self.mails
        return self.profileChanges


class DailyLimits(pydantic.BaseModel):
    """The `limits` sub-object stored on a user document.

    Keys other than the counters and the date are kept as extras and are
    written back unchanged with every update.
    """

    model_config = pydantic.ConfigDict(extra="allow")

    date: typing.Optional[str] = pydantic.Field(
        None,
        description="UTC calendar date (YYYY-MM-DD) of the counting window",
    )
    mailsToday: int = pydantic.Field(0, ge=0)
    profileChangesToday: int = pydantic.Field(0, ge=0)

    @classmethod
    def fresh(cls, today: str, **extra: typing.Any) -> "DailyLimits":
        return cls(**extra, date=today, mailsToday=0, profileChangesToday=0)

    def used(self, action: ActionKind) -> int:
        if action is ActionKind.MAIL:
            return self.mailsToday
        return self.profileChangesToday

    def consumed(self, action: ActionKind) -> "DailyLimits":
        """Return a copy with the action's counter incremented by one."""
        if action is ActionKind.MAIL:
            return self.model_copy(update={"mailsToday": self.mailsToday + 1})
        return self.model_copy(
            update={"profileChangesToday": self.profileChangesToday + 1}
        )


class QuotaDecision(pydantic.BaseModel):
    """Result of QuotaEnforcer.check_and_consume."""

    allowed: bool
    action: ActionKind
    plan: str
    used: int = pydantic.Field(..., description="Counter value after the call")
    limit: int = pydantic.Field(..., description="Cap for the action on this plan")
    date: str = pydantic.Field(..., description="Quota window (UTC date)")
    reason: typing.Optional[str] = None

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used, 0)


class UpdateProfileNameInput(pydantic.BaseModel):
    """Body of POST /update-profile-name."""

    newName: typing.Optional[str] = pydantic.Field(
        None,
        validation_alias=pydantic.AliasChoices("newName", "new_name"),
    )
    uid: typing.Optional[str] = None


class ContactInput(pydantic.BaseModel):
    """Body of POST /contact. Presence is checked by the route."""

    name: typing.Optional[str] = None
    email: typing.Optional[pydantic.EmailStr] = None
    message: typing.Optional[str] = None


class ContactResponse(pydantic.BaseModel):
    success: bool
    message: str


class ProfileNameResponse(pydantic.BaseModel):
    success: bool
    message: str
    newName: str


class ProfilePictureResponse(pydantic.BaseModel):
    imageUrl: str
