"""Capsule types (Pydantic models with camelCase JSON aliases)."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class CapsuleType(str, Enum):
    """Built-in capsule categories."""
    PERSONAL = "personal"
    FAMILY = "family"
    COMMUNITY = "community"
    LEGACY = "legacy"

    @property
    def icon(self) -> str:
        return _TYPE_ICONS[self]


_TYPE_ICONS = {
    CapsuleType.PERSONAL: "👤",
    CapsuleType.FAMILY: "👨‍👩‍👧‍👦",
    CapsuleType.COMMUNITY: "🌍",
    CapsuleType.LEGACY: "💝",
}
CUSTOM_TYPE_ICON = "⭐"


def type_icon(capsule_type: str) -> str:
    """Icon for a built-in type, or the custom-type star."""
    try:
        return CapsuleType(capsule_type).icon
    except ValueError:
        return CUSTOM_TYPE_ICON


class Capsule(BaseModel):
    """A sealed message that opens on its unlock date."""

    id: int | str
    type: str = CapsuleType.PERSONAL.value
    is_custom_type: bool = Field(False, alias="customType")
    title: str
    message: str
    predictions: str = ""
    unlock_date: date = Field(alias="unlockDate")
    created_date: date = Field(alias="createdDate")
    opened: bool = False  # kept for data compatibility, never read
    has_password: bool = Field(False, alias="hasPassword")
    password: str | None = None
    recipient_email: str | None = Field(None, alias="recipientEmail")
    notification_sent: bool = Field(False, alias="notificationSent")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _password_present(self) -> "Capsule":
        if self.has_password and self.password is None:
            raise ValueError("hasPassword is set but password is missing")
        return self

    @property
    def icon(self) -> str:
        return type_icon(self.type)

    def to_record(self) -> dict:
        """Serialize to the on-disk record shape."""
        return self.model_dump(mode="json", by_alias=True)


class CapsuleFields(BaseModel):
    """User input for a new capsule, before validation and id assignment."""

    title: str = ""
    message: str = ""
    unlock_date: date | None = None
    type: str = CapsuleType.PERSONAL.value
    custom_type: str = ""
    predictions: str = ""
    password: str = ""
    recipient_email: str = ""

    @field_validator("unlock_date", mode="before")
    @classmethod
    def _blank_date(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@dataclass(frozen=True)
class Countdown:
    """Approximate time left until a capsule unlocks."""
    years: int = 0
    months: int = 0
    days: int = 0

    def __str__(self) -> str:
        return f"{self.years}y {self.months}m {self.days}d"


@dataclass
class CapsuleView:
    """What opening a capsule reveals.

    Unlocked capsules carry their message and predictions; locked ones only
    the countdown.
    """
    capsule: Capsule
    unlocked: bool
    message: str | None = None
    predictions: str | None = None
    countdown: Countdown | None = None
