"""Access gate - the optional capsule password.

The password is stored in plain text and compared with ==. There is no
hashing, rate limiting or lockout: it keeps casual eyes out, nothing more.
"""

from datetime import datetime

from timecapsule.capsule.engine import countdown, is_unlocked
from timecapsule.capsule.types import Capsule, CapsuleView
from timecapsule.errors import AccessDeniedError


def requires_password(capsule: Capsule) -> bool:
    return capsule.has_password


def verify(capsule: Capsule, attempt: str | None) -> bool:
    """Exact, case-sensitive match against the stored password."""
    return attempt is not None and attempt == capsule.password


def open_capsule(capsule: Capsule, now: datetime, attempt: str | None = None) -> CapsuleView:
    """
    Pass the gate, then reveal whatever the unlock state allows.

    The password is checked first, even for capsules that are still locked.

    Raises:
        AccessDeniedError: password required and missing or wrong.
    """
    if requires_password(capsule) and not verify(capsule, attempt):
        raise AccessDeniedError("Incorrect password")

    if is_unlocked(capsule, now):
        return CapsuleView(
            capsule=capsule,
            unlocked=True,
            message=capsule.message,
            predictions=capsule.predictions or None,
        )

    return CapsuleView(capsule=capsule, unlocked=False, countdown=countdown(capsule, now))
