"""Unlock engine - pure date logic over capsules.

Every function takes the current time explicitly. Nothing in here reads the
clock, so callers (and tests) decide what "now" is.
"""

import math
from datetime import date, datetime, time
from typing import Iterable

from loguru import logger

from timecapsule.capsule.types import Capsule, Countdown

DAY_MS = 1000 * 60 * 60 * 24
# Average calendar lengths; the countdown is an approximation, not an exact
# calendar breakdown.
YEAR_MS = DAY_MS * 365.25
MONTH_MS = DAY_MS * 30.44


def is_unlocked(capsule: Capsule, now: datetime) -> bool:
    """True from the first moment of the unlock day onwards."""
    return now.date() >= capsule.unlock_date


def countdown(capsule: Capsule, now: datetime) -> Countdown:
    """Years, months and days left until the unlock day starts.

    Uses 365.25-day years and 30.44-day months, flooring each unit and carrying
    the remainder down. Returns all zeros once the capsule is unlocked.
    """
    if is_unlocked(capsule, now):
        return Countdown()

    unlock_at = datetime.combine(capsule.unlock_date, time.min, tzinfo=now.tzinfo)
    diff = (unlock_at - now).total_seconds() * 1000
    if diff <= 0:
        return Countdown()

    years = math.floor(diff / YEAR_MS)
    remaining = diff % YEAR_MS
    months = math.floor(remaining / MONTH_MS)
    remaining = remaining % MONTH_MS
    days = math.floor(remaining / DAY_MS)

    return Countdown(years=years, months=months, days=days)


def sweep_for_newly_unlocked(capsules: Iterable[Capsule], now: datetime) -> list[Capsule]:
    """
    Mark and return capsules that became unlocked since the last sweep.

    Each selected capsule gets `notification_sent=True` in place, so a later
    sweep (same or later `now`) never selects it again. The caller is expected
    to notify for the returned capsules and persist the collection.
    """
    newly_unlocked = []
    for capsule in capsules:
        if capsule.notification_sent or not is_unlocked(capsule, now):
            continue
        capsule.notification_sent = True
        newly_unlocked.append(capsule)

    if newly_unlocked:
        logger.info(f"{len(newly_unlocked)} capsule(s) unlocked as of {now.date().isoformat()}")
    return newly_unlocked


def unlock_date_in(years: int, today: date) -> date:
    """Unlock date N whole years from today (0 means today)."""
    if years < 0:
        raise ValueError("years must not be negative")
    try:
        return today.replace(year=today.year + years)
    except ValueError:
        # Feb 29 into a non-leap year
        return today.replace(year=today.year + years, day=28)


def format_date(value: date | str) -> str:
    """Long US-style date, e.g. 'January 1, 2025'."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return value
    if not isinstance(value, date):
        return str(value)
    return f"{value:%B} {value.day}, {value.year}"
