"""Shared fixtures for capsule tests."""

from datetime import date, datetime

import pytest

from timecapsule.capsule.backend import MemoryBackend
from timecapsule.capsule.registry import CapsuleRegistry
from timecapsule.capsule.store import CapsuleStore
from timecapsule.capsule.types import Capsule

NOW = datetime(2024, 6, 15, 10, 30)


def make_capsule(**overrides) -> Capsule:
    """Build a capsule with sensible defaults."""
    fields = {
        "id": 1718447400000,
        "title": "Letter to me",
        "message": "Hello from the past",
        "unlock_date": date(2025, 1, 1),
        "created_date": date(2024, 6, 15),
    }
    fields.update(overrides)
    return Capsule(**fields)


def sample_record(capsule_id=1, unlock_date="2025-01-01", **overrides) -> dict:
    """A single capsule record as stored on disk."""
    record = {
        "id": capsule_id,
        "type": "personal",
        "customType": False,
        "title": f"Capsule {capsule_id}",
        "message": "See you soon",
        "predictions": "",
        "unlockDate": unlock_date,
        "createdDate": "2024-06-01",
        "opened": False,
        "hasPassword": False,
        "password": None,
        "recipientEmail": None,
        "notificationSent": False,
    }
    record.update(overrides)
    return record


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend) -> CapsuleStore:
    return CapsuleStore(backend)


@pytest.fixture
def registry(store, now) -> CapsuleRegistry:
    return CapsuleRegistry(store, clock=lambda: now)
