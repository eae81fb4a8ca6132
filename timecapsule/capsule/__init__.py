"""Capsule package.

`capsule.types` is the record contract (Pydantic models).
Persistence lives in `capsule.store`, date logic in `capsule.engine`.
"""

from timecapsule.capsule.backend import FileBackend, KeyValueBackend, MemoryBackend
from timecapsule.capsule.registry import CapsuleRegistry
from timecapsule.capsule.store import STORAGE_KEY, CapsuleStore
from timecapsule.capsule.types import Capsule, CapsuleFields, CapsuleType, CapsuleView, Countdown

__all__ = [
    "Capsule",
    "CapsuleFields",
    "CapsuleType",
    "CapsuleView",
    "Countdown",
    "CapsuleStore",
    "CapsuleRegistry",
    "KeyValueBackend",
    "FileBackend",
    "MemoryBackend",
    "STORAGE_KEY",
]
