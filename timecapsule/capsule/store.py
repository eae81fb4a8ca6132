"""Capsule store - the whole collection as one JSON array under one key."""

import json
from typing import Iterable

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from timecapsule.capsule.backend import KeyValueBackend
from timecapsule.capsule.types import Capsule

STORAGE_KEY = "timecapsule_data_v2"

# A record missing any of these (or holding a falsy value) is dropped on load.
REQUIRED_KEYS = ("id", "title", "message", "unlockDate", "createdDate")


class CapsuleStore:
    """Load and save the capsule collection through a key-value backend."""

    def __init__(self, backend: KeyValueBackend, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key

    def load(self) -> list[Capsule]:
        """
        Read the collection.

        Never raises: missing data, unparseable JSON and non-array payloads all
        yield an empty list, and individual bad records are skipped.
        """
        raw = self.backend.get(self.key)
        if not raw:
            logger.debug(f"No saved capsules under '{self.key}'")
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse capsule store '{self.key}': {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Capsule store '{self.key}' is not an array, ignoring it")
            return []

        capsules = []
        for record in data:
            if not isinstance(record, dict) or not all(record.get(k) for k in REQUIRED_KEYS):
                continue
            try:
                capsules.append(Capsule.model_validate(record))
            except PydanticValidationError as e:
                logger.debug(f"Skipping invalid capsule record {record.get('id')!r}: {e}")

        logger.debug(f"Loaded {len(capsules)} capsules from '{self.key}'")
        return capsules

    def save(self, capsules: Iterable[Capsule]) -> bool:
        """Write the collection. Returns False if the backend rejected it."""
        capsules = list(capsules)
        try:
            data = json.dumps([c.to_record() for c in capsules], ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize capsules: {e}")
            return False

        if not self.backend.set(self.key, data):
            logger.error(f"Failed to save {len(capsules)} capsules to '{self.key}'")
            return False

        logger.debug(f"Saved {len(capsules)} capsules to '{self.key}'")
        return True
