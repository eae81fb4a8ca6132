"""Capsule registry - the in-memory collection backed by a store."""

from datetime import datetime
from typing import Any, Callable, Iterator

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from timecapsule.capsule.store import CapsuleStore
from timecapsule.capsule.types import Capsule, CapsuleFields, CapsuleType
from timecapsule.errors import NotFoundError, PersistenceError, ValidationError


class CapsuleRegistry:
    """
    Owns the capsule collection.

    The in-memory list always matches the store's last successful write after
    a create; delete and sweep failures are reported without rollback.
    """

    def __init__(self, store: CapsuleStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock
        self._capsules: list[Capsule] = store.load()
        logger.info(f"Capsule registry loaded with {len(self._capsules)} capsules")

    def __len__(self) -> int:
        return len(self._capsules)

    def __iter__(self) -> Iterator[Capsule]:
        return iter(self._capsules)

    def reload(self) -> None:
        """Replace the in-memory collection with what the store holds now."""
        self._capsules = self.store.load()

    def persist(self) -> bool:
        return self.store.save(self._capsules)

    def create(self, fields: CapsuleFields | dict[str, Any]) -> Capsule:
        """
        Validate, add and persist a new capsule.

        Raises:
            ValidationError: title, message or unlock date is blank.
            PersistenceError: the store rejected the write; the capsule is not kept.
        """
        if not isinstance(fields, CapsuleFields):
            try:
                fields = CapsuleFields.model_validate(fields)
            except PydanticValidationError as e:
                err = e.errors()[0]
                field = str(err["loc"][0]) if err["loc"] else "fields"
                raise ValidationError(field, f"Invalid {field}: {err['msg']}") from e

        title = fields.title.strip()
        message = fields.message.strip()
        if not title:
            raise ValidationError("title", "Please enter a capsule title")
        if not message:
            raise ValidationError("message", "Please enter a message")
        if fields.unlock_date is None:
            raise ValidationError("unlock_date", "Please select an unlock date")

        custom_type = fields.custom_type.strip()
        capsule_type = custom_type or fields.type.strip() or CapsuleType.PERSONAL.value
        now = self.clock()

        capsule = Capsule(
            id=self._next_id(now),
            type=capsule_type,
            is_custom_type=bool(custom_type),
            title=title,
            message=message,
            predictions=fields.predictions.strip(),
            unlock_date=fields.unlock_date,
            created_date=now.date(),
            has_password=bool(fields.password),
            password=fields.password or None,
            recipient_email=fields.recipient_email.strip() or None,
        )

        self._capsules.append(capsule)
        if not self.persist():
            self._capsules.pop()
            raise PersistenceError("Failed to save capsule")

        logger.info(f"Created capsule {capsule.id} '{capsule.title}' unlocking {capsule.unlock_date}")
        return capsule

    def find(self, capsule_id: int | str) -> Capsule | None:
        key = str(capsule_id)
        for capsule in self._capsules:
            if str(capsule.id) == key:
                return capsule
        return None

    def get(self, capsule_id: int | str) -> Capsule:
        """Like find(), but raises NotFoundError on a miss."""
        capsule = self.find(capsule_id)
        if capsule is None:
            raise NotFoundError(capsule_id)
        return capsule

    def delete(self, capsule_id: int | str) -> Capsule:
        """
        Remove a capsule permanently.

        Confirmation is the caller's job. If the write fails the capsule stays
        removed in memory and PersistenceError is raised.
        """
        capsule = self.get(capsule_id)
        self._capsules = [c for c in self._capsules if c is not capsule]

        if not self.persist():
            raise PersistenceError("Failed to delete capsule")

        logger.info(f"Deleted capsule {capsule.id}")
        return capsule

    def list(self, sorted_by_unlock_date: bool = True) -> list[Capsule]:
        """Snapshot of the collection, earliest unlock first (stable)."""
        capsules = list(self._capsules)
        if sorted_by_unlock_date:
            capsules.sort(key=lambda c: c.unlock_date)
        return capsules

    def _next_id(self, now: datetime) -> int:
        taken = {str(c.id) for c in self._capsules}
        candidate = int(now.timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return candidate
