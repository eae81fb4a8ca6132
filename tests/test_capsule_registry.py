"""Tests for creating, finding, listing and deleting capsules."""

import json
from datetime import date, datetime

import pytest

from timecapsule.capsule.backend import MemoryBackend
from timecapsule.capsule.registry import CapsuleRegistry
from timecapsule.capsule.store import STORAGE_KEY, CapsuleStore
from timecapsule.capsule.types import CapsuleFields
from timecapsule.errors import NotFoundError, PersistenceError, ValidationError


def _fields(**overrides) -> dict:
    fields = {"title": "Dear me", "message": "Remember this", "unlock_date": "2025-01-01"}
    fields.update(overrides)
    return fields


class TestCreate:

    def test_create_assigns_id_and_persists(
        self, registry: CapsuleRegistry, backend: MemoryBackend, now: datetime
    ) -> None:
        capsule = registry.create(_fields())

        assert capsule.id == int(now.timestamp() * 1000)
        assert capsule.created_date == now.date()
        assert capsule.unlock_date == date(2025, 1, 1)
        assert capsule.notification_sent is False
        assert capsule.has_password is False
        assert capsule.password is None
        assert len(registry) == 1

        stored = json.loads(backend.data[STORAGE_KEY])
        assert stored[0]["id"] == capsule.id
        assert stored[0]["unlockDate"] == "2025-01-01"

    def test_accepts_capsule_fields(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(CapsuleFields(title="A", message="B", unlock_date=date(2030, 1, 1)))

        assert capsule.unlock_date == date(2030, 1, 1)

    def test_ids_are_unique_within_the_same_millisecond(self, registry: CapsuleRegistry) -> None:
        first = registry.create(_fields())
        second = registry.create(_fields())

        assert first.id != second.id

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"title": ""}, "title"),
            ({"title": "   "}, "title"),
            ({"message": ""}, "message"),
            ({"unlock_date": ""}, "unlock_date"),
            ({"unlock_date": None}, "unlock_date"),
            ({"unlock_date": "not-a-date"}, "unlock_date"),
        ],
    )
    def test_missing_fields_raise_validation_error(
        self, registry: CapsuleRegistry, backend: MemoryBackend, overrides: dict, field: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            registry.create(_fields(**overrides))

        assert exc_info.value.field == field
        assert len(registry) == 0
        assert STORAGE_KEY not in backend.data

    def test_text_fields_are_trimmed(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(
            _fields(title="  Hi  ", message=" msg ", predictions=" rain ", recipient_email=" a@b.c ")
        )

        assert capsule.title == "Hi"
        assert capsule.message == "msg"
        assert capsule.predictions == "rain"
        assert capsule.recipient_email == "a@b.c"

    def test_password_sets_gate(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(_fields(password=" secret"))

        assert capsule.has_password is True
        assert capsule.password == " secret"

    def test_custom_type_wins_over_selected_type(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(_fields(type="family", custom_type="Graduation"))

        assert capsule.type == "Graduation"
        assert capsule.is_custom_type is True

    def test_custom_type_named_like_builtin_is_still_custom(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(_fields(custom_type="family"))

        assert capsule.type == "family"
        assert capsule.is_custom_type is True
        assert capsule.to_record()["customType"] is True

    def test_builtin_type(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(_fields(type="legacy"))

        assert capsule.type == "legacy"
        assert capsule.is_custom_type is False
        assert capsule.icon == "💝"

    def test_failed_write_rolls_back(self, now: datetime) -> None:
        backend = MemoryBackend(max_bytes=1)
        registry = CapsuleRegistry(CapsuleStore(backend), clock=lambda: now)

        with pytest.raises(PersistenceError):
            registry.create(_fields())

        assert len(registry) == 0
        assert registry.list() == []
        assert backend.data == {}


class TestLookup:

    def test_find_by_int_or_string_id(self, registry: CapsuleRegistry) -> None:
        capsule = registry.create(_fields())

        assert registry.find(capsule.id) is capsule
        assert registry.find(str(capsule.id)) is capsule

    def test_find_missing_returns_none(self, registry: CapsuleRegistry) -> None:
        assert registry.find(42) is None

    def test_get_missing_raises(self, registry: CapsuleRegistry) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            registry.get(42)

        assert exc_info.value.capsule_id == 42


class TestList:

    def test_sorted_by_unlock_date(self, registry: CapsuleRegistry) -> None:
        later = registry.create(_fields(title="later", unlock_date="2025-01-01"))
        sooner = registry.create(_fields(title="sooner", unlock_date="2024-06-01"))

        assert registry.list() == [sooner, later]
        assert registry.list(sorted_by_unlock_date=False) == [later, sooner]

    def test_ties_keep_insertion_order(self, registry: CapsuleRegistry) -> None:
        a = registry.create(_fields(title="a", unlock_date="2026-01-01"))
        b = registry.create(_fields(title="b", unlock_date="2025-01-01"))
        c = registry.create(_fields(title="c", unlock_date="2026-01-01"))

        assert registry.list() == [b, a, c]

    def test_list_is_a_snapshot(self, registry: CapsuleRegistry) -> None:
        registry.create(_fields())

        snapshot = registry.list()
        snapshot.clear()

        assert len(registry) == 1


class TestDelete:

    def test_delete_removes_and_persists(
        self, registry: CapsuleRegistry, backend: MemoryBackend
    ) -> None:
        keep = registry.create(_fields(title="keep"))
        drop = registry.create(_fields(title="drop"))

        assert registry.delete(drop.id) is drop

        assert registry.list() == [keep]
        assert [r["id"] for r in json.loads(backend.data[STORAGE_KEY])] == [keep.id]

    def test_delete_missing_raises(self, registry: CapsuleRegistry) -> None:
        with pytest.raises(NotFoundError):
            registry.delete(42)

    def test_failed_write_keeps_record_removed_in_memory(
        self, registry: CapsuleRegistry, backend: MemoryBackend
    ) -> None:
        capsule = registry.create(_fields())
        backend.max_bytes = 1

        with pytest.raises(PersistenceError):
            registry.delete(capsule.id)

        assert registry.find(capsule.id) is None
        assert json.loads(backend.data[STORAGE_KEY])[0]["id"] == capsule.id


class TestReload:

    def test_reload_picks_up_external_writes(
        self, registry: CapsuleRegistry, store: CapsuleStore, now: datetime
    ) -> None:
        other = CapsuleRegistry(store, clock=lambda: now)
        created = other.create(_fields())

        assert registry.find(created.id) is None
        registry.reload()
        assert registry.find(created.id) is not None
