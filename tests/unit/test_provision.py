"""
Provision component unit tests.

Admin seeding against an in-memory user store.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest

from byteletters.adapters.auth.crypto import BcryptPasswordHasher
from byteletters.components.provision import (
    ProvisionInput,
    ProvisionOutcome,
    run,
    run_provision,
)
from byteletters.domain.entities import User
from byteletters.domain.errors import HashingError, StoreUnavailable, StoreWriteConflict

# --- Mock Implementations ---


class MockUserStore:
    """In-memory user store keyed by lowercase email."""

    def __init__(self) -> None:
        self._by_email: dict[str, User] = {}
        self.writes = 0

    def find_by_email(self, email: str) -> User | None:
        return self._by_email.get(email.lower())

    def insert(self, user: User) -> User:
        key = user.email.lower()
        if key in self._by_email:
            raise StoreWriteConflict(key, "duplicate email")
        self._by_email[key] = user
        self.writes += 1
        return user

    def update(self, email: str, fields: dict[str, Any]) -> User:
        key = email.lower()
        updated = self._by_email[key].model_copy(update=fields)
        self._by_email[key] = updated
        self.writes += 1
        return updated

    def count(self) -> int:
        return len(self._by_email)


class FailingWriteStore(MockUserStore):
    def insert(self, user: User) -> User:
        raise StoreUnavailable("database is locked")

    def update(self, email: str, fields: dict[str, Any]) -> User:
        raise StoreUnavailable("database is locked")


class MockTimePort:
    """Mock time port for deterministic testing."""

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2026, 1, 12, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._time

    def advance(self, delta: timedelta) -> None:
        self._time = self._time + delta


# --- Fixtures ---


@pytest.fixture
def store() -> MockUserStore:
    return MockUserStore()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def time_port() -> MockTimePort:
    return MockTimePort()


@pytest.fixture
def admin_input() -> ProvisionInput:
    return ProvisionInput(email="Admin@Example.com", password="s3cure-pass", name="Admin")


# --- Creation ---


class TestCreate:
    def test_creates_single_admin(self, store, hasher, time_port, admin_input) -> None:
        result = run_provision(admin_input, store, hasher, time_port)

        assert result.outcome is ProvisionOutcome.CREATED
        assert result.created is True
        assert store.count() == 1

        user = store.find_by_email("admin@example.com")
        assert user is not None
        assert user.is_admin is True
        assert user.name == "Admin"
        assert hasher.verify_password("s3cure-pass", user.password_hash) is True

    def test_new_user_gets_profile_defaults(self, store, hasher, time_port, admin_input) -> None:
        result = run_provision(admin_input, store, hasher, time_port)

        assert result.user.onboarding_completed is True
        assert result.user.life_expectancy == 80
        assert result.user.created_at == time_port.now_utc()
        assert result.user.updated_at == time_port.now_utc()

    def test_email_is_normalized(self, store, hasher, time_port, admin_input) -> None:
        result = run_provision(admin_input, store, hasher, time_port)

        assert result.user.email == "admin@example.com"
        assert store.find_by_email("admin@example.com") is not None
        assert store.find_by_email("ADMIN@EXAMPLE.COM") is not None

    def test_plaintext_never_stored(self, store, hasher, time_port, admin_input) -> None:
        result = run_provision(admin_input, store, hasher, time_port)

        assert result.user.password_hash != admin_input.password
        assert admin_input.password not in result.user.password_hash


# --- Update ---


class TestUpdate:
    @pytest.fixture
    def existing(self, store: MockUserStore) -> User:
        user = User(
            email="admin@example.com",
            name="Old Name",
            password_hash="old-hash",
            is_admin=False,
            onboarding_completed=False,
            life_expectancy=95,
            birth_date=date(1990, 5, 17),
            inbox_email="oldname-x1@inbox.byteletters.app",
            enable_recommendations=False,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
            updated_at=datetime(2025, 1, 1, tzinfo=UTC),
        )
        return store.insert(user)

    def test_promotes_existing_user(self, store, hasher, time_port, admin_input, existing) -> None:
        result = run_provision(admin_input, store, hasher, time_port)

        assert result.outcome is ProvisionOutcome.UPDATED
        assert result.created is False
        assert store.count() == 1

        user = store.find_by_email("admin@example.com")
        assert user.id == existing.id
        assert user.is_admin is True
        assert user.name == "Admin"
        assert user.password_hash != "old-hash"
        assert hasher.verify_password("s3cure-pass", user.password_hash)
        assert user.updated_at == time_port.now_utc()

    def test_unrelated_fields_untouched(
        self, store, hasher, time_port, admin_input, existing
    ) -> None:
        run_provision(admin_input, store, hasher, time_port)
        user = store.find_by_email("admin@example.com")

        assert user.onboarding_completed is False
        assert user.life_expectancy == 95
        assert user.birth_date == date(1990, 5, 17)
        assert user.inbox_email == "oldname-x1@inbox.byteletters.app"
        assert user.enable_recommendations is False
        assert user.created_at == existing.created_at

    def test_matches_differently_cased_input(self, store, hasher, time_port, existing) -> None:
        inp = ProvisionInput(email="  ADMIN@example.COM ", password="s3cure-pass", name="Admin")

        result = run_provision(inp, store, hasher, time_port)

        assert result.outcome is ProvisionOutcome.UPDATED
        assert store.count() == 1


# --- Idempotency ---


def test_second_run_converges(store, hasher, time_port, admin_input) -> None:
    first = run_provision(admin_input, store, hasher, time_port)
    time_port.advance(timedelta(minutes=5))
    second = run(admin_input, user_store=store, hasher=hasher, time=time_port)

    assert first.outcome is ProvisionOutcome.CREATED
    assert second.outcome is ProvisionOutcome.UPDATED
    assert store.count() == 1

    user = store.find_by_email("admin@example.com")
    assert user.id == first.user.id
    assert user.is_admin is True
    assert user.name == first.user.name
    # Fresh salt on every run
    assert user.password_hash != first.user.password_hash
    assert hasher.verify_password("s3cure-pass", user.password_hash)


# --- Failures ---


def test_hashing_failure_leaves_store_untouched(store, time_port) -> None:
    hasher = MagicMock()
    hasher.hash_password.side_effect = HashingError("boom")
    inp = ProvisionInput(email="admin@example.com", password="s3cure-pass", name="Admin")

    with pytest.raises(HashingError):
        run_provision(inp, store, hasher, time_port)

    assert store.writes == 0
    assert store.count() == 0


def test_empty_password_rejected(store, hasher, time_port) -> None:
    inp = ProvisionInput(email="admin@example.com", password="", name="Admin")

    with pytest.raises(HashingError):
        run_provision(inp, store, hasher, time_port)

    assert store.count() == 0


def test_hasher_echoing_plaintext_rejected(store, time_port) -> None:
    hasher = MagicMock()
    hasher.hash_password.side_effect = lambda p: p
    inp = ProvisionInput(email="admin@example.com", password="s3cure-pass", name="Admin")

    with pytest.raises(HashingError):
        run_provision(inp, store, hasher, time_port)

    assert store.count() == 0


def test_store_failure_propagates_without_record(hasher, time_port, admin_input) -> None:
    store = FailingWriteStore()

    with pytest.raises(StoreUnavailable):
        run_provision(admin_input, store, hasher, time_port)

    assert store.count() == 0


def test_input_repr_hides_password(admin_input) -> None:
    assert "s3cure-pass" not in repr(admin_input)
