"""
Auth component unit tests.

Credential checks and admin gating.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from byteletters.components.auth import (
    LoginInput,
    RequireAdminInput,
    run,
    run_login,
    run_require_admin,
)
from byteletters.domain.entities import User


class MockHasher:
    def verify_password(self, plain: str, hashed: str) -> bool:
        return hashed == f"hashed_{plain}"


@pytest.fixture
def reader() -> User:
    return User(email="reader@example.com", name="Reader", password_hash="hashed_letmein123")


@pytest.fixture
def user_store(reader: User) -> MagicMock:
    store = MagicMock()
    store.find_by_email.side_effect = lambda email: {reader.email: reader}.get(email)
    return store


def test_login_success(user_store, reader):
    result = run_login(
        LoginInput(email="Reader@Example.com", password="letmein123"), user_store, MockHasher()
    )

    assert result.success is True
    assert result.user == reader
    user_store.find_by_email.assert_called_once_with("reader@example.com")


def test_login_wrong_password(user_store):
    result = run_login(
        LoginInput(email="reader@example.com", password="nope"), user_store, MockHasher()
    )

    assert result.success is False
    assert result.error == "Invalid credentials"


def test_login_unknown_user_same_error(user_store):
    result = run_login(
        LoginInput(email="ghost@example.com", password="letmein123"), user_store, MockHasher()
    )

    assert result.success is False
    assert result.error == "Invalid credentials"


def test_login_google_only_account():
    store = MagicMock()
    store.find_by_email.return_value = User(email="g@example.com", name="G", google_id="123")

    result = run_login(LoginInput(email="g@example.com", password="whatever1"), store, MockHasher())

    assert result.success is False
    assert "Google" in (result.error or "")


def test_login_missing_fields(user_store):
    result = run(LoginInput(email="", password=""), user_store=user_store, hasher=MockHasher())

    assert result.success is False
    user_store.find_by_email.assert_not_called()


def test_require_admin_flag(reader):
    admin = reader.model_copy(update={"is_admin": True})

    assert run_require_admin(RequireAdminInput(user=admin)).success is True


def test_require_admin_whitelist(reader):
    inp = RequireAdminInput(user=reader, admin_emails=frozenset({"reader@example.com"}))

    assert run(inp).success is True


def test_require_admin_denied(reader):
    result = run_require_admin(RequireAdminInput(user=reader))

    assert result.success is False
    assert result.error == "Admin access required"
