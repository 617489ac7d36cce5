"""Provision component port definitions.

Protocol interfaces for external dependencies.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from byteletters.domain.entities import User


class UserStorePort(Protocol):
    """Persistent user store keyed by normalized email."""

    def find_by_email(self, email: str) -> User | None:
        """Return the user with this email, or None."""
        ...

    def insert(self, user: User) -> User:
        """Insert a new user. Raises StoreWriteConflict on duplicates."""
        ...

    def update(self, email: str, fields: dict[str, Any]) -> User:
        """Update only the given fields of an existing user."""
        ...


class PasswordHasherPort(Protocol):
    """Slow, salted password hashing."""

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password for storage. Raises HashingError."""
        ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
