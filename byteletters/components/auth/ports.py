from datetime import datetime
from typing import Any, Protocol

from byteletters.domain.entities import User


class UserStorePort(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_inbox_email(self, inbox_email: str) -> User | None: ...
    def insert(self, user: User) -> User: ...
    def update(self, email: str, fields: dict[str, Any]) -> User: ...


class PasswordVerifierPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...


class PasswordHasherPort(Protocol):
    def hash_password(self, plain: str) -> str: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
