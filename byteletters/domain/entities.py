import re
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

DEFAULT_LIFE_EXPECTANCY = 80
MIN_PASSWORD_LENGTH = 8

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


# --- User ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    password_hash: str = ""
    is_admin: bool = False
    onboarding_completed: bool = False
    life_expectancy: int = DEFAULT_LIFE_EXPECTANCY
    birth_date: date | None = None
    inbox_email: str | None = None
    enable_recommendations: bool = True
    google_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
