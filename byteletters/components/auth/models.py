from dataclasses import dataclass, field
from datetime import date

from byteletters.domain.entities import User


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class SignupInput:
    email: str
    password: str
    name: str
    birth_date: date | None
    enable_recommendations: bool | None = None

    def __repr__(self) -> str:
        return f"SignupInput(email={self.email!r}, name={self.name!r}, password='***')"


@dataclass
class UpdateProfileInput:
    user: User
    name: str | None = None
    birth_date: date | None = None
    life_expectancy: int | None = None
    enable_recommendations: bool | None = None


@dataclass
class RequireAdminInput:
    user: User
    admin_emails: frozenset[str] = field(default_factory=frozenset)


@dataclass
class AuthOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
