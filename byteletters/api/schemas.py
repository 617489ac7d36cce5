from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# --- Auth ---
class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class SignupRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None
    birth_date: date | None = None
    enable_recommendations: bool | None = None


class ProfileUpdateRequest(BaseModel):
    name: str | None = None
    birth_date: date | None = None
    life_expectancy: int | None = Field(default=None, ge=1, le=150)
    enable_recommendations: bool | None = None


# --- Users ---
class UserResponse(BaseModel):
    """Public user profile. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    is_admin: bool
    birth_date: date | None = None
    life_expectancy: int
    inbox_email: str | None = None
    enable_recommendations: bool
    onboarding_completed: bool
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
