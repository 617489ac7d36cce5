from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from byteletters.adapters.clock import SystemClock
from byteletters.adapters.sqlite.repos import SQLiteUserStore
from byteletters.api.auth_utils import create_access_token
from byteletters.api.deps import (
    get_clock,
    get_current_user,
    get_password_hasher,
    get_settings,
    get_user_store,
)
from byteletters.api.schemas import (
    LoginRequest,
    ProfileUpdateRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from byteletters.app_shell.config import AppSettings
from byteletters.components.auth import (
    EMAIL_TAKEN,
    LoginInput,
    SignupInput,
    UpdateProfileInput,
    run_login,
    run_signup,
    run_update_profile,
)
from byteletters.domain.entities import User

router = APIRouter()


def _issue_token(user: User, settings: AppSettings) -> TokenResponse:
    access_token = create_access_token(
        {"sub": str(user.id), "email": user.email},
        settings.secret_key.get_secret_value(),
        expires_delta=timedelta(days=settings.token_ttl_days),
    )
    return TokenResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(
    req: SignupRequest,
    settings: AppSettings = Depends(get_settings),
    user_store: SQLiteUserStore = Depends(get_user_store),
    hasher: Any = Depends(get_password_hasher),
    clock: SystemClock = Depends(get_clock),
) -> TokenResponse:
    """Create a password account and sign it in."""
    result = run_signup(
        SignupInput(
            email=req.email or "",
            password=req.password or "",
            name=req.name or "",
            birth_date=req.birth_date,
            enable_recommendations=req.enable_recommendations,
        ),
        user_store=user_store,
        hasher=hasher,
        time=clock,
        inbox_domain=settings.inbox_domain,
    )
    if not result.success or result.user is None:
        code = status.HTTP_409_CONFLICT if result.error == EMAIL_TAKEN else 400
        raise HTTPException(status_code=code, detail=result.error or "Signup failed")

    return _issue_token(result.user, settings)


@router.post("/login", response_model=TokenResponse)
def login(
    req: LoginRequest,
    settings: AppSettings = Depends(get_settings),
    user_store: SQLiteUserStore = Depends(get_user_store),
    hasher: Any = Depends(get_password_hasher),
) -> TokenResponse:
    """Authenticate with email and password and return a bearer token."""
    if not req.email or not req.password:
        raise HTTPException(status_code=400, detail="Email and password required")

    result = run_login(
        LoginInput(email=req.email, password=req.password),
        user_store=user_store,
        hasher=hasher,
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _issue_token(result.user, settings)


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)) -> dict[str, str]:
    """Acknowledge logout. Tokens are stateless and simply expire."""
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Get current user profile."""
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    req: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    user_store: SQLiteUserStore = Depends(get_user_store),
    clock: SystemClock = Depends(get_clock),
) -> UserResponse:
    """Update the caller's own profile fields."""
    result = run_update_profile(
        UpdateProfileInput(
            user=current_user,
            name=req.name,
            birth_date=req.birth_date,
            life_expectancy=req.life_expectancy,
            enable_recommendations=req.enable_recommendations,
        ),
        user_store=user_store,
        time=clock,
    )
    if not result.success or result.user is None:
        raise HTTPException(status_code=400, detail=result.error or "Profile update failed")

    return UserResponse.model_validate(result.user)
