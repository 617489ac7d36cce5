from collections.abc import Iterator
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from byteletters.adapters.auth.crypto import (
    Argon2PasswordHasher,
    BcryptPasswordHasher,
    build_password_hasher,
)
from byteletters.adapters.clock import SystemClock
from byteletters.adapters.sqlite.repos import SQLiteUserStore
from byteletters.api.auth_utils import decode_access_token
from byteletters.app_shell.config import AppSettings, load_settings
from byteletters.components.auth import RequireAdminInput, run_require_admin
from byteletters.domain.entities import User
from byteletters.domain.errors import StoreUnavailable


# --- Settings ---
@lru_cache
def get_settings() -> AppSettings:
    return load_settings()


# --- Store ---
def get_user_store(
    settings: AppSettings = Depends(get_settings),
) -> Iterator[SQLiteUserStore]:
    """One store (one connection) per request, closed when the response is done."""
    try:
        store = SQLiteUserStore.open(settings.db_path)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail="User store unavailable") from e
    try:
        yield store
    finally:
        store.close()


# --- Adapters ---
def get_password_hasher(
    settings: AppSettings = Depends(get_settings),
) -> BcryptPasswordHasher | Argon2PasswordHasher:
    return build_password_hasher(settings.hash_scheme, settings.bcrypt_rounds)


def get_clock() -> SystemClock:
    return SystemClock()


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: AppSettings = Depends(get_settings),
    user_store: SQLiteUserStore = Depends(get_user_store),
) -> User:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(token, settings.secret_key.get_secret_value())
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    user_id = payload.get("sub")
    try:
        uid = UUID(str(user_id))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token payload",
        ) from e

    user = user_store.get_by_id(uid)
    if not user:
        # Valid token, but the account is gone
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return user


def require_admin(
    current_user: User = Depends(get_current_user),
    settings: AppSettings = Depends(get_settings),
    user_store: SQLiteUserStore = Depends(get_user_store),
) -> User:
    result = run_require_admin(
        RequireAdminInput(user=current_user, admin_emails=settings.admin_emails),
        user_store=user_store,
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=result.error or "Admin access required",
        )
    return result.user
