import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from byteletters.domain.entities import MIN_PASSWORD_LENGTH, is_valid_email, normalize_email
from byteletters.domain.errors import ConfigError
from byteletters.domain.inbox import DEFAULT_INBOX_DOMAIN

ENV_PREFIX = "BYTELETTERS_"
DB_FILENAME = "byteletters.db"
DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"


def _format_errors(e: ValidationError) -> str:
    # Never echo input values: they may contain the password
    parts = []
    for err in e.errors():
        field = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


class AppSettings(BaseModel):
    data_dir: Path = Path("./data")
    migrations_dir: Path = DEFAULT_MIGRATIONS_DIR
    hash_scheme: Literal["bcrypt", "argon2"] = "bcrypt"
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    secret_key: SecretStr = SecretStr("dev-secret-unsafe")
    token_ttl_days: int = Field(default=30, ge=1)
    admin_emails: frozenset[str] = frozenset()
    inbox_domain: str = DEFAULT_INBOX_DOMAIN

    @field_validator("admin_emails", mode="before")
    @classmethod
    def _split_admin_emails(cls, value: object) -> object:
        if isinstance(value, str):
            return frozenset(normalize_email(e) for e in value.split(",") if e.strip())
        return value

    @property
    def db_path(self) -> str:
        return str(self.data_dir / DB_FILENAME)


class AdminSeedConfig(BaseModel):
    email: str
    password: SecretStr
    name: str

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        value = normalize_email(value)
        if not is_valid_email(value):
            raise ValueError("not a valid email address")
        return value

    @field_validator("password")
    @classmethod
    def _strong_enough(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value()) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"must be at least {MIN_PASSWORD_LENGTH} characters")
        return value

    @field_validator("name")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


def load_settings(environ: Mapping[str, str] | None = None) -> AppSettings:
    """
    Build AppSettings from BYTELETTERS_* environment variables.
    Raises ConfigError if a value is invalid.
    """
    env = os.environ if environ is None else environ
    keys = {
        "data_dir": "DATA_DIR",
        "migrations_dir": "MIGRATIONS_DIR",
        "hash_scheme": "HASH_SCHEME",
        "bcrypt_rounds": "BCRYPT_ROUNDS",
        "secret_key": "SECRET_KEY",
        "token_ttl_days": "TOKEN_TTL_DAYS",
        "admin_emails": "ADMIN_EMAILS",
        "inbox_domain": "INBOX_DOMAIN",
    }
    data = {field: env[ENV_PREFIX + key] for field, key in keys.items() if ENV_PREFIX + key in env}
    try:
        return AppSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {_format_errors(e)}") from e


def load_admin_seed_config(
    environ: Mapping[str, str] | None = None,
    email: str | None = None,
    name: str | None = None,
) -> AdminSeedConfig:
    """
    Resolve the admin account to provision.

    Email and name may be overridden by the caller (CLI flags); the password
    is only ever read from the environment.
    """
    env = os.environ if environ is None else environ
    resolved = {
        "email": email or env.get(ENV_PREFIX + "ADMIN_EMAIL"),
        "password": env.get(ENV_PREFIX + "ADMIN_PASSWORD"),
        "name": name or env.get(ENV_PREFIX + "ADMIN_NAME"),
    }

    missing = [
        ENV_PREFIX + "ADMIN_" + field.upper() for field, value in resolved.items() if not value
    ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        return AdminSeedConfig.model_validate(resolved)
    except ValidationError as e:
        raise ConfigError(f"Invalid admin configuration: {_format_errors(e)}") from e
