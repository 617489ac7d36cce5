"""Provision component implementation.

Creates or updates the administrative account: hash the password, look the
user up by normalized email, then either update the credentials and admin
flag in place or insert a fresh admin record.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from byteletters.domain.entities import DEFAULT_LIFE_EXPECTANCY, User, normalize_email
from byteletters.domain.errors import HashingError

from .models import ProvisionInput, ProvisionOutcome, ProvisionOutput
from .ports import PasswordHasherPort, TimePort, UserStorePort

logger = logging.getLogger(__name__)


def run_provision(
    inp: ProvisionInput,
    user_store: UserStorePort,
    hasher: PasswordHasherPort,
    time: TimePort,
) -> ProvisionOutput:
    """Ensure exactly one admin account exists for ``inp.email``.

    Args:
        inp: Email, plaintext password and display name of the admin.
        user_store: Store the account lives in. Owned by the caller.
        hasher: Slow password hasher.
        time: Time provider for deterministic timestamps.

    Returns:
        ProvisionOutput with the stored user and whether it was created or updated.

    Raises:
        HashingError: The password could not be hashed. The store is untouched.
        StoreUnavailable: The store could not be read or written.
        StoreWriteConflict: The write violated a store constraint.
    """
    # Hash first so a bad password never reaches the store
    password_hash = hasher.hash_password(inp.password)
    if not password_hash or password_hash == inp.password:
        raise HashingError("Password hasher returned an unusable hash")
    logger.info("Password hashed with %s", getattr(hasher, "scheme", type(hasher).__name__))

    email = normalize_email(inp.email)
    now = time.now_utc()

    existing = user_store.find_by_email(email)
    if existing:
        user = user_store.update(
            email,
            {
                "password_hash": password_hash,
                "is_admin": True,
                "name": inp.name,
                "updated_at": now,
            },
        )
        logger.info("Updated existing user %s to admin", email)
        return ProvisionOutput(user=user, outcome=ProvisionOutcome.UPDATED)

    user = user_store.insert(
        User(
            id=uuid4(),
            email=email,
            name=inp.name,
            password_hash=password_hash,
            is_admin=True,
            onboarding_completed=True,
            life_expectancy=DEFAULT_LIFE_EXPECTANCY,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info("Created new admin user %s", email)
    return ProvisionOutput(user=user, outcome=ProvisionOutcome.CREATED)


def run(
    inp: ProvisionInput,
    user_store: UserStorePort,
    hasher: PasswordHasherPort,
    time: TimePort,
) -> ProvisionOutput:
    """Main entry point for the provision component."""
    return run_provision(inp, user_store, hasher, time)
