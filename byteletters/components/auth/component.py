import logging
from typing import Any
from uuid import uuid4

from byteletters.domain.entities import (
    MIN_PASSWORD_LENGTH,
    User,
    is_valid_email,
    normalize_email,
)
from byteletters.domain.errors import HashingError
from byteletters.domain.inbox import DEFAULT_INBOX_DOMAIN, generate_inbox_email

from .models import (
    AuthOutput,
    LoginInput,
    RequireAdminInput,
    SignupInput,
    UpdateProfileInput,
)
from .ports import PasswordHasherPort, PasswordVerifierPort, TimePort, UserStorePort

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_TAKEN = "Email already registered"


def run_login(
    inp: LoginInput, user_store: UserStorePort, hasher: PasswordVerifierPort
) -> AuthOutput:
    if not inp.email or not inp.password:
        return AuthOutput(success=False, error="Email and password required")

    user = user_store.find_by_email(normalize_email(inp.email))
    if not user:
        # Same message as a bad password so emails cannot be enumerated
        return AuthOutput(success=False, error=INVALID_CREDENTIALS)

    if not user.has_password:
        return AuthOutput(success=False, error="Please sign in with Google")

    if not hasher.verify_password(inp.password, user.password_hash):
        return AuthOutput(success=False, error=INVALID_CREDENTIALS)

    return AuthOutput(user=user, success=True)


def run_signup(
    inp: SignupInput,
    user_store: UserStorePort,
    hasher: PasswordHasherPort,
    time: TimePort,
    inbox_domain: str = DEFAULT_INBOX_DOMAIN,
) -> AuthOutput:
    if not inp.email or not inp.password or not inp.name or not inp.birth_date:
        return AuthOutput(success=False, error="All fields are required")

    if len(inp.password) < MIN_PASSWORD_LENGTH:
        return AuthOutput(
            success=False,
            error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    email = normalize_email(inp.email)
    if not is_valid_email(email):
        return AuthOutput(success=False, error="Invalid email format")

    if user_store.find_by_email(email):
        return AuthOutput(success=False, error=EMAIL_TAKEN)

    try:
        password_hash = hasher.hash_password(inp.password)
    except HashingError as e:
        return AuthOutput(success=False, error=f"Password not accepted: {e}")

    inbox_email = generate_inbox_email(
        inp.name,
        is_taken=lambda candidate: user_store.find_by_inbox_email(candidate) is not None,
        domain=inbox_domain,
    )
    now = time.now_utc()

    user = user_store.insert(
        User(
            id=uuid4(),
            email=email,
            name=inp.name.strip(),
            password_hash=password_hash,
            birth_date=inp.birth_date,
            inbox_email=inbox_email,
            enable_recommendations=(
                True if inp.enable_recommendations is None else inp.enable_recommendations
            ),
            onboarding_completed=True,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info("Created account %s", user.id)
    return AuthOutput(user=user, success=True)


def run_update_profile(
    inp: UpdateProfileInput, user_store: UserStorePort, time: TimePort
) -> AuthOutput:
    fields: dict[str, Any] = {}
    if inp.name is not None:
        if not inp.name.strip():
            return AuthOutput(user=inp.user, success=False, error="Name must not be blank")
        fields["name"] = inp.name.strip()
    if inp.birth_date is not None:
        fields["birth_date"] = inp.birth_date
    if inp.life_expectancy is not None:
        fields["life_expectancy"] = inp.life_expectancy
    if inp.enable_recommendations is not None:
        fields["enable_recommendations"] = inp.enable_recommendations

    # Onboarding is done once both name and birth date have been supplied
    if inp.name and inp.birth_date:
        fields["onboarding_completed"] = True

    fields["updated_at"] = time.now_utc()
    user = user_store.update(inp.user.email, fields)
    return AuthOutput(user=user, success=True)


def run_require_admin(
    inp: RequireAdminInput, user_store: UserStorePort | None = None
) -> AuthOutput:
    user = inp.user
    whitelisted = normalize_email(user.email) in inp.admin_emails
    if not (user.is_admin or whitelisted):
        logger.warning("Unauthorized admin access attempt by %s", user.email)
        return AuthOutput(user=user, success=False, error="Admin access required")

    # Persist the flag for whitelisted users so it survives whitelist changes
    if whitelisted and not user.is_admin and user_store is not None:
        user = user_store.update(user.email, {"is_admin": True})
        logger.info("Promoted whitelisted user %s to admin", user.email)

    return AuthOutput(user=user, success=True)


def run(
    inp: LoginInput | SignupInput | UpdateProfileInput | RequireAdminInput,
    *,
    user_store: UserStorePort | None = None,
    hasher: Any | None = None,
    time: TimePort | None = None,
    inbox_domain: str = DEFAULT_INBOX_DOMAIN,
) -> AuthOutput:
    if isinstance(inp, LoginInput):
        assert user_store and hasher
        return run_login(inp, user_store, hasher)

    elif isinstance(inp, SignupInput):
        assert user_store and hasher and time
        return run_signup(inp, user_store, hasher, time, inbox_domain)

    elif isinstance(inp, UpdateProfileInput):
        assert user_store and time
        return run_update_profile(inp, user_store, time)

    elif isinstance(inp, RequireAdminInput):
        return run_require_admin(inp, user_store)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
