"""
Auth component - Credential checks, account signup, profile edits and admin gating.
"""

from .component import (
    EMAIL_TAKEN,
    INVALID_CREDENTIALS,
    run,
    run_login,
    run_require_admin,
    run_signup,
    run_update_profile,
)
from .models import (
    AuthOutput,
    LoginInput,
    RequireAdminInput,
    SignupInput,
    UpdateProfileInput,
)
from .ports import PasswordHasherPort, PasswordVerifierPort, TimePort, UserStorePort

__all__ = [
    # Entry points
    "run",
    "run_login",
    "run_signup",
    "run_update_profile",
    "run_require_admin",
    # Errors
    "EMAIL_TAKEN",
    "INVALID_CREDENTIALS",
    # Models
    "AuthOutput",
    "LoginInput",
    "SignupInput",
    "UpdateProfileInput",
    "RequireAdminInput",
    # Ports
    "PasswordHasherPort",
    "PasswordVerifierPort",
    "TimePort",
    "UserStorePort",
]
