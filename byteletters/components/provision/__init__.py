"""Provision component - admin account seeding.

Idempotently creates or updates the administrative account in the user store.
"""

from .component import run, run_provision
from .models import ProvisionInput, ProvisionOutcome, ProvisionOutput
from .ports import PasswordHasherPort, TimePort, UserStorePort

__all__ = [
    # Entry points
    "run",
    "run_provision",
    # Models
    "ProvisionInput",
    "ProvisionOutcome",
    "ProvisionOutput",
    # Ports
    "PasswordHasherPort",
    "TimePort",
    "UserStorePort",
]
