"""
Error taxonomy for account provisioning and the user store.

None of these are retried; callers at the edge (CLI, API) translate them
into an exit status or an HTTP error.
"""


class ProvisionError(Exception):
    """Base class for failures that abort provisioning."""


class HashingError(ProvisionError):
    """Raised when a password cannot be hashed (bad input or bad cost)."""


class StoreError(ProvisionError):
    """Base class for user store failures."""


class StoreUnavailable(StoreError):
    """Raised when the store cannot be reached or a query fails."""


class StoreWriteConflict(StoreError):
    """Raised when a write violates a store constraint."""

    def __init__(self, email: str, detail: str = "") -> None:
        self.email = email
        message = f"Write conflict for user {email}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
