"""Provision component data models.

Frozen dataclasses for inputs and outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from byteletters.domain.entities import User


class ProvisionOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class ProvisionInput:
    """Target account for provisioning."""

    email: str
    password: str
    name: str

    def __repr__(self) -> str:
        return f"ProvisionInput(email={self.email!r}, name={self.name!r}, password='***')"


@dataclass(frozen=True)
class ProvisionOutput:
    """Result of a completed provisioning run."""

    user: User
    outcome: ProvisionOutcome

    @property
    def created(self) -> bool:
        return self.outcome is ProvisionOutcome.CREATED
