"""
Result schemas produced by the distribution engine and the health calculator.

Nothing here is persisted: every result is recomputed from the current
credential/subscriber snapshot.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..enums import AssignmentStatus, HealthStatus
from .credential_schema import CredentialRead


class AccountAlert(BaseModel):
    """Subscriber-facing age alert for an assigned credential."""

    alert: Optional[str] = None
    days_active: int = Field(description="Calendar days since publication, counting day one")


class AssignmentResult(BaseModel):
    """Outcome of resolving one subscriber's login for one service."""

    credential: Optional[CredentialRead] = None
    alert: Optional[str] = None
    days_active: int = 0
    status: AssignmentStatus = AssignmentStatus.ASSIGNED

    @property
    def has_credential(self) -> bool:
        return self.credential is not None


class CredentialHealth(BaseModel):
    """Operator-facing renewal classification of a credential."""

    status: HealthStatus
    label: str
    days_active: Optional[int] = None
    days_remaining: Optional[int] = None
    cycle_days: Optional[int] = None


class CredentialLoad(BaseModel):
    """How many subscribers a credential currently serves, and its health."""

    credential_id: str
    service: str
    email: str
    assigned_count: int
    health: CredentialHealth
