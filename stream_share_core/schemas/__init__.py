"""Pydantic schemas for Stream Share Core records and results."""

from .assignment_schema import AccountAlert, AssignmentResult, CredentialHealth, CredentialLoad
from .credential_schema import CredentialBase, CredentialCreate, CredentialRead
from .subscriber_schema import (
    SubscriberBase,
    SubscriberCreate,
    SubscriberProfile,
    SubscriberRead,
    SubscriptionDetail,
)

__all__ = [
    "AccountAlert",
    "AssignmentResult",
    "CredentialHealth",
    "CredentialLoad",
    "CredentialBase",
    "CredentialCreate",
    "CredentialRead",
    "SubscriberBase",
    "SubscriberCreate",
    "SubscriberProfile",
    "SubscriberRead",
    "SubscriptionDetail",
]
