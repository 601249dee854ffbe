"""
Service layer: storage-backed operations around the distribution engine.
"""

from .assignment_service import AssignmentService
from .base_service import SessionManagedService
from .credential_service import CredentialService
from .subscriber_service import SubscriberService

__all__ = [
    "AssignmentService",
    "CredentialService",
    "SessionManagedService",
    "SubscriberService",
]
