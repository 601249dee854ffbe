"""
Manual credential overrides.

An operator can pin a subscriber to a specific credential per service. The
pin is consulted before any pool or strategy logic runs.
"""

from typing import Dict, Optional, Sequence

from ..schemas.credential_schema import CredentialRead
from ..schemas.subscriber_schema import SubscriberRead
from .subscriptions import entry_service


def find_override_id(overrides: Dict[str, str], service_name: str) -> Optional[str]:
    """
    Look up the pinned credential id for a service.

    Exact key first, then the first key (in map order) that is a
    case-insensitive substring of the service name.
    """
    if not overrides:
        return None

    clean_service = entry_service(service_name)
    assigned_id = overrides.get(clean_service)
    if assigned_id:
        return assigned_id

    lowered = clean_service.lower()
    for key, credential_id in overrides.items():
        if key.lower() in lowered and credential_id:
            return credential_id
    return None


def resolve_override(
    subscriber: SubscriberRead, service_name: str, credentials: Sequence[CredentialRead]
) -> Optional[CredentialRead]:
    """
    The credential a subscriber is pinned to for a service, if any.

    A pin pointing at a credential that is not in the current snapshot is
    treated as absent.
    """
    credential_id = find_override_id(subscriber.manual_credentials, service_name)
    if credential_id is None:
        return None
    return next((c for c in credentials if c.id == credential_id), None)
