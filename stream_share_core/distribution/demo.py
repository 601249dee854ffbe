"""
Demo accounts.

Demo phone numbers never see a real login: they get a fictitious credential
built on the fly so the product can be shown without leaking secrets.
"""

import re
from datetime import datetime
from typing import Optional

from ..constants import DEMO_CREDENTIAL_ID, DEMO_EMAIL_DOMAIN, DEMO_PASSWORD, AlertMessage
from ..enums import AssignmentStatus
from ..schemas.assignment_schema import AssignmentResult
from ..schemas.credential_schema import CredentialRead
from ..utils.time_utils import utc_now
from .subscriptions import entry_service

_NON_SLUG = re.compile(r"[^a-z0-9]")


def service_slug(service_name: str) -> str:
    """``"Viki Pass|2024-05-01"`` -> ``"vikipass"``."""
    return _NON_SLUG.sub("", entry_service(service_name).lower())


def demo_assignment(service_name: str, now: Optional[datetime] = None) -> AssignmentResult:
    """Fictitious assignment for a demo subscriber."""
    clean_name = entry_service(service_name)
    credential = CredentialRead(
        id=DEMO_CREDENTIAL_ID,
        service=clean_name or service_name,
        email=f"demo.{service_slug(service_name)}@{DEMO_EMAIL_DOMAIN}",
        password=DEMO_PASSWORD,
        published_at=now or utc_now(),
        is_visible=True,
    )
    return AssignmentResult(
        credential=credential,
        alert=AlertMessage.DEMO_MODE.value,
        days_active=1,
        status=AssignmentStatus.DEMO,
    )
