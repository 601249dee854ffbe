"""
Credential age alerts and health classification.

Two calculations live here and are deliberately kept apart:

* ``account_alert`` is what a subscriber sees next to their login. It counts
  calendar days (UTC dates) since publication, with the publication day
  counting as day one.
* ``credential_health`` is what operators see on the credential list. It
  floors the raw elapsed time in whole days and compares it with a
  per-service renewal cycle.

The two produce different day counts for the same credential and their
per-service thresholds overlap without matching. Both are reproduced as they
are used today; reconciling them is a product decision.
"""

import math
from datetime import datetime
from typing import Optional, Tuple

from ..constants import AlertMessage, HealthLabel, ServiceKeyword
from ..enums import HealthStatus
from ..schemas.assignment_schema import AccountAlert, CredentialHealth
from ..utils.time_utils import ensure_utc, utc_now

SECONDS_PER_DAY = 86_400

DEFAULT_CYCLE_DAYS = 30
WARNING_WINDOW_DAYS = 2

# Renewal cycle per service, checked in order by substring
CYCLE_DAYS: Tuple[Tuple[str, int], ...] = (
    (ServiceKeyword.VIKI.value, 14),
    (ServiceKeyword.KOCOWA.value, 25),
    (ServiceKeyword.IQIYI.value, 30),
    (ServiceKeyword.WETV.value, 30),
)


def calendar_days_active(created_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole UTC calendar days between publication and today, plus one."""
    now = ensure_utc(now or utc_now())
    return (now.date() - ensure_utc(created_at).date()).days + 1


def elapsed_days(created_at: datetime, now: Optional[datetime] = None) -> int:
    """Floor of the raw elapsed time since publication, in days."""
    now = ensure_utc(now or utc_now())
    elapsed = (now - ensure_utc(created_at)).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)


def _age_alert_text(service_name: str, days: int) -> Optional[str]:
    name = service_name.lower()

    if ServiceKeyword.VIKI.value in name:
        if days >= 14:
            return AlertMessage.VIKI_EXPIRED.value
        if days == 13:
            return AlertMessage.VIKI_LAST_DAY.value
        if days >= 10:
            return AlertMessage.VIKI_FINAL_CYCLE.value.format(days=days)
        return None

    if ServiceKeyword.KOCOWA.value in name:
        if days >= 30:
            return AlertMessage.KOCOWA_EXPIRED.value
        if days >= 28:
            return AlertMessage.KOCOWA_PASSWORD_SOON.value
        return None

    if ServiceKeyword.IQIYI.value in name:
        if days >= 29:
            return AlertMessage.IQIYI_UPDATE_IMMINENT.value
        return None

    if days >= 35:
        return AlertMessage.LOGIN_TOO_OLD.value
    return None


def account_alert(
    service_name: str, created_at: datetime, now: Optional[datetime] = None
) -> AccountAlert:
    """
    Subscriber-facing alert for a credential of ``service_name``.

    Thresholds (calendar days, day one = publication day):
    Viki final cycle from day 10, last day on 13, expired from 14;
    Kocowa warning from 28, expired from 30; IQIYI warning from 29;
    everything else warns from day 35.
    """
    days = calendar_days_active(created_at, now)
    return AccountAlert(alert=_age_alert_text(service_name, days), days_active=days)


def cycle_days(service_name: str) -> Optional[int]:
    """Renewal cycle length for a service; None for lifetime (DramaBox) logins."""
    name = service_name.lower()
    for keyword, days in CYCLE_DAYS:
        if keyword in name:
            return days
    if ServiceKeyword.DRAMABOX.value in name:
        return None
    return DEFAULT_CYCLE_DAYS


def credential_health(
    service_name: str, created_at: datetime, now: Optional[datetime] = None
) -> CredentialHealth:
    """
    Operator-facing renewal state of a credential.

    ``days_remaining = cycle - floor(elapsed days)``; zero or less is expired,
    up to two days is a warning, anything else (including brand new logins)
    is ok. DramaBox logins never expire.
    """
    cycle = cycle_days(service_name)
    if cycle is None:
        return CredentialHealth(status=HealthStatus.INFINITE, label=HealthLabel.INFINITE.value)

    days_active = elapsed_days(created_at, now)
    days_remaining = cycle - days_active

    if days_remaining < 0:
        status = HealthStatus.EXPIRED
        label = HealthLabel.EXPIRED_AGO.value.format(days=abs(days_remaining))
    elif days_remaining == 0:
        status = HealthStatus.EXPIRED
        label = HealthLabel.EXPIRES_TODAY.value
    elif days_remaining <= WARNING_WINDOW_DAYS:
        status = HealthStatus.WARNING
        label = HealthLabel.RENEW_IN.value.format(days=days_remaining)
    else:
        status = HealthStatus.OK
        label = HealthLabel.DAYS_LEFT.value.format(days=days_remaining)

    return CredentialHealth(
        status=status,
        label=label,
        days_active=days_active,
        days_remaining=days_remaining,
        cycle_days=cycle,
    )
