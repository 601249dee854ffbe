"""
Credential distribution engine.

Given a snapshot of credentials and subscribers, decides which shared login
each subscriber of a service uses (forward assignment) and which subscribers
share a given login (reverse assignment).

Both directions are built on the same two orderings:

* the **pool**: visible credentials of the service, oldest first;
* the **roster**: non-deleted subscribers of the service, by phone number.

A subscriber's roster index and the service's strategy fully determine its
credential. The reverse direction slices the roster with the same rules, so
the credentials of a service always partition its roster exactly. Nothing is
cached or stored; every call recomputes from the snapshot it is given.
"""

import re
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from ..constants import AlertMessage
from ..enums import AssignmentStatus, StrategyType
from ..schemas.assignment_schema import AssignmentResult
from ..schemas.credential_schema import CredentialRead
from ..schemas.subscriber_schema import SubscriberRead
from ..utils.logger import get_logger
from .alerts import account_alert
from .overrides import resolve_override
from .strategy import Strategy, select_strategy
from .subscriptions import entry_service, has_service

DEFAULT_ALERT_SEPARATOR = " | "

_NON_DIGITS = re.compile(r"\D")


def service_matches(credential_service: str, service_name: str) -> bool:
    """Bidirectional case-insensitive containment between two service names."""
    a = credential_service.lower()
    b = service_name.lower()
    return a in b or b in a


def build_credential_pool(
    service_name: str, credentials: Sequence[CredentialRead]
) -> List[CredentialRead]:
    """Visible credentials of the service, oldest first (ties keep input order)."""
    pool = [
        credential
        for credential in credentials
        if credential.is_visible and service_matches(credential.service, service_name)
    ]
    # list.sort is stable
    pool.sort(key=lambda credential: credential.published_at)
    return pool


def build_roster(service_name: str, subscribers: Sequence[SubscriberRead]) -> List[SubscriberRead]:
    """Non-deleted subscribers of the service, ordered by phone number."""
    roster = [
        subscriber
        for subscriber in subscribers
        if not subscriber.deleted and has_service(subscriber.subscriptions, service_name)
    ]
    roster.sort(key=lambda subscriber: subscriber.phone_number)
    return roster


def phone_digits(phone_number: str) -> str:
    return _NON_DIGITS.sub("", phone_number)


def roster_position(subscriber: SubscriberRead, roster: Sequence[SubscriberRead]) -> Optional[int]:
    """Index of the subscriber in the roster, matching phone numbers on digits only."""
    wanted = phone_digits(subscriber.phone_number)
    for index, member in enumerate(roster):
        if phone_digits(member.phone_number) == wanted:
            return index
    return None


def pool_index_for(position: int, pool_size: int, strategy: Strategy) -> Tuple[int, bool]:
    """
    Pool index for a roster position under a strategy.

    Returns:
        ``(pool_index, overflowed)``; ``overflowed`` is only ever True for a
        bucket strategy whose total capacity is exceeded.
    """
    if strategy.type == StrategyType.SINGLE:
        return 0, False
    if strategy.type == StrategyType.ROUND_ROBIN:
        return position % pool_size, False

    if position < strategy.capacity(pool_size):
        return position // strategy.limit, False
    # Overflow spreads round-robin over the whole pool until more logins exist
    return position % pool_size, True


def merge_alerts(
    capacity_alert: Optional[str],
    age_alert: Optional[str],
    separator: str = DEFAULT_ALERT_SEPARATOR,
) -> Optional[str]:
    """Capacity alert first, then the age alert."""
    if capacity_alert and age_alert:
        return f"{capacity_alert}{separator}{age_alert}"
    return capacity_alert or age_alert


def _result_for(
    credential: CredentialRead,
    service_name: str,
    status: AssignmentStatus,
    now: Optional[datetime],
    capacity_alert: Optional[str] = None,
    separator: str = DEFAULT_ALERT_SEPARATOR,
) -> AssignmentResult:
    age = account_alert(service_name, credential.published_at, now)
    return AssignmentResult(
        credential=credential,
        alert=merge_alerts(capacity_alert, age.alert, separator),
        days_active=age.days_active,
        status=status,
    )


def assign_credential(
    subscriber: SubscriberRead,
    service_name: str,
    credentials: Sequence[CredentialRead],
    subscribers: Sequence[SubscriberRead],
    now: Optional[datetime] = None,
    alert_separator: str = DEFAULT_ALERT_SEPARATOR,
) -> AssignmentResult:
    """
    Resolve the login a subscriber uses for a service.

    Args:
        subscriber: The subscriber asking for a login
        service_name: Service the login is for
        credentials: Credential snapshot
        subscribers: Subscriber snapshot the roster is built from
        now: Clock used for age alerts (default: current UTC time)
        alert_separator: Joins capacity and age alerts

    Returns:
        The assignment. An empty pool yields ``credential=None`` with status
        ``NO_CREDENTIAL``; every other path returns a credential.
    """
    logger = get_logger()
    # Callers may pass a stored "service|timestamp" entry
    service_name = entry_service(service_name) or service_name

    pinned = resolve_override(subscriber, service_name, credentials)
    if pinned is not None:
        return _result_for(pinned, service_name, AssignmentStatus.OVERRIDDEN, now)

    pool = build_credential_pool(service_name, credentials)
    if not pool:
        logger.warning(
            "No credential available",
            extra={"service_name": service_name, "phone_number": subscriber.phone_number},
        )
        return AssignmentResult(
            credential=None,
            alert=AlertMessage.NO_CREDENTIAL.value,
            days_active=0,
            status=AssignmentStatus.NO_CREDENTIAL,
        )

    roster = build_roster(service_name, subscribers)
    position = roster_position(subscriber, roster)
    if position is None:
        # e.g. subscriber created after the snapshot was taken
        return _result_for(pool[0], service_name, AssignmentStatus.NOT_IN_ROSTER, now)

    strategy = select_strategy(service_name)
    pool_index, overflowed = pool_index_for(position, len(pool), strategy)
    credential = pool[pool_index]

    if not overflowed:
        return _result_for(credential, service_name, AssignmentStatus.ASSIGNED, now)

    logger.warning(
        "Credential pool over capacity",
        extra={
            "service_name": service_name,
            "pool_size": len(pool),
            "roster_size": len(roster),
            "capacity": strategy.capacity(len(pool)),
            "credential_id": credential.id,
        },
    )
    capacity_alert = AlertMessage.CAPACITY_EXCEEDED.value.format(service=service_name)
    return _result_for(
        credential,
        service_name,
        AssignmentStatus.OVERFLOW,
        now,
        capacity_alert=capacity_alert,
        separator=alert_separator,
    )


def pool_members(
    pool_index: int, pool_size: int, roster: Sequence[SubscriberRead], strategy: Strategy
) -> List[SubscriberRead]:
    """
    Roster members served by the credential at ``pool_index``.

    single: index 0 takes the whole roster. round_robin: positions with
    ``i % n == k``. bucket: the slice ``[k*limit, (k+1)*limit)`` plus the
    overflow positions ``i >= n*limit`` with ``i % n == k``.
    """
    if strategy.type == StrategyType.SINGLE:
        return list(roster) if pool_index == 0 else []

    if strategy.type == StrategyType.ROUND_ROBIN:
        return [member for i, member in enumerate(roster) if i % pool_size == pool_index]

    start = pool_index * strategy.limit
    members = list(roster[start : start + strategy.limit])

    capacity = strategy.capacity(pool_size)
    if len(roster) > capacity:
        members.extend(
            roster[i] for i in range(capacity, len(roster)) if i % pool_size == pool_index
        )
    return members


def assigned_subscribers(
    credential: CredentialRead,
    credentials: Sequence[CredentialRead],
    subscribers: Sequence[SubscriberRead],
) -> List[SubscriberRead]:
    """
    Subscribers currently mapped to a credential, in roster order.

    The credential's own service name selects the pool, roster and strategy.
    A credential absent from its pool (hidden, or not in the snapshot) serves
    nobody.
    """
    pool = build_credential_pool(credential.service, credentials)
    pool_index = next((i for i, c in enumerate(pool) if c.id == credential.id), None)
    if pool_index is None:
        return []

    roster = build_roster(credential.service, subscribers)
    strategy = select_strategy(credential.service)
    return pool_members(pool_index, len(pool), roster, strategy)


def count_assigned_subscribers(
    credential: CredentialRead,
    credentials: Sequence[CredentialRead],
    subscribers: Sequence[SubscriberRead],
) -> int:
    return len(assigned_subscribers(credential, credentials, subscribers))


def partition_roster(
    service_name: str,
    credentials: Sequence[CredentialRead],
    subscribers: Sequence[SubscriberRead],
) -> Dict[str, List[SubscriberRead]]:
    """
    Split a service's roster over its pool.

    Returns:
        Credential id -> assigned subscribers, in pool order. Empty when the
        service has no visible credential.
    """
    service_name = entry_service(service_name) or service_name
    pool = build_credential_pool(service_name, credentials)
    roster = build_roster(service_name, subscribers)
    strategy = select_strategy(service_name)

    partition: Dict[str, List[SubscriberRead]] = OrderedDict()
    for index, credential in enumerate(pool):
        partition[credential.id] = pool_members(index, len(pool), roster, strategy)
    return partition
