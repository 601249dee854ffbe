"""
Subscription lifecycle.

Every subscribed service expires ``duration_months`` calendar months after
its activation. This module derives per-service expiry, classifies a
subscriber's services as active, expiring or expired, and filters a
subscriber list into the operator views.
"""

import calendar
import math
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from ..constants import EXPIRING_WINDOW_DAYS
from ..distribution.subscriptions import normalize_subscriptions, parse_subscription_entries
from ..enums import SubscriberView
from ..schemas.subscriber_schema import SubscriberRead
from ..utils.time_utils import ensure_utc, utc_now

SECONDS_PER_DAY = 86_400

ALL_SERVICES = "all"


class SubscriberStanding(BaseModel):
    """Services of one subscriber grouped by expiry state."""

    active_services: List[str] = Field(default_factory=list)
    expiring_services: List[str] = Field(
        default_factory=list, description="Expire within the expiring window (subset of active)"
    )
    expired_services: List[str] = Field(default_factory=list)

    @property
    def has_expired(self) -> bool:
        return bool(self.expired_services)

    @property
    def has_expiring(self) -> bool:
        return bool(self.expiring_services)


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def subscription_expiry(activated_at: datetime, months: int) -> datetime:
    return add_months(ensure_utc(activated_at), months)


def days_until(expiry: datetime, now: Optional[datetime] = None) -> int:
    """Whole days left until ``expiry``, rounded up; negative once it has passed."""
    now = ensure_utc(now or utc_now())
    remaining = (ensure_utc(expiry) - now).total_seconds() / SECONDS_PER_DAY
    return math.ceil(remaining)


def classify_subscriber(
    subscriber: SubscriberRead, now: Optional[datetime] = None
) -> SubscriberStanding:
    """
    Group a subscriber's services by expiry state.

    A service is expired once fewer than zero days remain, and expiring while
    zero to ``EXPIRING_WINDOW_DAYS`` days remain.
    """
    now = ensure_utc(now or utc_now())
    standing = SubscriberStanding()

    for entry in parse_subscription_entries(subscriber.subscriptions, subscriber.purchase_date):
        expiry = subscription_expiry(entry.activated_at, subscriber.duration_months)
        days = days_until(expiry, now)
        if expiry > now:
            standing.active_services.append(entry.service)
        if days < 0:
            standing.expired_services.append(entry.service)
        elif days <= EXPIRING_WINDOW_DAYS:
            standing.expiring_services.append(entry.service)

    return standing


def _expiries(subscriber: SubscriberRead) -> List[datetime]:
    return [
        subscription_expiry(entry.activated_at, subscriber.duration_months)
        for entry in parse_subscription_entries(subscriber.subscriptions, subscriber.purchase_date)
    ]


def _matches_search(subscriber: SubscriberRead, search: str) -> bool:
    lowered = search.lower()
    if lowered in subscriber.phone_number:
        return True
    return bool(subscriber.client_name) and lowered in subscriber.client_name.lower()


def _in_view(subscriber: SubscriberRead, view: SubscriberView, now: datetime) -> bool:
    if view == SubscriberView.ACTIVE:
        return any(expiry > now for expiry in _expiries(subscriber))
    if view == SubscriberView.EXPIRING:
        return any(
            0 <= days_until(expiry, now) <= EXPIRING_WINDOW_DAYS
            for expiry in _expiries(subscriber)
        )
    if view == SubscriberView.EXPIRED:
        return any(expiry < now for expiry in _expiries(subscriber))
    if view == SubscriberView.CONTACTED:
        return subscriber.is_contacted
    return True


def filter_subscribers(
    subscribers: Sequence[SubscriberRead],
    view: SubscriberView = SubscriberView.ALL,
    search: Optional[str] = None,
    service_filter: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[SubscriberRead]:
    """
    Select the subscribers shown in an operator view.

    Args:
        subscribers: Subscriber snapshot, in display order
        view: Which view to build; ``trash`` lists soft-deleted rows only,
            every other view lists non-deleted rows
        search: Case-insensitive match on phone number or client name
        service_filter: Keep subscribers with an entry containing this text;
            ``None`` or ``"all"`` disables the filter (ignored for ``trash``)
        now: Clock for expiry checks (default: current UTC time)

    Returns:
        The matching subscribers, input order preserved
    """
    now = ensure_utc(now or utc_now())
    selected = list(subscribers)

    if search:
        selected = [s for s in selected if _matches_search(s, search)]

    if view == SubscriberView.TRASH:
        return [s for s in selected if s.deleted]

    selected = [s for s in selected if not s.deleted and _in_view(s, view, now)]

    if service_filter and service_filter != ALL_SERVICES:
        wanted = service_filter.lower()
        selected = [
            s
            for s in selected
            if any(
                isinstance(entry, str) and wanted in entry.lower()
                for entry in normalize_subscriptions(s.subscriptions)
            )
        ]

    return selected
