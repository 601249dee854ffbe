"""
Subscriber processing: lifecycle views and merged profiles.
"""

from .subscriber_lifecycle import (
    SubscriberStanding,
    add_months,
    classify_subscriber,
    days_until,
    filter_subscribers,
    subscription_expiry,
)
from .subscriber_profile import build_subscriber_profile

__all__ = [
    "SubscriberStanding",
    "add_months",
    "build_subscriber_profile",
    "classify_subscriber",
    "days_until",
    "filter_subscribers",
    "subscription_expiry",
]
