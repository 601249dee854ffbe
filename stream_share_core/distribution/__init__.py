"""
Credential distribution.

Pure functions that map subscribers onto shared credentials, select the
per-service distribution strategy, normalize legacy subscription fields and
derive credential age alerts.
"""

from .alerts import account_alert, credential_health, cycle_days
from .demo import demo_assignment, service_slug
from .engine import (
    assign_credential,
    assigned_subscribers,
    build_credential_pool,
    build_roster,
    count_assigned_subscribers,
    partition_roster,
)
from .overrides import find_override_id, resolve_override
from .strategy import Strategy, select_strategy
from .subscriptions import (
    SubscriptionEntry,
    classify_subscriptions,
    encode_subscriptions,
    has_service,
    normalize_subscriptions,
    parse_subscription_entries,
    service_names,
)

__all__ = [
    # Alerts
    "account_alert",
    "credential_health",
    "cycle_days",
    # Demo accounts
    "demo_assignment",
    "service_slug",
    # Engine
    "assign_credential",
    "assigned_subscribers",
    "build_credential_pool",
    "build_roster",
    "count_assigned_subscribers",
    "partition_roster",
    # Overrides
    "find_override_id",
    "resolve_override",
    # Strategy
    "Strategy",
    "select_strategy",
    # Subscriptions
    "SubscriptionEntry",
    "classify_subscriptions",
    "encode_subscriptions",
    "has_service",
    "normalize_subscriptions",
    "parse_subscription_entries",
    "service_names",
]
