"""
Enums used across the stream_share_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class StrategyType(str, enum.Enum):
    """Ways a service's credential pool is shared among its subscribers."""

    SINGLE = "single"
    ROUND_ROBIN = "round_robin"
    BUCKET = "bucket"


class HealthStatus(str, enum.Enum):
    """Operator-facing renewal state of a credential."""

    INFINITE = "infinite"
    EXPIRED = "expired"
    WARNING = "warning"
    OK = "ok"


class AssignmentStatus(str, enum.Enum):
    """How a forward assignment was resolved."""

    ASSIGNED = "assigned"
    OVERRIDDEN = "overridden"
    OVERFLOW = "overflow"
    NOT_IN_ROSTER = "not_in_roster"
    NO_CREDENTIAL = "no_credential"
    DEMO = "demo"


class SubscriptionEncoding(str, enum.Enum):
    """Storage encodings accepted for a subscriber's subscription field."""

    NATIVE_LIST = "native_list"
    SINGLE = "single"
    COMMA_JOINED = "comma_joined"
    PLUS_JOINED = "plus_joined"
    EMPTY = "empty"
    MALFORMED = "malformed"


class SubscriberView(str, enum.Enum):
    """Operator views over the subscriber list."""

    ALL = "all"
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    CONTACTED = "contacted"
    TRASH = "trash"
