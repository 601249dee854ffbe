"""
Constants and enums for the Stream Share Core library.

This module centralizes the magic strings used throughout the library:
environment variable names, service keywords and the operator/subscriber
facing alert texts produced by the distribution engine.
"""

from enum import Enum


class QueueName(str, Enum):
    """Standard queue names used by the library."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"
    DEMO_MODE = "STREAM_SHARE_DEMO_MODE"
    LOGS_QUEUE = "STREAM_SHARE_LOGS_QUEUE"
    DB_HOST = "DB_HOST"
    DB_PORT = "DB_PORT"
    DB_NAME = "DB_NAME"
    DB_USER = "DB_USER"
    DB_PASSWORD = "DB_PASSWORD"


class ServiceKeyword(str, Enum):
    """Lower-case keywords used to recognise streaming services by substring."""

    VIKI = "viki"
    KOCOWA = "kocowa"
    IQIYI = "iqiyi"
    WETV = "wetv"
    DRAMABOX = "dramabox"

# Subscription field encodings
SUBSCRIPTION_TIMESTAMP_SEPARATOR = "|"
COMMA_SEPARATOR = ","
PLUS_SEPARATOR = "+"

# Default per-credential capacity for services with no explicit rule
DEFAULT_BUCKET_LIMIT = 5

# Subscriber "expiring" window, in days
EXPIRING_WINDOW_DAYS = 5

# Placeholder display name used when a client has none
DEFAULT_CLIENT_NAME = "Dorameira"

# Demo mode
DEMO_CREDENTIAL_ID = "demo-safe-cred"
DEMO_EMAIL_DOMAIN = "eudorama.com"
DEMO_PASSWORD = "senha_demo_protegida"


class AlertMessage(str, Enum):
    """Subscriber-facing alert texts."""

    NO_CREDENTIAL = "No account available. Please contact support."
    CAPACITY_EXCEEDED = (
        "⚠️ SYSTEM FULL: this login is shared by too many people. "
        "Create a new {service} account urgently!"
    )
    VIKI_EXPIRED = "⚠️ Account expired (14 days). Wait for a new one!"
    VIKI_LAST_DAY = "⚠️ Attention: last day of this login!"
    VIKI_FINAL_CYCLE = "⚠️ Final cycle ({days}/14 days)."
    KOCOWA_EXPIRED = "⚠️ Account expired. Wait for a new one!"
    KOCOWA_PASSWORD_SOON = "⚠️ Attention: the password changes soon!"
    IQIYI_UPDATE_IMMINENT = "⚠️ Account update imminent."
    LOGIN_TOO_OLD = "⚠️ Login is very old."
    DEMO_MODE = "Demo mode: fictitious data (security)"


class HealthLabel(str, Enum):
    """Operator-facing credential health labels."""

    INFINITE = "Lifetime"
    EXPIRED_AGO = "Expired {days}d ago"
    EXPIRES_TODAY = "Expires TODAY"
    RENEW_IN = "Renew in {days}d"
    DAYS_LEFT = "{days} days left"
