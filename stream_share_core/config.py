"""
Settings for stream_share_core.

Every section is a pydantic model whose defaults are read from the
environment when the model is built, so ``AppConfig()`` reflects the process
environment at that moment. ``get_config`` caches one instance per process;
tests swap it with ``set_config`` and ``reset_config``.
"""

import os
from typing import Callable, List, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel, QueueName


def _env(name: EnvironmentVariable, default: str = "") -> Callable[[], str]:
    return lambda: os.getenv(name.value, default)


def _env_flag(name: EnvironmentVariable, default: bool = False) -> Callable[[], bool]:
    return lambda: os.getenv(name.value, str(default)).lower() == "true"


class DatabaseConfig(BaseModel):
    """Where credential and client rows are stored (``DATABASE_URL``)."""

    connection_string: str = Field(
        default_factory=_env(EnvironmentVariable.DATABASE_URL, "sqlite:///./stream_share.db"),
        description="SQLAlchemy URL; a local SQLite file unless DATABASE_URL is set",
    )
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    echo: bool = False


class QueueConfig(BaseModel):
    """Azure Storage queue that receives structured log records."""

    connection_string: str = Field(
        default_factory=_env(EnvironmentVariable.AZURE_STORAGE_CONNECTION),
        description="Storage account connection string (AzureWebJobsStorage)",
    )
    logs_queue_name: str = QueueName.LOGS.value
    batch_size: int = Field(default=10, description="Records buffered before a send")


class LoggingConfig(BaseModel):
    level: str = Field(default_factory=_env(EnvironmentVariable.LOG_LEVEL, LogLevel.INFO.value))
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        allowed = [member.value for member in LogLevel]
        if level not in allowed:
            raise ValueError(f"Unknown log level {v!r}; expected one of {', '.join(allowed)}")
        return level


class FeatureFlags(BaseModel):
    """Switches read from ``STREAM_SHARE_*`` environment variables."""

    enable_logs_queue: bool = Field(
        default_factory=_env_flag(EnvironmentVariable.LOGS_QUEUE),
        description="Ship log records to the Azure Storage logs queue",
    )
    enable_demo_mode: bool = Field(
        default_factory=_env_flag(EnvironmentVariable.DEMO_MODE, True),
        description="Serve fictitious credentials to demo phone numbers",
    )
    enable_operation_logging: bool = Field(
        default=True, description="Log ENTER/EXIT lines around service operations"
    )


class DistributionConfig(BaseModel):
    """Settings for the credential distribution layer."""

    demo_phone_numbers: List[str] = Field(
        default_factory=lambda: ["00000000000"],
        description="Phone numbers that always receive the demo credential",
    )
    demo_phone_prefixes: List[str] = Field(
        default_factory=lambda: ["99999"],
        description="Phone number prefixes that always receive the demo credential",
    )
    alert_separator: str = Field(
        default=" | ", description="Joins the capacity alert and the age alert"
    )

    def is_demo_phone(self, phone_number: str) -> bool:
        if phone_number in self.demo_phone_numbers:
            return True
        return any(phone_number.startswith(prefix) for prefix in self.demo_phone_prefixes)


class AppConfig(BaseModel):
    environment: str = Field(default_factory=_env(EnvironmentVariable.APP_ENV, "development"))
    debug: bool = Field(default_factory=_env_flag(EnvironmentVariable.DEBUG))

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    distribution: DistributionConfig = Field(default_factory=DistributionConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls()


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """The process-wide configuration, built from the environment on first use."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    global _config
    _config = config


def reset_config() -> None:
    """Drop the cached configuration; the next get_config() rereads the environment."""
    global _config
    _config = None
