"""Utility modules for Stream Share Core."""

from .import_utils import ImportedCredential, parse_bulk_import, parse_import_line
from .json_utils import dumps, loads
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationContextFilter,
    configure_logging,
    get_logger,
    reset_logging,
)

__all__ = [
    # Bulk import
    "ImportedCredential",
    "parse_bulk_import",
    "parse_import_line",
    # JSON
    "dumps",
    "loads",
    # Logging
    "AzureQueueHandler",
    "ContextAwareLogger",
    "CorrelationContextFilter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
