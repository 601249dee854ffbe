"""
SQLAlchemy storage models for Stream Share Core.

This module provides a common entry point for the storage layer.
"""

from .db_base import JSON, TimestampMixin, UUIDMixin, utc_now
from .db_client_models import Client
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    get_app_database_config,
    get_db_manager,
    has_db_manager,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_credential_models import StreamingCredential

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "get_app_database_config",
    "get_db_manager",
    "has_db_manager",
    "import_all_models",
    "initialize_db",
    "set_db_manager",
    # Models
    "Client",
    "StreamingCredential",
]
