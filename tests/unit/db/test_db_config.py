"""Tests for database configuration and the process-wide manager."""

import os
from unittest.mock import patch

import pytest

from stream_share_core.db import db_config as db_config_module
from stream_share_core.db.db_config import (
    DatabaseConfig,
    DatabaseManager,
    get_db_manager,
    has_db_manager,
    set_db_manager,
)
from stream_share_core.exceptions import ErrorCode, ServiceError, ValidationError


@pytest.fixture
def no_manager():
    previous = db_config_module._db_manager
    set_db_manager(None)
    yield
    set_db_manager(previous)


class TestConnectionString:
    def test_explicit_url_wins(self):
        config = DatabaseConfig(db_type="postgres", url="sqlite:///./local.db")
        assert config.get_connection_string() == "sqlite:///./local.db"
        assert config.is_sqlite

    def test_sqlite_defaults_to_memory(self):
        config = DatabaseConfig(db_type="sqlite")
        assert config.get_connection_string() == "sqlite:///:memory:"
        assert config.is_in_memory

    def test_postgres_from_parts(self):
        config = DatabaseConfig(
            host="db.internal", port="6543", database="share", username="app", password="pw"
        )
        assert config.get_connection_string() == "postgresql://app:pw@db.internal:6543/share"
        assert not config.is_sqlite

    def test_postgres_missing_parts(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(host="db.internal").get_connection_string()

        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED
        assert exc_info.value.context["missing"] == ["database", "username", "password"]

    def test_unsupported_type(self):
        with pytest.raises(ValidationError):
            DatabaseConfig(db_type="oracle").get_connection_string()

    def test_repr_hides_password(self):
        config = DatabaseConfig(url="postgresql://app:secret@db/share")
        assert "secret" not in repr(config)


class TestFromEnv:
    def test_database_url(self):
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite:///./share.db"}, clear=True):
            config = DatabaseConfig.from_env()

        assert config.db_type == "sqlite"
        assert config.url == "sqlite:///./share.db"
        assert config.development_mode is True

    def test_db_host_selects_postgres_parts(self):
        env = {"DB_HOST": "pg", "DB_NAME": "share", "DB_USER": "app", "DB_PASSWORD": "pw"}
        with patch.dict(os.environ, env, clear=True):
            config = DatabaseConfig.from_env()

        assert config.url is None
        assert config.get_connection_string() == "postgresql://app:pw@pg:5432/share"
        assert config.development_mode is False


class TestDatabaseManager:
    def test_drop_tables_refused_outside_development(self):
        manager = DatabaseManager(DatabaseConfig(db_type="sqlite"))
        try:
            with pytest.raises(ServiceError):
                manager.drop_tables()
        finally:
            manager.close()

    def test_get_db_manager_requires_initialization(self, no_manager):
        assert not has_db_manager()
        with pytest.raises(ServiceError) as exc_info:
            get_db_manager()
        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR

    def test_set_db_manager(self, no_manager):
        manager = DatabaseManager(DatabaseConfig(db_type="sqlite", development_mode=True))
        set_db_manager(manager)
        try:
            assert get_db_manager() is manager
        finally:
            manager.close()
