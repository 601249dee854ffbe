"""
Database engine and session management for the credential and client tables.

The same models run against a local SQLite file during development, an
in-memory SQLite database in tests and PostgreSQL in production. One
process-wide ``DatabaseManager`` is installed with ``initialize_db`` and
looked up by services that are not handed a session.
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..constants import EnvironmentVariable
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils import get_logger

Base: Any = declarative_base()

SQLITE_MEMORY = ":memory:"


class DatabaseConfig(BaseModel):
    """
    Where the credential and client tables live.

    ``url`` wins when set; otherwise the URL is assembled from the parts.
    """

    db_type: str = "postgres"
    database: str = ""
    host: str = ""
    port: str = "5432"
    username: str = ""
    password: str = ""
    url: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    # Allows drop_tables(); set for SQLite and test databases only
    development_mode: bool = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """
        Build from the application config.

        ``DATABASE_URL`` (or its SQLite default) is used unless ``DB_HOST`` is
        set, in which case the PostgreSQL parts come from the ``DB_*``
        variables.
        """
        app_database = get_config().database
        pool_settings = {
            "pool_size": app_database.pool_size,
            "max_overflow": app_database.max_overflow,
            "pool_timeout": app_database.pool_timeout,
            "echo": app_database.echo,
        }

        host = os.getenv(EnvironmentVariable.DB_HOST.value)
        if host:
            return cls(
                db_type="postgres",
                host=host,
                port=os.getenv(EnvironmentVariable.DB_PORT.value, "5432"),
                database=os.getenv(EnvironmentVariable.DB_NAME.value, "stream_share"),
                username=os.getenv(EnvironmentVariable.DB_USER.value, "postgres"),
                password=os.getenv(EnvironmentVariable.DB_PASSWORD.value, ""),
                **pool_settings,
            )

        url = app_database.connection_string
        is_sqlite = url.startswith("sqlite")
        return cls(
            db_type="sqlite" if is_sqlite else "postgres",
            url=url,
            development_mode=is_sqlite,
            **pool_settings,
        )

    def get_connection_string(self) -> str:
        if self.url:
            return self.url

        kind = self.db_type.lower()
        if kind == "sqlite":
            return f"sqlite:///{self.database or SQLITE_MEMORY}"
        if kind != "postgres":
            raise ValidationError(
                f"Unsupported database type: {self.db_type}",
                field="db_type",
                error_code=ErrorCode.INVALID_FORMAT,
                value=self.db_type,
            )

        missing = [
            name for name in ("host", "database", "username", "password") if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(
                "Incomplete PostgreSQL settings",
                field="database_config",
                error_code=ErrorCode.MISSING_REQUIRED,
                missing=missing,
            )

        return URL.create(
            "postgresql",
            username=self.username,
            password=self.password,
            host=self.host,
            port=int(self.port),
            database=self.database,
        ).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.get_connection_string().startswith("sqlite")

    @property
    def is_in_memory(self) -> bool:
        connection_string = self.get_connection_string()
        return connection_string in ("sqlite://", f"sqlite:///{SQLITE_MEMORY}")

    def __repr__(self) -> str:
        target = self.url.split("@")[-1] if self.url else f"{self.host}:{self.port}/{self.database}"
        return f"DatabaseConfig(db_type='{self.db_type}', target='{target}')"


class DatabaseManager:
    """Owns the engine and a thread-scoped session registry."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self) -> Engine:
        url = self.config.get_connection_string()

        if not self.config.is_sqlite:
            return create_engine(
                url,
                echo=self.config.echo,
                pool_size=self.config.pool_size,
                max_overflow=self.config.max_overflow,
                pool_timeout=self.config.pool_timeout,
                pool_pre_ping=True,
            )

        sqlite_options: dict = {"connect_args": {"check_same_thread": False}}
        if self.config.is_in_memory:
            # One shared connection, or every checkout sees an empty database
            sqlite_options["poolclass"] = StaticPool
        return create_engine(url, echo=self.config.echo, **sqlite_options)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if not self.config.development_mode:
            raise ServiceError(
                "Refusing to drop tables outside development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close_session(self, session: Optional[Session] = None) -> None:
        """Close ``session``, or drop the current thread's scoped session."""
        if session is not None:
            session.close()
            return
        self.scoped_session.remove()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def get_app_database_config() -> DatabaseConfig:
    return DatabaseConfig.from_env()


def import_all_models():
    """Register every model on ``Base.metadata``."""
    from sqlalchemy.orm import configure_mappers

    from .db_client_models import Client  # noqa
    from .db_credential_models import StreamingCredential  # noqa

    configure_mappers()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    The process-wide database manager.

    Raises:
        ServiceError: If initialize_db() has not been called
    """
    if _db_manager is None:
        raise ServiceError(
            "No database manager installed; call initialize_db() first",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def has_db_manager() -> bool:
    return _db_manager is not None


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    """Install (or clear, with None) the process-wide manager; used by tests."""
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Create the process-wide manager and make sure both tables exist.

    Args:
        config: Database to use (default: DatabaseConfig.from_env())
    """
    global _db_manager

    config = config or get_app_database_config()
    get_logger().info("Initializing database", extra={"db_type": config.db_type})

    import_all_models()
    _db_manager = DatabaseManager(config)
    _db_manager.create_tables()
    return _db_manager

