"""
Shared test fixtures.

Provides an in-memory SQLite database, service fixtures bound to a per-test
session, and factories for building credential/subscriber snapshots for the
pure distribution tests.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from stream_share_core.config import reset_config
from stream_share_core.db import DatabaseConfig, DatabaseManager, import_all_models
from stream_share_core.db.db_config import Base, initialize_db
from stream_share_core.schemas import CredentialRead, SubscriberRead

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    import_all_models()
    return initialize_db(db_config)


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Fresh session and empty tables for each test.
    """
    session = db_manager.get_session()
    Base.metadata.create_all(db_manager.engine)

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(autouse=True)
def clean_config():
    """Every test starts from the environment-derived configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def make_credential():
    """
    Factory for CredentialRead snapshots.

    Credentials are published one hour apart in creation order unless
    ``published_at`` is given.
    """
    counter = itertools.count()

    def factory(service="Viki Pass", **overrides) -> CredentialRead:
        n = next(counter)
        data = {
            "id": f"cred-{n}",
            "service": service,
            "email": f"login{n}@example.com",
            "password": f"secret{n}",
            "published_at": BASE_TIME + timedelta(hours=n),
            "is_visible": True,
        }
        data.update(overrides)
        return CredentialRead(**data)

    return factory


@pytest.fixture
def make_subscriber():
    """Factory for SubscriberRead snapshots with sequential phone numbers."""
    counter = itertools.count()

    def factory(subscriptions=None, **overrides) -> SubscriberRead:
        n = next(counter)
        data = {
            "id": f"sub-{n}",
            "phone_number": f"5511900000{n:03d}",
            "client_name": f"Client {n}",
            "subscriptions": ["Viki Pass"] if subscriptions is None else subscriptions,
            "purchase_date": BASE_TIME,
            "duration_months": 1,
        }
        data.update(overrides)
        return SubscriberRead(**data)

    return factory
