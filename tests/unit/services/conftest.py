"""Service fixtures bound to the per-test database session."""

import pytest

from stream_share_core.services import AssignmentService, CredentialService, SubscriberService


@pytest.fixture(scope="function")
def credential_service(db_session):
    return CredentialService(session=db_session)


@pytest.fixture(scope="function")
def subscriber_service(db_session):
    return SubscriberService(session=db_session)


@pytest.fixture(scope="function")
def assignment_service(db_session):
    return AssignmentService(session=db_session)
