"""
Assignment queries against the stored snapshot.

Each query reads the credential and subscriber tables once (two independent
reads, no isolation across them) and hands the snapshot to the pure
distribution engine. Nothing computed here is written back.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import get_config
from ..context.operation_context import operation
from ..distribution.alerts import credential_health
from ..distribution.demo import demo_assignment
from ..distribution.engine import assign_credential, assigned_subscribers, partition_roster
from ..enums import HealthStatus
from ..schemas.assignment_schema import AssignmentResult, CredentialLoad
from ..schemas.credential_schema import CredentialRead
from ..schemas.subscriber_schema import SubscriberRead
from ..utils.time_utils import utc_now
from .base_service import SessionManagedService
from .credential_service import CredentialService
from .subscriber_service import SubscriberService


class AssignmentService(SessionManagedService):
    """Resolves credentials for subscribers and subscribers for credentials."""

    def __init__(self, session=None, logger=None):
        super().__init__(session=session, logger=logger)
        self.credentials = CredentialService(session=self.session, logger=self.logger)
        self.subscribers = SubscriberService(session=self.session, logger=self.logger)

    def _snapshot(
        self, preloaded_subscribers: Optional[Sequence[SubscriberRead]] = None
    ) -> Tuple[List[CredentialRead], List[SubscriberRead]]:
        credentials = self.credentials.list_credentials()
        if preloaded_subscribers is None:
            subscribers = self.subscribers.list_subscribers()
        else:
            subscribers = list(preloaded_subscribers)
        return credentials, subscribers

    def _is_demo(self, subscriber: SubscriberRead) -> bool:
        config = get_config()
        return config.features.enable_demo_mode and config.distribution.is_demo_phone(
            subscriber.phone_number
        )

    @operation()
    def get_assigned_credential(
        self,
        subscriber: SubscriberRead,
        service_name: str,
        preloaded_subscribers: Optional[Sequence[SubscriberRead]] = None,
        now: Optional[datetime] = None,
    ) -> AssignmentResult:
        """
        Resolve the login a subscriber uses for a service.

        Demo phone numbers get a fictitious credential without touching the
        database. ``preloaded_subscribers`` skips the subscriber read when the
        caller already holds the roster (e.g. while rendering a list).
        """
        if self._is_demo(subscriber):
            return demo_assignment(service_name, now)

        credentials, subscribers = self._snapshot(preloaded_subscribers)
        return assign_credential(
            subscriber,
            service_name,
            credentials,
            subscribers,
            now=now,
            alert_separator=get_config().distribution.alert_separator,
        )

    @operation()
    def get_assigned_subscribers(
        self,
        credential: CredentialRead,
        preloaded_subscribers: Optional[Sequence[SubscriberRead]] = None,
    ) -> List[SubscriberRead]:
        """Subscribers currently sharing a credential, in roster order."""
        credentials, subscribers = self._snapshot(preloaded_subscribers)
        return assigned_subscribers(credential, credentials, subscribers)

    @operation()
    def count_assigned_subscribers(
        self,
        credential: CredentialRead,
        preloaded_subscribers: Optional[Sequence[SubscriberRead]] = None,
    ) -> int:
        return len(self.get_assigned_subscribers(credential, preloaded_subscribers))

    @operation()
    def get_service_partition(self, service_name: str) -> Dict[str, List[SubscriberRead]]:
        """Credential id -> subscribers for every visible credential of a service."""
        credentials, subscribers = self._snapshot()
        return partition_roster(service_name, credentials, subscribers)

    @operation()
    def load_report(self) -> Dict[str, int]:
        """Assigned subscriber count for every stored credential, keyed by id."""
        credentials, subscribers = self._snapshot()
        return {
            credential.id: len(assigned_subscribers(credential, credentials, subscribers))
            for credential in credentials
        }

    @operation()
    def credential_loads(self, now: Optional[datetime] = None) -> List[CredentialLoad]:
        """Count and health of every stored credential, oldest first."""
        now = now or utc_now()
        credentials, subscribers = self._snapshot()

        loads = []
        for credential in credentials:
            loads.append(
                CredentialLoad(
                    credential_id=credential.id,
                    service=credential.service,
                    email=credential.email,
                    assigned_count=len(assigned_subscribers(credential, credentials, subscribers)),
                    health=credential_health(credential.service, credential.published_at, now),
                )
            )

        expired = [
            load.credential_id for load in loads if load.health.status == HealthStatus.EXPIRED
        ]
        if expired:
            self.logger.info(
                "Expired credentials still stored", extra={"credential_ids": expired}
            )
        return loads
