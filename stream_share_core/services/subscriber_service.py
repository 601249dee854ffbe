"""
Service for managing subscribers (client rows).

Subscribers are soft-deleted into a trash view and can be restored or
permanently deleted from there.
"""

from typing import List, Optional

from ..context.operation_context import operation
from ..db.db_client_models import Client
from ..exceptions import SubscriberNotFoundError
from ..processing.subscriber_profile import build_subscriber_profile
from ..schemas.subscriber_schema import SubscriberCreate, SubscriberProfile, SubscriberRead
from .base_service import SessionManagedService


class SubscriberService(SessionManagedService):
    """Service for managing subscriber rows."""

    def _get_row(self, subscriber_id: str) -> Client:
        row = self.session.get(Client, subscriber_id)
        if row is None:
            raise SubscriberNotFoundError(
                f"Subscriber {subscriber_id} not found", subscriber_id=subscriber_id
            )
        return row

    @operation()
    def list_subscribers(self, include_deleted: bool = True) -> List[SubscriberRead]:
        """All subscribers ordered by phone number."""
        try:
            query = self.session.query(Client)
            if not include_deleted:
                query = query.filter(Client.deleted.is_(False))
            rows = query.order_by(Client.phone_number).all()
            return self._to_schemas(SubscriberRead, rows)
        except Exception as e:
            self._handle_service_exception("list_subscribers", e)

    @operation()
    def get_subscriber(self, subscriber_id: str) -> SubscriberRead:
        """
        Get a subscriber row by id.

        Raises:
            SubscriberNotFoundError: If no row has this id
        """
        try:
            return SubscriberRead.model_validate(self._get_row(subscriber_id))
        except Exception as e:
            self._handle_service_exception("get_subscriber", e, subscriber_id)

    @operation()
    def find_by_phone(self, phone_number: str) -> List[SubscriberRead]:
        """Every row stored under a phone number, deleted ones included."""
        try:
            rows = self.session.query(Client).filter(Client.phone_number == phone_number).all()
            return self._to_schemas(SubscriberRead, rows)
        except Exception as e:
            self._handle_service_exception("find_by_phone", e)

    @operation()
    def get_profile(self, phone_number: str) -> Optional[SubscriberProfile]:
        """Merged profile for a phone number; None when it has no live row."""
        return build_subscriber_profile(self.find_by_phone(phone_number))

    @operation()
    def save_subscriber(self, data: SubscriberCreate) -> SubscriberRead:
        """
        Insert or update a subscriber row.

        A blank or missing id inserts a new row with a generated id.
        """
        try:
            payload = self._payload(data, exclude={"id"})
            subscriber_id = (data.id or "").strip()

            row = self.session.get(Client, subscriber_id) if subscriber_id else None
            if row is None:
                row = Client(**payload)
                if subscriber_id:
                    row.id = subscriber_id
                self.session.add(row)
            else:
                for key, value in payload.items():
                    setattr(row, key, value)

            self.session.flush()
            self.commit()
            self.logger.info(
                "Subscriber saved",
                extra={"subscriber_id": row.id, "phone_number": row.phone_number},
            )
            return SubscriberRead.model_validate(row)
        except Exception as e:
            self._handle_service_exception("save_subscriber", e, data.id)

    def _set_deleted(self, operation_name: str, subscriber_id: str, deleted: bool) -> SubscriberRead:
        try:
            row = self._get_row(subscriber_id)
            row.deleted = deleted
            self.session.flush()
            self.commit()
            return SubscriberRead.model_validate(row)
        except Exception as e:
            self._handle_service_exception(operation_name, e, subscriber_id)

    @operation()
    def soft_delete(self, subscriber_id: str) -> SubscriberRead:
        """Move a subscriber to the trash; it leaves every roster."""
        return self._set_deleted("soft_delete", subscriber_id, True)

    @operation()
    def restore(self, subscriber_id: str) -> SubscriberRead:
        """Bring a subscriber back from the trash."""
        return self._set_deleted("restore", subscriber_id, False)

    @operation()
    def permanently_delete(self, subscriber_id: str) -> None:
        try:
            self.session.delete(self._get_row(subscriber_id))
            self.commit()
            self.logger.info("Subscriber permanently deleted", extra={"subscriber_id": subscriber_id})
        except Exception as e:
            self._handle_service_exception("permanently_delete", e, subscriber_id)

    @operation()
    def soft_delete_all(self) -> int:
        """Move every subscriber to the trash; returns how many rows changed."""
        try:
            count = (
                self.session.query(Client)
                .filter(Client.deleted.is_(False))
                .update({Client.deleted: True}, synchronize_session="fetch")
            )
            self.commit()
            self.logger.warning("All subscribers moved to trash", extra={"count": count})
            return count
        except Exception as e:
            self._handle_service_exception("soft_delete_all", e)

    @operation()
    def remove_service_subscriptions(self, service_name: str) -> int:
        """
        Drop every subscription entry mentioning a service.

        Only native-list subscription fields are rewritten; legacy string
        encodings are left untouched.

        Returns:
            Number of subscribers whose subscriptions changed
        """
        try:
            wanted = service_name.lower()
            changed = 0
            for row in self.session.query(Client).all():
                entries = row.subscriptions if isinstance(row.subscriptions, list) else []
                kept = [entry for entry in entries if wanted not in str(entry).lower()]
                if len(kept) != len(entries):
                    row.subscriptions = kept
                    changed += 1

            self.session.flush()
            self.commit()
            self.logger.info(
                "Service subscriptions removed",
                extra={"service_name": service_name, "changed_count": changed},
            )
            return changed
        except Exception as e:
            self._handle_service_exception("remove_service_subscriptions", e)
