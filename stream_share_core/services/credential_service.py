"""
Service for managing shared streaming credentials.

Plain SQLAlchemy CRUD over the ``credentials`` table plus the operator bulk
import and the per-credential health report.
"""

from datetime import datetime
from typing import Dict, List, Optional

from ..context.operation_context import operation
from ..db.db_credential_models import StreamingCredential
from ..distribution.alerts import credential_health
from ..exceptions import BulkImportError, CredentialNotFoundError
from ..schemas.assignment_schema import CredentialHealth
from ..schemas.credential_schema import CredentialCreate, CredentialRead
from ..utils.import_utils import parse_bulk_import
from ..utils.time_utils import utc_now
from .base_service import SessionManagedService


class CredentialService(SessionManagedService):
    """
    Service for managing streaming credentials.

    Deletion is hard; hiding a credential (``is_visible=False``) is how an
    operator takes it out of rotation while keeping it stored.
    """

    @operation()
    def list_credentials(self, include_hidden: bool = True) -> List[CredentialRead]:
        """All credentials, oldest first."""
        try:
            query = self.session.query(StreamingCredential)
            if not include_hidden:
                query = query.filter(StreamingCredential.is_visible.is_(True))
            rows = query.order_by(StreamingCredential.published_at).all()
            return self._to_schemas(CredentialRead, rows)
        except Exception as e:
            self._handle_service_exception("list_credentials", e)

    @operation()
    def get_credential(self, credential_id: str) -> CredentialRead:
        """
        Get a credential by id.

        Raises:
            CredentialNotFoundError: If no credential has this id
        """
        try:
            row = self.session.get(StreamingCredential, credential_id)
            if row is None:
                raise CredentialNotFoundError(
                    f"Credential {credential_id} not found", credential_id=credential_id
                )
            return CredentialRead.model_validate(row)
        except Exception as e:
            self._handle_service_exception("get_credential", e, credential_id)

    def _upsert(self, data: CredentialCreate) -> StreamingCredential:
        payload = self._payload(data, exclude={"id"})
        credential_id = (data.id or "").strip()

        row = self.session.get(StreamingCredential, credential_id) if credential_id else None
        if row is None:
            row = StreamingCredential(**payload)
            if credential_id:
                row.id = credential_id
            self.session.add(row)
        else:
            for key, value in payload.items():
                setattr(row, key, value)

        self.session.flush()
        return row

    @operation()
    def save_credential(self, data: CredentialCreate) -> CredentialRead:
        """
        Insert or update a credential.

        A blank or missing id inserts a new row with a generated id; an
        existing id updates that row in place.
        """
        try:
            row = self._upsert(data)
            self.commit()
            self.logger.info(
                "Credential saved",
                extra={"credential_id": row.id, "service_name": row.service},
            )
            return CredentialRead.model_validate(row)
        except Exception as e:
            self._handle_service_exception("save_credential", e, data.id)

    @operation()
    def delete_credential(self, credential_id: str) -> None:
        """
        Permanently delete a credential.

        Raises:
            CredentialNotFoundError: If no credential has this id
        """
        try:
            row = self.session.get(StreamingCredential, credential_id)
            if row is None:
                raise CredentialNotFoundError(
                    f"Credential {credential_id} not found", credential_id=credential_id
                )
            self.session.delete(row)
            self.commit()
            self.logger.info("Credential deleted", extra={"credential_id": credential_id})
        except Exception as e:
            self._handle_service_exception("delete_credential", e, credential_id)

    @operation()
    def bulk_import(
        self, text: str, service: str, now: Optional[datetime] = None
    ) -> List[CredentialRead]:
        """
        Import pasted credentials for one service.

        Every parsed line is saved as its own new credential, in input order.

        Raises:
            BulkImportError: If the text holds no usable line
        """
        rows = parse_bulk_import(text, service, now or utc_now())
        if not rows:
            raise BulkImportError("No credential lines to import", service_name=service)

        imported = []
        for row in rows:
            imported.append(
                self.save_credential(
                    CredentialCreate(
                        service=row.service,
                        email=row.email,
                        password=row.password,
                        published_at=row.published_at,
                        is_visible=row.is_visible,
                    )
                )
            )

        self.logger.info(
            "Bulk import finished",
            extra={"service_name": service, "imported_count": len(imported)},
        )
        return imported

    @operation()
    def credential_health_report(
        self, now: Optional[datetime] = None
    ) -> Dict[str, CredentialHealth]:
        """Health of every stored credential, keyed by credential id."""
        now = now or utc_now()
        return {
            credential.id: credential_health(credential.service, credential.published_at, now)
            for credential in self.list_credentials()
        }
