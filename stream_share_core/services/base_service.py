"""
Session handling shared by the credential, subscriber and assignment services.

Services talk to SQLAlchemy directly and either own their session or share
one handed to them by the caller.
"""

from typing import Any, Dict, List, NoReturn, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db.db_config import get_db_manager, has_db_manager, initialize_db
from ..exceptions import BaseError, ErrorCode, ServiceError
from ..utils.logger import ContextAwareLogger, get_logger

TRead = TypeVar("TRead", bound=BaseModel)


class SessionManagedService:
    """
    Service bound to one SQLAlchemy session.

    Pass ``session`` to share a caller's session (tests, or several services
    in one unit of work); the caller then commits and closes it.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = self._create_session()
            self._owns_session = True

        self.logger = logger or get_logger()

    def _create_session(self) -> Session:
        """Session from the process-wide manager, installing one from the environment if needed."""
        manager = get_db_manager() if has_db_manager() else initialize_db()
        return manager.get_session()

    def commit(self):
        """Commit when this service owns the session, otherwise just flush."""
        if self._owns_session:
            self.session.commit()
        else:
            self.session.flush()

    def rollback(self):
        if self._owns_session:
            self.session.rollback()

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.rollback()
        else:
            self.commit()
        self.close()

    def _handle_service_exception(
        self, operation: str, exception: Exception, entity_id: Optional[str] = None  # noqa
    ) -> NoReturn:
        """
        Log a failed operation and re-raise it as a library error.

        Library errors (not-found and friends) propagate unchanged; anything
        else is wrapped in a ServiceError after the session is rolled back.
        """
        if isinstance(exception, BaseError):
            self.logger.warning(
                f"{type(exception).__name__} in {operation}",
                extra={
                    "operation": operation,
                    "entity_id": entity_id,
                    "error_code": exception.error_code.value,
                },
            )
            raise exception

        self.rollback()
        error_msg = f"{operation} failed: {exception}"
        self.logger.error(
            error_msg,
            extra={
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(exception).__name__,
                "error_details": str(exception),
            },
            exc_info=True,
        )
        raise ServiceError(
            error_msg,
            error_code=ErrorCode.DATABASE_ERROR,
            operation=operation,
            entity_id=entity_id,
            cause=exception,
        ) from exception

    @staticmethod
    def _to_schemas(schema_class: Type[TRead], rows: List[Any]) -> List[TRead]:
        return [schema_class.model_validate(row) for row in rows]

    @staticmethod
    def _payload(model: BaseModel, exclude: Optional[set] = None) -> Dict[str, Any]:
        return model.model_dump(exclude=exclude or set())
