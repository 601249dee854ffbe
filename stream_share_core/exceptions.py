"""
Error hierarchy for the storage and service layers.

Every error carries an ``ErrorCode``, an HTTP-style status and free-form
context, and logs itself once when raised. The distribution engine never
raises these: an empty pool or an unknown subscriber is reported on the
assignment result instead.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

_thread_local = threading.local()

# Context keys that are bookkeeping rather than caller-supplied detail
_INTERNAL_KEYS = ("cause", "error_id", "correlation_id")


class ErrorCode(str, Enum):
    """Error codes, grouped by the hundreds digit."""

    # System
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Input
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"

    # Records
    NOT_FOUND = "3000"

    # Credential and subscriber rules
    IMPORT_FAILED = "4001"


def set_correlation_id(correlation_id: str) -> None:
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    _thread_local.__dict__.pop("correlation_id", None)


class BaseError(Exception):
    """
    Root of every error raised by stream_share_core.

    Args:
        message: Human-readable message
        error_code: Machine-readable code
        status_code: HTTP-style status for callers that expose the error
        cause: Exception being wrapped, if any
        **context: Identifiers and other detail (credential_id, service_name...)
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.error_id = str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()

        self.context = dict(context)
        self.context["error_id"] = self.error_id
        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id
        if cause is not None:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log()

    @property
    def public_context(self) -> Dict[str, Any]:
        return {k: v for k, v in self.context.items() if k not in _INTERNAL_KEYS}

    def _log(self) -> None:
        # Deferred: the logger module imports this one
        from .utils.logger import get_logger

        extra = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": self.public_context,
        }
        if "correlation_id" in self.context:
            extra["correlation_id"] = self.context["correlation_id"]

        logger = get_logger()
        text = f"[{self.error_code.value}] {self.message}"
        if self.status_code >= 500:
            logger.error(text, extra=extra)
        elif self.status_code >= 400:
            logger.warning(text, extra=extra)
        else:
            logger.info(text, extra=extra)

    def add_context(self, **kwargs: Any) -> "BaseError":
        self.context.update(kwargs)
        return self


class ServiceError(BaseError):
    """A service operation failed; NOT_FOUND maps to 404, everything else to 500."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if operation:
            context["operation"] = operation
        status_code = 404 if error_code is ErrorCode.NOT_FOUND else 500
        super().__init__(message, error_code, status_code, cause, **context)


class ValidationError(BaseError):
    """Input was rejected before reaching storage."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class CredentialNotFoundError(BaseError):
    def __init__(self, message: str = "Credential not found", **kwargs):
        super().__init__(message, ErrorCode.NOT_FOUND, 404, **kwargs)


class SubscriberNotFoundError(BaseError):
    def __init__(self, message: str = "Subscriber not found", **kwargs):
        super().__init__(message, ErrorCode.NOT_FOUND, 404, **kwargs)


class BulkImportError(BaseError):
    """A bulk credential paste contained no usable ``email password`` line."""

    def __init__(self, message: str = "Bulk import failed", **kwargs):
        super().__init__(message, ErrorCode.IMPORT_FAILED, 400, **kwargs)
