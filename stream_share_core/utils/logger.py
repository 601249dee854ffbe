"""
Logging for stream_share_core.

Console output is a single readable line per event (``msg | key=value``)
while the ``extra`` values stay on the record, so ``AzureQueueHandler`` can
ship them as structured JSON to a storage queue when queue logging is on.
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from azure.storage.queue import QueueClient, QueueServiceClient

from ..config import get_config
from .json_utils import dumps

LIBRARY_LOGGER_NAME = "stream_share_core"

_library_logger = None

# Present on every LogRecord; anything else arrived through ``extra``
_RECORD_BUILTINS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
    | {"message", "asctime", "taskName", "correlation_id"}
)


def _level_number(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def _write_stderr(text: str) -> None:
    # The queue handler cannot log its own failures through logging
    sys.stderr.write(text + "\n")


class ContextAwareLogger:
    """Wraps a ``logging.Logger``, appending ``extra`` to the message text."""

    def __init__(self, logger):
        self.logger = logger

    def _emit(self, method: str, msg, extra=None, exc_info=None):
        extra = extra or {}
        text = " | ".join([str(msg)] + [f"{key}={value}" for key, value in extra.items()])
        getattr(self.logger, method)(text, extra=extra, exc_info=exc_info)

    def set_level(self, level):
        self.logger.setLevel(level)

    def debug(self, msg, **kwargs):
        self._emit("debug", msg, **kwargs)

    def info(self, msg, **kwargs):
        self._emit("info", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._emit("warning", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._emit("error", msg, **kwargs)

    def exception(self, msg, **kwargs):
        kwargs.setdefault("exc_info", True)
        self._emit("error", msg, **kwargs)


class CorrelationContextFilter(logging.Filter):
    """Copies the thread's correlation id onto each record."""

    def filter(self, record):
        # exceptions imports this module
        from ..exceptions import get_correlation_id

        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class AzureQueueHandler(logging.Handler):
    """
    Buffers records as JSON documents and sends them to an Azure Storage Queue.

    One queue message is sent per record once ``batch_size`` records are
    buffered, and on ``close``. Without a connection string records are
    buffered but never sent.
    """

    def __init__(
        self,
        queue_name: str = "logs-queue",
        connection_string: Optional[str] = None,
        batch_size: int = 10,
    ):
        super().__init__()
        self.queue_name = queue_name
        self.connection_string = connection_string or os.getenv("AzureWebJobsStorage")
        self.batch_size = batch_size
        self.log_buffer: List[Dict[str, Any]] = []

        if self.connection_string:
            self._ensure_queue_exists()
        else:
            _write_stderr("AzureQueueHandler: no storage connection string, logs stay local")

    def _ensure_queue_exists(self) -> bool:
        try:
            service = QueueServiceClient.from_connection_string(self.connection_string)
            if self.queue_name not in {queue.name for queue in service.list_queues()}:
                service.create_queue(self.queue_name)
        except Exception as e:
            _write_stderr(f"AzureQueueHandler: cannot prepare queue '{self.queue_name}': {e}")
            return False
        return True

    def build_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            entry["correlation_id"] = correlation_id

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_BUILTINS and not key.startswith("_") and not callable(value)
        }
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": [line.rstrip() for line in traceback.format_exception(*record.exc_info)],
            }
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log_buffer.append(self.build_entry(record))
        except Exception:
            self.handleError(record)
            return
        if len(self.log_buffer) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not (self.log_buffer and self.connection_string):
            return

        try:
            client = QueueClient.from_connection_string(
                conn_str=self.connection_string, queue_name=self.queue_name
            )
        except Exception as e:
            _write_stderr(f"AzureQueueHandler: cannot open queue '{self.queue_name}': {e}")
            return

        pending, self.log_buffer = self.log_buffer, []
        for entry in pending:
            try:
                client.send_message(dumps(entry))
            except Exception as e:
                _write_stderr(f"AzureQueueHandler: dropped log entry: {e}")

    def close(self) -> None:
        self.flush()
        super().close()


def configure_logging(
    logger_name: str = LIBRARY_LOGGER_NAME,
    log_level: Optional[Union[int, str]] = None,
    enable_queue: Optional[bool] = None,
    queue_name: Optional[str] = None,
    queue_batch_size: Optional[int] = None,
    connection_string: Optional[str] = None,
) -> "ContextAwareLogger":
    """
    Install the library logger: a stdout handler, plus the queue handler when enabled.

    Every argument left as None is read from ``get_config()`` (``logging``,
    ``features.enable_logs_queue`` and ``queue`` sections). Calling it again
    replaces the handlers installed by the previous call.
    """
    global _library_logger

    app_config = get_config()
    level = _level_number(app_config.logging.level if log_level is None else log_level)
    if enable_queue is None:
        enable_queue = app_config.features.enable_logs_queue

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    correlation_filter = CorrelationContextFilter()
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(logging.Formatter(app_config.logging.format))

    if enable_queue:
        queue_name = queue_name or app_config.queue.logs_queue_name
        handlers.append(
            AzureQueueHandler(
                queue_name=queue_name,
                connection_string=connection_string or app_config.queue.connection_string,
                batch_size=queue_batch_size or app_config.queue.batch_size,
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(correlation_filter)
        logger.addHandler(handler)

    _library_logger = ContextAwareLogger(logger)
    _library_logger.info(
        "Logger configured",
        extra={"logger_name": logger_name, "queue_name": queue_name if enable_queue else None},
    )
    return _library_logger


def reset_logging() -> None:
    global _library_logger
    _library_logger = None


def get_logger(log_level: Optional[Union[int, str]] = None) -> "ContextAwareLogger":
    """
    The logger installed by ``configure_logging``.

    Before configuration, a wrapper around the plain ``stream_share_core``
    logger at the configured level.
    """
    if _library_logger is not None:
        return _library_logger

    logger = logging.getLogger(LIBRARY_LOGGER_NAME)
    logger.setLevel(_level_number(get_config().logging.level if log_level is None else log_level))
    return ContextAwareLogger(logger)
