"""
Operation logging for the service layer.

Each service call runs inside an ``OperationContext`` that carries an
operation id, a correlation id shared with any nested call and a start time.
``OperationHandler`` writes one ENTER line, then an EXIT or ERROR line with
the duration; the ``@operation()`` decorator applies it to a method.
"""

import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from ..config import get_config
from ..exceptions import BaseError, get_correlation_id, set_correlation_id
from ..utils.logger import ContextAwareLogger, get_logger

F = TypeVar("F", bound=Callable[..., Any])


class OperationContext:
    """Identity, timing and metrics of one running operation."""

    def __init__(self, operation_name: str, correlation_id: Optional[str] = None, **context):
        self.operation_name = operation_name
        self.operation_id = str(uuid.uuid4())
        # An enclosing operation's correlation id wins over a fresh one
        self.correlation_id = correlation_id or get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)

        self.context = dict(context, operation_id=self.operation_id, correlation_id=self.correlation_id)
        self.metrics: Dict[str, Union[int, float]] = {}
        self.started = time.monotonic()

    @property
    def duration_ms(self) -> float:
        return (time.monotonic() - self.started) * 1000

    def add_context(self, **kwargs) -> None:
        self.context.update(kwargs)

    def add_metric(self, name: str, value: Union[int, float]) -> None:
        """Record a number (rows imported, subscribers moved) for the EXIT line."""
        self.metrics[name] = value


class OperationHandler:
    def __init__(self, logger: Optional[ContextAwareLogger] = None):
        self.logger = logger if logger is not None else get_logger()

    @contextmanager
    def operation(self, name: str, **context):
        ctx = OperationContext(name, **context)

        def fields(**more) -> Dict[str, Any]:
            return {
                **context,
                "operation_id": ctx.operation_id,
                "correlation_id": ctx.correlation_id,
                **more,
            }

        self.logger.info(f"ENTER: {name}", extra=fields())
        try:
            yield ctx
        except BaseError as e:
            e.add_context(
                operation_name=name,
                operation_id=ctx.operation_id,
                operation_duration_ms=ctx.duration_ms,
            )
            # The error already logged its own details when it was raised
            self.logger.error(
                f"ERROR: {name} -> [{e.error_code.value}] {e.message}",
                extra=fields(
                    duration_ms=ctx.duration_ms,
                    error_id=e.error_id,
                    error_code=e.error_code.value,
                    status="error",
                ),
            )
            raise
        except Exception as e:
            self.logger.exception(
                f"ERROR: {name} -> {type(e).__name__}: {e}",
                extra=fields(
                    duration_ms=ctx.duration_ms, error_type=type(e).__name__, status="error"
                ),
            )
            raise

        self.logger.info(
            f"EXIT: {name}",
            extra=fields(duration_ms=ctx.duration_ms, status="success", **ctx.metrics),
        )


def _operation_name(func: Callable, args: tuple) -> str:
    """``module.Class.method`` for methods, ``module.function`` otherwise."""
    qualified = func.__name__
    if args and hasattr(args[0], func.__name__):
        qualified = f"{type(args[0]).__name__}.{qualified}"
    return f"{func.__module__.rsplit('.', 1)[-1]}.{qualified}"


def operation(name: Optional[str] = None):
    """
    Run the decorated callable inside ``OperationHandler().operation``.

    Skipped entirely when ``features.enable_operation_logging`` is off.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            if not get_config().features.enable_operation_logging:
                return func(*args, **kwargs)

            op_name = name or _operation_name(func, args)
            with OperationHandler().operation(op_name, source_module=func.__module__):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
