"""Tracing helpers around cache operations (OpenTelemetry API).

Spans are only created when Settings.telemetry_enabled is True. Without
an SDK tracer provider configured by the host, the API is a no-op.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from acp.core.config import get_settings

T = TypeVar("T")


def _run_in_span(span: trace.Span, run: Callable[[], T]) -> T:
    """Run a callable, set span status, and record exceptions."""
    try:
        result = run()
    except Exception as e:
        span.set_status(Status(StatusCode.ERROR, str(e)))
        span.record_exception(e)
        raise
    else:
        span.set_status(Status(StatusCode.OK))
        return result


def traced(operation_name: str | None = None) -> Callable:
    """Decorator to run a sync function inside a span.

    Args:
        operation_name: Span name (defaults to module.funcname).

    Returns:
        Decorated function.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer("acp")
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not get_settings().telemetry_enabled:
                return func(*args, **kwargs)
            with tracer.start_as_current_span(span_name) as span:
                return _run_in_span(span, lambda: func(*args, **kwargs))

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)
