"""OpenTelemetry tracing decorators."""

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

F = TypeVar("F", bound=Callable[..., Any])

# Keyword arguments copied onto the span when a traced function receives them
SPAN_ARGUMENTS = ("order_id", "item_id", "category_id")


def traced(span_name: str | None = None, tracer_name: str = "ordering-svc") -> Callable[[F], F]:
    """Wrap a function (sync or async) in an OpenTelemetry span.

    The span records success, exception details and any identifier arguments
    listed in SPAN_ARGUMENTS, so an order can be followed across transitions.

    Args:
        span_name: Name for the span (defaults to the function's qualified name)
        tracer_name: Instrumentation scope name for the tracer

    Example:
        @traced("orders.mark_paid")
        async def mark_paid(self, order_id: str) -> Order:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__qualname__
        tracer = trace.get_tracer(tracer_name)
        signature = inspect.signature(func)

        def annotate(span: Span, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
            try:
                bound = signature.bind_partial(*args, **kwargs)
            except TypeError:
                return
            for argument in SPAN_ARGUMENTS:
                value = bound.arguments.get(argument)
                if isinstance(value, str):
                    span.set_attribute(f"ordering.{argument}", value)

        def record_failure(span: Span, error: Exception) -> None:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(error).__name__)
            span.record_exception(error)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                annotate(span, args, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    record_failure(span, e)
                    raise
                span.set_attribute("success", True)
                return result

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                annotate(span, args, kwargs)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    record_failure(span, e)
                    raise
                span.set_attribute("success", True)
                return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
