"""OpenTelemetry configuration for distributed tracing.

Spans are exported over OTLP/HTTP in batches. Incoming requests are
traced by the FastAPI instrumentation (operational endpoints excluded)
and selected coroutines by the trace_function decorator.
"""

import functools
import inspect
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

F = TypeVar("F", bound=Callable[..., Any])

# Operational endpoints, matched by FastAPIInstrumentor as regexes
UNTRACED_URLS = "health,ready,metrics"


def configure_tracing(
    service_name: str,
    service_version: str = "0.1.0",
    otlp_endpoint: Optional[str] = None,
    environment: Optional[str] = None,
) -> TracerProvider:
    """Configure OpenTelemetry tracing for the service.

    Args:
        service_name: Name of the service (e.g., "Local Library")
        service_version: Version reported on every span
        otlp_endpoint: OTLP/HTTP traces endpoint; exporter defaults apply when None
        environment: Deployment environment resource attribute

    Returns:
        Configured TracerProvider
    """
    attributes = {
        "service.name": service_name,
        "service.namespace": "local-library",
        "service.version": service_version,
    }
    if environment:
        attributes["deployment.environment"] = environment

    provider = TracerProvider(resource=Resource.create(attributes))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    trace.set_tracer_provider(provider)

    return provider


def instrument_app(app: Any) -> None:
    """Trace every request served by a FastAPI app."""
    FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)


def shutdown_tracing() -> None:
    """Flush pending spans; a no-op when tracing was never configured."""
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance.

    Args:
        name: Tracer name (typically __name__)

    Returns:
        Tracer instance
    """
    return trace.get_tracer(name)


@contextmanager
def _function_span(name: str, func: Callable[..., Any]) -> Iterator[trace.Span]:
    tracer = get_tracer(func.__module__)
    with tracer.start_as_current_span(name, record_exception=False) as span:
        span.set_attribute("code.function", func.__qualname__)
        span.set_attribute("code.namespace", func.__module__)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
        span.set_status(Status(StatusCode.OK))


def trace_function(span_name: Optional[str] = None) -> Callable[[F], F]:
    """Decorator to trace a function or coroutine in its own span.

    Args:
        span_name: Optional custom span name (defaults to function name)

    Returns:
        Decorated function with automatic tracing
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _function_span(name, func):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _function_span(name, func):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore

    return decorator
