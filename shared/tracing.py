"""
OpenTelemetry tracing for the SWAPI Aggregator.

Until :func:`configure_tracing` installs a provider, spans go to the global
no-op tracer, so :func:`trace_function` can decorate code unconditionally.
"""

import functools
import inspect
import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

TRACER_NAME = "swapi-aggregator"


def configure_tracing(service_name: str, otel_exporter: Optional[str] = None, enable_console: bool = False) -> None:
    """Install a tracer provider exporting over OTLP/gRPC and instrument FastAPI, Redis and HTTPX.

    Exporter headers and TLS settings follow the standard
    ``OTEL_EXPORTER_OTLP_*`` environment variables.
    """
    endpoint = otel_exporter or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT") or "http://localhost:4317"
    resource = Resource.create({
        "service.name": service_name,
        "service.version": "1.0.0",
        "service.namespace": TRACER_NAME,
        "deployment.environment": os.getenv("AGGREGATOR_ENV", "local"),
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://")))
    )
    if enable_console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor().instrument()
    RedisInstrumentor().instrument()
    HTTPXClientInstrumentor().instrument()


def trace_function(operation_name: Optional[str] = None, **attributes):
    """Run a coroutine function inside its own span.

    The span is named ``operation_name`` (default ``module.qualname``), carries
    ``attributes`` and is marked as failed when the coroutine raises.
    """

    def decorator(func):
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"trace_function expects a coroutine function, got {func.__name__}")

        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            tracer = trace.get_tracer(TRACER_NAME)
            # The span records the exception and sets ERROR status on raise
            with tracer.start_as_current_span(span_name, attributes=attributes or None):
                return await func(*args, **kwargs)

        return wrapper

    return decorator


def add_span_attributes(**attributes):
    """Set non-None attributes on the current span."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, value)
