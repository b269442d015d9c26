"""
Structured logging for the SWAPI Aggregator.

Every record is rendered as one JSON line carrying the service name, the
active OpenTelemetry trace/span ids and whatever request-scoped values were
bound through :func:`set_request_id` and :func:`set_client_context`.
"""

import logging
import sys
import uuid
from typing import Any, Dict, Optional

import structlog
from opentelemetry import trace

EventDict = Dict[str, Any]


def _service_processor(service_name: str):
    def add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service


def add_trace_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach trace and span ids of the current span, if one is recording."""
    span = trace.get_current_span()
    if not span.is_recording():
        return event_dict

    span_context = span.get_span_context()
    if span_context.trace_id:
        event_dict["trace_id"] = f"{span_context.trace_id:032x}"
    if span_context.span_id:
        event_dict["span_id"] = f"{span_context.span_id:016x}"
    return event_dict


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Route structlog through stdlib logging with JSON output on stdout."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _service_processor(service_name),
            add_trace_context,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind the request id for the current task, generating one when missing."""
    request_id = request_id or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(request_id=request_id)
    return request_id


def set_client_context(client_id: Optional[str] = None) -> None:
    """Bind the calling client id for the current task."""
    if client_id:
        structlog.contextvars.bind_contextvars(client_id=client_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger named ``<service>.<component>``, e.g. ``aggregator.cache``."""
    return structlog.get_logger(name)
