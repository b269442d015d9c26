"""
Shared error handling for the SWAPI Aggregator.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AggregatorException(Exception):
    """Base exception for aggregator services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(AggregatorException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class UpstreamFetchError(AggregatorException):
    """The upstream catalog returned a non-success status or could not be reached."""

    status_code = 502

    def __init__(
        self,
        resource: str,
        message: str = "Upstream fetch failed",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        code: str = "UPSTREAM_FETCH_ERROR",
    ):
        self.resource = resource
        self.upstream_status = status_code
        payload = {"resource": resource}
        if status_code is not None:
            payload["status_code"] = status_code
        payload.update(details or {})
        super().__init__(code, f"{resource}: {message}", payload)


class ReferenceResolutionError(UpstreamFetchError):
    """A cross-reference could not be resolved while expanding an entity."""

    def __init__(self, field: str, url: str, cause: Exception):
        details = {"field": field, "url": url, "cause": str(cause)}
        upstream_status = getattr(cause, "upstream_status", None)
        super().__init__(
            resource=getattr(cause, "resource", field),
            message=f"failed to resolve {field} reference {url}",
            status_code=upstream_status,
            details=details,
            code="REFERENCE_RESOLUTION_ERROR",
        )


class StoreUnavailableError(AggregatorException):
    """The key-value store could not be reached."""

    status_code = 503

    def __init__(self, operation: str, message: str = "Store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_UNAVAILABLE", f"{operation}: {message}", details)
