"""
FastAPI service skeleton shared by SWAPI Aggregator processes.

Subclasses get CORS, request timing and correlation, ``/health``,
``/metrics`` and JSON error translation, and add their own routes on
``self.app``.
"""

import os
import time
from typing import Dict

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from shared.config import get_config
from shared.errors import AggregatorException, ValidationError
from shared.logging import clear_context, configure_logging, get_logger, set_request_id
from shared.metrics import get_metrics_collector

VERSION = "1.0.0"


def _endpoint_label(request: Request) -> str:
    # Route template keeps label cardinality bounded (/movies/{movie_id})
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, port: int):
        self.service_name = service_name
        self.port = port
        self.config = get_config(service_name, port)

        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        if self.config.enable_tracing:
            from shared.tracing import configure_tracing
            configure_tracing(service_name, self.config.otel_exporter, self.config.enable_console_tracing)

        local = self.config.env == "local"
        self.app = FastAPI(
            title=f"{service_name.title()} Service",
            version=VERSION,
            docs_url="/docs" if local else None,
            redoc_url="/redoc" if local else None,
        )
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if local else [],
            allow_credentials=True,
            allow_methods=["GET"],
            allow_headers=["*"],
        )
        self.app.middleware("http")(self._request_middleware)
        self._install_routes()
        self._install_exception_handlers()

    async def _request_middleware(self, request: Request, call_next):
        started = time.perf_counter()
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        try:
            response = await call_next(request)
            duration = time.perf_counter() - started
            endpoint = _endpoint_label(request)

            self.metrics.record_http_request(request.method, endpoint, response.status_code, duration)
            self.logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
        finally:
            clear_context()

        response.headers["X-Request-ID"] = request_id
        return response

    def _install_routes(self):
        @self.app.get("/health")
        async def health_check():
            """Dependency reachability; "degraded" when any dependency is down."""
            try:
                dependencies = await self._check_dependencies()
            except Exception as exc:
                self.logger.error("Health check failed", error=str(exc))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={"service": self.service_name, "status": "error", "error": str(exc)},
                )

            status = "ok" if all(state == "ok" for state in dependencies.values()) else "degraded"
            self.metrics.record_health_check(status)
            return {
                "service": self.service_name,
                "status": status,
                "uptime_seconds": round(time.time() - self._start_time, 3),
                "dependencies": dependencies,
                "version": VERSION,
                "commit": os.getenv("GIT_COMMIT", "unknown"),
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            return Response(content=generate_latest(self.metrics.registry), media_type=CONTENT_TYPE_LATEST)

    def _error_response(self, request: Request, exc: AggregatorException) -> JSONResponse:
        log = self.logger.warning if exc.status_code < 500 else self.logger.error
        log("Request failed", code=exc.code, message=exc.message, details=exc.details, path=request.url.path)
        self.metrics.record_error(exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())

    def _install_exception_handlers(self):
        @self.app.exception_handler(AggregatorException)
        async def aggregator_exception_handler(request: Request, exc: AggregatorException):
            return self._error_response(request, exc)

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            error = ValidationError("Invalid request parameters", {"errors": jsonable_encoder(exc.errors())})
            return self._error_response(request, error)

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={"code": "INTERNAL_ERROR", "message": "Internal server error", "details": {}},
            )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Map of dependency name to "ok" or "error". Override in subclasses."""
        return {}

    def run(self):
        """Serve the app with uvicorn."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower(),
        )
