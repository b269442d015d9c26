"""
Shared configuration management for the SWAPI Aggregator.
"""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="AGGREGATOR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Key-value store
    redis_url: str = "redis://localhost:6379/0"
    cache_namespace: str = "api"

    # Upstream catalog
    swapi_url: str = Field(
        default="https://swapi.dev/api",
        validation_alias=AliasChoices("AGGREGATOR_SWAPI_URL", "SWAPI_URL"),
    )
    swapi_page_size: int = 10
    swapi_timeout_seconds: float = 10.0
    pagination_strategy: Literal["count", "next"] = "count"

    # Client identification
    client_cookie_name: str = "client-id"

    # Observability
    enable_tracing: bool = False
    otel_exporter: str = "http://localhost:4317"
    enable_console_tracing: bool = False


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
