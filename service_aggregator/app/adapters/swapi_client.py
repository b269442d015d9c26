"""
Upstream catalog (SWAPI) client for the aggregator.
"""

import time
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from shared.logging import get_logger
from shared.errors import UpstreamFetchError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.config import BaseConfig
    from shared.metrics import MetricsCollector


class SwapiClient:
    """Thin async client for the paginated SWAPI REST catalog.

    Any non-2xx response or transport failure raises ``UpstreamFetchError``.
    Requests are never retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        metrics: Optional["MetricsCollector"] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.metrics = metrics
        self.logger = get_logger("aggregator.swapi")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: "BaseConfig", metrics: Optional["MetricsCollector"] = None) -> "SwapiClient":
        """Client on the configured upstream URL and timeout."""
        return cls(config.swapi_url, timeout=config.swapi_timeout_seconds, metrics=metrics)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get_resource(self, resource: str, resource_id: str) -> Dict[str, Any]:
        """Fetch a single entity, e.g. ``get_resource("films", "1")``."""
        return await self._get(resource, f"{self.base_url}/{resource}/{resource_id}/")

    async def get_page(self, resource: str, page: int = 1) -> Dict[str, Any]:
        """Fetch one page of a listing: ``{count, next, previous, results}``."""
        return await self._get(resource, f"{self.base_url}/{resource}/", params={"page": page})

    async def get_url(self, resource: str, url: str) -> Dict[str, Any]:
        """Fetch an absolute URL handed out by the catalog (e.g. a ``next`` link)."""
        return await self._get(resource, url)

    async def ping(self) -> bool:
        """Return True when the catalog root responds successfully."""
        try:
            response = await self._client.get(f"{self.base_url}/")
        except httpx.HTTPError:
            return False
        return response.is_success

    async def _get(self, resource: str, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            self._record(resource, "error", start)
            self.logger.error("Upstream request failed", url=url, params=params, error=str(exc))
            raise UpstreamFetchError(
                resource,
                message=str(exc) or exc.__class__.__name__,
                details={"url": url},
            ) from exc

        self._record(resource, str(response.status_code), start)

        if not response.is_success:
            self.logger.error(
                "Upstream returned unexpected status",
                url=url,
                params=params,
                status_code=response.status_code,
            )
            raise UpstreamFetchError(
                resource,
                message=f"Unexpected status {response.status_code}",
                status_code=response.status_code,
                details={"url": url},
            )

        try:
            data = response.json()
        except ValueError as exc:
            self.logger.error("Upstream returned invalid JSON", url=url)
            raise UpstreamFetchError(resource, message="Invalid JSON body", details={"url": url}) from exc

        self.logger.debug("Upstream resource retrieved", url=url, params=params)
        return data

    def _record(self, resource: str, status: str, start: float) -> None:
        if self.metrics:
            self.metrics.record_upstream_request(resource, status, time.perf_counter() - start)
