"""
Cache warming for the catalog collections and movie details.
"""

import asyncio
from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger
from ..adapters.swapi_client import SwapiClient
from ..domain.catalog import CatalogService
from ..domain.references import extract_id
from ..stores.redis_store import RedisStore
from .cache_aside import CacheAside
from .visibility import VisibilityTracker

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.config import BaseConfig
    from ..stores.base import KeyValueStore


class CacheWarmer:
    """Pre-populates the cache through the regular read-through paths.

    Warming never records visits, so per-client listings are unaffected.
    Movie details warmed here do show up in the global key-scan listing.
    """

    def __init__(self, catalog: CatalogService, *, concurrency: int = 5):
        self.catalog = catalog
        self.logger = get_logger("aggregator.cache_warmer")
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def warm(self, include_details: bool = False) -> Dict[str, Any]:
        """Warm the movie and character collections, and optionally every movie detail.

        Returns a summary with warmed counts and collected error messages.
        """
        summary: Dict[str, Any] = {
            "collections": {"movies": 0, "characters": 0},
            "details": {"movies": 0},
            "errors": [],
        }

        collections = await asyncio.gather(
            self.catalog.get_collection("movies"),
            self.catalog.get_collection("characters"),
            return_exceptions=True,
        )
        movies, _ = collections
        for name, outcome in zip(("movies", "characters"), collections):
            if isinstance(outcome, Exception):
                self.logger.error("Collection warm failed", collection=name, error=str(outcome))
                summary["errors"].append(f"{name}: {outcome}")
            else:
                summary["collections"][name] = 1

        if include_details and not isinstance(movies, Exception):
            movie_ids = [extract_id(movie["url"]) for movie in movies]
            results = await asyncio.gather(
                *(self._warm_movie(movie_id) for movie_id in movie_ids),
                return_exceptions=True,
            )
            for movie_id, outcome in zip(movie_ids, results):
                if isinstance(outcome, Exception):
                    self.logger.error("Movie detail warm failed", movie_id=movie_id, error=str(outcome))
                    summary["errors"].append(f"movies:{movie_id}: {outcome}")
                else:
                    summary["details"]["movies"] += 1

        self.logger.info(
            "Cache warm completed",
            collections=summary["collections"],
            details=summary["details"],
            errors=len(summary["errors"]),
        )
        return summary

    async def _warm_movie(self, movie_id: str) -> None:
        async with self._semaphore:
            await self.catalog.get_movie(movie_id)


async def warm_catalog(
    config: "BaseConfig",
    *,
    include_details: bool = False,
    concurrency: int = 5,
    store: Optional["KeyValueStore"] = None,
    swapi_client: Optional[SwapiClient] = None,
) -> Dict[str, Any]:
    """Warm the cache a service configured by ``config`` reads.

    Redis URL, key namespace, upstream URL and timeout, page size and
    pagination strategy all come from ``config``. A store or client passed
    in is used as is and left open.
    """
    own_store = store is None
    own_client = swapi_client is None
    store = store or RedisStore.from_config(config)
    swapi_client = swapi_client or SwapiClient.from_config(config)

    if own_store:
        await store.start()
    try:
        cache = CacheAside(store)
        catalog = CatalogService(
            swapi_client,
            cache,
            VisibilityTracker(cache),
            page_size=config.swapi_page_size,
            pagination_strategy=config.pagination_strategy,
        )
        return await CacheWarmer(catalog, concurrency=concurrency).warm(include_details=include_details)
    finally:
        if own_client:
            await swapi_client.close()
        if own_store:
            await store.stop()
