"""
Aggregator service: cached, reference-resolving front end for SWAPI.
"""

import os
import uuid
from typing import List, Optional

from fastapi import Query, Request, Response

from shared.base_service import BaseService
from shared.errors import AggregatorException
from shared.logging import set_client_context

from .adapters.swapi_client import SwapiClient
from .caching.cache_aside import CacheAside
from .caching.visibility import VisibilityTracker
from .domain.catalog import CatalogService
from .domain.models import (
    CharacterResponse,
    DetailedCharacterResponse,
    DetailedMovieResponse,
    MovieResponse,
    OrderDirection,
    SortType,
    VisibilityScope,
)
from .stores.base import KeyValueStore
from .stores.redis_store import RedisStore


class AggregatorService(BaseService):
    """Aggregator service implementation."""

    def __init__(
        self,
        *,
        store: Optional[KeyValueStore] = None,
        swapi_client: Optional[SwapiClient] = None,
    ):
        super().__init__("aggregator", int(os.getenv("PORT", "3000")))

        self.store = store or RedisStore.from_config(self.config)
        self.swapi_client = swapi_client or SwapiClient.from_config(self.config, metrics=self.metrics)
        self.cache = CacheAside(self.store, metrics=self.metrics)
        self.visibility = VisibilityTracker(self.cache, "movies")
        self.catalog = CatalogService(
            self.swapi_client,
            self.cache,
            self.visibility,
            page_size=self.config.swapi_page_size,
            pagination_strategy=self.config.pagination_strategy,
        )

        @self.app.on_event("startup")
        async def _startup():
            if isinstance(self.store, RedisStore):
                try:
                    await self.store.start()
                except AggregatorException as exc:
                    self.logger.warning("Starting without cache, Redis unavailable", error=exc.message)

        @self.app.on_event("shutdown")
        async def _shutdown():
            if isinstance(self.store, RedisStore):
                await self.store.stop()
            await self.swapi_client.close()

        self._setup_aggregator_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.aggregator_service = self

    def _resolve_client_id(self, request: Request, response: Response) -> str:
        """Read the client id cookie, issuing a new one when absent."""
        cookie_name = self.config.client_cookie_name
        client_id = request.cookies.get(cookie_name)
        if not client_id:
            client_id = uuid.uuid4().hex[:12]
            response.set_cookie(cookie_name, client_id)
            self.logger.info("Issued client id", client_id=client_id)
        set_client_context(client_id)
        return client_id

    async def _check_dependencies(self):
        redis_ok = isinstance(self.store, RedisStore) and await self.store.health_check()
        swapi_ok = await self.swapi_client.ping()
        return {
            "redis": "ok" if redis_ok else "error",
            "swapi": "ok" if swapi_ok else "error",
        }

    def _setup_aggregator_routes(self):
        """Set up catalog routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "aggregator",
                "message": "SWAPI Aggregator",
                "version": "1.0.0",
                "capabilities": ["read_through_cache", "reference_resolution", "client_visibility"]
            }

        @self.app.get("/movies", response_model=List[MovieResponse])
        async def list_movies(
            request: Request,
            response: Response,
            sort: SortType = Query(SortType.EPISODE),
            order: OrderDirection = Query(OrderDirection.ASCENDING),
        ):
            """List movies sorted by release date or episode."""
            self._resolve_client_id(request, response)
            movies = await self.catalog.get_movies(sort, order)
            return [MovieResponse.from_entity(movie) for movie in movies]

        @self.app.get("/movies/{movie_id}", response_model=DetailedMovieResponse)
        async def get_movie(movie_id: str, request: Request, response: Response):
            """Movie detail; records the visit for the calling client."""
            client_id = self._resolve_client_id(request, response)
            movie = await self.catalog.get_movie(movie_id, client_id)
            return DetailedMovieResponse.from_entity(movie)

        @self.app.get("/characters", response_model=List[CharacterResponse])
        async def list_characters(
            request: Request,
            response: Response,
            movie: Optional[str] = Query(None),
            scope: VisibilityScope = Query(VisibilityScope.CLIENT),
        ):
            """Characters from movies the client (or, with scope=global, anyone) has fetched."""
            client_id = self._resolve_client_id(request, response)
            if scope == VisibilityScope.GLOBAL:
                characters = await self.catalog.get_characters(movie)
            else:
                characters = await self.catalog.get_characters_with_filters(movie, client_id)
            return [CharacterResponse.from_entity(character) for character in characters]

        @self.app.get("/characters/{character_id}", response_model=DetailedCharacterResponse)
        async def get_character(character_id: str):
            """Character detail with film titles."""
            character = await self.catalog.get_character(character_id, include_film_titles=True)
            return DetailedCharacterResponse.from_entity(character)


def create_app(**kwargs):
    """Create FastAPI application."""
    service = AggregatorService(**kwargs)
    return service.app


if __name__ == "__main__":
    service = AggregatorService()
    service.run()
