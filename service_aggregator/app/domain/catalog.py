"""
Catalog operations: cached lookups, reference expansion and scoped listings.
"""

import asyncio
from typing import Any, Dict, List, Optional

from shared.logging import get_logger
from shared.tracing import trace_function, add_span_attributes

from ..adapters.swapi_client import SwapiClient
from ..caching.cache_aside import CacheAside
from ..caching.visibility import VisibilityTracker
from .filters import filter_by_visibility
from .models import OrderDirection, SortType
from .pagination import COUNT_STRATEGY, fetch_all_pages
from .references import resolve_by_search, resolve_references

Entity = Dict[str, Any]

# Cache category -> upstream resource path
UPSTREAM_RESOURCES = {
    "movies": "films",
    "characters": "people",
    "planets": "planets",
    "starships": "starships",
}


class CatalogService:
    """Read-through view of the upstream catalog.

    Every upstream response is cached under ``<category>`` (whole listings)
    or ``<category>:<id>`` (single entities). Movie details additionally
    record the requesting client's visit, which scopes character listings.
    """

    def __init__(
        self,
        client: SwapiClient,
        cache: CacheAside,
        visibility: VisibilityTracker,
        *,
        page_size: int = 10,
        pagination_strategy: str = COUNT_STRATEGY,
    ):
        self.client = client
        self.cache = cache
        self.visibility = visibility
        self.page_size = page_size
        self.pagination_strategy = pagination_strategy
        self.logger = get_logger("aggregator.catalog")

    async def _get_entity(self, category: str, entity_id: str) -> Entity:
        resource = UPSTREAM_RESOURCES[category]
        return await self.cache.try_get(
            f"{category}:{entity_id}",
            lambda: self.client.get_resource(resource, entity_id),
        )

    async def get_collection(self, category: str) -> List[Entity]:
        """Whole upstream listing for category, cached under the bare category key."""
        resource = UPSTREAM_RESOURCES[category]
        return await self.cache.try_get(
            category,
            lambda: fetch_all_pages(
                self.client,
                resource,
                page_size=self.page_size,
                strategy=self.pagination_strategy,
            ),
        )

    @trace_function("catalog.get_movies")
    async def get_movies(
        self,
        sort: SortType = SortType.EPISODE,
        order: OrderDirection = OrderDirection.ASCENDING,
    ) -> List[Entity]:
        """All movies sorted by release date or episode number."""
        movies = await self.get_collection("movies")

        if sort == SortType.RELEASE:
            key = lambda movie: movie["release_date"]  # noqa: E731
        else:
            key = lambda movie: movie["episode_id"]  # noqa: E731

        return sorted(movies, key=key, reverse=order == OrderDirection.DESCENDING)

    @trace_function("catalog.get_movie")
    async def get_movie(self, movie_id: str, client_id: Optional[str] = None) -> Entity:
        """Movie detail with starships, planets and characters resolved to names.

        The visit is recorded for ``client_id`` only once every reference
        resolved.
        """
        add_span_attributes(movie_id=movie_id, client_id=client_id)
        movie = await self._get_entity("movies", movie_id)

        starships, planets, characters = await asyncio.gather(
            resolve_references(movie.get("starships", []), self.get_starship, "name", field="starships"),
            resolve_references(movie.get("planets", []), self.get_planet, "name", field="planets"),
            resolve_references(movie.get("characters", []), self.get_character, "name", field="characters"),
        )
        movie["starships"] = starships
        movie["planets"] = planets
        movie["characters"] = characters

        if client_id:
            await self.visibility.record_visit(client_id, movie_id)

        return movie

    async def get_planet(self, planet_id: str) -> Entity:
        return await self._get_entity("planets", planet_id)

    async def get_starship(self, starship_id: str) -> Entity:
        return await self._get_entity("starships", starship_id)

    @trace_function("catalog.get_character")
    async def get_character(self, character_id: str, include_film_titles: bool = False) -> Entity:
        """Character detail, optionally with film URLs replaced by titles.

        Film titles come from the cached movie collection; a film missing
        from it resolves to an empty title.
        """
        character = await self._get_entity("characters", character_id)
        if not include_film_titles:
            return character

        movies = await self.get_movies(SortType.RELEASE, OrderDirection.ASCENDING)
        character["films"] = resolve_by_search(character.get("films", []), movies, "title")
        return character

    @trace_function("catalog.get_characters")
    async def get_characters(self, movie_id: Optional[str] = None) -> List[Entity]:
        """Characters appearing in any movie whose detail is cached by anyone."""
        characters = await self.get_collection("characters")
        cached_movie_ids = await self.visibility.list_all_visited_across_clients("movies")
        return filter_by_visibility(characters, "films", cached_movie_ids, movie_id)

    @trace_function("catalog.get_characters_with_filters")
    async def get_characters_with_filters(self, movie_id: Optional[str], client_id: str) -> List[Entity]:
        """Characters appearing in movies this client has fetched.

        With ``movie_id`` the listing narrows to that movie, provided the
        client has fetched it.
        """
        add_span_attributes(movie_id=movie_id, client_id=client_id)
        characters = await self.get_collection("characters")
        visited = await self.visibility.get_visited(client_id)
        allowed = filter_by_visibility(characters, "films", visited, movie_id)

        self.logger.debug(
            "Filtered characters by client visibility",
            client_id=client_id,
            movie_id=movie_id,
            visited=len(visited),
            total=len(characters),
            allowed=len(allowed),
        )
        return allowed
