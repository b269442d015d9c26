"""
Tests for catalog operations.
"""

import pytest

from service_aggregator.app.domain.models import OrderDirection, SortType
from shared.errors import ReferenceResolutionError, UpstreamFetchError


def _names(entities):
    return [entity["name"] for entity in entities]


class TestGetMovie:
    """Test movie detail resolution and visit recording."""

    @pytest.mark.asyncio
    async def test_resolves_references_and_records_visit(self, catalog, upstream, visibility):
        movie = await catalog.get_movie("1", "clientA")

        assert movie["title"] == "A New Hope"
        assert movie["starships"] == ["Death Star"]
        assert movie["planets"] == ["Tatooine", "Alderaan"]
        assert movie["characters"] == ["Luke Skywalker"]
        assert await visibility.get_visited("clientA") == ["1"]

    @pytest.mark.asyncio
    async def test_second_fetch_is_served_from_cache(self, catalog, upstream, router):
        first = await catalog.get_movie("1", "clientA")
        calls_after_first = router.calls.call_count

        second = await catalog.get_movie("1", "clientA")

        assert second == first
        assert router.calls.call_count == calls_after_first
        assert upstream["film_1"].call_count == 1
        assert upstream["planet_1"].call_count == 1

    @pytest.mark.asyncio
    async def test_caches_raw_entity_and_references(self, catalog, upstream, store):
        await catalog.get_movie("1")

        assert store.load("movies:1")["planets"][0].endswith("/planets/1/")
        assert store.load("planets:2") == {"name": "Alderaan", "url": "https://swapi.test/api/planets/2/"}
        assert store.load("starships:9")["name"] == "Death Star"
        assert store.load("characters:1")["name"] == "Luke Skywalker"

    @pytest.mark.asyncio
    async def test_no_visit_without_client(self, catalog, upstream, store):
        await catalog.get_movie("1")

        assert not any(key.startswith("client:") for key in store.data)

    @pytest.mark.asyncio
    async def test_reference_failure_propagates_without_visit(self, catalog, router, films, visibility):
        router.get("/films/1/").respond(200, json=films[0])
        router.get("/starships/9/").respond(200, json={"name": "Death Star"})
        router.get("/people/1/").respond(200, json={"name": "Luke Skywalker"})
        router.get("/planets/1/").respond(200, json={"name": "Tatooine"})
        router.get("/planets/2/").respond(503)

        with pytest.raises(ReferenceResolutionError) as exc_info:
            await catalog.get_movie("1", "clientA")

        assert exc_info.value.details["field"] == "planets"
        assert await visibility.get_visited("clientA") == []

    @pytest.mark.asyncio
    async def test_missing_movie_raises_upstream_error(self, catalog, router, store):
        router.get("/films/42/").respond(404, json={"detail": "Not found"})

        with pytest.raises(UpstreamFetchError):
            await catalog.get_movie("42", "clientA")

        assert "movies:42" not in store.data


class TestGetMovies:
    """Test movie listing sort options."""

    @pytest.mark.asyncio
    async def test_default_sort_is_episode_ascending(self, catalog, upstream):
        movies = await catalog.get_movies()

        assert [movie["episode_id"] for movie in movies] == [2, 3, 4]

    @pytest.mark.asyncio
    async def test_release_descending(self, catalog, upstream):
        movies = await catalog.get_movies(SortType.RELEASE, OrderDirection.DESCENDING)

        assert [movie["release_date"] for movie in movies] == ["2005-05-19", "2002-05-16", "1977-05-25"]

    @pytest.mark.asyncio
    async def test_episode_descending(self, catalog, upstream):
        movies = await catalog.get_movies(SortType.EPISODE, OrderDirection.DESCENDING)

        assert [movie["episode_id"] for movie in movies] == [4, 3, 2]

    @pytest.mark.asyncio
    async def test_listing_cached_under_category_key(self, catalog, upstream, store):
        await catalog.get_movies()
        await catalog.get_movies(SortType.RELEASE)

        assert upstream["films"].call_count == 1
        assert [movie["episode_id"] for movie in store.load("movies")] == [4, 2, 3]


class TestGetCharacter:
    """Test character detail."""

    @pytest.mark.asyncio
    async def test_plain_detail_keeps_film_urls(self, catalog, upstream):
        character = await catalog.get_character("1")

        assert character["films"] == ["https://swapi.test/api/films/1/", "https://swapi.test/api/films/2/"]

    @pytest.mark.asyncio
    async def test_film_titles_resolved_from_movie_collection(self, catalog, upstream):
        character = await catalog.get_character("1", include_film_titles=True)

        assert character["name"] == "Luke Skywalker"
        assert character["films"] == ["A New Hope", ""]


class TestCharacterListings:
    """Test visibility-scoped character listings."""

    @pytest.mark.asyncio
    async def test_client_listing_follows_visited_movies(self, catalog, upstream, store):
        store.seed("client:abc123:movies", ["1", "4"])

        characters = await catalog.get_characters_with_filters(None, "abc123")

        assert _names(characters) == ["Luke Skywalker", "Leia Organa", "Han Solo"]

    @pytest.mark.asyncio
    async def test_client_listing_with_movie_filter(self, catalog, upstream, store):
        store.seed("client:abc123:movies", ["1", "4"])

        characters = await catalog.get_characters_with_filters("4", "abc123")

        assert _names(characters) == ["Leia Organa", "Han Solo"]

    @pytest.mark.asyncio
    async def test_client_listing_with_unvisited_movie_is_empty(self, catalog, upstream, store):
        store.seed("client:abc123:movies", ["1", "4"])

        assert await catalog.get_characters_with_filters("5", "abc123") == []

    @pytest.mark.asyncio
    async def test_new_client_sees_nothing(self, catalog, upstream):
        assert await catalog.get_characters_with_filters(None, "fresh") == []

    @pytest.mark.asyncio
    async def test_listing_after_movie_fetch(self, catalog, upstream):
        await catalog.get_movie("1", "clientA")

        characters = await catalog.get_characters_with_filters(None, "clientA")

        assert _names(characters) == ["Luke Skywalker"]

    @pytest.mark.asyncio
    async def test_global_listing_uses_cached_movie_details(self, catalog, upstream, store):
        store.seed("movies:4", {"title": "cached elsewhere"})

        characters = await catalog.get_characters()

        assert _names(characters) == ["Leia Organa", "Han Solo"]

    @pytest.mark.asyncio
    async def test_listing_survives_store_outage(self, catalog, upstream, store):
        store.available = False

        assert await catalog.get_characters_with_filters(None, "abc123") == []
        assert upstream["people"].call_count == 1
