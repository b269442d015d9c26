"""
Tests for reference resolution.
"""

import asyncio
import random

import pytest

from service_aggregator.app.domain.references import extract_id, resolve_by_search, resolve_references
from shared.errors import ReferenceResolutionError, UpstreamFetchError


class TestExtractId:
    """Test extract_id."""

    def test_trailing_slash(self):
        assert extract_id("https://swapi.dev/api/planets/1/") == "1"

    def test_without_trailing_slash(self):
        assert extract_id("https://swapi.dev/api/people/14") == "14"

    def test_only_one_trailing_slash_is_stripped(self):
        assert extract_id("https://swapi.dev/api/films/2//") == ""


class TestResolveReferences:
    """Test resolve_references."""

    @pytest.mark.asyncio
    async def test_output_aligned_with_input_despite_latency(self):
        names = {str(i): f"Entity {i}" for i in range(1, 11)}

        async def dereference(entity_id):
            await asyncio.sleep(random.uniform(0, 0.02))
            return {"name": names[entity_id]}

        urls = [f"https://swapi.test/api/people/{i}/" for i in range(10, 0, -1)]

        resolved = await resolve_references(urls, dereference, "name")

        assert resolved == [f"Entity {i}" for i in range(10, 0, -1)]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        async def dereference(entity_id):
            raise AssertionError("should not be called")

        assert await resolve_references([], dereference, "name") == []

    @pytest.mark.asyncio
    async def test_failure_fails_whole_resolution(self):
        async def dereference(entity_id):
            if entity_id == "2":
                raise UpstreamFetchError("planets", "Unexpected status 404", status_code=404)
            return {"name": f"Planet {entity_id}"}

        urls = ["https://swapi.test/api/planets/1/", "https://swapi.test/api/planets/2/"]

        with pytest.raises(ReferenceResolutionError) as exc_info:
            await resolve_references(urls, dereference, "name", field="planets")

        error = exc_info.value
        assert isinstance(error, UpstreamFetchError)
        assert error.code == "REFERENCE_RESOLUTION_ERROR"
        assert error.details["field"] == "planets"
        assert error.details["url"] == "https://swapi.test/api/planets/2/"
        assert error.upstream_status == 404

    @pytest.mark.asyncio
    async def test_non_upstream_errors_propagate_unchanged(self):
        async def dereference(entity_id):
            raise TypeError("bad lookup")

        with pytest.raises(TypeError) as exc_info:
            await resolve_references(["https://swapi.test/api/planets/1/"], dereference, "name")

        assert not isinstance(exc_info.value, UpstreamFetchError)

    @pytest.mark.asyncio
    async def test_missing_display_field_raises_key_error(self):
        async def dereference(entity_id):
            return {"title": "A New Hope"}

        with pytest.raises(KeyError):
            await resolve_references(["https://swapi.test/api/films/1/"], dereference, "name")


class TestResolveBySearch:
    """Test resolve_by_search."""

    MOVIES = [
        {"title": "A New Hope", "url": "https://swapi.test/api/films/1/"},
        {"title": "The Empire Strikes Back", "url": "https://swapi.test/api/films/2/"},
        {"title": "Return of the Jedi", "url": "https://swapi.test/api/films/3/"},
    ]

    def test_resolves_in_input_order(self):
        urls = ["https://swapi.test/api/films/3/", "https://swapi.test/api/films/1/"]

        assert resolve_by_search(urls, self.MOVIES, "title") == ["Return of the Jedi", "A New Hope"]

    def test_unmatched_reference_resolves_to_empty_string(self):
        urls = ["https://swapi.test/api/films/7/", "https://swapi.test/api/films/2/"]

        assert resolve_by_search(urls, self.MOVIES, "title") == ["", "The Empire Strikes Back"]

    def test_identifier_match_is_exact(self):
        movies = [{"title": "Episode Eleven", "url": "https://swapi.test/api/films/11/"}]

        assert resolve_by_search(["https://swapi.test/api/films/1/"], movies, "title") == [""]


class TestResolutionPoliciesAgree:
    """By-id dereference and collection search give the same values."""

    FILMS = [
        {"title": "Film 1", "url": "https://swapi.test/api/films/1/"},
        {"title": "Film 2", "url": "https://swapi.test/api/films/2/"},
        {"title": "Film 11", "url": "https://swapi.test/api/films/11/"},
    ]

    @pytest.mark.asyncio
    async def test_same_titles_for_same_urls(self):
        by_id = {extract_id(film["url"]): film for film in self.FILMS}

        async def dereference(entity_id):
            return by_id[entity_id]

        urls = [
            "https://swapi.test/api/films/1/",
            "https://swapi.test/api/films/11/",
            "https://swapi.test/api/films/2/",
        ]

        dereferenced = await resolve_references(urls, dereference, "title")
        searched = resolve_by_search(urls, self.FILMS, "title")

        assert dereferenced == searched == ["Film 1", "Film 11", "Film 2"]
