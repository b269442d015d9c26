"""
Shared fixtures for aggregator tests.
"""

import json
from typing import Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
import respx

from service_aggregator.app.adapters.swapi_client import SwapiClient
from service_aggregator.app.caching.cache_aside import CacheAside
from service_aggregator.app.caching.visibility import VisibilityTracker
from service_aggregator.app.domain.catalog import CatalogService
from shared.errors import StoreUnavailableError
from shared.metrics import MetricsCollector


BASE_URL = "https://swapi.test/api"


class InMemoryStore:
    """Dict-backed KeyValueStore double that records writes."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.writes: List[str] = []
        self.available = True

    def _check(self, operation: str):
        if not self.available:
            raise StoreUnavailableError(operation, "simulated outage")

    async def get(self, key: str) -> Optional[str]:
        self._check("get")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._check("set")
        self.data[key] = value
        self.writes.append(key)

    async def exists(self, key: str) -> bool:
        self._check("exists")
        return key in self.data

    async def keys(self, prefix: str) -> List[str]:
        self._check("keys")
        return [key for key in self.data if key.startswith(prefix)]

    def seed(self, key: str, value) -> None:
        self.data[key] = json.dumps(value)

    def load(self, key: str):
        return json.loads(self.data[key])


def url(resource: str, resource_id: str) -> str:
    return f"{BASE_URL}/{resource}/{resource_id}/"


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def metrics():
    """Metrics collector with its own registry."""
    return MetricsCollector("aggregator")


@pytest.fixture
def cache(store, metrics):
    return CacheAside(store, metrics=metrics)


@pytest.fixture
def visibility(cache):
    return VisibilityTracker(cache, "movies")


@pytest.fixture
def router():
    """respx router standing in for the upstream catalog."""
    return respx.Router(base_url=BASE_URL, assert_all_called=False)


@pytest_asyncio.fixture
async def swapi_client(router, metrics):
    client = SwapiClient(
        BASE_URL,
        metrics=metrics,
        transport=httpx.MockTransport(router.async_handler),
    )
    yield client
    await client.close()


@pytest.fixture
def catalog(swapi_client, cache, visibility):
    return CatalogService(swapi_client, cache, visibility, page_size=10)


@pytest.fixture
def films():
    """Three films listed upstream in episode order 4, 2, 3."""
    return [
        {
            "title": "A New Hope",
            "episode_id": 4,
            "release_date": "1977-05-25",
            "director": "George Lucas",
            "producer": "Gary Kurtz, Rick McCallum",
            "opening_crawl": "It is a period of civil war.",
            "url": url("films", "1"),
            "starships": [url("starships", "9")],
            "planets": [url("planets", "1"), url("planets", "2")],
            "characters": [url("people", "1")],
        },
        {
            "title": "Attack of the Clones",
            "episode_id": 2,
            "release_date": "2002-05-16",
            "director": "George Lucas",
            "producer": "Rick McCallum",
            "opening_crawl": "There is unrest in the Galactic Senate.",
            "url": url("films", "5"),
            "starships": [],
            "planets": [],
            "characters": [],
        },
        {
            "title": "Revenge of the Sith",
            "episode_id": 3,
            "release_date": "2005-05-19",
            "director": "George Lucas",
            "producer": "Rick McCallum",
            "opening_crawl": "War! The Republic is crumbling.",
            "url": url("films", "6"),
            "starships": [],
            "planets": [],
            "characters": [],
        },
    ]


@pytest.fixture
def people():
    """Characters with film references to 1, 2, 4, 5 and 6."""
    return [
        {
            "name": "Luke Skywalker",
            "height": "172",
            "mass": "77",
            "gender": "male",
            "hair_color": "blond",
            "skin_color": "fair",
            "homeworld": url("planets", "1"),
            "films": [url("films", "1"), url("films", "2")],
            "url": url("people", "1"),
        },
        {
            "name": "Leia Organa",
            "height": "150",
            "mass": "49",
            "gender": "female",
            "hair_color": "brown",
            "skin_color": "light",
            "homeworld": url("planets", "2"),
            "films": [url("films", "4")],
            "url": url("people", "5"),
        },
        {
            "name": "Han Solo",
            "height": "180",
            "mass": "80",
            "gender": "male",
            "hair_color": "brown",
            "skin_color": "fair",
            "homeworld": url("planets", "22"),
            "films": [url("films", "2"), url("films", "4"), url("films", "5")],
            "url": url("people", "14"),
        },
        {
            "name": "Dooku",
            "height": "193",
            "mass": "80",
            "gender": "male",
            "hair_color": "white",
            "skin_color": "fair",
            "homeworld": url("planets", "52"),
            "films": [url("films", "5"), url("films", "6")],
            "url": url("people", "67"),
        },
    ]


@pytest.fixture
def upstream(router, films, people):
    """Register catalog routes for the movie detail and listing scenarios."""
    return {
        "films": router.get("/films/", params={"page": "1"}).respond(
            200, json={"count": len(films), "next": None, "previous": None, "results": films}
        ),
        "film_1": router.get("/films/1/").respond(200, json=films[0]),
        "people": router.get("/people/", params={"page": "1"}).respond(
            200, json={"count": len(people), "next": None, "previous": None, "results": people}
        ),
        "person_1": router.get("/people/1/").respond(200, json=people[0]),
        "planet_1": router.get("/planets/1/").respond(200, json={"name": "Tatooine", "url": url("planets", "1")}),
        "planet_2": router.get("/planets/2/").respond(200, json={"name": "Alderaan", "url": url("planets", "2")}),
        "starship_9": router.get("/starships/9/").respond(200, json={"name": "Death Star", "url": url("starships", "9")}),
    }
