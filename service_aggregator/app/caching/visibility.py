"""
Per-client visibility tracking for top-level catalog entries.
"""

from typing import List

from shared.logging import get_logger
from .cache_aside import CacheAside


class VisibilityTracker:
    """Records which entries of a category each client has fetched.

    Sets live under ``client:<client_id>:<category>`` as JSON string arrays.
    Updates are read-modify-write without locking; two concurrent visits by
    the same client may lose one of the entries.
    """

    def __init__(self, cache: CacheAside, category: str = "movies"):
        self.cache = cache
        self.category = category
        self.logger = get_logger("aggregator.visibility")

    def _key(self, client_id: str) -> str:
        return f"client:{client_id}:{self.category}"

    async def record_visit(self, client_id: str, entry_id: str) -> None:
        """Append entry_id to the client's set unless already present."""
        visited = await self.get_visited(client_id)
        if entry_id in visited:
            return

        visited.append(entry_id)
        await self.cache.set_json(self._key(client_id), visited)
        self.logger.debug("Recorded visit", client_id=client_id, category=self.category, entry_id=entry_id)

    async def get_visited(self, client_id: str) -> List[str]:
        """Return the client's visited entries, or an empty list."""
        visited = await self.cache.get_json(self._key(client_id))
        if not visited:
            return []
        return list(visited)

    async def list_all_visited_across_clients(self, category: str) -> List[str]:
        """Identifiers of every cached ``<category>:<id>`` detail entry.

        This reflects any client's detail fetch that populated the cache,
        not one client's own history.
        """
        keys = await self.cache.keys(f"{category}:")
        return [key.split(":")[-1] for key in keys]
