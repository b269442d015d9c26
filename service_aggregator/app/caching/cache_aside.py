"""
Read-through cache over the aggregator key-value store.
"""

import json
from typing import Any, Awaitable, Callable, List, Optional, TypeVar, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import StoreUnavailableError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..stores.base import KeyValueStore
    from shared.metrics import MetricsCollector

T = TypeVar("T")


class CacheAside:
    """Cache-aside primitive: try the store, else compute and store.

    Values are stored as JSON and replaced whole on every write. A stored
    value that deserializes to something falsy (``[]``, ``{}``, ``""``) is
    treated like an absent key, so empty upstream results are recomputed on
    every call.

    When the store is unavailable every read behaves as a miss and writes
    are dropped; results stay correct but uncached.
    """

    def __init__(self, store: "KeyValueStore", *, metrics: Optional["MetricsCollector"] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("aggregator.cache")

    async def try_get(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for key, computing and storing it on a miss.

        ``compute`` runs at most once per call. Concurrent misses on the same
        key are not coalesced: each caller computes and writes, and the last
        write wins. Exceptions from ``compute`` propagate and nothing is
        stored.
        """
        cached = await self.get_json(key)
        if cached:
            self._record(key, hit=True)
            return cached

        self._record(key, hit=False)
        value = await compute()
        await self.set_json(key, value)
        return value

    async def get_json(self, key: str) -> Optional[Any]:
        """Read and deserialize key; None when absent, undecodable or unreachable."""
        try:
            raw = await self.store.get(key)
        except StoreUnavailableError as exc:
            self.logger.warning("Cache read skipped, store unavailable", key=key, error=exc.message)
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            self.logger.warning("Failed to deserialize cached payload", key=key)
            return None

    async def set_json(self, key: str, value: Any) -> bool:
        """Serialize and store value under key; False when the write was dropped."""
        try:
            await self.store.set(key, json.dumps(value))
        except StoreUnavailableError as exc:
            self.logger.warning("Cache write dropped, store unavailable", key=key, error=exc.message)
            return False

        self.logger.debug("Cached value", key=key)
        return True

    async def keys(self, prefix: str) -> List[str]:
        """List stored keys under prefix; empty when the store is unreachable."""
        try:
            return await self.store.keys(prefix)
        except StoreUnavailableError as exc:
            self.logger.warning("Key scan skipped, store unavailable", prefix=prefix, error=exc.message)
            return []

    def _record(self, key: str, hit: bool) -> None:
        self.logger.debug("Cache hit" if hit else "Cache miss", key=key)
        if self.metrics:
            self.metrics.record_cache_lookup(key.split(":", 1)[0], hit)
