"""
Redis-backed key-value store for the aggregator cache.
"""

from typing import List, Optional, TYPE_CHECKING

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import AggregatorException, StoreUnavailableError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.config import BaseConfig


class RedisStore:
    """Namespaced Redis store; every key is written as ``<namespace>:<key>``."""

    def __init__(self, redis_url: str, namespace: str = "api"):
        self.redis_url = redis_url
        self.namespace = namespace
        self.logger = get_logger("aggregator.store.redis")
        self.redis: Optional[redis.Redis] = None

    @classmethod
    def from_config(cls, config: "BaseConfig") -> "RedisStore":
        """Store on the configured Redis URL and key namespace."""
        return cls(config.redis_url, namespace=config.cache_namespace)

    async def start(self):
        """Start the Redis connection."""
        try:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )

            await self.redis.ping()

            self.logger.info("Redis store started", namespace=self.namespace)

        except (RedisError, OSError) as e:
            self.logger.error("Failed to start Redis store", error=str(e))
            raise AggregatorException("REDIS_START_FAILED", str(e))

    async def stop(self):
        """Stop the Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis store stopped")

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def _client(self, operation: str) -> redis.Redis:
        if self.redis is None:
            raise StoreUnavailableError(operation, "Redis store not started")
        return self.redis

    async def get(self, key: str) -> Optional[str]:
        """Get the raw value stored under key."""
        client = self._client("get")
        try:
            return await client.get(self._key(key))
        except (RedisError, OSError) as e:
            raise StoreUnavailableError("get", str(e), {"key": key}) from e

    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        client = self._client("set")
        try:
            await client.set(self._key(key), value)
        except (RedisError, OSError) as e:
            raise StoreUnavailableError("set", str(e), {"key": key}) from e

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        client = self._client("exists")
        try:
            return (await client.exists(self._key(key))) == 1
        except (RedisError, OSError) as e:
            raise StoreUnavailableError("exists", str(e), {"key": key}) from e

    async def keys(self, prefix: str) -> List[str]:
        """List keys starting with prefix, without the namespace."""
        client = self._client("keys")
        try:
            found = await client.keys(f"{self._key(prefix)}*")
        except (RedisError, OSError) as e:
            raise StoreUnavailableError("keys", str(e), {"prefix": prefix}) from e

        strip = len(self.namespace) + 1
        return [key[strip:] for key in found]

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis is None:
            return False
        try:
            await self.redis.ping()
            return True
        except (RedisError, OSError):
            return False
