"""
Key-value store adapters for the aggregator.

The cache layer only depends on the ``KeyValueStore`` protocol; ``RedisStore``
is the production implementation.
"""

from .base import KeyValueStore
from .redis_store import RedisStore

__all__ = ["KeyValueStore", "RedisStore"]
