"""
Caching package for the aggregator.

- cache_aside: read-through JSON cache over the key-value store
- visibility: per-client record of fetched movies
- warmer: cache pre-population (import from .warmer directly)
"""

from .cache_aside import CacheAside
from .visibility import VisibilityTracker

__all__ = ["CacheAside", "VisibilityTracker"]
