"""
Key-value store interface consumed by the cache layer.
"""

from typing import List, Optional, Protocol


class KeyValueStore(Protocol):
    """GET/SET/EXISTS/KEYS-by-prefix store.

    Implementations raise ``StoreUnavailableError`` when the backend cannot
    be reached; callers decide whether to degrade.
    """

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def exists(self, key: str) -> bool:
        ...

    async def keys(self, prefix: str) -> List[str]:
        ...
