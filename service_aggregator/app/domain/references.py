"""
Resolution of URL cross-references into display values.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from shared.errors import ReferenceResolutionError, UpstreamFetchError

Entity = Dict[str, Any]


def extract_id(url: str) -> str:
    """Trailing path segment of a reference URL.

    ``https://swapi.dev/api/planets/1/`` -> ``"1"``. Only one trailing slash
    is stripped.
    """
    trimmed = url[:-1] if url.endswith("/") else url
    return trimmed.split("/")[-1]


async def resolve_references(
    urls: Sequence[str],
    dereference: Callable[[str], Awaitable[Entity]],
    display_field: str,
    *,
    field: Optional[str] = None,
) -> List[str]:
    """Dereference every URL concurrently and map each entity to display_field.

    The result is positionally aligned with ``urls`` whatever order the
    lookups complete in. An upstream failure of any lookup fails the whole
    resolution with ``ReferenceResolutionError``; any other exception,
    including a ``KeyError`` for an entity lacking ``display_field``,
    propagates unchanged.
    """

    async def _resolve(url: str) -> str:
        try:
            entity = await dereference(extract_id(url))
        except UpstreamFetchError as exc:
            raise ReferenceResolutionError(field or display_field, url, exc) from exc
        return entity[display_field]

    return list(await asyncio.gather(*(_resolve(url) for url in urls)))


def resolve_by_search(
    urls: Sequence[str],
    collection: Sequence[Entity],
    display_field: str,
    url_field: str = "url",
) -> List[str]:
    """Resolve URLs against an already loaded collection.

    Each URL maps to the display value of the first entity in ``collection``
    whose own URL has the same identifier; unmatched URLs map to ``""``.
    """
    resolved: List[str] = []
    for url in urls:
        reference_id = extract_id(url)
        match = next(
            (entity for entity in collection if extract_id(entity.get(url_field, "")) == reference_id),
            None,
        )
        resolved.append(match.get(display_field, "") if match else "")
    return resolved
