"""
Draining of paginated upstream listings.
"""

import asyncio
import math
from typing import Any, Dict, List, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.swapi_client import SwapiClient

COUNT_STRATEGY = "count"
NEXT_LINK_STRATEGY = "next"
PAGINATION_STRATEGIES = (COUNT_STRATEGY, NEXT_LINK_STRATEGY)

logger = get_logger("aggregator.pagination")


async def fetch_all_pages(
    client: "SwapiClient",
    resource: str,
    *,
    page_size: int = 10,
    strategy: str = COUNT_STRATEGY,
) -> List[Dict[str, Any]]:
    """Return every item of an upstream listing in page order.

    With the ``count`` strategy the first page's ``count`` determines the
    number of pages and pages 2..N are requested concurrently. With the
    ``next`` strategy the ``next`` links are followed one page at a time.
    Any failing page fails the whole fetch.
    """
    if strategy not in PAGINATION_STRATEGIES:
        raise ValueError(f"Unknown pagination strategy: {strategy}")

    first_page = await client.get_page(resource, 1)
    results: List[Dict[str, Any]] = list(first_page.get("results", []))

    if strategy == NEXT_LINK_STRATEGY:
        next_url = first_page.get("next")
        while next_url:
            page = await client.get_url(resource, next_url)
            results.extend(page.get("results", []))
            next_url = page.get("next")
    else:
        total_pages = math.ceil(first_page.get("count", 0) / page_size)
        pages = await asyncio.gather(
            *(client.get_page(resource, number) for number in range(2, total_pages + 1))
        )
        for page in pages:
            results.extend(page.get("results", []))

    logger.info("Drained upstream listing", resource=resource, strategy=strategy, items=len(results))
    return results
