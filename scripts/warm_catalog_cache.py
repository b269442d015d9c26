#!/usr/bin/env python3
"""
Warm the Redis cache with the catalog collections and, optionally, movie details.

Defaults come from the aggregator service configuration (``AGGREGATOR_*``
environment variables and ``.env``), so the warmed keys land in the namespace
the service reads and are fetched from the same upstream. Flags override
individual settings.
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from service_aggregator.app.caching.warmer import warm_catalog
from shared.config import get_config
from shared.logging import configure_logging


def _parse_args(config) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm Redis caches for the SWAPI catalog.")
    parser.add_argument("--redis-url", default=config.redis_url, help="Redis connection URL")
    parser.add_argument("--namespace", default=config.cache_namespace, help="Redis key namespace")
    parser.add_argument("--swapi-url", default=config.swapi_url, help="Upstream catalog base URL")
    parser.add_argument("--page-size", type=int, default=config.swapi_page_size, help="Upstream listing page size")
    parser.add_argument(
        "--pagination-strategy",
        choices=["count", "next"],
        default=config.pagination_strategy,
        help="How upstream listings are drained",
    )
    parser.add_argument("--concurrency", type=int, default=5, help="Concurrent movie detail warms")
    parser.add_argument("--details", action="store_true", help="Also warm every movie detail with its references")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    config = get_config("aggregator", int(os.getenv("PORT", "3000")))
    args = _parse_args(config)
    config = config.model_copy(update={
        "redis_url": args.redis_url,
        "cache_namespace": args.namespace,
        "swapi_url": args.swapi_url,
        "swapi_page_size": args.page_size,
        "pagination_strategy": args.pagination_strategy,
    })
    configure_logging("aggregator", config.log_level)

    try:
        summary = asyncio.run(
            warm_catalog(config, include_details=args.details, concurrency=args.concurrency)
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cache-warm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 1 if summary["errors"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
