"""
Aggregator service package for the SWAPI Aggregator.

The aggregator fronts the public Star Wars API, providing:
- Read-through caching of every upstream response in Redis
- Resolution of URL cross-references into names and titles
- Per-client tracking of fetched movies, used to scope character listings

Structure:
- app.main: FastAPI app, routes, and client-id cookie handling.
- app.adapters: HTTP client for the upstream catalog.
- app.stores: Key-value store interface and Redis implementation.
- app.caching: Cache-aside primitive and visibility tracker.
- app.domain: Catalog operations, pagination, references, filters.
"""
