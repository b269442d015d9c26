"""
Domain package for the aggregator.

- catalog: the operations exposed to the HTTP layer
- pagination: draining multi-page upstream listings
- references: URL cross-reference resolution
- filters: visibility-scoped listing filters
- models: sort options and response shapes
"""

from .catalog import CatalogService
from .models import (
    SortType, OrderDirection, VisibilityScope,
    MovieResponse, DetailedMovieResponse, CharacterResponse, DetailedCharacterResponse,
)

__all__ = [
    "CatalogService",
    "SortType",
    "OrderDirection",
    "VisibilityScope",
    "MovieResponse",
    "DetailedMovieResponse",
    "CharacterResponse",
    "DetailedCharacterResponse",
]
