"""
Adapters package for the aggregator.

Contains the HTTP client wrapper for the upstream catalog. Adapters map
transport and status failures to shared errors and stay side-effect free
outside of explicit calls.
"""

from .swapi_client import SwapiClient

__all__ = ["SwapiClient"]
