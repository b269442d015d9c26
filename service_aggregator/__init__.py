"""SWAPI Aggregator service."""
