"""
Request options and response models for the aggregator API.
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class SortType(str, Enum):
    """Movie listing sort keys."""
    RELEASE = "release"
    EPISODE = "episode"


class OrderDirection(str, Enum):
    """Sort directions."""
    ASCENDING = "ascending"
    DESCENDING = "descending"


class VisibilityScope(str, Enum):
    """Which visibility signal scopes a character listing."""
    CLIENT = "client"
    GLOBAL = "global"


class MovieResponse(BaseModel):
    """Movie listing entry."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    episode: int
    release_date: str = Field(alias="releaseDate")

    @classmethod
    def from_entity(cls, movie: Dict[str, Any]) -> "MovieResponse":
        return cls(
            title=movie["title"],
            episode=movie["episode_id"],
            release_date=movie["release_date"],
        )


class DetailedMovieResponse(MovieResponse):
    """Movie detail with resolved references."""

    opening_crawl: str = Field(alias="openingCrawl")
    director: str
    producer: str
    characters: List[str]
    planets: List[str]
    starships: List[str]

    @classmethod
    def from_entity(cls, movie: Dict[str, Any]) -> "DetailedMovieResponse":
        return cls(
            title=movie["title"],
            episode=movie["episode_id"],
            release_date=movie["release_date"],
            opening_crawl=movie.get("opening_crawl", ""),
            director=movie.get("director", ""),
            producer=movie.get("producer", ""),
            characters=movie.get("characters", []),
            planets=movie.get("planets", []),
            starships=movie.get("starships", []),
        )


class CharacterResponse(BaseModel):
    """Character listing entry."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    home_world: str = Field(alias="homeWorld")

    @classmethod
    def from_entity(cls, character: Dict[str, Any]) -> "CharacterResponse":
        return cls(name=character["name"], home_world=character.get("homeworld", ""))


class DetailedCharacterResponse(CharacterResponse):
    """Character detail with film titles."""

    height: str
    mass: str
    gender: str
    hair_color: str = Field(alias="hairColor")
    skin_color: str = Field(alias="skinColor")
    films: List[str]

    @classmethod
    def from_entity(cls, character: Dict[str, Any]) -> "DetailedCharacterResponse":
        return cls(
            name=character["name"],
            home_world=character.get("homeworld", ""),
            height=character.get("height", ""),
            mass=character.get("mass", ""),
            gender=character.get("gender", ""),
            hair_color=character.get("hair_color", ""),
            skin_color=character.get("skin_color", ""),
            films=character.get("films", []),
        )
