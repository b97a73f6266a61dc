"""
Data models and types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Optional


class Category(str, Enum):
    DISNEY_ORIGINALS = "Disney Originals"
    MARVEL = "Marvel"


@dataclass(frozen=True)
class Movie:
    id: str
    tmdb_id: int
    title: str
    description: str
    poster_url: str
    backdrop_url: str
    genres: tuple[str, ...] = ()
    release_year: int = 2000
    rating: str = "PG"
    trailer_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON shape consumed by the browser client."""
        return {
            "id": self.id,
            "tmdbId": self.tmdb_id,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.poster_url,
            "backdropUrl": self.backdrop_url,
            "trailerUrl": self.trailer_url,
            "genre": list(self.genres),
            "releaseYear": self.release_year,
            "rating": self.rating,
        }


@dataclass(frozen=True)
class CatalogSnapshot:
    featured: Optional[Movie] = None
    disney: tuple[Movie, ...] = field(default_factory=tuple)
    marvel: tuple[Movie, ...] = field(default_factory=tuple)
    # 0 means never fetched
    fetched_at_millis: int = 0

    def movies_for(self, category: Category) -> tuple[Movie, ...]:
        if category is Category.DISNEY_ORIGINALS:
            return self.disney
        return self.marvel


class User(NamedTuple):
    user_id: int
    email: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.user_id, "email": self.email, "name": self.name}


class StoredUser(NamedTuple):
    user: User
    password_hash: str
