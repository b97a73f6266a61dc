"""TMDB discover client feeding the catalog cache."""

import asyncio
import datetime
import os
from typing import Any, Optional

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from streaming_catalog.logger import logger
from streaming_catalog.models import Movie
from streaming_catalog.remote.fallback import (FALLBACK_FEATURED,
                                               PLACEHOLDER_IMAGE,
                                               demo_trailer_url,
                                               fallback_disney,
                                               fallback_marvel)

BASE_URL = "https://api.themoviedb.org/3"
IMAGE_BASE = "https://image.tmdb.org/t/p"
POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"

REQUEST_TIMEOUT_SECONDS = 5
CATEGORY_LIMIT = 8
MAX_GENRES = 3
DEFAULT_RELEASE_YEAR = 2000
NO_DESCRIPTION = "No description available"

DISNEY_COMPANY_ID = "2"
MARVEL_COMPANY_ID = "420"
ANIMATION_GENRE_ID = "16"
FEATURED_RELEASED_AFTER = "2020-01-01"

GENRES = {
    16: "Animation",
    10751: "Family",
    14: "Fantasy",
    28: "Action",
    12: "Adventure",
    35: "Comedy",
    18: "Drama",
    27: "Horror",
    10749: "Romance",
    878: "Sci-Fi",
    53: "Thriller",
}


class TMDBError(Exception):
    """Transport error, timeout or non-success status from TMDB."""
    pass


class TMDBMovie(BaseModel):
    """A single record of a discover response."""
    id: int
    title: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None
    genre_ids: list[int] = Field(default_factory=list)
    adult: bool = False


class DiscoverResponse(BaseModel):
    # records are validated one by one so a malformed entry only drops itself
    results: list[dict[str, Any]] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


def image_url(path: Optional[str], size: str) -> str:
    if not path:
        return PLACEHOLDER_IMAGE
    return f"{IMAGE_BASE}/{size}{path}"


def genre_labels(genre_ids: list[int]) -> tuple[str, ...]:
    labels = [GENRES[genre_id] for genre_id in genre_ids if genre_id in GENRES]
    return tuple(labels[:MAX_GENRES])


def release_year(release_date: Optional[str]) -> int:
    if not release_date:
        return DEFAULT_RELEASE_YEAR
    try:
        return datetime.date.fromisoformat(release_date[:10]).year
    except ValueError:
        pass
    if len(release_date) == 4 and release_date.isdigit():
        return int(release_date)
    return DEFAULT_RELEASE_YEAR


def movie_from_tmdb(record: TMDBMovie) -> Movie:
    return Movie(
        id=str(record.id),
        tmdb_id=record.id,
        title=record.title,
        description=record.overview or NO_DESCRIPTION,
        poster_url=image_url(record.poster_path, POSTER_SIZE),
        backdrop_url=image_url(record.backdrop_path, BACKDROP_SIZE),
        genres=genre_labels(record.genre_ids),
        release_year=release_year(record.release_date),
        rating="R" if record.adult else "PG",
        trailer_url=demo_trailer_url(record.title),
    )


def map_results(results: list[dict[str, Any]], limit: int) -> list[Movie]:
    """Map the first `limit` raw records, skipping the ones that do not validate."""
    movies = []
    for item in results[:limit]:
        try:
            movies.append(movie_from_tmdb(TMDBMovie(**item)))
        except (TypeError, ValidationError) as exc:
            logger.debug(f"skipping malformed TMDB record: {exc}")
    return movies


class TMDBClient:
    """Async client for the TMDB discover endpoint.

    Catalog reads never raise: every failure is logged and replaced by the
    static fallback data of the requested category.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("TMDB_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

        if not self.api_key:
            logger.warning("TMDB_API_KEY not configured, serving fallback catalog")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request(self, endpoint: str, params: dict[str, Any]) -> dict:
        if not self.api_key:
            raise TMDBError("TMDB_API_KEY not configured")

        session = await self._get_session()
        url = f"{self.base_url}{endpoint}"
        try:
            async with session.get(url, params={"api_key": self.api_key, **params}) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise TMDBError(f"API error {response.status}: {text[:200]}")
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise TMDBError(f"Connection error: {exc!r}") from exc

    async def _discover(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        data = await self._request("/discover/movie", {**params, "page": 1})
        try:
            return DiscoverResponse(**data).results
        except (TypeError, ValidationError) as exc:
            raise TMDBError(f"unexpected discover payload: {exc}") from exc

    async def fetch_disney(self) -> list[Movie]:
        """Popular Disney animated movies."""
        try:
            results = await self._discover({
                "with_companies": DISNEY_COMPANY_ID,
                "with_genres": ANIMATION_GENRE_ID,
                "vote_average.gte": 6.0,
                "sort_by": "popularity.desc",
            })
        except TMDBError as exc:
            logger.warning(f"using fallback Disney movies: {exc}")
            return fallback_disney()
        return map_results(results, CATEGORY_LIMIT)

    async def fetch_marvel(self) -> list[Movie]:
        """Popular Marvel Studios movies."""
        try:
            results = await self._discover({
                "with_companies": MARVEL_COMPANY_ID,
                "vote_average.gte": 6.0,
                "sort_by": "popularity.desc",
            })
        except TMDBError as exc:
            logger.warning(f"using fallback Marvel movies: {exc}")
            return fallback_marvel()
        return map_results(results, CATEGORY_LIMIT)

    async def fetch_featured(self) -> Movie:
        """Highest rated recent Disney or Marvel release."""
        try:
            results = await self._discover({
                "with_companies": f"{DISNEY_COMPANY_ID},{MARVEL_COMPANY_ID}",
                "primary_release_date.gte": FEATURED_RELEASED_AFTER,
                "vote_average.gte": 7.0,
                "sort_by": "vote_average.desc",
            })
        except TMDBError as exc:
            logger.warning(f"using fallback featured movie: {exc}")
            return FALLBACK_FEATURED

        featured = map_results(results, 1)
        if not featured:
            logger.warning("TMDB returned no featured candidates, using fallback")
            return FALLBACK_FEATURED
        return featured[0]
