"""
Read-only views over the cached catalog, used by the request handlers.
"""

from typing import Optional

from streaming_catalog.cache import CatalogCache
from streaming_catalog.logger import logger
from streaming_catalog.models import Category, Movie
from streaming_catalog.search.fuzzy_search import get_searcher


class CategoryNotFound(LookupError):
    def __init__(self, name: str):
        super().__init__(f"category {name!r} not found")
        self.name = name


def parse_category(name: str) -> Category:
    try:
        return Category(name)
    except ValueError:
        raise CategoryNotFound(name) from None


class CatalogLookup:
    def __init__(self, cache: CatalogCache):
        self.cache = cache

    async def get_featured(self) -> Optional[Movie]:
        snapshot = await self.cache.get_snapshot()
        return snapshot.featured

    async def get_categories(self) -> dict[Category, list[Movie]]:
        snapshot = await self.cache.get_snapshot()
        return {category: list(snapshot.movies_for(category)) for category in Category}

    async def get_by_category_name(self, name: str) -> list[Movie]:
        snapshot = await self.cache.get_snapshot()
        category = parse_category(name)
        movies = snapshot.movies_for(category)
        if not movies:
            raise CategoryNotFound(name)
        return list(movies)

    async def get_all(self) -> list[Movie]:
        snapshot = await self.cache.get_snapshot()
        return [*snapshot.disney, *snapshot.marvel]

    async def search(self, query: str, limit: int = 5) -> list[Movie]:
        """Fuzzy title search over every movie in the current catalog."""
        snapshot = await self.cache.get_snapshot()
        movies = (*snapshot.disney, *snapshot.marvel)
        if snapshot.featured is not None:
            movies = (snapshot.featured, *movies)
        searcher = get_searcher(movies)
        results = searcher(query, limit=limit)
        logger.info(f"found {len(results)} movies matching {query!r}")
        return results
