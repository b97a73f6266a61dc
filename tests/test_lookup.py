import asyncio
import gc
import weakref

import pytest

from streaming_catalog.cache import DEFAULT_TTL_MILLIS, CatalogCache
from streaming_catalog.lookup import CatalogLookup, CategoryNotFound, parse_category
from streaming_catalog.models import Category, Movie
from streaming_catalog.remote.fallback import (FALLBACK_DISNEY, FALLBACK_FEATURED,
                                               FALLBACK_MARVEL)
from streaming_catalog.remote.tmdb import TMDBClient, TMDBError


def _movie(idx: int, title: str) -> Movie:
    return Movie(
        id=str(idx),
        tmdb_id=idx,
        title=title,
        description="",
        poster_url="",
        backdrop_url="",
    )


DISNEY = [_movie(1, "Encanto"), _movie(2, "Frozen II"), _movie(3, "Moana")]
MARVEL = [_movie(4, "Iron Man"), _movie(1, "Encanto")]


class StaticSource:
    def __init__(self, disney=DISNEY, marvel=MARVEL, featured=None):
        self.disney = disney
        self.marvel = marvel
        self.featured = featured or _movie(99, "The Little Mermaid")

    async def fetch_featured(self):
        return self.featured

    async def fetch_disney(self):
        return list(self.disney)

    async def fetch_marvel(self):
        return list(self.marvel)


class FailingClient(TMDBClient):
    def __init__(self):
        super().__init__(api_key="test-key")

    async def _request(self, endpoint, params):
        raise TMDBError("Connection error: refused")


def _lookup(source) -> CatalogLookup:
    return CatalogLookup(CatalogCache(source, clock=lambda: 1_700_000_000_000))


def test_get_featured():
    lookup = _lookup(StaticSource())
    assert asyncio.run(lookup.get_featured()).title == "The Little Mermaid"


def test_get_categories_has_both_keys_in_order():
    categories = asyncio.run(_lookup(StaticSource()).get_categories())
    assert list(categories) == [Category.DISNEY_ORIGINALS, Category.MARVEL]
    assert categories[Category.DISNEY_ORIGINALS] == DISNEY
    assert categories[Category.MARVEL] == MARVEL


def test_get_by_category_name():
    lookup = _lookup(StaticSource())
    assert asyncio.run(lookup.get_by_category_name("Disney Originals")) == DISNEY
    assert asyncio.run(lookup.get_by_category_name("Marvel")) == MARVEL


@pytest.mark.parametrize("name", ["Pixar", "marvel", "", "Disney"])
def test_unknown_category_raises(name):
    lookup = _lookup(StaticSource())
    with pytest.raises(CategoryNotFound):
        asyncio.run(lookup.get_by_category_name(name))


def test_empty_category_raises():
    lookup = _lookup(StaticSource(marvel=[]))
    with pytest.raises(CategoryNotFound):
        asyncio.run(lookup.get_by_category_name("Marvel"))


def test_parse_category():
    assert parse_category("Marvel") is Category.MARVEL
    with pytest.raises(CategoryNotFound):
        parse_category("Star Wars")


def test_get_all_concatenates_without_dedup():
    movies = asyncio.run(_lookup(StaticSource()).get_all())
    assert len(movies) == len(DISNEY) + len(MARVEL)
    assert movies == DISNEY + MARVEL


def test_failing_upstream_serves_fallback_everywhere():
    lookup = _lookup(FailingClient())

    async def read_everything():
        return (
            await lookup.get_featured(),
            await lookup.get_categories(),
            await lookup.get_by_category_name("Marvel"),
            await lookup.get_all(),
        )

    featured, categories, marvel, everything = asyncio.run(read_everything())
    assert featured == FALLBACK_FEATURED
    assert categories[Category.DISNEY_ORIGINALS] == list(FALLBACK_DISNEY)
    assert marvel == list(FALLBACK_MARVEL)
    assert everything == list(FALLBACK_DISNEY) + list(FALLBACK_MARVEL)


def test_search_finds_closest_title():
    lookup = _lookup(StaticSource())
    results = asyncio.run(lookup.search("frozen", limit=1))
    assert results == [DISNEY[1]]


def test_search_normalizes_accents():
    lookup = _lookup(StaticSource(disney=[_movie(7, "Amélie")]))
    results = asyncio.run(lookup.search("amelie", limit=1))
    assert results[0].tmdb_id == 7


def test_search_returns_each_movie_once():
    lookup = _lookup(StaticSource())
    results = asyncio.run(lookup.search("encanto", limit=10))
    assert len(results) == len({movie.id for movie in results})


def test_search_empty_query_raises():
    lookup = _lookup(StaticSource())
    with pytest.raises(ValueError):
        asyncio.run(lookup.search("  "))


class FreshSource:
    """Builds new Movie objects on every fetch, as the TMDB client does."""

    def __init__(self):
        self.rounds = 0

    async def fetch_featured(self):
        self.rounds += 1
        return _movie(99, "The Little Mermaid")

    async def fetch_disney(self):
        return [_movie(1, "Encanto"), _movie(2, "Frozen II")]

    async def fetch_marvel(self):
        return [_movie(4, "Iron Man")]


def test_search_does_not_keep_superseded_movies_alive():
    now = [1_700_000_000_000]
    source = FreshSource()
    lookup = CatalogLookup(CatalogCache(source, clock=lambda: now[0]))

    asyncio.run(lookup.search("encanto"))
    old_movie = weakref.ref(lookup.cache.snapshot.disney[0])

    now[0] += DEFAULT_TTL_MILLIS + 1
    results = asyncio.run(lookup.search("encanto", limit=1))
    gc.collect()

    assert source.rounds == 2
    assert results[0] is lookup.cache.snapshot.disney[0]
    assert old_movie() is None
