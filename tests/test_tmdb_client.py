import asyncio

from aiohttp import web
from aiohttp import test_utils

from streaming_catalog.remote.fallback import (FALLBACK_DISNEY, FALLBACK_FEATURED,
                                               FALLBACK_MARVEL)
from streaming_catalog.remote.tmdb import TMDBClient, TMDBError


class _StubClient(TMDBClient):
    def __init__(self, payload=None, error=None):
        super().__init__(api_key="test-key")
        self.payload = payload
        self.error = error
        self.requests = []

    async def _request(self, endpoint, params):
        self.requests.append((endpoint, params))
        if self.error is not None:
            raise self.error
        return self.payload


def _results(count: int) -> dict:
    return {
        "results": [{"id": i, "title": f"Movie {i}", "genre_ids": [28]} for i in range(count)],
        "total_pages": 1,
        "total_results": count,
    }


def test_fetch_disney_takes_first_eight_in_order():
    client = _StubClient(payload=_results(10))
    movies = asyncio.run(client.fetch_disney())
    assert [movie.tmdb_id for movie in movies] == list(range(8))


def test_fetch_disney_query():
    client = _StubClient(payload=_results(1))
    asyncio.run(client.fetch_disney())
    endpoint, params = client.requests[0]
    assert endpoint == "/discover/movie"
    assert params["with_companies"] == "2"
    assert params["with_genres"] == "16"
    assert params["vote_average.gte"] == 6.0
    assert params["sort_by"] == "popularity.desc"
    assert params["page"] == 1


def test_fetch_marvel_has_no_genre_filter():
    client = _StubClient(payload=_results(1))
    asyncio.run(client.fetch_marvel())
    _, params = client.requests[0]
    assert params["with_companies"] == "420"
    assert "with_genres" not in params


def test_fetch_featured_takes_first_result():
    client = _StubClient(payload=_results(3))
    movie = asyncio.run(client.fetch_featured())
    assert movie.tmdb_id == 0
    _, params = client.requests[0]
    assert params["with_companies"] == "2,420"
    assert params["primary_release_date.gte"] == "2020-01-01"
    assert params["vote_average.gte"] == 7.0
    assert params["sort_by"] == "vote_average.desc"


def test_fetch_featured_empty_results_uses_fallback():
    client = _StubClient(payload=_results(0))
    assert asyncio.run(client.fetch_featured()) == FALLBACK_FEATURED


def test_upstream_errors_use_fallback():
    client = _StubClient(error=TMDBError("API error 503"))
    assert asyncio.run(client.fetch_disney()) == list(FALLBACK_DISNEY)
    assert asyncio.run(client.fetch_marvel()) == list(FALLBACK_MARVEL)
    assert asyncio.run(client.fetch_featured()) == FALLBACK_FEATURED


def test_unexpected_payload_uses_fallback():
    client = _StubClient(payload={"results": "nope"})
    assert asyncio.run(client.fetch_marvel()) == list(FALLBACK_MARVEL)


def test_fallback_lists_have_four_movies():
    assert len(FALLBACK_DISNEY) == 4
    assert len(FALLBACK_MARVEL) == 4


def test_missing_api_key_uses_fallback_without_network():
    client = TMDBClient(api_key="")
    assert asyncio.run(client.fetch_disney()) == list(FALLBACK_DISNEY)
    assert client._session is None


def test_unreachable_upstream_uses_fallback():
    async def fetch_all():
        # nothing listens on the discard port
        client = TMDBClient(api_key="test-key", base_url="http://127.0.0.1:9", timeout=2)
        try:
            return await asyncio.gather(
                client.fetch_featured(), client.fetch_disney(), client.fetch_marvel()
            )
        finally:
            await client.close()

    featured, disney, marvel = asyncio.run(fetch_all())
    assert featured == FALLBACK_FEATURED
    assert disney == list(FALLBACK_DISNEY)
    assert marvel == list(FALLBACK_MARVEL)


def test_slow_upstream_times_out_to_fallback():
    async def fetch_from_slow_server():
        release = asyncio.Event()

        async def discover(request):
            await release.wait()
            return web.json_response(_results(8))

        app = web.Application()
        app.router.add_get("/discover/movie", discover)
        server = test_utils.TestServer(app)
        await server.start_server()
        client = TMDBClient(api_key="test-key", base_url=str(server.make_url("")), timeout=0.5)
        try:
            return await client.fetch_disney()
        finally:
            release.set()
            await client.close()
            await server.close()

    assert asyncio.run(fetch_from_slow_server()) == list(FALLBACK_DISNEY)
