"""
Time-to-live cache holding the catalog snapshot served by the API.
"""

import asyncio
from dataclasses import replace
from typing import Callable, Optional, Protocol

from streaming_catalog.logger import logger
from streaming_catalog.models import CatalogSnapshot, Movie
from streaming_catalog.utils import now_millis, timed

DEFAULT_TTL_MILLIS = 30 * 60 * 1000


class CatalogSource(Protocol):
    async def fetch_featured(self) -> Movie:
        ...

    async def fetch_disney(self) -> list[Movie]:
        ...

    async def fetch_marvel(self) -> list[Movie]:
        ...


class CatalogCache:
    """Holds the last catalog snapshot and refreshes it once it is older than the TTL.

    The snapshot is replaced as a whole, readers get either the previous one or
    the new one. Readers that find it stale while a refresh is running wait on
    that same refresh instead of starting their own.
    """

    def __init__(
        self,
        source: CatalogSource,
        clock: Callable[[], int] = now_millis,
        ttl_millis: int = DEFAULT_TTL_MILLIS,
    ):
        self.source = source
        self.clock = clock
        self.ttl_millis = ttl_millis
        self._snapshot = CatalogSnapshot()
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def is_fresh(self) -> bool:
        fetched_at = self._snapshot.fetched_at_millis
        return fetched_at != 0 and self.clock() - fetched_at < self.ttl_millis

    def invalidate(self) -> None:
        """Force a refresh on the next read, keeping the current data until then."""
        if self._snapshot.fetched_at_millis != 0:
            self._snapshot = replace(self._snapshot, fetched_at_millis=0)

    async def get_snapshot(self) -> CatalogSnapshot:
        if self.is_fresh():
            logger.debug("catalog cache hit")
            return self._snapshot

        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._refresh())
        # a cancelled reader must not cancel the refresh the others are waiting on
        return await asyncio.shield(self._refresh_task)

    @timed
    async def _refresh(self) -> CatalogSnapshot:
        previous = self._snapshot
        try:
            # wait for every fetch so no request outlives this refresh
            results = await asyncio.gather(
                self.source.fetch_featured(),
                self.source.fetch_disney(),
                self.source.fetch_marvel(),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            featured, disney, marvel = results
        except Exception as exc:
            logger.exception(f"catalog refresh failed, keeping previous snapshot: {exc}")
            return previous
        finally:
            self._refresh_task = None

        self._snapshot = CatalogSnapshot(
            featured=featured,
            disney=tuple(disney),
            marvel=tuple(marvel),
            fetched_at_millis=self.clock(),
        )
        logger.info(
            f"catalog refreshed: {len(self._snapshot.disney)} Disney, "
            f"{len(self._snapshot.marvel)} Marvel movies"
        )
        return self._snapshot
