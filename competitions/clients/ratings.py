"""Client for the external team rating reference."""

import logging
from functools import lru_cache
from typing import Any, Optional

import httpx

from competitions import config
from competitions.models.rating import RatingEntry, RatingTable
from competitions.services.cache import CacheService, get_cache_service
from competitions.types import RatingRowDict

logger = logging.getLogger(__name__)

CACHE_KEY = "rating_table"


def parse_rating_rows(data: Any) -> RatingTable:
    """Build a rating table from the reference payload.

    Accepts either a list of ``{"team"|"name", "rating", "rank"}`` rows or a
    mapping of team name to ``{"rating", "rank"}``. Rows without a name, or
    without both rating and rank, are skipped.
    """
    table = RatingTable()
    if isinstance(data, dict):
        rows: list[RatingRowDict] = [
            dict(value, team=name) for name, value in data.items() if isinstance(value, dict)
        ]
    elif isinstance(data, list):
        rows = [row for row in data if isinstance(row, dict)]
    else:
        logger.warning(f"Unexpected rating payload type: {type(data).__name__}")
        return table

    for row in rows:
        name = row.get("team") or row.get("name") or row.get("teamName")
        try:
            entry = RatingEntry(rating=row.get("rating"), rank=row.get("rank"))
        except ValueError as e:
            logger.debug(f"Skipping malformed rating row for {name!r}: {e}")
            continue
        table.add(name, entry)
    return table


class RatingsClient:
    """Async client for the rating reference, cached for one freshness window."""

    def __init__(
        self,
        url: Optional[str] = None,
        cache: Optional[CacheService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Rating reference endpoint (defaults to RATINGS_URL)
            cache: Cache service holding the current snapshot
            transport: Optional httpx transport, used by tests
        """
        self.url = url if url is not None else config.RATINGS_URL
        self.cache = cache or get_cache_service()
        self.transport = transport
        self.headers = {"Accept": "application/json"}

    async def _request(self) -> Any:
        """Fetch the raw rating payload.

        Raises:
            httpx.HTTPError: If request fails
        """
        async with httpx.AsyncClient(
            headers=self.headers,
            timeout=config.RATINGS_TIMEOUT_SECONDS,
            transport=self.transport,
        ) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            return response.json()

    async def get_rating_table(self, force_refresh: bool = False) -> RatingTable:
        """Current rating snapshot, re-fetched once it is older than the TTL.

        Fetch failures degrade to an empty table, so every rating reads as
        unknown and the rest of the results summary still computes.
        """
        if not force_refresh:
            cached = self.cache.get(CACHE_KEY)
            if cached is not None:
                logger.debug("Returning cached rating table")
                return cached

        if not self.url:
            logger.debug("RATINGS_URL not configured; using empty rating table")
            return RatingTable()

        logger.info(f"Fetching ratings from {self.url}")
        try:
            data = await self._request()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error fetching ratings: {e}")
            return RatingTable()

        table = parse_rating_rows(data)
        logger.info(f"Loaded {len(table)} team ratings")
        self.cache.set(CACHE_KEY, table)
        return table


@lru_cache
def get_ratings_client() -> RatingsClient:
    """Get the global ratings client instance."""
    return RatingsClient()
