"""FastAPI dependencies for dependency injection."""

from functools import lru_cache

from competitions.clients.ratings import RatingsClient, get_ratings_client
from competitions.services.cache import CacheService, get_cache_service
from competitions.services.competition_service import CompetitionService


@lru_cache
def get_competition_service() -> CompetitionService:
    """Get competition service dependency."""
    return CompetitionService()


def get_client() -> RatingsClient:
    """Get ratings client dependency."""
    return get_ratings_client()


def get_cache() -> CacheService:
    """Get cache service dependency."""
    return get_cache_service()
