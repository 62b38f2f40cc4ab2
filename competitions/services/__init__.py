"""Services for the competition engine."""

from competitions.services.cache import CacheService, get_cache_service
from competitions.services.competition_service import CompetitionService, ResultsSummary

__all__ = ["CacheService", "get_cache_service", "CompetitionService", "ResultsSummary"]
