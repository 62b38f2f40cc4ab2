"""
Type definitions for the competition engine.

Provides TypedDict classes for JSON payloads exchanged with collaborators.
"""

from typing import TypedDict, Optional


class RatingRowDict(TypedDict, total=False):
    """One row of the external rating reference."""
    team: str
    name: str
    teamName: str
    rating: Optional[float]
    rank: Optional[int]


class CacheStatsEntryDict(TypedDict):
    size: int
    maxsize: int
    ttl: int


class CacheStatsDict(TypedDict):
    """Statistics about the rating cache."""
    ratings: CacheStatsEntryDict

