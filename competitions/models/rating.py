"""Rating data models."""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from competitions.utils.names import name_variants, normalize_team_name

logger = logging.getLogger(__name__)


class RatingEntry(BaseModel):
    """One row of the external rating reference."""

    rating: Optional[float] = None
    rank: Optional[int] = None

    @property
    def is_known(self) -> bool:
        return self.rating is not None or self.rank is not None


class RatingTable:
    """Point-in-time snapshot of the external rating reference.

    Keys are normalized team names. Entries without both rating and rank are
    dropped on insert, so they read as unknown rather than zero.
    """

    def __init__(
        self,
        entries: Optional[dict[str, RatingEntry]] = None,
        fetched_at: Optional[datetime] = None,
    ) -> None:
        self._entries: dict[str, RatingEntry] = {}
        self.fetched_at = fetched_at or datetime.now(timezone.utc)
        for name, entry in (entries or {}).items():
            self.add(name, entry)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, name: str, entry: RatingEntry) -> bool:
        if not name or not entry.is_known:
            logger.debug(f"Ignoring rating entry without data: {name!r}")
            return False
        self._entries[normalize_team_name(name)] = entry
        return True

    def lookup(self, team_name: Optional[str]) -> Optional[RatingEntry]:
        """Find the entry for a team name, trying the usual name variants."""
        if not team_name:
            return None
        for variant in name_variants(team_name):
            entry = self._entries.get(variant)
            if entry is not None:
                return entry
        return None

    def rating_for(self, team_name: Optional[str]) -> Optional[float]:
        entry = self.lookup(team_name)
        return entry.rating if entry else None


class GameRating(BaseModel):
    """Rating one team earned in one completed game."""

    matchup_id: str
    opponent_id: str
    own_score: int
    opponent_score: int
    opponent_rating: Optional[float] = None
    rating: Optional[float] = None  # None when either pre-rating is unknown
    blowout: bool = False


class RatingSnapshot(BaseModel):
    """Derived, unpersisted rating projection of one team."""

    team_id: str
    pre_rating: Optional[float] = None
    rank: Optional[int] = None
    games: list[GameRating] = []
    projected: Optional[float] = None
    delta: Optional[float] = None
