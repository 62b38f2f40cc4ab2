"""Matchup data model."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class MatchupStatus(str, Enum):
    """Lifecycle of a matchup."""

    PENDING = "pending"
    SCHEDULED = "scheduled"
    BYE = "bye"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MatchupKind(str, Enum):
    """Whether a matchup belongs to pool play or the bracket."""

    POOL = "pool"
    BRACKET = "bracket"


class PoolSeed(BaseModel):
    """Slot filled by the team finishing at `rank` in pool `pool`."""

    kind: Literal["pool-seed"] = "pool-seed"
    pool: str
    rank: int

    @property
    def label(self) -> str:
        return f"{self.pool}{self.rank}"


class WinnerOf(BaseModel):
    """Slot filled by the winner of the matchup at `position` in the previous round."""

    kind: Literal["winner-of"] = "winner-of"
    position: int

    @property
    def label(self) -> str:
        return f"W{self.position}"


SeedLabel = Annotated[Union[PoolSeed, WinnerOf], Field(discriminator="kind")]


class Matchup(BaseModel):
    """One game between two teams, pool or bracket variant.

    Bracket rounds count down towards the championship: round 1 is the final,
    round 2 the semifinals, and so on.
    """

    id: str
    kind: MatchupKind = MatchupKind.POOL
    pool_id: Optional[str] = None
    round: Optional[int] = None  # bracket only
    position: int = 1
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: MatchupStatus = MatchupStatus.SCHEDULED
    home_seed: Optional[SeedLabel] = None
    away_seed: Optional[SeedLabel] = None
    game_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_scores(self) -> "Matchup":
        has_scores = self.home_score is not None and self.away_score is not None
        if (self.status == MatchupStatus.COMPLETED) != has_scores:
            raise ValueError("a matchup is completed exactly when both scores are set")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == MatchupStatus.COMPLETED

    @property
    def has_both_teams(self) -> bool:
        return self.home_team_id is not None and self.away_team_id is not None

    @property
    def winner_label(self) -> WinnerOf:
        """Label a next-round slot uses to expect this matchup's winner."""
        return WinnerOf(position=self.position)

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def opponent_of(self, team_id: str) -> Optional[str]:
        if team_id == self.home_team_id:
            return self.away_team_id
        if team_id == self.away_team_id:
            return self.home_team_id
        return None

    def score_for(self, team_id: str) -> Optional[int]:
        if team_id == self.home_team_id:
            return self.home_score
        if team_id == self.away_team_id:
            return self.away_score
        return None

    def margin(self) -> Optional[int]:
        """Absolute score margin of a completed matchup."""
        if not self.is_completed:
            return None
        return abs(self.home_score - self.away_score)

    def winner_id(self) -> Optional[str]:
        """Team with the higher score; None while undecided or tied."""
        if not self.is_completed or self.home_score == self.away_score:
            return None
        if self.home_score > self.away_score:
            return self.home_team_id
        return self.away_team_id

    def loser_id(self) -> Optional[str]:
        winner = self.winner_id()
        if winner is None:
            return None
        return self.opponent_of(winner)
