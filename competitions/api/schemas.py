"""Request bodies for the HTTP API."""

from typing import Optional

from pydantic import BaseModel, Field

from competitions.models.matchup import MatchupKind


class TeamIn(BaseModel):
    id: str
    name: str


class ResultIn(BaseModel):
    """A final score reported for one matchup."""

    matchup_id: str
    kind: MatchupKind
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    game_id: Optional[str] = None
