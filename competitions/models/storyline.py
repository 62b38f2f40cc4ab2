"""Storyline data models."""

from typing import Optional

from pydantic import BaseModel


class GameStory(BaseModel):
    """A single notable game."""

    matchup_id: str
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    winner_score: int
    loser_score: int
    margin: int
    # Seed or rating gap for upsets
    gap: Optional[float] = None


class TeamStory(BaseModel):
    """A notable team performance."""

    team_id: str
    wins: int
    losses: int
    ties: int = 0
    point_diff: int = 0
    seed: Optional[int] = None
    rating: Optional[float] = None
    score: float = 0


class PoolStory(BaseModel):
    pool_id: str
    pool_name: str
    average_rating: float
    rated_teams: int


class Storylines(BaseModel):
    """Structured findings plus the assembled narrative."""

    upset_by_seed: Optional[GameStory] = None
    upset_by_rating: Optional[GameStory] = None
    closest_game: Optional[GameStory] = None
    biggest_blowout: Optional[GameStory] = None
    cinderella: Optional[TeamStory] = None
    group_of_death: Optional[PoolStory] = None
    dominant: Optional[TeamStory] = None
    narrative: str = ""
