"""Standings data models."""

from pydantic import BaseModel


class StandingsRecord(BaseModel):
    """Win/loss/tie and scoring record of one team."""

    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: int = 0
    points_against: int = 0
    point_diff: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_fraction(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.wins / self.games_played


class LeagueStandingsRecord(StandingsRecord):
    """Season-wide record split into regular-season and tournament tallies.

    The totals inherited from StandingsRecord drive the ranking; the split
    exists for reporting.
    """

    regular_wins: int = 0
    regular_losses: int = 0
    tournament_wins: int = 0
    tournament_losses: int = 0
