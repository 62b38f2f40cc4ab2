"""Data models for the competition engine."""

from competitions.models.competition import (
    Bracket,
    Competition,
    League,
    LeagueGame,
    Pool,
    PoolPlay,
    PoolToBracket,
    parse_competition,
    pools_of,
)
from competitions.models.matchup import (
    Matchup,
    MatchupKind,
    MatchupStatus,
    PoolSeed,
    SeedLabel,
    WinnerOf,
)
from competitions.models.rating import GameRating, RatingEntry, RatingSnapshot, RatingTable
from competitions.models.standings import LeagueStandingsRecord, StandingsRecord
from competitions.models.storyline import GameStory, PoolStory, Storylines, TeamStory

__all__ = [
    "Competition", "PoolPlay", "Bracket", "PoolToBracket", "Pool",
    "League", "LeagueGame", "parse_competition", "pools_of",
    "Matchup", "MatchupKind", "MatchupStatus", "PoolSeed", "WinnerOf", "SeedLabel",
    "RatingEntry", "RatingTable", "GameRating", "RatingSnapshot",
    "StandingsRecord", "LeagueStandingsRecord",
    "GameStory", "TeamStory", "PoolStory", "Storylines",
]
