"""Builders shared by the test modules."""

from competitions.models import Matchup, MatchupStatus


TEAM_NAMES = {
    "t1": "Revolver",
    "t2": "Ring of Fire",
    "t3": "Sockeye",
    "t4": "Truck Stop",
    "t5": "PoNY",
    "t6": "Doublewide",
    "t7": "Johnny Bravo",
    "t8": "Chicago Machine",
}


def completed(matchup_id, home, away, home_score, away_score, **kwargs) -> Matchup:
    """Build a completed matchup."""
    return Matchup(
        id=matchup_id,
        home_team_id=home,
        away_team_id=away,
        home_score=home_score,
        away_score=away_score,
        status=MatchupStatus.COMPLETED,
        **kwargs,
    )


def scheduled(matchup_id, home, away, **kwargs) -> Matchup:
    """Build a scheduled matchup without scores."""
    return Matchup(
        id=matchup_id,
        home_team_id=home,
        away_team_id=away,
        status=MatchupStatus.SCHEDULED,
        **kwargs,
    )
