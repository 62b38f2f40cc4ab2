"""Standings computation.

Every function here rebuilds records from scratch from the matchup list, so
calling it repeatedly over the same matchups gives the same answer.
"""

import logging
from typing import Iterable, Mapping, TypeVar

from competitions.models.competition import League, pools_of
from competitions.models.matchup import Matchup
from competitions.models.standings import LeagueStandingsRecord, StandingsRecord

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=StandingsRecord)


def _fold_game(
    records: Mapping[str, StandingsRecord],
    home: str,
    away: str,
    home_score: int,
    away_score: int,
) -> None:
    for team, own, other in ((home, home_score, away_score), (away, away_score, home_score)):
        record = records.get(team)
        if record is None:
            logger.debug(f"Skipping unknown team {team} in standings")
            continue
        record.points_for += own
        record.points_against += other
        if own > other:
            record.wins += 1
        elif own < other:
            record.losses += 1
        else:
            record.ties += 1


def _finish(records: Mapping[str, StandingsRecord]) -> None:
    for record in records.values():
        record.point_diff = record.points_for - record.points_against


def compute_standings(
    matchups: Iterable[Matchup], team_ids: Iterable[str]
) -> dict[str, StandingsRecord]:
    """Fold completed matchups into a fresh record per team."""
    records = {team_id: StandingsRecord() for team_id in team_ids}
    for matchup in matchups:
        if not matchup.is_completed:
            continue
        _fold_game(
            records,
            matchup.home_team_id,
            matchup.away_team_id,
            matchup.home_score,
            matchup.away_score,
        )
    _finish(records)
    return records


def rank_teams(standings: Mapping[str, R]) -> list[str]:
    """Team ids by wins, then point differential, both descending.

    The sort is stable, so fully tied teams keep their original order.
    """
    return sorted(
        standings,
        key=lambda team_id: (-standings[team_id].wins, -standings[team_id].point_diff),
    )


def compute_pool_standings(competition) -> dict[str, dict[str, StandingsRecord]]:
    """Standings of every pool of a competition, keyed by pool id."""
    result = {}
    for pool in pools_of(competition):
        result[pool.id] = compute_standings(
            competition.matchups_for_pool(pool.id), pool.team_ids
        )
    return result


def pool_rankings(competition) -> dict[str, list[str]]:
    """Ranking of every pool, computed from the current matchups."""
    return {
        pool_id: rank_teams(records)
        for pool_id, records in compute_pool_standings(competition).items()
    }


def compute_league_standings(
    league: League, competitions: Iterable = ()
) -> dict[str, LeagueStandingsRecord]:
    """Season standings blending regular-season games and tournament results."""
    records = {team_id: LeagueStandingsRecord() for team_id in league.team_ids}

    for game in league.games:
        _fold_game(records, game.home_team_id, game.away_team_id, game.home_score, game.away_score)
        _tally(records, game.home_team_id, game.away_team_id,
               game.home_score, game.away_score, regular=True)

    for competition in competitions:
        for matchup in competition.completed_matchups():
            _fold_game(
                records,
                matchup.home_team_id,
                matchup.away_team_id,
                matchup.home_score,
                matchup.away_score,
            )
            _tally(records, matchup.home_team_id, matchup.away_team_id,
                   matchup.home_score, matchup.away_score, regular=False)

    _finish(records)
    return records


def _tally(records, home, away, home_score, away_score, regular: bool) -> None:
    if home_score == away_score:
        return
    winner, loser = (home, away) if home_score > away_score else (away, home)
    if winner in records:
        if regular:
            records[winner].regular_wins += 1
        else:
            records[winner].tournament_wins += 1
    if loser in records:
        if regular:
            records[loser].regular_losses += 1
        else:
            records[loser].tournament_losses += 1
