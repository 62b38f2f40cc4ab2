"""
Rating model.

Estimates the rating a team earned in each game from the score margin and
the opponent's pre-competition rating, and projects a competition rating as
the mean of those game ratings. The curve and blowout thresholds are
empirical heuristics, configurable in ``competitions.config``.
"""

import logging
import math
from typing import Mapping, Optional

from competitions import config
from competitions.models.matchup import Matchup
from competitions.models.rating import GameRating, RatingSnapshot, RatingTable

logger = logging.getLogger(__name__)


def rating_diff(winner_score: int, loser_score: int) -> int:
    """Rating points separating a winner from a loser, given the final score.

    A one-point win is worth the minimum swing; the swing grows with the
    margin relative to the winning score and saturates at the maximum.
    Returns 0 when the first score is not a win.
    """
    if winner_score <= loser_score:
        return 0
    if winner_score - loser_score == 1:
        return config.RATING_MIN_SWING

    ratio = loser_score / (winner_score - 1)
    angle = config.RATING_CURVE_ANGLE * math.pi
    sin_arg = min(1.0, (1 - ratio) / config.RATING_CURVE_SPAN) * angle
    span = config.RATING_MAX_SWING - config.RATING_MIN_SWING
    diff = config.RATING_MIN_SWING + span * math.sin(sin_arg) / math.sin(angle)
    return min(config.RATING_MAX_SWING, round(diff))


def game_rating(opponent_rating: float, own_score: int, opponent_score: int) -> float:
    """Rating a team earned in one game against an opponent of known rating."""
    if own_score > opponent_score:
        return opponent_rating + rating_diff(own_score, opponent_score)
    return opponent_rating - rating_diff(opponent_score, own_score)


def is_blowout(
    winner_rating: Optional[float],
    loser_rating: Optional[float],
    winner_score: int,
    loser_score: int,
    winner_other_results: int,
) -> bool:
    """Whether a heavy favourite's win was lopsided enough to be a blowout.

    Needs a pre-game gap of at least BLOWOUT_RATING_GAP, a winning score above
    twice the losing score plus one, and enough other results for the winner
    that the game is not a small-sample outlier.
    """
    if winner_rating is None or loser_rating is None:
        return False
    return (
        winner_rating - loser_rating >= config.BLOWOUT_RATING_GAP
        and winner_score > 2 * loser_score + 1
        and winner_other_results >= config.BLOWOUT_MIN_OTHER_RESULTS
    )


def pre_ratings(
    team_ids: list[str], team_names: Mapping[str, str], table: RatingTable
) -> dict[str, Optional[float]]:
    """Pre-competition rating of each team, None where unknown."""
    ratings = {}
    for team_id in team_ids:
        ratings[team_id] = table.rating_for(team_names.get(team_id, team_id))
        if ratings[team_id] is None:
            logger.debug(f"No rating found for team {team_id}")
    return ratings


def project_team(
    team_id: str,
    matchups: list[Matchup],
    ratings: Mapping[str, Optional[float]],
    rank: Optional[int] = None,
) -> RatingSnapshot:
    """Rating snapshot of one team over its completed games."""
    pre = ratings.get(team_id)
    played = [m for m in matchups if m.is_completed and m.involves(team_id)]

    games = []
    for matchup in played:
        opponent = matchup.opponent_of(team_id)
        own_score = matchup.score_for(team_id)
        opponent_score = matchup.score_for(opponent)
        opponent_rating = ratings.get(opponent)

        rating = None
        if pre is not None and opponent_rating is not None:
            rating = game_rating(opponent_rating, own_score, opponent_score)

        blowout = False
        if own_score > opponent_score:
            blowout = is_blowout(pre, opponent_rating, own_score, opponent_score, len(played) - 1)
        elif opponent_score > own_score:
            opponent_results = sum(
                1 for m in matchups if m.is_completed and m.involves(opponent)
            )
            blowout = is_blowout(
                opponent_rating, pre, opponent_score, own_score, opponent_results - 1
            )

        games.append(GameRating(
            matchup_id=matchup.id,
            opponent_id=opponent,
            own_score=own_score,
            opponent_score=opponent_score,
            opponent_rating=opponent_rating,
            rating=rating,
            blowout=blowout,
        ))

    resolved = [g.rating for g in games if g.rating is not None]
    projected = sum(resolved) / len(resolved) if resolved else pre
    delta = projected - pre if projected is not None and pre is not None else None
    return RatingSnapshot(
        team_id=team_id,
        pre_rating=pre,
        rank=rank,
        games=games,
        projected=projected,
        delta=delta,
    )


def project_ratings(
    competition, team_names: Mapping[str, str], table: RatingTable
) -> dict[str, RatingSnapshot]:
    """Rating snapshots of every team in a competition."""
    ratings = pre_ratings(competition.team_ids, team_names, table)
    matchups = competition.all_matchups()
    snapshots = {}
    for team_id in competition.team_ids:
        entry = table.lookup(team_names.get(team_id, team_id))
        snapshots[team_id] = project_team(
            team_id, matchups, ratings, rank=entry.rank if entry else None
        )
    return snapshots
