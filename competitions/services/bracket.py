"""
Bracket construction.

Two strategies:
- Seeded two-pool bracket: semifinals cross the top two of each pool.
- Single elimination: any team count, padded with byes to a power of two.

Rounds count down to the final (round 1). Every round after the first is
created up front with empty slots labelled by the prior-round winners that
feed them, so advancement always has a slot to write into.
"""

import logging
import math
from typing import Optional

from competitions.models.competition import Bracket, Pool, PoolPlay, PoolToBracket
from competitions.models.matchup import Matchup, MatchupKind, MatchupStatus, PoolSeed, WinnerOf
from competitions.services.advancement import resolve_byes
from competitions.services.standings import pool_rankings

logger = logging.getLogger(__name__)


def bracket_size(num_teams: int) -> int:
    """Smallest power of two holding every team."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def total_rounds(num_teams: int) -> int:
    size = bracket_size(num_teams)
    return int(math.log2(size)) if size else 0


def round_name(round_number: int) -> str:
    """Display name of a round (1 = final)."""
    teams_in_round = 2 ** round_number
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    return f"Round of {teams_in_round}"


def _status_for(home: Optional[str], away: Optional[str]) -> MatchupStatus:
    if home and away:
        return MatchupStatus.SCHEDULED
    if home or away:
        return MatchupStatus.BYE
    return MatchupStatus.PENDING


def _matchup_id(round_number: int, position: int) -> str:
    return f"bracket-r{round_number}-{position}"


def _rank(ranking: list[str], rank: int) -> Optional[str]:
    return ranking[rank - 1] if len(ranking) >= rank else None


def build_two_pool_bracket(
    pools: list[Pool], rankings: dict[str, list[str]]
) -> Optional[list[Matchup]]:
    """Semifinals A1-B2 and B1-A2, then a final between their winners.

    Returns None unless exactly two pools are given.
    """
    if len(pools) != 2:
        logger.warning(f"Seeded bracket needs exactly two pools, got {len(pools)}")
        return None

    pool_a, pool_b = pools
    ranking_a = rankings.get(pool_a.id, [])
    ranking_b = rankings.get(pool_b.id, [])

    semis = [
        (PoolSeed(pool=pool_a.id, rank=1), PoolSeed(pool=pool_b.id, rank=2)),
        (PoolSeed(pool=pool_b.id, rank=1), PoolSeed(pool=pool_a.id, rank=2)),
    ]
    by_pool = {pool_a.id: ranking_a, pool_b.id: ranking_b}

    matchups = []
    for position, (home_seed, away_seed) in enumerate(semis, start=1):
        home = _rank(by_pool[home_seed.pool], home_seed.rank)
        away = _rank(by_pool[away_seed.pool], away_seed.rank)
        matchups.append(Matchup(
            id=_matchup_id(2, position),
            kind=MatchupKind.BRACKET,
            round=2,
            position=position,
            home_team_id=home,
            away_team_id=away,
            status=MatchupStatus.SCHEDULED if home and away else MatchupStatus.PENDING,
            home_seed=home_seed,
            away_seed=away_seed,
        ))

    matchups.append(Matchup(
        id=_matchup_id(1, 1),
        kind=MatchupKind.BRACKET,
        round=1,
        position=1,
        status=MatchupStatus.PENDING,
        home_seed=WinnerOf(position=1),
        away_seed=WinnerOf(position=2),
    ))
    return matchups


def build_single_elimination(team_ids: list[str]) -> Optional[list[Matchup]]:
    """Single-elimination bracket over teams in seed order.

    Teams fill first-round slots pairwise in order; a pairing missing its
    second team is a bye. Returns None for fewer than two teams.
    """
    if len(team_ids) < 2:
        logger.warning(f"Single elimination needs at least two teams, got {len(team_ids)}")
        return None

    size = bracket_size(len(team_ids))
    first_round = total_rounds(len(team_ids))
    slots: list[Optional[str]] = list(team_ids) + [None] * (size - len(team_ids))

    matchups = []
    for index in range(size // 2):
        home, away = slots[2 * index], slots[2 * index + 1]
        matchups.append(Matchup(
            id=_matchup_id(first_round, index + 1),
            kind=MatchupKind.BRACKET,
            round=first_round,
            position=index + 1,
            home_team_id=home,
            away_team_id=away,
            status=_status_for(home, away),
        ))

    for round_number in range(first_round - 1, 0, -1):
        for position in range(1, 2 ** (round_number - 1) + 1):
            matchups.append(Matchup(
                id=_matchup_id(round_number, position),
                kind=MatchupKind.BRACKET,
                round=round_number,
                position=position,
                status=MatchupStatus.PENDING,
                home_seed=WinnerOf(position=2 * position - 1),
                away_seed=WinnerOf(position=2 * position),
            ))

    resolve_byes(matchups)
    return matchups


def seed_order(team_ids: list[str], seeds: dict[str, int]) -> list[str]:
    """Teams by seed ascending; unseeded teams follow in their given order."""
    unseeded = len(team_ids) + max(seeds.values(), default=0) + 1
    return sorted(team_ids, key=lambda team_id: seeds.get(team_id, unseeded))


def cross_pool_order(pools: list[Pool], rankings: dict[str, list[str]]) -> list[str]:
    """All pool winners (by pool name), then all runners-up, and so on."""
    ordered_pools = sorted(pools, key=lambda p: p.name)
    depth = max((len(rankings.get(p.id, [])) for p in ordered_pools), default=0)
    order = []
    for rank in range(1, depth + 1):
        for pool in ordered_pools:
            team_id = _rank(rankings.get(pool.id, []), rank)
            if team_id is not None:
                order.append(team_id)
    return order


def generate_bracket(competition) -> Optional[list[Matchup]]:
    """Build the bracket a competition's format calls for.

    Returns None when the format has no bracket or the field is too small.
    """
    match competition:
        case PoolPlay():
            logger.warning(f"Competition {competition.id} is pool play only; no bracket")
            return None
        case Bracket():
            return build_single_elimination(
                seed_order(competition.team_ids, competition.seeds)
            )
        case PoolToBracket():
            rankings = pool_rankings(competition)
            if len(competition.pools) == 2:
                return build_two_pool_bracket(competition.pools, rankings)
            return build_single_elimination(cross_pool_order(competition.pools, rankings))
    return None
