"""Round-robin pool scheduling (circle method)."""

import logging
from typing import Optional

from competitions.models.matchup import Matchup, MatchupKind, MatchupStatus

logger = logging.getLogger(__name__)


def round_robin_rounds(team_ids: list[str]) -> list[list[tuple[str, str]]]:
    """Pair every team with every other team exactly once, grouped by round.

    An odd field gets a synthetic bye slot; pairings against it are dropped.
    The first team stays fixed while the rest rotate one place per round.
    """
    teams: list[Optional[str]] = list(team_ids)
    if len(teams) < 2:
        return []
    if len(teams) % 2:
        teams.append(None)

    n = len(teams)
    rounds = []
    for _ in range(n - 1):
        pairs = []
        for i in range(n // 2):
            home, away = teams[i], teams[n - 1 - i]
            if home is None or away is None:
                continue
            pairs.append((home, away))
        rounds.append(pairs)
        teams.append(teams.pop(1))
    return rounds


def schedule_pool(pool_id: str, team_ids: list[str]) -> list[Matchup]:
    """Build the full matchup list of one pool.

    Deterministic for a given team order, so ids are stable across re-runs.
    """
    matchups = []
    for pairs in round_robin_rounds(team_ids):
        for home, away in pairs:
            position = len(matchups) + 1
            matchups.append(Matchup(
                id=f"{pool_id}-{position}",
                kind=MatchupKind.POOL,
                pool_id=pool_id,
                position=position,
                home_team_id=home,
                away_team_id=away,
                status=MatchupStatus.SCHEDULED,
            ))
    logger.debug(f"Scheduled {len(matchups)} matchups for pool {pool_id}")
    return matchups
