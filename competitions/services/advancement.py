"""
Bracket advancement.

Winners move forward by label: a completed matchup at position p in round r
feeds whichever slot of round r - 1 expects ``W{p}``.
"""

import logging
from typing import Iterable, Optional

from competitions.models.matchup import Matchup, MatchupKind, MatchupStatus, WinnerOf

logger = logging.getLogger(__name__)


def advancing_team(matchup: Matchup) -> Optional[str]:
    """Team that moves on from a matchup, if decided."""
    if matchup.status == MatchupStatus.BYE:
        return matchup.home_team_id or matchup.away_team_id
    return matchup.winner_id()


def _find_slot(
    matchups: Iterable[Matchup], round_number: int, label: WinnerOf
) -> tuple[Optional[Matchup], Optional[str]]:
    for candidate in matchups:
        if candidate.kind != MatchupKind.BRACKET or candidate.round != round_number:
            continue
        if candidate.home_seed == label:
            return candidate, "home"
        if candidate.away_seed == label:
            return candidate, "away"
    return None, None


def next_matchup(matchups: Iterable[Matchup], source: Matchup) -> Optional[Matchup]:
    """Matchup of the following round that expects the source's winner."""
    if source.kind != MatchupKind.BRACKET or source.round is None or source.round <= 1:
        return None
    target, _ = _find_slot(matchups, source.round - 1, source.winner_label)
    return target


def winner_locked(matchups: list[Matchup], source: Matchup) -> bool:
    """Whether the source's winner already played on.

    Byes are followed through, so a team that skipped a round still counts
    as having played the game after it.
    """
    target = next_matchup(matchups, source)
    while target is not None:
        if target.status in (MatchupStatus.IN_PROGRESS, MatchupStatus.COMPLETED):
            return True
        if target.status != MatchupStatus.BYE:
            return False
        target = next_matchup(matchups, target)
    return False


def advance_winner(matchups: list[Matchup], source: Matchup) -> Optional[Matchup]:
    """Write the source matchup's winner into its next-round slot.

    Returns the updated matchup, or None when there is nothing to do: the
    source is the final, undecided, or no slot expects its winner.
    """
    if source.kind != MatchupKind.BRACKET or source.round is None:
        return None

    winner = advancing_team(source)
    if winner is None:
        return None

    if source.round == 1:
        logger.info(f"Final {source.id} decided, champion {winner}")
        return None

    target, side = _find_slot(matchups, source.round - 1, source.winner_label)
    if target is None:
        logger.debug(f"No slot expects {source.winner_label.label} in round {source.round - 1}")
        return None

    if side == "home":
        target.home_team_id = winner
    else:
        target.away_team_id = winner

    if target.has_both_teams and target.status == MatchupStatus.PENDING:
        target.status = MatchupStatus.SCHEDULED
    logger.debug(f"{winner} advanced from {source.id} to {target.id} ({side})")
    return target


def _dead_matchups(matchups: list[Matchup]) -> set[str]:
    """Ids of matchups that can never produce a team.

    A first-round matchup with no teams is dead, as is any later matchup
    whose two feeders are both dead.
    """
    bracket = [m for m in matchups if m.kind == MatchupKind.BRACKET and m.round is not None]
    if not bracket:
        return set()
    first_round = max(m.round for m in bracket)

    dead = {
        m.id for m in bracket
        if m.round == first_round and m.home_team_id is None and m.away_team_id is None
    }
    for round_number in range(first_round - 1, 0, -1):
        feeders = {m.position: m for m in bracket if m.round == round_number + 1}
        for m in bracket:
            if m.round != round_number:
                continue
            sources = [feeders.get(seed.position) for seed in (m.home_seed, m.away_seed)
                       if isinstance(seed, WinnerOf)]
            if len(sources) == 2 and all(s is not None and s.id in dead for s in sources):
                dead.add(m.id)
    return dead


def resolve_byes(matchups: list[Matchup]) -> int:
    """Advance every bye, including byes created by empty feeders.

    Returns the number of teams advanced.
    """
    bracket = [m for m in matchups if m.kind == MatchupKind.BRACKET and m.round is not None]
    if not bracket:
        return 0
    dead = _dead_matchups(matchups)
    advanced = 0

    for round_number in range(max(m.round for m in bracket), 0, -1):
        feeders = {m.position: m for m in bracket if m.round == round_number + 1}
        for m in bracket:
            if m.round != round_number:
                continue
            if m.status == MatchupStatus.PENDING and m.id not in dead:
                home_dead = _feeder_dead(m.home_seed, feeders, dead)
                away_dead = _feeder_dead(m.away_seed, feeders, dead)
                if (m.home_team_id and away_dead) or (m.away_team_id and home_dead):
                    m.status = MatchupStatus.BYE
            if m.status == MatchupStatus.BYE and advance_winner(matchups, m) is not None:
                advanced += 1
    return advanced


def _feeder_dead(seed, feeders: dict[int, Matchup], dead: set[str]) -> bool:
    if not isinstance(seed, WinnerOf):
        return False
    feeder = feeders.get(seed.position)
    return feeder is not None and feeder.id in dead
