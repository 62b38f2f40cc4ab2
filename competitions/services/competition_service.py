"""
Competition Service - Runs competitions on top of the repository.

Composes the pure scheduling, standings, bracket, rating and storyline
functions with persistence. Every mutation loads the competition, rebuilds
the derived state from its matchups, and saves it back wholesale.
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Optional

from pydantic import BaseModel

from competitions.models.competition import (
    Bracket,
    League,
    PoolPlay,
    PoolToBracket,
    parse_competition,
    pools_of,
)
from competitions.models.matchup import Matchup, MatchupKind, MatchupStatus
from competitions.models.rating import RatingSnapshot, RatingTable
from competitions.models.standings import LeagueStandingsRecord, StandingsRecord
from competitions.models.storyline import Storylines
from competitions.services.advancement import advance_winner, resolve_byes, winner_locked
from competitions.services.bracket import generate_bracket
from competitions.services.rating import project_ratings
from competitions.services.scheduler import schedule_pool
from competitions.services.standings import (
    compute_league_standings,
    compute_pool_standings,
    rank_teams,
)
from competitions.services.storylines import build_storylines
from competitions.storage import CompetitionRepository, get_repository

logger = logging.getLogger(__name__)

RESULT_STATUSES = (
    MatchupStatus.SCHEDULED,
    MatchupStatus.IN_PROGRESS,
    MatchupStatus.COMPLETED,
)


class ResultsSummary(BaseModel):
    """Everything the results view shows for one competition."""

    competition_id: str
    standings: dict[str, dict[str, StandingsRecord]] = {}
    rankings: dict[str, list[str]] = {}
    champion_id: Optional[str] = None
    ratings: dict[str, RatingSnapshot] = {}
    storylines: Storylines


class CompetitionService:
    """
    Service layer for competitions.

    Mutations of one competition id are serialized with a per-id lock;
    different competitions proceed independently.
    """

    def __init__(self, repository: Optional[CompetitionRepository] = None):
        self.repository = repository or get_repository()
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, competition_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[competition_id]

    def _save(self, competition) -> None:
        if isinstance(competition, (PoolPlay, PoolToBracket)):
            competition.standings = compute_pool_standings(competition)
        self.repository.save_competition(competition)

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def create_competition(self, data: dict[str, Any]):
        """Validate and store a new competition (replacing one with the same id)."""
        competition = parse_competition(data)
        with self._lock_for(competition.id):
            self._save(competition)
        logger.info(f"Created {competition.format} competition {competition.id}")
        return competition

    def get_competition(self, competition_id: str):
        return self.repository.get_competition(competition_id)

    def list_competitions(self, league_id: Optional[str] = None) -> list:
        return self.repository.list_competitions(league_id=league_id)

    def delete_competition(self, competition_id: str) -> bool:
        with self._lock_for(competition_id):
            deleted = self.repository.delete_competition(competition_id)
        if deleted:
            logger.info(f"Deleted competition {competition_id}")
        return deleted

    def register_team(self, team_id: str, name: str) -> None:
        self.repository.save_team(team_id, name)

    def team_names(self, competition) -> dict[str, str]:
        return self.repository.get_team_names(competition.team_ids)

    # =========================================================================
    # POOL PLAY
    # =========================================================================

    def schedule_pool(self, competition_id: str, pool_id: str) -> Optional[list[Matchup]]:
        """
        Generate (or regenerate) a pool's round-robin schedule.

        Returns:
            The new matchups, or None if the competition or pool does not
            exist or the pool already has completed matchups.
        """
        with self._lock_for(competition_id):
            competition = self.repository.get_competition(competition_id)
            if competition is None:
                return None
            pool = next((p for p in pools_of(competition) if p.id == pool_id), None)
            if pool is None:
                logger.warning(f"Pool {pool_id} not found in {competition_id}")
                return None
            existing = competition.matchups_for_pool(pool_id)
            if any(m.is_completed for m in existing):
                logger.warning(
                    f"Refusing to reschedule pool {pool_id} of {competition_id}: "
                    f"results already recorded"
                )
                return None

            matchups = schedule_pool(pool.id, pool.team_ids)
            competition.pool_matchups = [
                m for m in competition.pool_matchups if m.pool_id != pool_id
            ] + matchups
            self._save(competition)

        logger.info(f"Scheduled {len(matchups)} matchups for pool {pool_id} of {competition_id}")
        return matchups

    def schedule_all_pools(self, competition_id: str) -> Optional[int]:
        """Schedule every pool; returns the number of matchups created."""
        competition = self.repository.get_competition(competition_id)
        if competition is None:
            return None
        total = 0
        for pool in pools_of(competition):
            matchups = self.schedule_pool(competition_id, pool.id)
            if matchups is None:
                return None
            total += len(matchups)
        return total

    def standings(self, competition_id: str) -> Optional[dict[str, dict[str, StandingsRecord]]]:
        competition = self.repository.get_competition(competition_id)
        if competition is None:
            return None
        return compute_pool_standings(competition)

    def rankings(self, competition_id: str) -> Optional[dict[str, list[str]]]:
        standings = self.standings(competition_id)
        if standings is None:
            return None
        return {pool_id: rank_teams(records) for pool_id, records in standings.items()}

    # =========================================================================
    # BRACKET
    # =========================================================================

    def generate_bracket(self, competition_id: str) -> Optional[list[Matchup]]:
        """
        Build the competition's bracket from its teams or pool rankings.

        Returns:
            The bracket matchups, or None if the format has no bracket, the
            field is too small, or bracket results are already recorded.
        """
        with self._lock_for(competition_id):
            competition = self.repository.get_competition(competition_id)
            if competition is None:
                return None
            if isinstance(competition, (Bracket, PoolToBracket)) and any(
                m.is_completed for m in competition.bracket_matchups
            ):
                logger.warning(f"Refusing to rebuild bracket of {competition_id}: results recorded")
                return None

            matchups = generate_bracket(competition)
            if matchups is None:
                return None
            competition.bracket_matchups = matchups
            self._save(competition)

        logger.info(f"Generated bracket with {len(matchups)} matchups for {competition_id}")
        return matchups

    # =========================================================================
    # RESULTS
    # =========================================================================

    def start_matchup(self, competition_id: str, matchup_id: str) -> Optional[Matchup]:
        """Mark a scheduled matchup as in progress."""
        with self._lock_for(competition_id):
            competition = self.repository.get_competition(competition_id)
            if competition is None:
                return None
            matchup = competition.find_matchup(matchup_id)
            if matchup is None or matchup.status != MatchupStatus.SCHEDULED:
                return None
            matchup.status = MatchupStatus.IN_PROGRESS
            self._save(competition)
        return matchup

    def record_result(
        self,
        competition_id: str,
        matchup_id: str,
        kind: MatchupKind,
        home_score: int,
        away_score: int,
        game_id: Optional[str] = None,
    ) -> Optional[Matchup]:
        """
        Record a final score; the only way a matchup becomes completed.

        Pool results rebuild the standings; bracket results advance the
        winner into the next round.

        Returns:
            The completed matchup, or None if it cannot take a result
            (unknown, missing a team, not yet playable, negative scores, a tied
            bracket game, or a changed winner whose next game has started).
        """
        kind = MatchupKind(kind)
        with self._lock_for(competition_id):
            competition = self.repository.get_competition(competition_id)
            if competition is None:
                return None
            matchup = competition.find_matchup(matchup_id, kind)
            if matchup is None:
                logger.warning(f"No {kind.value} matchup {matchup_id} in {competition_id}")
                return None
            if matchup.status not in RESULT_STATUSES or not matchup.has_both_teams:
                logger.warning(f"Matchup {matchup_id} is {matchup.status.value}; cannot record")
                return None
            if home_score < 0 or away_score < 0:
                return None
            if kind == MatchupKind.BRACKET and home_score == away_score:
                logger.warning(f"Bracket matchup {matchup_id} cannot end tied")
                return None
            if kind == MatchupKind.BRACKET and matchup.is_completed:
                new_winner = matchup.home_team_id if home_score > away_score else matchup.away_team_id
                if new_winner != matchup.winner_id() and winner_locked(
                    competition.bracket_matchups, matchup
                ):
                    logger.warning(
                        f"Cannot change the winner of {matchup_id}; "
                        f"the next round has already started"
                    )
                    return None

            matchup.home_score = home_score
            matchup.away_score = away_score
            matchup.status = MatchupStatus.COMPLETED
            if game_id is not None:
                matchup.game_id = game_id

            if kind == MatchupKind.BRACKET:
                advance_winner(competition.bracket_matchups, matchup)
                resolve_byes(competition.bracket_matchups)
            self._save(competition)

        logger.info(
            f"Recorded {matchup.home_team_id} {home_score}-{away_score} "
            f"{matchup.away_team_id} for {matchup_id} in {competition_id}"
        )
        return matchup

    # =========================================================================
    # SUMMARY
    # =========================================================================

    def summarize(
        self, competition_id: str, rating_table: Optional[RatingTable] = None
    ) -> Optional[ResultsSummary]:
        """Standings, rating projections and storylines for one competition."""
        competition = self.repository.get_competition(competition_id)
        if competition is None:
            return None

        names = self.team_names(competition)
        snapshots = project_ratings(competition, names, rating_table or RatingTable())
        standings = compute_pool_standings(competition)

        champion = None
        if isinstance(competition, (Bracket, PoolToBracket)):
            champion = competition.champion_id

        return ResultsSummary(
            competition_id=competition.id,
            standings=standings,
            rankings={pool_id: rank_teams(r) for pool_id, r in standings.items()},
            champion_id=champion,
            ratings=snapshots,
            storylines=build_storylines(competition, names, snapshots),
        )

    # =========================================================================
    # LEAGUES
    # =========================================================================

    def create_league(self, data: dict[str, Any]) -> League:
        league = League.model_validate(data)
        self.repository.save_league(league)
        logger.info(f"Created league {league.id}")
        return league

    def league_standings(self, league_id: str) -> Optional[dict[str, LeagueStandingsRecord]]:
        """Season standings across regular-season games and child competitions."""
        league = self.repository.get_league(league_id)
        if league is None:
            return None

        competitions = []
        for competition_id in league.competition_ids:
            competition = self.repository.get_competition(competition_id)
            if competition is None:
                logger.warning(f"League {league_id} references missing competition {competition_id}")
                continue
            competitions.append(competition)
        for competition in self.repository.list_competitions(league_id=league_id):
            if competition.id not in league.competition_ids:
                competitions.append(competition)

        return compute_league_standings(league, competitions)
