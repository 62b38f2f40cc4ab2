"""
In-memory repository.

Keeps deep copies of every entity so callers cannot mutate stored state
without saving it.
"""

import threading
from typing import Optional, List, Dict

from competitions.models.competition import League
from .base import CompetitionRepository


class MemoryRepository(CompetitionRepository):
    """Dict-backed repository, one instance per application or test."""

    def __init__(self) -> None:
        self._competitions: Dict[str, object] = {}
        self._teams: Dict[str, str] = {}
        self._leagues: Dict[str, League] = {}
        self._lock = threading.RLock()

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        pass

    def health_check(self) -> bool:
        return True

    def save_competition(self, competition) -> None:
        with self._lock:
            self._competitions[competition.id] = competition.model_copy(deep=True)

    def get_competition(self, competition_id: str):
        with self._lock:
            stored = self._competitions.get(competition_id)
            return stored.model_copy(deep=True) if stored is not None else None

    def list_competitions(self, league_id: Optional[str] = None) -> List:
        with self._lock:
            return [
                c.model_copy(deep=True)
                for c in self._competitions.values()
                if league_id is None or c.league_id == league_id
            ]

    def delete_competition(self, competition_id: str) -> bool:
        with self._lock:
            return self._competitions.pop(competition_id, None) is not None

    def save_team(self, team_id: str, name: str) -> None:
        with self._lock:
            self._teams[team_id] = name

    def get_team_names(self, team_ids: Optional[List[str]] = None) -> Dict[str, str]:
        with self._lock:
            if team_ids is None:
                return dict(self._teams)
            return {t: self._teams[t] for t in team_ids if t in self._teams}

    def save_league(self, league: League) -> None:
        with self._lock:
            self._leagues[league.id] = league.model_copy(deep=True)

    def get_league(self, league_id: str) -> Optional[League]:
        with self._lock:
            stored = self._leagues.get(league_id)
            return stored.model_copy(deep=True) if stored is not None else None
