"""
Abstract base class defining the repository interface.

Competitions are read and written wholesale: a competition owns its pools,
matchups and standings, so saving one replaces all of them and deleting one
removes all of them. Teams are only referenced by id.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict

from competitions.models.competition import League


class CompetitionRepository(ABC):
    """
    Abstract interface for competition storage.

    The core assumes one writer per competition at a time; callers serialize
    mutations of the same competition id.
    """

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    def initialize(self) -> None:
        """
        Prepare the store. Should be idempotent (safe to call multiple times).
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release connections and other resources."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the store is reachable.

        Returns:
            True if accessible, False otherwise
        """
        pass

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    @abstractmethod
    def save_competition(self, competition) -> None:
        """Insert or replace a competition with everything it owns."""
        pass

    @abstractmethod
    def get_competition(self, competition_id: str):
        """
        Load a competition.

        Returns:
            The competition variant, or None if not found
        """
        pass

    @abstractmethod
    def list_competitions(self, league_id: Optional[str] = None) -> List:
        """List competitions, optionally only those of one league."""
        pass

    @abstractmethod
    def delete_competition(self, competition_id: str) -> bool:
        """
        Delete a competition with its pools and matchups.

        Returns:
            True if a competition was deleted
        """
        pass

    # =========================================================================
    # TEAMS
    # =========================================================================

    @abstractmethod
    def save_team(self, team_id: str, name: str) -> None:
        """Register or rename a team."""
        pass

    @abstractmethod
    def get_team_names(self, team_ids: Optional[List[str]] = None) -> Dict[str, str]:
        """Map of team id to name; unknown ids are left out."""
        pass

    # =========================================================================
    # LEAGUES
    # =========================================================================

    @abstractmethod
    def save_league(self, league: League) -> None:
        """Insert or replace a league."""
        pass

    @abstractmethod
    def get_league(self, league_id: str) -> Optional[League]:
        """Load a league, or None if not found."""
        pass
