"""Competition data models.

A competition is one of three tagged variants, discriminated by ``format``:

- ``PoolPlay``: round-robin pools only.
- ``Bracket``: a single-elimination bracket over a flat team list, no pools.
- ``PoolToBracket``: pools feeding an elimination bracket.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from competitions.models.matchup import Matchup, MatchupKind, MatchupStatus
from competitions.models.standings import StandingsRecord


class Pool(BaseModel):
    """A round-robin sub-group of teams."""

    id: str
    name: str
    team_ids: list[str] = []


class _CompetitionBase(BaseModel):
    id: str
    name: str
    team_ids: list[str] = []
    seeds: dict[str, int] = {}
    league_id: Optional[str] = None

    def all_matchups(self) -> list[Matchup]:
        return []

    def completed_matchups(self) -> list[Matchup]:
        return [m for m in self.all_matchups() if m.is_completed]

    def find_matchup(
        self, matchup_id: str, kind: Optional[MatchupKind] = None
    ) -> Optional[Matchup]:
        for matchup in self.all_matchups():
            if matchup.id == matchup_id and (kind is None or matchup.kind == kind):
                return matchup
        return None


class _PoolStage(BaseModel):
    pools: list[Pool] = []
    pool_matchups: list[Matchup] = []
    # pool id -> team id -> record
    standings: dict[str, dict[str, StandingsRecord]] = {}

    @model_validator(mode="after")
    def _check_pool_membership(self):
        seen: set[str] = set()
        for pool in self.pools:
            for team_id in pool.team_ids:
                if team_id in seen:
                    raise ValueError(f"team {team_id} appears in more than one pool")
                seen.add(team_id)
        if not self.team_ids:
            self.team_ids = [t for pool in self.pools for t in pool.team_ids]
        elif set(self.team_ids) != seen:
            raise ValueError("every team must belong to exactly one pool")
        return self

    def find_pool(self, pool_id: str) -> Optional[Pool]:
        for pool in self.pools:
            if pool.id == pool_id:
                return pool
        return None

    def matchups_for_pool(self, pool_id: str) -> list[Matchup]:
        return [m for m in self.pool_matchups if m.pool_id == pool_id]


class _BracketStage(BaseModel):
    bracket_matchups: list[Matchup] = []

    @property
    def final(self) -> Optional[Matchup]:
        for matchup in self.bracket_matchups:
            if matchup.round == 1:
                return matchup
        return None

    @property
    def champion_id(self) -> Optional[str]:
        final = self.final
        if final is None:
            return None
        if final.status == MatchupStatus.BYE:
            return final.home_team_id or final.away_team_id
        return final.winner_id()


class PoolPlay(_PoolStage, _CompetitionBase):
    format: Literal["pool-play"] = "pool-play"

    def all_matchups(self) -> list[Matchup]:
        return list(self.pool_matchups)


class Bracket(_BracketStage, _CompetitionBase):
    format: Literal["bracket"] = "bracket"

    def all_matchups(self) -> list[Matchup]:
        return list(self.bracket_matchups)


class PoolToBracket(_PoolStage, _BracketStage, _CompetitionBase):
    format: Literal["pool-to-bracket"] = "pool-to-bracket"

    def all_matchups(self) -> list[Matchup]:
        return list(self.pool_matchups) + list(self.bracket_matchups)


Competition = Annotated[
    Union[PoolPlay, Bracket, PoolToBracket], Field(discriminator="format")
]

_competition_adapter: TypeAdapter = TypeAdapter(Competition)


def parse_competition(data: Any) -> Union[PoolPlay, Bracket, PoolToBracket]:
    """Validate a plain dict (or JSON string) into the matching variant."""
    if isinstance(data, (str, bytes)):
        return _competition_adapter.validate_json(data)
    return _competition_adapter.validate_python(data)


def pools_of(competition) -> list[Pool]:
    """Pools of a competition; a pure bracket has none."""
    match competition:
        case PoolPlay() | PoolToBracket():
            return competition.pools
        case _:
            return []


class LeagueGame(BaseModel):
    """A completed regular-season game of a league."""

    id: str
    home_team_id: str
    away_team_id: str
    home_score: int
    away_score: int


class League(BaseModel):
    """A season grouping regular-season games and child competitions."""

    id: str
    name: str
    team_ids: list[str] = []
    games: list[LeagueGame] = []
    competition_ids: list[str] = []
