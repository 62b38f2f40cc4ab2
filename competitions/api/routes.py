"""API route definitions."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from competitions.api.dependencies import get_cache, get_client, get_competition_service
from competitions.api.schemas import ResultIn, TeamIn
from competitions.clients.ratings import RatingsClient
from competitions.models.competition import Bracket, PoolToBracket
from competitions.services.bracket import round_name
from competitions.services.cache import CacheService
from competitions.services.competition_service import CompetitionService
from competitions.services.standings import rank_teams

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_competition(service: CompetitionService, competition_id: str):
    competition = service.get_competition(competition_id)
    if competition is None:
        raise HTTPException(status_code=404, detail=f"Competition '{competition_id}' not found")
    return competition


def _dump(models) -> list[dict[str, Any]]:
    return [m.model_dump(mode="json") for m in models]


def _dump_standings(standings) -> dict[str, dict[str, Any]]:
    return {
        group: {team_id: record.model_dump() for team_id, record in records.items()}
        for group, records in standings.items()
    }


# =============================================================================
# TEAMS
# =============================================================================

@router.post("/api/teams", status_code=201)
async def register_team(
    team: TeamIn,
    service: CompetitionService = Depends(get_competition_service),
) -> dict[str, str]:
    """Register or rename a team in the team registry."""
    service.register_team(team.id, team.name)
    return {"id": team.id, "name": team.name}


# =============================================================================
# COMPETITIONS
# =============================================================================

@router.post("/api/competitions", status_code=201)
async def create_competition(
    payload: dict[str, Any] = Body(...),
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Create a competition.

    The body's ``format`` selects the variant: ``pool-play``, ``bracket`` or
    ``pool-to-bracket``.
    """
    try:
        competition = service.create_competition(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return JSONResponse(status_code=201, content=competition.model_dump(mode="json"))


@router.get("/api/competitions")
async def list_competitions(
    league: Optional[str] = Query(default=None, description="League ID filter"),
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """List competitions with id, name and format."""
    competitions = service.list_competitions(league_id=league)
    return JSONResponse(
        content=[
            {"id": c.id, "name": c.name, "format": c.format, "leagueId": c.league_id}
            for c in competitions
        ]
    )


@router.get("/api/competitions/{competition_id}")
async def get_competition(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Full competition state."""
    competition = _require_competition(service, competition_id)
    return JSONResponse(content=competition.model_dump(mode="json"))


@router.delete("/api/competitions/{competition_id}")
async def delete_competition(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> dict[str, bool]:
    """Delete a competition with its pools and matchups."""
    if not service.delete_competition(competition_id):
        raise HTTPException(status_code=404, detail=f"Competition '{competition_id}' not found")
    return {"deleted": True}


# =============================================================================
# POOL PLAY
# =============================================================================

@router.post("/api/competitions/{competition_id}/pools/{pool_id}/schedule")
async def schedule_pool(
    competition_id: str,
    pool_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Generate a pool's round-robin schedule."""
    _require_competition(service, competition_id)
    matchups = service.schedule_pool(competition_id, pool_id)
    if matchups is None:
        raise HTTPException(
            status_code=409,
            detail=f"Pool '{pool_id}' cannot be scheduled (unknown pool or results recorded)",
        )
    return JSONResponse(content=_dump(matchups))


@router.post("/api/competitions/{competition_id}/schedule")
async def schedule_all_pools(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> dict[str, int]:
    """Generate the round-robin schedule of every pool."""
    _require_competition(service, competition_id)
    total = service.schedule_all_pools(competition_id)
    if total is None:
        raise HTTPException(status_code=409, detail="Pools cannot be rescheduled after results")
    return {"matchups": total}


@router.get("/api/competitions/{competition_id}/standings")
async def get_standings(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Standings table per pool (team id -> record)."""
    _require_competition(service, competition_id)
    return JSONResponse(content=_dump_standings(service.standings(competition_id)))


@router.get("/api/competitions/{competition_id}/rankings")
async def get_rankings(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Ordered team ids per pool."""
    _require_competition(service, competition_id)
    return JSONResponse(content=service.rankings(competition_id))


# =============================================================================
# BRACKET
# =============================================================================

@router.post("/api/competitions/{competition_id}/bracket")
async def generate_bracket(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Build the bracket from the team list or current pool rankings."""
    _require_competition(service, competition_id)
    matchups = service.generate_bracket(competition_id)
    if matchups is None:
        raise HTTPException(status_code=409, detail="Bracket cannot be generated")
    return JSONResponse(content=_dump(matchups))


@router.get("/api/competitions/{competition_id}/bracket")
async def get_bracket(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Bracket matchups grouped by round, first round first."""
    competition = _require_competition(service, competition_id)
    if not isinstance(competition, (Bracket, PoolToBracket)):
        raise HTTPException(status_code=409, detail="Competition has no bracket")

    rounds: dict[int, list] = {}
    for matchup in competition.bracket_matchups:
        rounds.setdefault(matchup.round, []).append(matchup)
    return JSONResponse(
        content={
            "champion": competition.champion_id,
            "rounds": [
                {
                    "round": number,
                    "name": round_name(number),
                    "matchups": _dump(sorted(rounds[number], key=lambda m: m.position)),
                }
                for number in sorted(rounds, reverse=True)
            ],
        }
    )


# =============================================================================
# RESULTS
# =============================================================================

@router.post("/api/competitions/{competition_id}/matchups/{matchup_id}/start")
async def start_matchup(
    competition_id: str,
    matchup_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Mark a scheduled matchup as in progress."""
    _require_competition(service, competition_id)
    matchup = service.start_matchup(competition_id, matchup_id)
    if matchup is None:
        raise HTTPException(status_code=409, detail=f"Matchup '{matchup_id}' cannot be started")
    return JSONResponse(content=matchup.model_dump(mode="json"))


@router.post("/api/competitions/{competition_id}/results")
async def record_result(
    competition_id: str,
    result: ResultIn,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Record a final score, updating standings or advancing the bracket."""
    competition = _require_competition(service, competition_id)
    if competition.find_matchup(result.matchup_id, result.kind) is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {result.kind.value} matchup '{result.matchup_id}'",
        )
    matchup = service.record_result(
        competition_id,
        result.matchup_id,
        result.kind,
        result.home_score,
        result.away_score,
        game_id=result.game_id,
    )
    if matchup is None:
        raise HTTPException(status_code=409, detail="Result cannot be recorded for this matchup")
    return JSONResponse(content=matchup.model_dump(mode="json"))


@router.get("/api/competitions/{competition_id}/summary")
async def get_summary(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
    client: RatingsClient = Depends(get_client),
) -> JSONResponse:
    """Standings, rating projections, storylines and narrative."""
    _require_competition(service, competition_id)
    try:
        table = await client.get_rating_table()
        summary = service.summarize(competition_id, table)
    except Exception as e:
        logger.error(f"Error building summary for {competition_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to build results summary")
    return JSONResponse(content=summary.model_dump(mode="json"))


# =============================================================================
# LEAGUES
# =============================================================================

@router.post("/api/leagues", status_code=201)
async def create_league(
    payload: dict[str, Any] = Body(...),
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Create a league (season) with its regular-season games."""
    try:
        league = service.create_league(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return JSONResponse(status_code=201, content=league.model_dump(mode="json"))


@router.get("/api/leagues/{league_id}/standings")
async def get_league_standings(
    league_id: str,
    service: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Season standings blending regular-season and tournament results."""
    standings = service.league_standings(league_id)
    if standings is None:
        raise HTTPException(status_code=404, detail=f"League '{league_id}' not found")
    return JSONResponse(
        content={
            "ranking": rank_teams(standings),
            "standings": {team_id: r.model_dump() for team_id, r in standings.items()},
        }
    )


@router.get("/api/cache/stats")
async def cache_stats(cache: CacheService = Depends(get_cache)) -> JSONResponse:
    """Get rating cache statistics."""
    return JSONResponse(content=cache.stats())
