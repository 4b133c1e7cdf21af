import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..config import LeagueFormat, get_league_format
from ..db import get_session
from ..exceptions import ProblemDetail, http_problem
from ..schemas import StandingsOut, StandingsRowOut
from ..services.league_data import load_season
from ..services.standings import StandingsError, compute_standings, rank_standings

logger = logging.getLogger(__name__)

# Resource-only prefix; no /api or /api/v0 here
router = APIRouter(
    prefix="/standings",
    tags=["standings"],
    responses={409: {"model": ProblemDetail}, 503: {"model": ProblemDetail}},
)

CACHE_KEY = "standings"


@router.get("", response_model=StandingsOut)
async def get_standings(
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> StandingsOut:
    cached = await standings_cache.get((CACHE_KEY, league_format))
    if cached is not None:
        return cached
    generation = standings_cache.generation

    try:
        teams, weeks = await load_season(session)
    except SQLAlchemyError:
        logger.exception("Could not load season data for standings")
        raise http_problem(
            status_code=503,
            detail="standings are temporarily unavailable",
            code="standings_unavailable",
        )

    try:
        records = compute_standings(teams, weeks, league_format)
    except StandingsError as exc:
        logger.warning("Standings could not be computed: %s", exc)
        raise http_problem(
            status_code=409,
            detail=str(exc),
            code="standings_inconsistent",
        )

    result = StandingsOut(
        rows=[
            StandingsRowOut(
                rank=row.rank,
                teamId=row.team_id,
                teamName=row.team_name,
                totalPoints=row.total_points,
                matchesPlayed=row.matches_played,
                record=row.record,
            )
            for row in rank_standings(records)
        ]
    )
    if not await standings_cache.set(
        (CACHE_KEY, league_format), result, generation=generation
    ):
        logger.debug("Standings result not cached")
    return result
