import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..config import LeagueFormat, get_league_format
from ..db import get_session
from ..exceptions import ProblemDetail, TeamNameTaken, TeamNotFound, http_problem
from ..models import Matchup, Player, Team, TeamLineup
from ..schemas import AutoAssignOut, TeamCreate, TeamOut, TeamRosterUpdate, TeamUpdate
from ..services.rosters import RosterSlotState, auto_assign, default_team_names
from ..time_utils import utcnow
from .players import to_player_out

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/teams",
    tags=["teams"],
    responses={
        400: {"model": ProblemDetail},
        404: {"model": ProblemDetail},
        409: {"model": ProblemDetail},
    },
)


async def _rosters(
    session: AsyncSession, team_ids: list[str]
) -> dict[str, list[Player]]:
    rosters: dict[str, list[Player]] = {tid: [] for tid in team_ids}
    if not team_ids:
        return rosters
    players = (
        await session.execute(
            select(Player)
            .where(Player.team_id.in_(team_ids), Player.deleted_at.is_(None))
            .order_by(Player.created_at, Player.id)
        )
    ).scalars().all()
    for player in players:
        rosters.setdefault(player.team_id, []).append(player)
    return rosters


def _to_team_out(team: Team, players: list[Player]) -> TeamOut:
    return TeamOut(
        id=team.id,
        name=team.name,
        captainId=team.captain_id,
        players=[to_player_out(p) for p in players],
    )


async def _ordered_teams(session: AsyncSession) -> list[Team]:
    return list(
        (
            await session.execute(select(Team).order_by(Team.created_at, Team.name))
        ).scalars().all()
    )


async def _get_team(session: AsyncSession, team_id: str) -> Team:
    team = await session.get(Team, team_id)
    if not team:
        raise TeamNotFound(team_id)
    return team


async def _ensure_name_available(
    session: AsyncSession, name: str, *, exclude_id: str | None = None
) -> None:
    stmt = select(Team.id).where(func.lower(Team.name) == name.lower())
    if exclude_id:
        stmt = stmt.where(Team.id != exclude_id)
    if (await session.execute(stmt)).scalars().first():
        raise TeamNameTaken(name)


@router.post("", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate, session: AsyncSession = Depends(get_session)
) -> TeamOut:
    await _ensure_name_available(session, body.name)
    team = Team(id=uuid.uuid4().hex, name=body.name, created_at=utcnow())
    session.add(team)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise TeamNameTaken(body.name)
    await standings_cache.clear()
    return _to_team_out(team, [])


@router.get("", response_model=list[TeamOut])
async def list_teams(session: AsyncSession = Depends(get_session)) -> list[TeamOut]:
    teams = await _ordered_teams(session)
    rosters = await _rosters(session, [t.id for t in teams])
    return [_to_team_out(t, rosters.get(t.id, [])) for t in teams]


@router.post("/defaults", response_model=list[TeamOut], status_code=status.HTTP_201_CREATED)
async def create_default_teams(
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> list[TeamOut]:
    existing = (await session.execute(select(Team.id))).scalars().first()
    if existing:
        raise http_problem(
            status_code=409,
            detail="teams already exist",
            code="teams_exist",
        )
    teams = [
        Team(id=uuid.uuid4().hex, name=name, created_at=utcnow())
        for name in default_team_names(league_format.team_count)
    ]
    session.add_all(teams)
    await session.commit()
    await standings_cache.clear()
    logger.info("Created %d default teams", len(teams))
    return [_to_team_out(t, []) for t in teams]


@router.post("/auto-assign", response_model=AutoAssignOut)
async def auto_assign_players(
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> AutoAssignOut:
    teams = await _ordered_teams(session)
    rosters = await _rosters(session, [t.id for t in teams])
    unassigned = (
        await session.execute(
            select(Player)
            .where(Player.team_id.is_(None), Player.deleted_at.is_(None))
            .order_by(Player.created_at, Player.id)
        )
    ).scalars().all()

    states = [
        RosterSlotState(
            team_id=t.id,
            player_ids=[p.id for p in rosters.get(t.id, [])],
            captain_id=t.captain_id,
        )
        for t in teams
    ]
    placed = auto_assign(states, [p.id for p in unassigned], league_format.roster_size)

    players_by_id = {p.id: p for p in unassigned}
    for player_id, team_id in placed.items():
        players_by_id[player_id].team_id = team_id
    for team, state in zip(teams, states):
        team.captain_id = state.captain_id
    await session.commit()
    logger.info("Auto-assigned %d players to teams", len(placed))

    rosters = await _rosters(session, [t.id for t in teams])
    return AutoAssignOut(
        assigned=placed,
        teams=[_to_team_out(t, rosters.get(t.id, [])) for t in teams],
    )


@router.get("/{team_id}", response_model=TeamOut)
async def get_team(team_id: str, session: AsyncSession = Depends(get_session)) -> TeamOut:
    team = await _get_team(session, team_id)
    rosters = await _rosters(session, [team.id])
    return _to_team_out(team, rosters[team.id])


@router.patch("/{team_id}", response_model=TeamOut)
async def update_team(
    team_id: str,
    body: TeamUpdate,
    session: AsyncSession = Depends(get_session),
) -> TeamOut:
    team = await _get_team(session, team_id)
    rosters = await _rosters(session, [team.id])
    payload = body.model_dump(exclude_unset=True)

    if payload.get("name"):
        await _ensure_name_available(session, payload["name"], exclude_id=team.id)
        team.name = payload["name"]

    if "captainId" in payload:
        captain_id = payload["captainId"]
        if captain_id and captain_id not in {p.id for p in rosters[team.id]}:
            raise http_problem(
                status_code=400,
                detail="captain must be on the team roster",
                code="captain_not_on_roster",
            )
        team.captain_id = captain_id

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise TeamNameTaken(payload.get("name") or team_id)
    await standings_cache.clear()
    return _to_team_out(team, rosters[team.id])


@router.put("/{team_id}/roster", response_model=TeamOut)
async def replace_roster(
    team_id: str,
    body: TeamRosterUpdate,
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> TeamOut:
    team = await _get_team(session, team_id)
    requested = list(dict.fromkeys(body.playerIds))
    if len(requested) != len(body.playerIds):
        raise http_problem(
            status_code=400,
            detail="roster lists a player more than once",
            code="roster_invalid",
        )
    if len(requested) > league_format.roster_size:
        raise http_problem(
            status_code=400,
            detail=f"a roster holds at most {league_format.roster_size} players",
            code="roster_full",
        )

    players = (
        await session.execute(
            select(Player).where(Player.id.in_(requested), Player.deleted_at.is_(None))
        )
    ).scalars().all() if requested else []
    found = {p.id: p for p in players}
    missing = sorted(set(requested) - set(found))
    if missing:
        raise http_problem(
            status_code=400,
            detail=f"unknown players: {', '.join(missing)}",
            code="roster_invalid",
        )
    taken = sorted(
        p.id for p in players if p.team_id is not None and p.team_id != team.id
    )
    if taken:
        raise http_problem(
            status_code=409,
            detail=f"players already on another team: {', '.join(taken)}",
            code="player_on_other_team",
        )

    await session.execute(
        update(Player)
        .where(Player.team_id == team.id, Player.id.not_in(requested))
        .values(team_id=None)
    )
    for player in players:
        player.team_id = team.id
    if team.captain_id not in found:
        team.captain_id = None
    await session.commit()

    rosters = await _rosters(session, [team.id])
    return _to_team_out(team, rosters[team.id])


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(team_id: str, session: AsyncSession = Depends(get_session)) -> None:
    team = await _get_team(session, team_id)
    scheduled = (
        await session.execute(
            select(Matchup.id).where(
                or_(Matchup.team_a_id == team_id, Matchup.team_b_id == team_id)
            )
        )
    ).scalars().first()
    if scheduled:
        raise http_problem(
            status_code=409,
            detail="team has recorded matchups",
            code="team_has_matchups",
        )

    await session.execute(
        update(Player).where(Player.team_id == team_id).values(team_id=None)
    )
    await session.execute(delete(TeamLineup).where(TeamLineup.team_id == team_id))
    await session.delete(team)
    await session.commit()
    await standings_cache.clear()
    logger.info("Deleted team %s", team_id)
