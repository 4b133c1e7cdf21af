import logging
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import LeagueFormat, get_league_format
from ..db import get_session
from ..exceptions import LeagueFull, PlayerNotFound, ProblemDetail
from ..models import Player, Team
from ..schemas import PlayerCreate, PlayerOut, PlayerUpdate
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={404: {"model": ProblemDetail}, 409: {"model": ProblemDetail}},
)


def to_player_out(player: Player) -> PlayerOut:
    return PlayerOut(
        id=player.id,
        name=player.name,
        email=player.email,
        phone=player.phone,
        teamId=player.team_id,
    )


async def get_active_player(session: AsyncSession, player_id: str) -> Player:
    player = await session.get(Player, player_id)
    if not player or player.deleted_at is not None:
        raise PlayerNotFound(player_id)
    return player


@router.post("", response_model=PlayerOut, status_code=status.HTTP_201_CREATED)
async def create_player(
    body: PlayerCreate,
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> PlayerOut:
    active = (
        await session.execute(
            select(func.count()).select_from(Player).where(Player.deleted_at.is_(None))
        )
    ).scalar_one()
    if active >= league_format.max_participants:
        raise LeagueFull(league_format.max_participants)

    player = Player(
        id=uuid.uuid4().hex,
        name=body.name,
        email=body.email,
        phone=body.phone,
        created_at=utcnow(),
    )
    session.add(player)
    await session.commit()
    logger.info(
        "Registered player %s (%d/%d)",
        player.id,
        active + 1,
        league_format.max_participants,
    )
    return to_player_out(player)


@router.get("", response_model=list[PlayerOut])
async def list_players(
    unassigned: bool = Query(False, description="Only players without a team"),
    session: AsyncSession = Depends(get_session),
) -> list[PlayerOut]:
    stmt = select(Player).where(Player.deleted_at.is_(None))
    if unassigned:
        stmt = stmt.where(Player.team_id.is_(None))
    rows = (
        await session.execute(stmt.order_by(Player.created_at, Player.id))
    ).scalars().all()
    return [to_player_out(p) for p in rows]


@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(
    player_id: str, session: AsyncSession = Depends(get_session)
) -> PlayerOut:
    return to_player_out(await get_active_player(session, player_id))


@router.patch("/{player_id}", response_model=PlayerOut)
async def update_player(
    player_id: str,
    body: PlayerUpdate,
    session: AsyncSession = Depends(get_session),
) -> PlayerOut:
    player = await get_active_player(session, player_id)
    payload = body.model_dump(exclude_unset=True)
    if "name" in payload and payload["name"]:
        player.name = payload["name"]
    if "email" in payload:
        player.email = payload["email"]
    if "phone" in payload:
        player.phone = payload["phone"]
    await session.commit()
    return to_player_out(player)


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(
    player_id: str, session: AsyncSession = Depends(get_session)
) -> None:
    player = await get_active_player(session, player_id)
    player.deleted_at = utcnow()
    player.team_id = None
    await session.execute(
        update(Team).where(Team.captain_id == player_id).values(captain_id=None)
    )
    await session.commit()
    logger.info("Removed player %s", player_id)
