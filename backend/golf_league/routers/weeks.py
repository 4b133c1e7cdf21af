import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..config import LeagueFormat, get_league_format
from ..db import get_session
from ..exceptions import ProblemDetail, TeamNotFound, http_problem
from ..models import Matchup, Player, PlayerRound, SubMatch, Team, TeamLineup
from ..schemas import (
    HoleOutcomeOut,
    MatchupOut,
    MatchupResultOut,
    PlayerRoundOut,
    SubMatchOut,
    SubMatchResultOut,
    TeamLineupIn,
    TeamLineupOut,
    WeekMatchupsIn,
    WeekMatchupsOut,
    WeekResultsOut,
    WeekScoresIn,
    WeekScoresOut,
)
from ..scoring.match_play import play_match, status_label
from ..services.league_data import load_weeks
from ..services.standings import LineupError, score_matchup
from ..services.validation import (
    ValidationError,
    validate_gross_scores,
    validate_matchups,
    validate_stroke_tags,
    validate_team_lineup,
)
from ..time_utils import coerce_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/weeks",
    tags=["weeks"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)

WeekNumber = Annotated[int, Path(ge=1, description="League week, starting at 1")]


def _hole_keyed(values: dict) -> dict[str, object]:
    return {str(hole): values[hole] for hole in sorted(values)}


def _to_round_out(row: PlayerRound) -> PlayerRoundOut:
    return PlayerRoundOut(
        playerId=row.player_id,
        gross=dict(row.gross or {}),
        strokes=dict(row.strokes or {}),
        updatedAt=coerce_utc(row.updated_at),
    )


def _to_matchup_out(row: Matchup) -> MatchupOut:
    return MatchupOut(
        index=row.matchup_index,
        teamAId=row.team_a_id,
        teamBId=row.team_b_id,
        subMatches=[
            SubMatchOut(
                slot=sub.slot,
                sideA=list(sub.side_a_player_ids or []),
                sideB=list(sub.side_b_player_ids or []),
            )
            for sub in sorted(row.sub_matches, key=lambda s: s.slot)
        ],
    )


async def _week_rounds(session: AsyncSession, week_number: int) -> list[PlayerRound]:
    return list(
        (
            await session.execute(
                select(PlayerRound)
                .where(PlayerRound.week_number == week_number)
                .order_by(PlayerRound.player_id)
            )
        ).scalars().all()
    )


async def _week_matchups(session: AsyncSession, week_number: int) -> list[Matchup]:
    return list(
        (
            await session.execute(
                select(Matchup)
                .where(Matchup.week_number == week_number)
                .order_by(Matchup.matchup_index)
            )
        ).scalars().all()
    )


async def _team_rosters(session: AsyncSession) -> dict[str, set]:
    rosters: dict[str, set] = {
        tid: set() for tid in (await session.execute(select(Team.id))).scalars().all()
    }
    rows = (
        await session.execute(
            select(Player.id, Player.team_id).where(
                Player.team_id.is_not(None), Player.deleted_at.is_(None)
            )
        )
    ).all()
    for player_id, team_id in rows:
        rosters.setdefault(team_id, set()).add(player_id)
    return rosters


@router.put("/{week_number}/scores", response_model=WeekScoresOut)
async def record_scores(
    week_number: WeekNumber,
    body: WeekScoresIn,
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> WeekScoresOut:
    holes = league_format.holes_per_round
    normalized: dict[str, tuple[dict, dict]] = {}
    try:
        for entry in body.players:
            gross = validate_gross_scores(entry.gross, holes=holes)
            strokes = validate_stroke_tags(entry.strokes, holes=holes)
            normalized[entry.playerId] = (_hole_keyed(gross), _hole_keyed(strokes))
    except ValidationError as exc:
        raise http_problem(status_code=400, detail=exc.detail, code="scores_invalid")

    player_ids = list(normalized)
    if player_ids:
        known = set(
            (
                await session.execute(
                    select(Player.id).where(
                        Player.id.in_(player_ids), Player.deleted_at.is_(None)
                    )
                )
            ).scalars().all()
        )
        missing = sorted(set(player_ids) - known)
        if missing:
            raise http_problem(
                status_code=400,
                detail=f"unknown players: {', '.join(missing)}",
                code="scores_invalid",
            )

    existing = {row.player_id: row for row in await _week_rounds(session, week_number)}
    for player_id, (gross, strokes) in normalized.items():
        row = existing.get(player_id)
        if row is None:
            session.add(
                PlayerRound(
                    id=uuid.uuid4().hex,
                    week_number=week_number,
                    player_id=player_id,
                    gross=gross,
                    strokes=strokes,
                    updated_at=utcnow(),
                )
            )
        else:
            row.gross = gross
            row.strokes = strokes
            row.updated_at = utcnow()
    await session.commit()
    await standings_cache.clear()
    logger.info("Recorded week %s scores for %d players", week_number, len(normalized))

    return WeekScoresOut(
        weekNumber=week_number,
        players=[_to_round_out(r) for r in await _week_rounds(session, week_number)],
    )


@router.get("/{week_number}/scores", response_model=WeekScoresOut)
async def get_scores(
    week_number: WeekNumber, session: AsyncSession = Depends(get_session)
) -> WeekScoresOut:
    rows = await _week_rounds(session, week_number)
    return WeekScoresOut(
        weekNumber=week_number, players=[_to_round_out(r) for r in rows]
    )


@router.put("/{week_number}/matchups", response_model=WeekMatchupsOut)
async def replace_matchups(
    week_number: WeekNumber,
    body: WeekMatchupsIn,
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> WeekMatchupsOut:
    proposed = [
        {
            "index": m.index,
            "team_a_id": m.teamAId,
            "team_b_id": m.teamBId,
            "sub_matches": [
                {"slot": s.slot, "side_a": s.sideA, "side_b": s.sideB}
                for s in m.subMatches
            ],
        }
        for m in body.matchups
    ]
    try:
        validate_matchups(proposed, await _team_rosters(session), league_format)
    except ValidationError as exc:
        raise http_problem(status_code=400, detail=exc.detail, code="matchups_invalid")

    old_ids = [m.id for m in await _week_matchups(session, week_number)]
    if old_ids:
        await session.execute(delete(SubMatch).where(SubMatch.matchup_id.in_(old_ids)))
        await session.execute(delete(Matchup).where(Matchup.id.in_(old_ids)))
        session.expunge_all()

    for item in proposed:
        matchup_id = uuid.uuid4().hex
        session.add(
            Matchup(
                id=matchup_id,
                week_number=week_number,
                matchup_index=item["index"],
                team_a_id=item["team_a_id"],
                team_b_id=item["team_b_id"],
                sub_matches=[
                    SubMatch(
                        id=uuid.uuid4().hex,
                        matchup_id=matchup_id,
                        slot=sub["slot"],
                        side_a_player_ids=list(sub["side_a"]),
                        side_b_player_ids=list(sub["side_b"]),
                    )
                    for sub in item["sub_matches"]
                ],
            )
        )
    await session.commit()
    await standings_cache.clear()
    logger.info("Stored %d matchups for week %s", len(proposed), week_number)

    return WeekMatchupsOut(
        weekNumber=week_number,
        matchups=[_to_matchup_out(m) for m in await _week_matchups(session, week_number)],
    )


@router.get("/{week_number}/matchups", response_model=WeekMatchupsOut)
async def get_matchups(
    week_number: WeekNumber, session: AsyncSession = Depends(get_session)
) -> WeekMatchupsOut:
    rows = await _week_matchups(session, week_number)
    return WeekMatchupsOut(
        weekNumber=week_number, matchups=[_to_matchup_out(m) for m in rows]
    )


@router.get("/{week_number}/results", response_model=WeekResultsOut)
async def get_results(
    week_number: WeekNumber,
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> WeekResultsOut:
    weeks = await load_weeks(session, [week_number])
    if not weeks:
        return WeekResultsOut(weekNumber=week_number, matchups=[])
    week = weeks[0]

    matchups: list[MatchupResultOut] = []
    for matchup in week.matchups:
        try:
            score = score_matchup(matchup, week, league_format)
        except LineupError as exc:
            raise http_problem(status_code=409, detail=str(exc), code="matchups_inconsistent")

        sub_results: list[SubMatchResultOut] = []
        for sub in matchup.sub_matches:
            progress = play_match(
                sub.side_a,
                sub.side_b,
                week.gross_scores,
                week.stroke_allocations,
                league_format.holes_per_round,
            )
            sub_results.append(
                SubMatchResultOut(
                    slot=sub.slot,
                    sideA=list(sub.side_a),
                    sideB=list(sub.side_b),
                    result=progress.result.value,
                    finalLabel=progress.final_label,
                    decidedOn=progress.decided_on,
                    holes=[
                        HoleOutcomeOut(
                            hole=h.hole,
                            netA=h.net_a,
                            netB=h.net_b,
                            winner=h.winner,
                            status=status_label(h.status),
                        )
                        for h in progress.holes
                    ],
                )
            )
        matchups.append(
            MatchupResultOut(
                index=matchup.index,
                teamAId=matchup.team_a_id,
                teamBId=matchup.team_b_id,
                teamAPoints=score.team_a_points,
                teamBPoints=score.team_b_points,
                subMatches=sub_results,
            )
        )
    return WeekResultsOut(weekNumber=week_number, matchups=matchups)


@router.put("/{week_number}/lineups/{team_id}", response_model=TeamLineupOut)
async def submit_lineup(
    team_id: str,
    week_number: WeekNumber,
    body: TeamLineupIn,
    session: AsyncSession = Depends(get_session),
    league_format: LeagueFormat = Depends(get_league_format),
) -> TeamLineupOut:
    team = await session.get(Team, team_id)
    if not team:
        raise TeamNotFound(team_id)
    rosters = await _team_rosters(session)
    try:
        player_ids = validate_team_lineup(
            body.playerIds, rosters.get(team_id, set()), league_format
        )
    except ValidationError as exc:
        raise http_problem(status_code=400, detail=exc.detail, code="lineup_invalid")

    row = (
        await session.execute(
            select(TeamLineup).where(
                TeamLineup.week_number == week_number, TeamLineup.team_id == team_id
            )
        )
    ).scalar_one_or_none()
    if row is None:
        row = TeamLineup(
            id=uuid.uuid4().hex,
            week_number=week_number,
            team_id=team_id,
            player_ids=player_ids,
            submitted_at=utcnow(),
        )
        session.add(row)
    else:
        row.player_ids = player_ids
        row.submitted_at = utcnow()
    await session.commit()
    logger.info("Team %s submitted week %s lineup", team_id, week_number)
    return TeamLineupOut(
        teamId=team_id,
        weekNumber=week_number,
        playerIds=list(row.player_ids),
        submittedAt=coerce_utc(row.submitted_at),
    )


@router.get("/{week_number}/lineups", response_model=list[TeamLineupOut])
async def list_lineups(
    week_number: WeekNumber, session: AsyncSession = Depends(get_session)
) -> list[TeamLineupOut]:
    rows = (
        await session.execute(
            select(TeamLineup)
            .where(TeamLineup.week_number == week_number)
            .order_by(TeamLineup.team_id)
        )
    ).scalars().all()
    return [
        TeamLineupOut(
            teamId=row.team_id,
            weekNumber=row.week_number,
            playerIds=list(row.player_ids or []),
            submittedAt=coerce_utc(row.submitted_at),
        )
        for row in rows
    ]


@router.delete("/{week_number}/lineups", status_code=status.HTTP_204_NO_CONTENT)
async def clear_lineups(
    week_number: WeekNumber, session: AsyncSession = Depends(get_session)
) -> None:
    await session.execute(delete(TeamLineup).where(TeamLineup.week_number == week_number))
    await session.commit()
    logger.info("Cleared week %s lineups", week_number)
