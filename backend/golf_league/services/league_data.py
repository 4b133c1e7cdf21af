"""Read league rows from the database into scoring inputs."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Matchup, PlayerRound, Team as TeamRow
from .standings import MatchupLineup, SubMatchLineup, Team, WeekResult

logger = logging.getLogger(__name__)


def _player_tuple(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(pid) for pid in value if pid)


def to_matchup_lineup(row: Matchup) -> MatchupLineup:
    return MatchupLineup(
        index=row.matchup_index,
        team_a_id=row.team_a_id,
        team_b_id=row.team_b_id,
        sub_matches=tuple(
            SubMatchLineup(
                slot=sub.slot,
                side_a=_player_tuple(sub.side_a_player_ids),
                side_b=_player_tuple(sub.side_b_player_ids),
            )
            for sub in sorted(row.sub_matches, key=lambda s: s.slot)
        ),
    )


def build_weeks(
    matchups: Iterable[Matchup], rounds: Iterable[PlayerRound]
) -> list[WeekResult]:
    """Group matchup and score rows by week number."""

    matchups_by_week: dict[int, list[Matchup]] = defaultdict(list)
    for row in matchups:
        matchups_by_week[row.week_number].append(row)

    gross_by_week: dict[int, dict[str, dict]] = defaultdict(dict)
    strokes_by_week: dict[int, dict[str, dict]] = defaultdict(dict)
    for row in rounds:
        gross_by_week[row.week_number][row.player_id] = (
            row.gross if isinstance(row.gross, dict) else {}
        )
        strokes_by_week[row.week_number][row.player_id] = (
            row.strokes if isinstance(row.strokes, dict) else {}
        )

    weeks: list[WeekResult] = []
    for week_number in sorted(set(matchups_by_week) | set(gross_by_week)):
        rows = sorted(matchups_by_week.get(week_number, []), key=lambda m: m.matchup_index)
        weeks.append(
            WeekResult(
                week_number=week_number,
                matchups=tuple(to_matchup_lineup(row) for row in rows),
                gross_scores=gross_by_week.get(week_number, {}),
                stroke_allocations=strokes_by_week.get(week_number, {}),
            )
        )
    return weeks


async def load_teams(session: AsyncSession) -> list[Team]:
    rows = (
        await session.execute(select(TeamRow).order_by(TeamRow.name))
    ).scalars().all()
    return [Team(id=row.id, name=row.name) for row in rows]


async def load_weeks(
    session: AsyncSession, week_numbers: Optional[Sequence[int]] = None
) -> list[WeekResult]:
    matchup_stmt = select(Matchup)
    round_stmt = select(PlayerRound)
    if week_numbers is not None:
        matchup_stmt = matchup_stmt.where(Matchup.week_number.in_(week_numbers))
        round_stmt = round_stmt.where(PlayerRound.week_number.in_(week_numbers))

    matchups = (await session.execute(matchup_stmt)).scalars().all()
    rounds = (await session.execute(round_stmt)).scalars().all()
    return build_weeks(matchups, rounds)


def snapshot_options(session: AsyncSession) -> dict[str, str]:
    """Execution options that make the season reads share one snapshot.

    Postgres defaults to READ COMMITTED, where every SELECT sees its own
    snapshot; REPEATABLE READ pins the first one for the whole transaction.
    SQLite already reads from a single snapshot inside a transaction.
    """

    if session.in_transaction():
        return {}
    if session.get_bind().dialect.name != "postgresql":
        return {}
    return {"isolation_level": "REPEATABLE READ"}


async def load_season(session: AsyncSession) -> tuple[list[Team], list[WeekResult]]:
    """Read every team and every recorded week from one snapshot.

    Errors from the database propagate unchanged.
    """

    options = snapshot_options(session)
    if options:
        await session.connection(execution_options=options)
    teams = await load_teams(session)
    weeks = await load_weeks(session)
    logger.info("Loaded %d teams and %d weeks for standings", len(teams), len(weeks))
    return teams, weeks
