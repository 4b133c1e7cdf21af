"""League standings from weekly best-ball results.

Every sub-match is worth two points: 2-0 to the winner, 1-1 for a tie and
nothing while it is incomplete. Points from all sub-matches of a matchup are
added to the team totals, and the matchup itself counts once in the
win/loss/tie record, decided by comparing the matchup's aggregate points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from ..config import LeagueFormat
from ..scoring.match_play import SubMatchResult, resolve_match

logger = logging.getLogger(__name__)

SUB_MATCH_POINTS = 2


class StandingsError(ValueError):
    """Raised when league data cannot be folded into standings."""


class DuplicateTeamError(StandingsError):
    pass


class UnknownTeamError(StandingsError):
    pass


class LineupError(StandingsError):
    pass


@dataclass(frozen=True)
class Team:
    id: str
    name: str


@dataclass(frozen=True)
class SubMatchLineup:
    slot: int
    side_a: tuple[str, ...]
    side_b: tuple[str, ...]


@dataclass(frozen=True)
class MatchupLineup:
    index: int
    team_a_id: str
    team_b_id: str
    sub_matches: tuple[SubMatchLineup, ...] = ()


@dataclass(frozen=True)
class WeekResult:
    week_number: int
    matchups: tuple[MatchupLineup, ...] = ()
    gross_scores: Mapping[str, Mapping] = field(default_factory=dict)
    stroke_allocations: Mapping[str, Mapping] = field(default_factory=dict)


@dataclass
class TeamStandingRecord:
    team_id: str
    team_name: str
    total_points: int = 0
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}-{self.ties}"


@dataclass(frozen=True)
class StandingsRow:
    rank: int
    team_id: str
    team_name: str
    total_points: int
    matches_played: int
    record: str


@dataclass
class MatchupScore:
    team_a_points: int = 0
    team_b_points: int = 0
    results: dict[int, SubMatchResult] = field(default_factory=dict)

    @property
    def decided(self) -> bool:
        return any(r is not SubMatchResult.INCOMPLETE for r in self.results.values())


def sub_match_points(result: SubMatchResult) -> tuple[int, int]:
    if result is SubMatchResult.SIDE_A:
        return SUB_MATCH_POINTS, 0
    if result is SubMatchResult.SIDE_B:
        return 0, SUB_MATCH_POINTS
    if result is SubMatchResult.TIE:
        half = SUB_MATCH_POINTS // 2
        return half, half
    return 0, 0


def _has_full_sides(sub_match: SubMatchLineup, players_per_side: int) -> bool:
    return all(
        len(side) == players_per_side and all(side)
        for side in (sub_match.side_a, sub_match.side_b)
    )


def score_matchup(
    matchup: MatchupLineup,
    week: WeekResult,
    league_format: LeagueFormat,
) -> MatchupScore:
    """Resolve every sub-match of ``matchup`` and total the points per team."""

    if len(matchup.sub_matches) > league_format.sub_matches_per_matchup:
        raise LineupError(
            f"week {week.week_number} matchup {matchup.index} has "
            f"{len(matchup.sub_matches)} sub-matches; at most "
            f"{league_format.sub_matches_per_matchup} allowed"
        )

    score = MatchupScore()
    for sub_match in matchup.sub_matches:
        if not _has_full_sides(sub_match, league_format.players_per_side):
            logger.debug(
                "Skipping week %s matchup %s slot %s: incomplete sides",
                week.week_number,
                matchup.index,
                sub_match.slot,
            )
            continue
        result = resolve_match(
            sub_match.side_a,
            sub_match.side_b,
            week.gross_scores,
            week.stroke_allocations,
            league_format.holes_per_round,
        )
        points_a, points_b = sub_match_points(result)
        score.team_a_points += points_a
        score.team_b_points += points_b
        score.results[sub_match.slot] = result
    return score


def _init_records(teams: Iterable[Team]) -> dict[str, TeamStandingRecord]:
    records: dict[str, TeamStandingRecord] = {}
    names: set[str] = set()
    for team in teams:
        if team.id in records:
            raise DuplicateTeamError(f"duplicate team id: {team.id!r}")
        folded = team.name.strip().casefold()
        if folded in names:
            raise DuplicateTeamError(f"duplicate team name: {team.name!r}")
        names.add(folded)
        records[team.id] = TeamStandingRecord(team_id=team.id, team_name=team.name)
    return records


def _check_matchups(
    week: WeekResult,
    records: Mapping[str, TeamStandingRecord],
    league_format: LeagueFormat,
) -> None:
    if len(week.matchups) > league_format.matchups_per_week:
        raise LineupError(
            f"week {week.week_number} has {len(week.matchups)} matchups; at most "
            f"{league_format.matchups_per_week} allowed"
        )
    for matchup in week.matchups:
        for team_id in (matchup.team_a_id, matchup.team_b_id):
            if team_id not in records:
                raise UnknownTeamError(
                    f"week {week.week_number} matchup {matchup.index} "
                    f"references unknown team {team_id!r}"
                )
        if matchup.team_a_id == matchup.team_b_id:
            raise LineupError(
                f"week {week.week_number} matchup {matchup.index} pits "
                f"team {matchup.team_a_id!r} against itself"
            )


def _sort_key(record: TeamStandingRecord):
    return (
        -record.total_points,
        -record.wins,
        record.team_name.casefold(),
        record.team_id,
    )


def compute_standings(
    teams: Sequence[Team],
    weeks: Sequence[WeekResult],
    league_format: LeagueFormat,
) -> list[TeamStandingRecord]:
    """Rebuild the standings table from every recorded week.

    Records are recomputed from scratch on each call so score corrections are
    always reflected. Raises ``DuplicateTeamError``, ``UnknownTeamError`` or
    ``LineupError`` for data that cannot be attributed unambiguously.
    """

    records = _init_records(teams)

    for week in sorted(weeks, key=lambda w: w.week_number):
        _check_matchups(week, records, league_format)
        for matchup in week.matchups:
            score = score_matchup(matchup, week, league_format)
            if not score.decided:
                continue

            team_a = records[matchup.team_a_id]
            team_b = records[matchup.team_b_id]
            team_a.total_points += score.team_a_points
            team_b.total_points += score.team_b_points
            team_a.matches_played += 1
            team_b.matches_played += 1

            if score.team_a_points > score.team_b_points:
                team_a.wins += 1
                team_b.losses += 1
            elif score.team_b_points > score.team_a_points:
                team_b.wins += 1
                team_a.losses += 1
            else:
                team_a.ties += 1
                team_b.ties += 1

            logger.debug(
                "Week %s matchup %s: %s %d - %d %s",
                week.week_number,
                matchup.index,
                team_a.team_name,
                score.team_a_points,
                score.team_b_points,
                team_b.team_name,
            )

    return sorted(records.values(), key=_sort_key)


def rank_standings(records: Sequence[TeamStandingRecord]) -> list[StandingsRow]:
    return [
        StandingsRow(
            rank=position,
            team_id=record.team_id,
            team_name=record.team_name,
            total_points=record.total_points,
            matches_played=record.matches_played,
            record=record.record,
        )
        for position, record in enumerate(records, start=1)
    ]
