import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import LeagueFormat
from ..scoring.net_score import StrokeAllocation


class ValidationError(Exception):
    """Raised when submitted league data is invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def _hole_number(raw: Any, holes: int) -> int:
    if isinstance(raw, bool):
        raise ValidationError("Hole numbers must be integers (not booleans).")
    try:
        hole = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Hole {raw!r} is not a number.")
    if str(hole) != str(raw).strip():
        raise ValidationError(f"Hole {raw!r} is not a whole number.")
    if not 1 <= hole <= holes:
        raise ValidationError(f"Hole {hole} is outside 1-{holes}.")
    return hole


def validate_gross_scores(
    gross: Mapping[Any, Any],
    *,
    holes: int,
    max_strokes: Optional[int] = 20,
) -> Dict[int, int]:
    """Validate a hole -> gross score mapping and return it keyed by ``int``.

    Rules:
    - Hole numbers must be within ``1..holes``
    - Blank values (``None`` or ``""``) mean "not played yet" and are dropped
    - Scores must be positive integers (booleans are rejected)
    - Scores must be <= ``max_strokes`` (if provided)
    """

    if not isinstance(gross, Mapping):
        raise ValidationError("Gross scores must be an object keyed by hole.")

    normalized: Dict[int, int] = {}
    for raw_hole, raw_value in gross.items():
        hole = _hole_number(raw_hole, holes)
        if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
            continue
        if isinstance(raw_value, bool):
            raise ValidationError(
                f"Hole {hole} score must be an integer (not a boolean)."
            )
        if isinstance(raw_value, float) and not (
            math.isfinite(raw_value) and raw_value.is_integer()
        ):
            raise ValidationError(f"Hole {hole} score must be an integer.")
        try:
            value = int(raw_value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"Hole {hole} score must be an integer.")
        if value <= 0:
            raise ValidationError(f"Hole {hole} score must be > 0.")
        if max_strokes is not None and value > max_strokes:
            raise ValidationError(f"Hole {hole} score must be <= {max_strokes}.")
        normalized[hole] = value
    return normalized


def validate_stroke_tags(
    strokes: Mapping[Any, Any], *, holes: int
) -> Dict[int, str]:
    """Validate a hole -> stroke tag mapping; ``none`` and blanks are dropped."""

    if not isinstance(strokes, Mapping):
        raise ValidationError("Strokes must be an object keyed by hole.")

    allowed = ", ".join(a.value for a in StrokeAllocation)
    normalized: Dict[int, str] = {}
    for raw_hole, raw_tag in strokes.items():
        hole = _hole_number(raw_hole, holes)
        if raw_tag is None or raw_tag == "":
            continue
        if not isinstance(raw_tag, str):
            raise ValidationError(f"Hole {hole} stroke must be one of: {allowed}.")
        try:
            tag = StrokeAllocation(raw_tag.strip().lower())
        except ValueError:
            raise ValidationError(f"Hole {hole} stroke must be one of: {allowed}.")
        if tag is not StrokeAllocation.NONE:
            normalized[hole] = tag.value
    return normalized


def validate_matchups(
    matchups: Sequence[Mapping[str, Any]],
    rosters: Mapping[str, set],
    league_format: LeagueFormat,
) -> None:
    """Validate the matchups of one week.

    ``matchups`` are dictionaries with ``index``, ``team_a_id``, ``team_b_id``
    and ``sub_matches`` (each with ``slot``, ``side_a`` and ``side_b``).
    ``rosters`` maps team id to the ids of its current players.
    """

    if len(matchups) > league_format.matchups_per_week:
        raise ValidationError(
            f"Too many matchups. Max allowed is {league_format.matchups_per_week}."
        )

    seen_indices: set[int] = set()
    seen_teams: set[str] = set()
    for matchup in matchups:
        index = matchup["index"]
        if not 0 <= index < league_format.matchups_per_week:
            raise ValidationError(
                f"Matchup index {index} is outside 0-{league_format.matchups_per_week - 1}."
            )
        if index in seen_indices:
            raise ValidationError(f"Matchup index {index} is used twice.")
        seen_indices.add(index)

        team_a, team_b = matchup["team_a_id"], matchup["team_b_id"]
        if team_a == team_b:
            raise ValidationError(f"Matchup {index} pits a team against itself.")
        for team_id in (team_a, team_b):
            if team_id not in rosters:
                raise ValidationError(f"Matchup {index} references unknown team {team_id}.")
            if team_id in seen_teams:
                raise ValidationError(f"Team {team_id} plays more than one matchup.")
            seen_teams.add(team_id)

        sub_matches = matchup.get("sub_matches") or []
        if len(sub_matches) > league_format.sub_matches_per_matchup:
            raise ValidationError(
                f"Matchup {index} has too many sub-matches. Max allowed is "
                f"{league_format.sub_matches_per_matchup}."
            )

        seen_slots: set[int] = set()
        seen_players: set[str] = set()
        for sub_match in sub_matches:
            slot = sub_match["slot"]
            if not 0 <= slot < league_format.sub_matches_per_matchup:
                raise ValidationError(f"Matchup {index} slot {slot} is out of range.")
            if slot in seen_slots:
                raise ValidationError(f"Matchup {index} slot {slot} is used twice.")
            seen_slots.add(slot)

            for side_key, team_id in (("side_a", team_a), ("side_b", team_b)):
                players: List[str] = list(sub_match[side_key])
                if len(players) != league_format.players_per_side:
                    raise ValidationError(
                        f"Matchup {index} slot {slot} needs exactly "
                        f"{league_format.players_per_side} players per side."
                    )
                for pid in players:
                    if pid not in rosters[team_id]:
                        raise ValidationError(
                            f"Player {pid} is not on team {team_id}."
                        )
                    if pid in seen_players:
                        raise ValidationError(
                            f"Player {pid} appears twice in matchup {index}."
                        )
                    seen_players.add(pid)


def validate_team_lineup(
    player_ids: Sequence[str],
    roster: set,
    league_format: LeagueFormat,
) -> List[str]:
    expected = league_format.players_per_week
    unique = list(dict.fromkeys(player_ids))
    if len(unique) != len(player_ids):
        raise ValidationError("Lineup lists a player more than once.")
    if len(unique) != expected:
        raise ValidationError(f"Please select exactly {expected} players.")
    outsiders = sorted(pid for pid in unique if pid not in roster)
    if outsiders:
        raise ValidationError(f"Players not on the roster: {', '.join(outsiders)}")
    return unique
