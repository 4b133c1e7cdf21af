"""Net score and best-ball helpers for a single hole."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class StrokeAllocation(str, Enum):
    """Share of a handicap stroke a player receives on a hole."""

    NONE = "none"
    HALF = "half"
    FULL = "full"


STROKE_VALUES: dict[StrokeAllocation, float] = {
    StrokeAllocation.NONE: 0.0,
    StrokeAllocation.HALF: 0.5,
    StrokeAllocation.FULL: 1.0,
}

HoleMap = Mapping[Any, Any]
ScoreBook = Mapping[str, HoleMap]


def parse_gross(raw: Any) -> Optional[int]:
    """Return a gross score as ``int`` or ``None`` when there is no usable score.

    Booleans, non-numeric strings, fractional values and anything ``<= 0`` are
    treated as "no score".
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not value.is_integer() or value <= 0:
        return None
    return int(value)


def parse_allocation(raw: Any) -> StrokeAllocation:
    if isinstance(raw, StrokeAllocation):
        return raw
    if isinstance(raw, str):
        try:
            return StrokeAllocation(raw.strip().lower())
        except ValueError:
            return StrokeAllocation.NONE
    return StrokeAllocation.NONE


def stroke_value(allocation: Any) -> float:
    return STROKE_VALUES[parse_allocation(allocation)]


def net_score(gross: int, allocation: Any = StrokeAllocation.NONE) -> float:
    return gross - stroke_value(allocation)


def hole_entry(holes: Optional[HoleMap], hole: int) -> Any:
    """Look up ``hole`` in a per-hole mapping keyed by ``int`` or ``str``."""

    if not holes:
        return None
    if hole in holes:
        return holes[hole]
    return holes.get(str(hole))


def best_net(
    side: Sequence[str],
    hole: int,
    gross_scores: ScoreBook,
    stroke_allocations: ScoreBook,
) -> Optional[float]:
    """Return the side's best-ball net score for ``hole``.

    Players without a valid gross score on the hole are skipped. ``None`` means
    no player on the side has a score for the hole.
    """

    best: Optional[float] = None
    for player_id in side:
        gross = parse_gross(hole_entry(gross_scores.get(player_id), hole))
        if gross is None:
            continue
        allocation = hole_entry(stroke_allocations.get(player_id), hole)
        net = net_score(gross, allocation)
        if best is None or net < best:
            best = net
    return best
