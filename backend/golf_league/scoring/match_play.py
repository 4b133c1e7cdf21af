"""Best-ball match play engine.

Side A and side B are compared hole by hole on their best net score. The match
status counts holes up from side A's point of view: ``+2`` means side A is two
up, ``-1`` means side B is one up. Once the leader is further ahead than there
are holes left to play the match is over.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .net_score import ScoreBook, best_net


class SubMatchResult(str, Enum):
    SIDE_A = "side_a"
    SIDE_B = "side_b"
    TIE = "tie"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class HoleOutcome:
    hole: int
    net_a: Optional[float]
    net_b: Optional[float]
    winner: Optional[str]  # "A" | "B" | "halved" | None when not compared
    status: int


@dataclass
class MatchProgress:
    round_length: int
    status: int = 0
    holes_compared: int = 0
    decided_on: Optional[int] = None
    holes: List[HoleOutcome] = field(default_factory=list)

    @property
    def decided(self) -> bool:
        return self.decided_on is not None

    @property
    def result(self) -> SubMatchResult:
        if self.holes_compared == 0:
            return SubMatchResult.INCOMPLETE
        if self.status > 0:
            return SubMatchResult.SIDE_A
        if self.status < 0:
            return SubMatchResult.SIDE_B
        return SubMatchResult.TIE

    @property
    def final_label(self) -> str:
        """Scorecard label for the finished match, e.g. ``"3&2"`` or ``"1 up"``."""

        if self.holes_compared == 0:
            return "-"
        remaining = self.round_length - self.decided_on if self.decided else 0
        if self.status == 0:
            return "AS"
        if remaining > 0:
            return f"{abs(self.status)}&{remaining}"
        return f"{abs(self.status)} up"


def status_label(status: int) -> str:
    """Describe ``status`` from side A's point of view."""

    if status == 0:
        return "AS"
    if status > 0:
        return f"{status} up"
    return f"{-status} dn"


def play_match(
    side_a: Sequence[str],
    side_b: Sequence[str],
    gross_scores: ScoreBook,
    stroke_allocations: ScoreBook,
    round_length: int,
) -> MatchProgress:
    """Walk a round hole by hole and return the full match trail.

    Holes where either side has no score are recorded but do not move the
    status. Iteration stops on the hole that clinches the match.
    """

    if isinstance(round_length, bool) or not isinstance(round_length, int):
        raise TypeError("round_length must be an integer")
    if round_length <= 0:
        raise ValueError("round_length must be positive")

    progress = MatchProgress(round_length=round_length)
    for hole in range(1, round_length + 1):
        net_a = best_net(side_a, hole, gross_scores, stroke_allocations)
        net_b = best_net(side_b, hole, gross_scores, stroke_allocations)

        if net_a is None or net_b is None:
            progress.holes.append(
                HoleOutcome(hole, net_a, net_b, None, progress.status)
            )
            continue

        if net_a < net_b:
            progress.status += 1
            winner = "A"
        elif net_b < net_a:
            progress.status -= 1
            winner = "B"
        else:
            winner = "halved"
        progress.holes_compared += 1
        progress.holes.append(HoleOutcome(hole, net_a, net_b, winner, progress.status))

        holes_remaining = round_length - hole
        if abs(progress.status) > holes_remaining:
            progress.decided_on = hole
            break

    return progress


def resolve_match(
    side_a: Sequence[str],
    side_b: Sequence[str],
    gross_scores: ScoreBook,
    stroke_allocations: ScoreBook,
    round_length: int,
) -> SubMatchResult:
    return play_match(
        side_a, side_b, gross_scores, stroke_allocations, round_length
    ).result
