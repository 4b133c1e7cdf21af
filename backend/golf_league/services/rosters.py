"""Roster helpers for filling teams with signed-up players."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass
class RosterSlotState:
    """Mutable view of one team's roster while players are being placed."""

    team_id: str
    player_ids: list[str] = field(default_factory=list)
    captain_id: Optional[str] = None


def default_team_names(team_count: int) -> list[str]:
    return [f"Team {number}" for number in range(1, team_count + 1)]


def auto_assign(
    rosters: Sequence[RosterSlotState],
    unassigned: Sequence[str],
    roster_size: int,
) -> dict[str, str]:
    """Fill open roster spots in team order with ``unassigned`` players.

    Players are placed in the order given (sign-up order). A team without a
    captain gets the first player placed on an empty roster as captain. Returns
    a ``player_id -> team_id`` mapping of the placements made; ``rosters`` is
    updated in place.
    """

    if roster_size < 1:
        raise ValueError("roster_size must be positive")

    placed: dict[str, str] = {}
    queue = [pid for pid in unassigned if pid]
    position = 0
    for roster in rosters:
        while len(roster.player_ids) < roster_size and position < len(queue):
            player_id = queue[position]
            position += 1
            roster.player_ids.append(player_id)
            if roster.captain_id is None and len(roster.player_ids) == 1:
                roster.captain_id = player_id
            placed[player_id] = roster.team_id
    return placed
