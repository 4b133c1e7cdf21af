"""Internal application services (pure helpers, no I/O)."""

from .validation import (
    ValidationError,
    validate_gross_scores,
    validate_matchups,
    validate_stroke_tags,
    validate_team_lineup,
)
from .standings import (
    DuplicateTeamError,
    LineupError,
    StandingsError,
    UnknownTeamError,
    compute_standings,
    rank_standings,
    score_matchup,
)
from .rosters import auto_assign, default_team_names

__all__ = [
    "ValidationError",
    "validate_gross_scores",
    "validate_matchups",
    "validate_stroke_tags",
    "validate_team_lineup",
    "DuplicateTeamError",
    "LineupError",
    "StandingsError",
    "UnknownTeamError",
    "compute_standings",
    "rank_standings",
    "score_matchup",
    "auto_assign",
    "default_team_names",
]
