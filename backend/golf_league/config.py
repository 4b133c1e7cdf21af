import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _env_int(env_var: str, default: int, *, minimum: int = 1) -> int:
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            env_var,
            raw_value,
            default,
        )
        return default

    if value < minimum:
        logger.warning(
            "%s must be at least %d; defaulting to %d", env_var, minimum, default
        )
        return default

    return value


def _env_float(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value is None:
        return default
    try:
        value = float(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid float (got %r); defaulting to %.2f",
            env_var,
            raw_value,
            default,
        )
        return default
    return max(value, 0.0)


@dataclass(frozen=True)
class LeagueFormat:
    """Cardinalities of a league week.

    The defaults describe a nine-hole league of six teams with six players
    each, where three matchups are played every week and each matchup is made
    of two best-ball pairings.
    """

    holes_per_round: int = 9
    matchups_per_week: int = 3
    sub_matches_per_matchup: int = 2
    players_per_side: int = 2
    roster_size: int = 6
    team_count: int = 6
    max_participants: int = 36

    def __post_init__(self) -> None:
        for field_name in (
            "holes_per_round",
            "matchups_per_week",
            "sub_matches_per_matchup",
            "players_per_side",
            "roster_size",
            "team_count",
            "max_participants",
        ):
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be positive")

    @property
    def players_per_week(self) -> int:
        """Players a team fields in one week."""
        return self.sub_matches_per_matchup * self.players_per_side


def load_league_format() -> LeagueFormat:
    return LeagueFormat(
        holes_per_round=_env_int("LEAGUE_HOLES_PER_ROUND", 9),
        matchups_per_week=_env_int("LEAGUE_MATCHUPS_PER_WEEK", 3),
        sub_matches_per_matchup=_env_int("LEAGUE_SUB_MATCHES_PER_MATCHUP", 2),
        players_per_side=_env_int("LEAGUE_PLAYERS_PER_SIDE", 2),
        roster_size=_env_int("LEAGUE_ROSTER_SIZE", 6),
        team_count=_env_int("LEAGUE_TEAM_COUNT", 6),
        max_participants=_env_int("LEAGUE_MAX_PARTICIPANTS", 36),
    )


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

LEAGUE_FORMAT = load_league_format()

STANDINGS_CACHE_TTL = _env_float("STANDINGS_CACHE_TTL", 300.0)


def get_league_format() -> LeagueFormat:
    """FastAPI dependency returning the configured league format."""
    return LEAGUE_FORMAT
