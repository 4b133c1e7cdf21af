from sqlalchemy.orm import relationship
from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Index,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from .db import Base


def _json_column(**kwargs) -> Column:
    return Column(JSON().with_variant(JSONB, "postgresql"), **kwargs)


class Team(Base):
    __tablename__ = "team"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    captain_id = Column(String, nullable=True)  # player.id; kept loose to avoid a FK cycle
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index("uq_team_name_lower", func.lower(name), unique=True),
    )


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    team_id = Column(String, ForeignKey("team.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    deleted_at = Column(DateTime, nullable=True)


class PlayerRound(Base):
    """Gross scores and stroke allocations of one player for one week."""

    __tablename__ = "player_round"
    id = Column(String, primary_key=True)
    week_number = Column(Integer, nullable=False)
    player_id = Column(String, ForeignKey("player.id"), nullable=False)
    gross = _json_column(nullable=False, default=dict)
    strokes = _json_column(nullable=False, default=dict)
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "week_number", "player_id", name="uq_player_round_week_player"
        ),
    )


class Matchup(Base):
    __tablename__ = "matchup"
    id = Column(String, primary_key=True)
    week_number = Column(Integer, nullable=False)
    matchup_index = Column(Integer, nullable=False)
    team_a_id = Column(String, ForeignKey("team.id"), nullable=False)
    team_b_id = Column(String, ForeignKey("team.id"), nullable=False)

    sub_matches = relationship(
        "SubMatch",
        cascade="all, delete-orphan",
        order_by="SubMatch.slot",
        back_populates="matchup",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("week_number", "matchup_index", name="uq_matchup_week_index"),
    )


class SubMatch(Base):
    __tablename__ = "sub_match"
    id = Column(String, primary_key=True)
    matchup_id = Column(
        String, ForeignKey("matchup.id", ondelete="CASCADE"), nullable=False
    )
    slot = Column(Integer, nullable=False)
    side_a_player_ids = _json_column(nullable=False)
    side_b_player_ids = _json_column(nullable=False)

    matchup = relationship("Matchup", back_populates="sub_matches")

    __table_args__ = (
        UniqueConstraint("matchup_id", "slot", name="uq_sub_match_matchup_slot"),
    )


class TeamLineup(Base):
    """Players a captain puts forward for a week."""

    __tablename__ = "team_lineup"
    id = Column(String, primary_key=True)
    week_number = Column(Integer, nullable=False)
    team_id = Column(String, ForeignKey("team.id"), nullable=False)
    player_ids = _json_column(nullable=False)
    submitted_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("week_number", "team_id", name="uq_team_lineup_week_team"),
    )
