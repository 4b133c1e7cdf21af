from typing import Dict, List, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, model_validator, field_validator, ConfigDict


HoleValue = Union[int, float, str, None]


def _trimmed(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field_name} must not be empty")
    return trimmed


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=40)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _trimmed(value, "name")


class PlayerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=40)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _trimmed(value, "name")

    @model_validator(mode="after")
    def _ensure_fields(self) -> "PlayerUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        return self


class PlayerOut(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    teamId: Optional[str] = None


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _trimmed(value, "name")


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    captainId: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _trimmed(value, "name")


class TeamRosterUpdate(BaseModel):
    playerIds: List[str] = Field(default_factory=list)


class TeamOut(BaseModel):
    id: str
    name: str
    captainId: Optional[str] = None
    players: List[PlayerOut] = Field(default_factory=list)


class AutoAssignOut(BaseModel):
    assigned: Dict[str, str]
    teams: List[TeamOut]


class PlayerRoundIn(BaseModel):
    playerId: str
    gross: Dict[str, HoleValue] = Field(default_factory=dict)
    strokes: Dict[str, Optional[str]] = Field(default_factory=dict)


class WeekScoresIn(BaseModel):
    players: List[PlayerRoundIn]

    @model_validator(mode="after")
    def _unique_players(self) -> "WeekScoresIn":
        ids = [p.playerId for p in self.players]
        if len(ids) != len(set(ids)):
            raise ValueError("each player may appear only once")
        return self


class PlayerRoundOut(BaseModel):
    playerId: str
    gross: Dict[str, int]
    strokes: Dict[str, str]
    updatedAt: Optional[datetime] = None


class WeekScoresOut(BaseModel):
    weekNumber: int
    players: List[PlayerRoundOut]


class SubMatchIn(BaseModel):
    slot: int = Field(..., ge=0)
    sideA: List[str]
    sideB: List[str]


class MatchupIn(BaseModel):
    index: int = Field(..., ge=0)
    teamAId: str
    teamBId: str
    subMatches: List[SubMatchIn] = Field(default_factory=list)


class WeekMatchupsIn(BaseModel):
    matchups: List[MatchupIn]


class SubMatchOut(BaseModel):
    slot: int
    sideA: List[str]
    sideB: List[str]


class MatchupOut(BaseModel):
    index: int
    teamAId: str
    teamBId: str
    subMatches: List[SubMatchOut]


class WeekMatchupsOut(BaseModel):
    weekNumber: int
    matchups: List[MatchupOut]


class TeamLineupIn(BaseModel):
    playerIds: List[str]


class TeamLineupOut(BaseModel):
    teamId: str
    weekNumber: int
    playerIds: List[str]
    submittedAt: Optional[datetime] = None


class HoleOutcomeOut(BaseModel):
    hole: int
    netA: Optional[float] = None
    netB: Optional[float] = None
    winner: Optional[str] = None
    status: str


class SubMatchResultOut(BaseModel):
    slot: int
    sideA: List[str]
    sideB: List[str]
    result: str
    finalLabel: str
    decidedOn: Optional[int] = None
    holes: List[HoleOutcomeOut]


class MatchupResultOut(BaseModel):
    index: int
    teamAId: str
    teamBId: str
    teamAPoints: int
    teamBPoints: int
    subMatches: List[SubMatchResultOut]


class WeekResultsOut(BaseModel):
    weekNumber: int
    matchups: List[MatchupResultOut]


class StandingsRowOut(BaseModel):
    rank: int
    teamId: str
    teamName: str
    totalPoints: int
    matchesPlayed: int
    record: str


class StandingsOut(BaseModel):
    rows: List[StandingsRowOut]
