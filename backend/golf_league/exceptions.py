from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class TeamNotFound(DomainException):
    def __init__(self, team_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Team not found",
            detail=f"team '{team_id}' not found",
            code="team_not_found",
        )


class TeamNameTaken(DomainException):
    def __init__(self, name: str) -> None:
        super().__init__(
            status_code=409,
            title="Team exists",
            detail=f"team name '{name}' already exists",
            code="team_exists",
        )


class PlayerNotFound(DomainException):
    def __init__(self, player_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{player_id}' not found",
            code="player_not_found",
        )


class LeagueFull(DomainException):
    def __init__(self, limit: int) -> None:
        super().__init__(
            status_code=409,
            title="League full",
            detail=f"league is limited to {limit} players",
            code="league_full",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
