from fastapi import HTTPException

from league.errors import LeagueError


def to_http(exc: LeagueError) -> HTTPException:
    """HTTP response for a domain error raised by the engine layer."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
