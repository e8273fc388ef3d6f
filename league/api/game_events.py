"""Game-event endpoints.

A submission derives its scoring events immediately; the game event and
its derived events are then moderated, edited and deleted as one unit.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user, require_moderator
from league.database import get_db
from league.engine import game_events as engine
from league.api import to_http
from league.errors import LeagueError
from league.models.user import User

router = APIRouter(prefix="/api/game-events", tags=["game-events"])


class GameEventCreate(BaseModel):
    type: str
    week: int
    data: dict


class GameEventUpdate(BaseModel):
    week: Optional[int] = None
    data: Optional[dict] = None


class ApprovalRequest(BaseModel):
    approved: bool


class BulkDeleteRequest(BaseModel):
    ids: list[int]


async def _detail(db: AsyncSession, game_event) -> dict:
    derived = await engine.derived_events_for(db, [game_event.id])
    names = await engine.contestant_names(db)
    return engine.game_event_to_dict(game_event, derived[game_event.id], names)


@router.get("")
async def list_game_events(
    week: Optional[int] = None,
    approved: bool = False,
    pending: bool = False,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await engine.list_game_events(db, week=week, approved_only=approved, pending_only=pending)


@router.get("/{game_event_id}")
async def get_game_event(
    game_event_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        game_event = await engine.get_game_event(db, game_event_id)
    except LeagueError as exc:
        raise to_http(exc)
    return await _detail(db, game_event)


@router.post("", status_code=201)
async def submit_game_event(
    req: GameEventCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        game_event = await engine.submit_game_event(db, user, req.type, req.week, req.data)
    except LeagueError as exc:
        raise to_http(exc)
    return await _detail(db, game_event)


@router.put("/{game_event_id}")
async def update_game_event(
    game_event_id: int,
    req: GameEventUpdate,
    moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    try:
        game_event = await engine.update_game_event(
            db, game_event_id, moderator, week=req.week, payload=req.data
        )
    except LeagueError as exc:
        raise to_http(exc)
    return await _detail(db, game_event)


@router.patch("/{game_event_id}")
async def set_approval(
    game_event_id: int,
    req: ApprovalRequest,
    moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    try:
        game_event = await engine.set_game_event_approval(db, game_event_id, req.approved, moderator)
    except LeagueError as exc:
        raise to_http(exc)
    return await _detail(db, game_event)


@router.delete("/{game_event_id}")
async def delete_game_event(
    game_event_id: int,
    _moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    try:
        await engine.delete_game_event(db, game_event_id)
    except LeagueError as exc:
        raise to_http(exc)
    return {"success": True}


@router.post("/bulk-delete")
async def bulk_delete(
    req: BulkDeleteRequest,
    _moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    try:
        deleted = await engine.bulk_delete_game_events(db, req.ids)
    except LeagueError as exc:
        raise to_http(exc)
    return {"deleted": deleted}
