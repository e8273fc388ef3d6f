"""Scoring-event endpoints -- submit, list, moderate, delete."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user, require_moderator
from league.database import get_db
from league.engine import events as events_engine
from league.api import to_http
from league.errors import LeagueError
from league.models.user import User

router = APIRouter(prefix="/api/events", tags=["events"])


class EventCreate(BaseModel):
    type: str
    contestant_id: int
    week: int
    description: Optional[str] = None


class ApprovalRequest(BaseModel):
    approved: bool


class BulkDeleteRequest(BaseModel):
    ids: list[int]


@router.get("")
async def list_events(
    week: Optional[int] = None,
    contestant_id: Optional[int] = None,
    approved: bool = False,
    pending: bool = False,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await events_engine.list_events(
        db, week=week, contestant_id=contestant_id, approved_only=approved, pending_only=pending,
    )
    return [events_engine.event_to_dict(event, contestant) for event, contestant in rows]


@router.post("", status_code=201)
async def submit_event(
    req: EventCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        event = await events_engine.submit_event(
            db, user, req.type, req.contestant_id, req.week, req.description
        )
    except LeagueError as exc:
        raise to_http(exc)
    return events_engine.event_to_dict(event)


@router.patch("/{event_id}")
async def set_approval(
    event_id: int,
    req: ApprovalRequest,
    moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    try:
        event = await events_engine.set_event_approval(db, event_id, req.approved, moderator)
    except LeagueError as exc:
        raise to_http(exc)
    return events_engine.event_to_dict(event)


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    _moderator: User = Depends(require_moderator),
    db: AsyncSession = Depends(get_db),
):
    try:
        await events_engine.delete_event(db, event_id)
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
        deleted = await events_engine.bulk_delete_events(db, req.ids)
    except LeagueError as exc:
        raise to_http(exc)
    return {"deleted": deleted}
