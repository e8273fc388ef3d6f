"""Contestant CRUD."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user, require_admin
from league.database import get_db
from league.models.contestant import Contestant
from league.models.event import ScoringEvent
from league.models.team import TeamContestant
from league.models.tribe import TribeMembership
from league.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contestants", tags=["contestants"])


class ContestantCreate(BaseModel):
    name: str = Field(min_length=1)
    nickname: Optional[str] = None
    tribe: Optional[str] = None
    image_url: Optional[str] = None
    original_seasons: Optional[str] = None


class ContestantUpdate(BaseModel):
    name: Optional[str] = None
    nickname: Optional[str] = None
    tribe: Optional[str] = None
    image_url: Optional[str] = None
    original_seasons: Optional[str] = None
    is_eliminated: Optional[bool] = None
    eliminated_week: Optional[int] = Field(default=None, ge=1)


def contestant_to_dict(contestant: Contestant) -> dict:
    return {
        "id": contestant.id,
        "name": contestant.name,
        "nickname": contestant.nickname,
        "tribe": contestant.tribe,
        "image_url": contestant.image_url,
        "original_seasons": contestant.original_seasons,
        "is_eliminated": contestant.is_eliminated,
        "eliminated_week": contestant.eliminated_week,
    }


async def _get_contestant(db: AsyncSession, contestant_id: int) -> Contestant:
    contestant = await db.get(Contestant, contestant_id)
    if contestant is None:
        raise HTTPException(status_code=404, detail="Contestant not found")
    return contestant


@router.get("")
async def list_contestants(
    active_only: bool = False,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Contestant).order_by(Contestant.name)
    if active_only:
        query = query.where(Contestant.is_eliminated.is_(False))
    return [contestant_to_dict(c) for c in (await db.execute(query)).scalars().all()]


@router.get("/{contestant_id}")
async def get_contestant(
    contestant_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return contestant_to_dict(await _get_contestant(db, contestant_id))


@router.post("", status_code=201)
async def create_contestant(
    req: ContestantCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    contestant = Contestant(**req.model_dump())
    db.add(contestant)
    await db.flush()
    log.info("Contestant %s created: %s", contestant.id, contestant.name)
    return contestant_to_dict(contestant)


@router.patch("/{contestant_id}")
async def update_contestant(
    contestant_id: int,
    req: ContestantUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    contestant = await _get_contestant(db, contestant_id)
    for field, value in req.model_dump(exclude_unset=True).items():
        setattr(contestant, field, value)
    if contestant.is_eliminated is False:
        contestant.eliminated_week = None
    await db.flush()
    return contestant_to_dict(contestant)


@router.delete("/{contestant_id}")
async def delete_contestant(
    contestant_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a contestant with their events, memberships and draft picks."""
    contestant = await _get_contestant(db, contestant_id)
    await db.execute(delete(ScoringEvent).where(ScoringEvent.contestant_id == contestant_id))
    await db.execute(delete(TeamContestant).where(TeamContestant.contestant_id == contestant_id))
    await db.execute(delete(TribeMembership).where(TribeMembership.contestant_id == contestant_id))
    await db.delete(contestant)
    await db.flush()
    log.info("Contestant %s deleted", contestant_id)
    return {"success": True}
