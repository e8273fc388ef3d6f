"""Season setup -- tribes, tribe memberships, episodes and readiness."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user, require_admin
from league.config import settings
from league.database import get_db
from league.engine import season as season_engine
from league.api import to_http
from league.errors import LeagueError
from league.models.contestant import Contestant
from league.models.episode import Episode
from league.models.tribe import Tribe, TribeMembership
from league.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["season"])


class TribeCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = "#888888"


class TribeUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


class MembershipCreate(BaseModel):
    contestant_id: int
    tribe_id: int
    from_week: int = 1


class EpisodeCreate(BaseModel):
    number: int = Field(ge=1)
    title: Optional[str] = None
    air_date: Optional[datetime] = None


class EpisodeUpdate(BaseModel):
    number: Optional[int] = Field(default=None, ge=1)
    title: Optional[str] = None
    air_date: Optional[datetime] = None


def _tribe_to_dict(tribe: Tribe, member_count: int = 0) -> dict:
    return {"id": tribe.id, "name": tribe.name, "color": tribe.color, "member_count": member_count}


def _episode_to_dict(episode: Episode) -> dict:
    return {
        "id": episode.id,
        "number": episode.number,
        "title": episode.title,
        "air_date": episode.air_date.isoformat() if episode.air_date else None,
    }


async def _flush_unique(db: AsyncSession, detail: str) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(status_code=409, detail=detail) from None


# ---------------------------------------------------------------------------
# Calendar and readiness
# ---------------------------------------------------------------------------

@router.get("/season/current-week")
async def get_current_week():
    return {"week": season_engine.current_week(), "max_week": settings.MAX_WEEK}


@router.get("/season-readiness")
async def season_readiness(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await season_engine.check_season_readiness(db)


# ---------------------------------------------------------------------------
# Tribes
# ---------------------------------------------------------------------------

@router.get("/tribes")
async def list_tribes(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tribes = (await db.execute(select(Tribe).order_by(Tribe.name))).scalars().all()
    open_memberships = (
        await db.execute(select(TribeMembership.tribe_id).where(TribeMembership.to_week.is_(None)))
    ).scalars().all()
    counts: dict[int, int] = {}
    for tribe_id in open_memberships:
        counts[tribe_id] = counts.get(tribe_id, 0) + 1
    return [_tribe_to_dict(t, counts.get(t.id, 0)) for t in tribes]


@router.post("/tribes", status_code=201)
async def create_tribe(
    req: TribeCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tribe = Tribe(name=req.name, color=req.color)
    db.add(tribe)
    await _flush_unique(db, "Tribe name already exists")
    return _tribe_to_dict(tribe)


@router.patch("/tribes/{tribe_id}")
async def update_tribe(
    tribe_id: int,
    req: TribeUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tribe = await db.get(Tribe, tribe_id)
    if tribe is None:
        raise HTTPException(status_code=404, detail="Tribe not found")
    for field, value in req.model_dump(exclude_unset=True).items():
        setattr(tribe, field, value)
    await _flush_unique(db, "Tribe name already exists")
    return _tribe_to_dict(tribe)


@router.delete("/tribes/{tribe_id}")
async def delete_tribe(
    tribe_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tribe = await db.get(Tribe, tribe_id)
    if tribe is None:
        raise HTTPException(status_code=404, detail="Tribe not found")
    await db.execute(delete(TribeMembership).where(TribeMembership.tribe_id == tribe_id))
    await db.delete(tribe)
    await db.flush()
    return {"success": True}


# ---------------------------------------------------------------------------
# Tribe memberships
# ---------------------------------------------------------------------------

@router.get("/tribe-memberships")
async def list_memberships(
    contestant_id: Optional[int] = None,
    tribe_id: Optional[int] = None,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(TribeMembership, Contestant, Tribe)
        .join(Contestant, Contestant.id == TribeMembership.contestant_id)
        .join(Tribe, Tribe.id == TribeMembership.tribe_id)
        .order_by(TribeMembership.from_week, TribeMembership.id)
    )
    if contestant_id is not None:
        query = query.where(TribeMembership.contestant_id == contestant_id)
    if tribe_id is not None:
        query = query.where(TribeMembership.tribe_id == tribe_id)
    return [
        {
            "id": m.id,
            "from_week": m.from_week,
            "to_week": m.to_week,
            "contestant": {"id": c.id, "name": c.name},
            "tribe": {"id": t.id, "name": t.name, "color": t.color},
        }
        for m, c, t in (await db.execute(query)).all()
    ]


@router.post("/tribe-memberships", status_code=201)
async def create_membership(
    req: MembershipCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        membership = await season_engine.assign_tribe(
            db, req.contestant_id, req.tribe_id, req.from_week
        )
    except LeagueError as exc:
        raise to_http(exc)
    return {
        "id": membership.id,
        "contestant_id": membership.contestant_id,
        "tribe_id": membership.tribe_id,
        "from_week": membership.from_week,
        "to_week": membership.to_week,
    }


@router.delete("/tribe-memberships/{membership_id}")
async def delete_membership(
    membership_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    membership = await db.get(TribeMembership, membership_id)
    if membership is None:
        raise HTTPException(status_code=404, detail="Membership not found")
    await db.delete(membership)
    await db.flush()
    return {"success": True}


# ---------------------------------------------------------------------------
# Episodes
# ---------------------------------------------------------------------------

@router.get("/episodes")
async def list_episodes(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    episodes = (await db.execute(select(Episode).order_by(Episode.number))).scalars().all()
    return [_episode_to_dict(e) for e in episodes]


@router.post("/episodes", status_code=201)
async def create_episode(
    req: EpisodeCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    episode = Episode(number=req.number, title=req.title, air_date=req.air_date)
    db.add(episode)
    await _flush_unique(db, f"Episode {req.number} already exists")
    return _episode_to_dict(episode)


@router.patch("/episodes/{episode_id}")
async def update_episode(
    episode_id: int,
    req: EpisodeUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    episode = await db.get(Episode, episode_id)
    if episode is None:
        raise HTTPException(status_code=404, detail="Episode not found")
    for field, value in req.model_dump(exclude_unset=True).items():
        setattr(episode, field, value)
    await _flush_unique(db, "Episode number already exists")
    return _episode_to_dict(episode)


@router.delete("/episodes/{episode_id}")
async def delete_episode(
    episode_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    episode = await db.get(Episode, episode_id)
    if episode is None:
        raise HTTPException(status_code=404, detail="Episode not found")
    await db.delete(episode)
    await db.flush()
    return {"success": True}
