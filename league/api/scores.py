from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user
from league.database import get_db
from league.engine.leaderboard import build_leaderboard, contestant_standings
from league.models.user import User

router = APIRouter(prefix="/api/scores", tags=["scores"])


@router.get("")
async def get_leaderboard(
    week: Optional[int] = None,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Team standings from approved events, optionally for a single week."""
    return await build_leaderboard(db, week)


@router.get("/contestants")
async def get_contestant_scores(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await contestant_standings(db)
