"""Draft endpoints -- one POST with an ``action`` of initialize or pick."""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user
from league.database import get_db
from league.engine import draft as draft_engine
from league.api import to_http
from league.errors import LeagueError, PermissionDeniedError
from league.models.user import User

router = APIRouter(prefix="/api/draft", tags=["draft"])


class DraftAction(BaseModel):
    action: Literal["initialize", "pick"]
    draft_order: Optional[list[int]] = None
    picks_per_player: Optional[int] = None
    contestant_id: Optional[int] = None


@router.get("")
async def get_draft(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await draft_engine.get_draft_state(db)


@router.post("")
async def draft_action(
    req: DraftAction,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        if req.action == "initialize":
            if not user.is_admin:
                raise PermissionDeniedError("Admin access required")
            draft = await draft_engine.initialize_draft(
                db, req.draft_order or [], req.picks_per_player
            )
            return {"success": True, "draft_id": draft.id}

        if req.contestant_id is None:
            raise HTTPException(status_code=400, detail="Contestant ID is required")
        return await draft_engine.make_pick(db, user, req.contestant_id)
    except LeagueError as exc:
        raise to_http(exc)
