"""User profile and administration endpoints, plus invite lookup."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from league.auth.deps import get_current_user, require_admin
from league.database import get_db
from league.models.user import ROLES, User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])
invite_router = APIRouter(prefix="/api/invites", tags=["users"])


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    is_paid: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: str


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "role": user.role,
        "is_paid": user.is_paid,
        "invite_code": user.invite_code,
        "invited_by_id": user.invited_by_id,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    return user_to_dict(user)


@router.patch("/me")
async def update_me(
    req: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")
    user.name = req.name.strip()
    await db.flush()
    return user_to_dict(user)


@router.get("")
async def list_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    users = (await db.execute(select(User).order_by(User.created_at, User.id))).scalars().all()
    return [user_to_dict(u) for u in users]


@router.patch("/{user_id}")
async def update_user(
    user_id: int,
    req: UserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if req.role is not None:
        if req.role not in ROLES:
            raise HTTPException(status_code=400, detail=f"Invalid role: {req.role}")
        user.role = req.role
    if req.is_paid is not None:
        user.is_paid = req.is_paid
    if req.name is not None:
        user.name = req.name
    await db.flush()
    log.info("User %s updated by %s", user.username, admin.username)
    return user_to_dict(user)


@invite_router.get("/{code}")
async def get_invite(code: str, db: AsyncSession = Depends(get_db)):
    """Public: resolve an invite code to the inviter's name."""
    inviter = (
        await db.execute(select(User).where(User.invite_code == code))
    ).scalar_one_or_none()
    if inviter is None:
        raise HTTPException(status_code=404, detail="Invalid invite code")
    return {"valid": True, "inviter_name": inviter.name}
