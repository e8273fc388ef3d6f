import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from league.config import settings
from league.database import get_db
from league.models.user import ROLE_ADMIN, ROLE_USER, User
from league.auth.jwt import create_access_token, hash_password, verify_password

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)
    name: Optional[str] = None
    invite_code: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    role: str


def _token_for(user: User) -> TokenResponse:
    token = create_access_token(user)
    return TokenResponse(
        access_token=token, user_id=user.id, username=user.username, role=user.role
    )


@router.post("/register", response_model=TokenResponse)
async def register(req: RegisterRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.username == req.username))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Username already taken")

    user_count = (await db.execute(select(func.count()).select_from(User))).scalar_one()

    inviter = None
    if req.invite_code:
        inviter = (
            await db.execute(select(User).where(User.invite_code == req.invite_code))
        ).scalar_one_or_none()
        if inviter is None:
            raise HTTPException(status_code=400, detail="Invalid invite code")
    elif settings.REQUIRE_INVITE and user_count > 0:
        raise HTTPException(status_code=400, detail="An invite code is required")

    user = User(
        username=req.username,
        password_hash=hash_password(req.password),
        name=req.name or req.username,
        # The first account in an empty league runs it.
        role=ROLE_ADMIN if user_count == 0 else ROLE_USER,
        invited_by_id=inviter.id if inviter else None,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    log.info("Registered %s (%s)", user.username, user.role)
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.username == req.username))
    user = result.scalar_one_or_none()
    if not user or not verify_password(req.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _token_for(user)
