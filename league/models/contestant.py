from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Contestant(Base):
    __tablename__ = "contestants"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(128), index=True)
    nickname: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    tribe: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    original_seasons: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    is_eliminated: Mapped[bool] = mapped_column(Boolean, default=False)
    eliminated_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
