from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class GameEvent(Base):
    """A compound occurrence (tribal council, challenge...) that expands
    into one or more scoring events sharing its id."""

    __tablename__ = "game_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(String(32))  # GameEventType value
    week: Mapped[int] = mapped_column(Integer, index=True)
    data: Mapped[str] = mapped_column(Text, default="{}")  # JSON string
    is_approved: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)  # None = pending
    submitted_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    approved_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
