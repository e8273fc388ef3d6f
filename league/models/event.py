from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ScoringEvent(Base):
    """A single point-bearing occurrence attributed to one contestant.

    ``points`` is copied from the catalog when the row is created and is
    never recomputed afterwards.
    """

    __tablename__ = "events"
    __table_args__ = (CheckConstraint("week >= 1", name="ck_events_week_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(String(32))  # EventType value
    contestant_id: Mapped[int] = mapped_column(ForeignKey("contestants.id"), index=True)
    week: Mapped[int] = mapped_column(Integer, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    points: Mapped[int] = mapped_column(Integer)
    is_approved: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)  # None = pending
    submitted_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    approved_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    game_event_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("game_events.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
