from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Tribe(Base):
    __tablename__ = "tribes"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True)
    color: Mapped[str] = mapped_column(String(16), default="#888888")


class TribeMembership(Base):
    __tablename__ = "tribe_memberships"

    id: Mapped[int] = mapped_column(primary_key=True)
    contestant_id: Mapped[int] = mapped_column(ForeignKey("contestants.id"), index=True)
    tribe_id: Mapped[int] = mapped_column(ForeignKey("tribes.id"))
    from_week: Mapped[int] = mapped_column(Integer, default=1)
    to_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # None = current
