from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True)
    name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)


class TeamContestant(Base):
    __tablename__ = "team_contestants"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), index=True)
    # A contestant can be on at most one roster.
    contestant_id: Mapped[int] = mapped_column(ForeignKey("contestants.id"), unique=True)
    draft_order: Mapped[int] = mapped_column(Integer)
