"""Scoring-event workflow -- submit, list, moderate and delete single events.

Points are looked up in the catalog once, when the event is created, and
stored on the row.
"""
import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from league.engine.catalog import label_for, parse_event_type, points_for
from league.errors import ConflictError, NotFoundError, ValidationError
from league.models.contestant import Contestant
from league.models.event import ScoringEvent
from league.models.user import User

log = logging.getLogger(__name__)


def approval_status(is_approved: Optional[bool]) -> str:
    if is_approved is None:
        return "pending"
    return "approved" if is_approved else "rejected"


def event_to_dict(event: ScoringEvent, contestant: Optional[Contestant] = None) -> dict:
    data = {
        "id": event.id,
        "type": event.type,
        "label": label_for(event.type),
        "contestant_id": event.contestant_id,
        "week": event.week,
        "description": event.description,
        "points": event.points,
        "is_approved": event.is_approved,
        "status": approval_status(event.is_approved),
        "submitted_by_id": event.submitted_by_id,
        "approved_by_id": event.approved_by_id,
        "game_event_id": event.game_event_id,
    }
    if contestant is not None:
        data["contestant"] = {"id": contestant.id, "name": contestant.name}
    return data


def validate_week(week: int) -> int:
    if not isinstance(week, int) or isinstance(week, bool) or week < 1:
        raise ValidationError("week must be a positive integer")
    return week


async def get_event(db: AsyncSession, event_id: int) -> ScoringEvent:
    event = await db.get(ScoringEvent, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


# ---------------------------------------------------------------------------
# submit_event
# ---------------------------------------------------------------------------

async def submit_event(
    db: AsyncSession,
    submitter: User,
    event_type: str,
    contestant_id: int,
    week: int,
    description: str | None = None,
) -> ScoringEvent:
    """Create a pending scoring event with the catalog's current points."""
    event_type = parse_event_type(event_type)
    validate_week(week)

    contestant = await db.get(Contestant, contestant_id)
    if contestant is None:
        raise NotFoundError("Contestant not found")

    event = ScoringEvent(
        type=event_type.value,
        contestant_id=contestant.id,
        week=week,
        description=description,
        points=points_for(event_type),
        is_approved=None,
        submitted_by_id=submitter.id,
    )
    db.add(event)
    await db.flush()

    log.info(
        "Event %s submitted: %s for %s (week %d) by %s",
        event.id, event_type.value, contestant.name, week, submitter.username,
    )
    return event


# ---------------------------------------------------------------------------
# list_events
# ---------------------------------------------------------------------------

async def list_events(
    db: AsyncSession,
    week: int | None = None,
    contestant_id: int | None = None,
    approved_only: bool = False,
    pending_only: bool = False,
) -> list[tuple[ScoringEvent, Contestant]]:
    query = select(ScoringEvent, Contestant).join(
        Contestant, Contestant.id == ScoringEvent.contestant_id
    )
    if week is not None:
        query = query.where(ScoringEvent.week == week)
    if contestant_id is not None:
        query = query.where(ScoringEvent.contestant_id == contestant_id)
    if approved_only:
        query = query.where(ScoringEvent.is_approved.is_(True))
    if pending_only:
        query = query.where(ScoringEvent.is_approved.is_(None))
    query = query.order_by(
        ScoringEvent.week.desc(), ScoringEvent.created_at.desc(), ScoringEvent.id.desc()
    )
    return [tuple(row) for row in (await db.execute(query)).all()]


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------

async def set_event_approval(
    db: AsyncSession, event_id: int, approved: bool, approver: User
) -> ScoringEvent:
    """Approve or reject a single event.

    Events derived from a game event only change state together with it.
    """
    event = await get_event(db, event_id)
    if event.game_event_id is not None:
        raise ConflictError("Derived events are moderated through their game event")
    event.is_approved = approved
    event.approved_by_id = approver.id if approved else None
    await db.flush()

    log.info(
        "Event %s %s by %s", event.id, approval_status(approved), approver.username
    )
    return event


async def delete_event(db: AsyncSession, event_id: int) -> None:
    event = await get_event(db, event_id)
    await db.delete(event)
    await db.flush()
    log.info("Event %s deleted", event_id)


async def bulk_delete_events(db: AsyncSession, event_ids: list[int]) -> int:
    if not event_ids:
        raise ValidationError("ids must be a non-empty list")
    result = await db.execute(delete(ScoringEvent).where(ScoringEvent.id.in_(event_ids)))
    log.info("Bulk deleted %d event(s)", result.rowcount)
    return result.rowcount
