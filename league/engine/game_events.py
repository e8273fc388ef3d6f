"""Game-event workflow -- submission, re-derivation, approval cascade, deletion.

A game event and the scoring events derived from it always move together:
they are created in one flush, approved or rejected with one state, and
deleted as a unit. Each function does all of its writes on the caller's
session; the request-scoped session commits them together or rolls them
all back, so a contestant's score never reflects only part of a compound
event.
"""
import json
import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from league.engine.derivation import (
    DerivedEvent,
    derive,
    eliminated_contestant,
    game_event_label,
    parse_game_event_type,
    parse_payload,
    referenced_contestants,
    summarize,
)
from league.engine.events import approval_status, event_to_dict, validate_week
from league.errors import ConflictError, DerivationEmptyError, NotFoundError, ValidationError
from league.models.contestant import Contestant
from league.models.event import ScoringEvent
from league.models.game_event import GameEvent
from league.models.user import User

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def get_game_event(db: AsyncSession, game_event_id: int) -> GameEvent:
    game_event = await db.get(GameEvent, game_event_id)
    if game_event is None:
        raise NotFoundError("Game event not found")
    return game_event


async def _resolve_contestants(db: AsyncSession, wanted: list[str]) -> dict[str, Contestant]:
    """Map contestant ids to rows; unknown ids are a validation error."""
    numeric = [int(cid) for cid in wanted if cid.isdigit()]
    found: dict[str, Contestant] = {}
    if numeric:
        rows = (
            await db.execute(select(Contestant).where(Contestant.id.in_(numeric)))
        ).scalars().all()
        found = {str(c.id): c for c in rows}

    invalid = [cid for cid in wanted if cid not in found]
    if invalid:
        raise ValidationError(f"Invalid contestant IDs: {', '.join(invalid)}")
    return found


async def _derive_checked(db: AsyncSession, game_event_type, payload):
    data = parse_payload(game_event_type, payload)
    derived = derive(game_event_type, data)
    if not derived:
        raise DerivationEmptyError()
    # Ids that score nothing (eliminated, fire-making loser) must exist too.
    contestants = await _resolve_contestants(
        db, referenced_contestants(game_event_type, data)
    )
    return data, derived, contestants


def _add_derived_events(
    db: AsyncSession,
    game_event: GameEvent,
    derived: list[DerivedEvent],
    contestants: dict[str, Contestant],
    submitter_id: int,
) -> None:
    for item in derived:
        db.add(ScoringEvent(
            type=item.type.value,
            contestant_id=contestants[item.contestant_id].id,
            week=game_event.week,
            description=item.description,
            points=item.points,
            is_approved=None,
            submitted_by_id=submitter_id,
            game_event_id=game_event.id,
        ))


async def derived_events_for(
    db: AsyncSession, game_event_ids: list[int]
) -> dict[int, list[tuple[ScoringEvent, Contestant]]]:
    grouped: dict[int, list[tuple[ScoringEvent, Contestant]]] = {gid: [] for gid in game_event_ids}
    if not game_event_ids:
        return grouped
    rows = (
        await db.execute(
            select(ScoringEvent, Contestant)
            .join(Contestant, Contestant.id == ScoringEvent.contestant_id)
            .where(ScoringEvent.game_event_id.in_(game_event_ids))
            .order_by(ScoringEvent.id)
        )
    ).all()
    for event, contestant in rows:
        grouped[event.game_event_id].append((event, contestant))
    return grouped


async def contestant_names(db: AsyncSession) -> dict[str, str]:
    rows = (await db.execute(select(Contestant.id, Contestant.name))).all()
    return {str(cid): name for cid, name in rows}


def game_event_to_dict(
    game_event: GameEvent,
    derived: list[tuple[ScoringEvent, Contestant]],
    names: Optional[dict[str, str]] = None,
) -> dict:
    data = json.loads(game_event.data)
    names = names if names is not None else {str(c.id): c.name for _, c in derived}
    return {
        "id": game_event.id,
        "type": game_event.type,
        "label": game_event_label(game_event.type),
        "week": game_event.week,
        "data": data,
        "summary": summarize(game_event.type, data, names),
        "is_approved": game_event.is_approved,
        "status": approval_status(game_event.is_approved),
        "submitted_by_id": game_event.submitted_by_id,
        "approved_by_id": game_event.approved_by_id,
        "events": [event_to_dict(e, c) for e, c in derived],
    }


# ---------------------------------------------------------------------------
# submit_game_event
# ---------------------------------------------------------------------------

async def submit_game_event(
    db: AsyncSession,
    submitter: User,
    game_event_type: str,
    week: int,
    payload: dict,
) -> GameEvent:
    """Derive scoring events and persist them, pending, with their game event.

    Nothing is written if the payload is invalid, derives no events, or
    names a contestant that does not exist.
    """
    game_event_type = parse_game_event_type(game_event_type)
    validate_week(week)
    data, derived, contestants = await _derive_checked(db, game_event_type, payload)

    game_event = GameEvent(
        type=game_event_type.value,
        week=week,
        data=data.model_dump_json(by_alias=True),
        is_approved=None,
        submitted_by_id=submitter.id,
    )
    db.add(game_event)
    await db.flush()

    _add_derived_events(db, game_event, derived, contestants, submitter.id)
    await db.flush()

    log.info(
        "Game event %s (%s, week %d) submitted by %s -> %d scoring event(s)",
        game_event.id, game_event_type.value, week, submitter.username, len(derived),
    )
    return game_event


# ---------------------------------------------------------------------------
# update_game_event
# ---------------------------------------------------------------------------

async def update_game_event(
    db: AsyncSession,
    game_event_id: int,
    editor: User,
    week: Optional[int] = None,
    payload: Optional[dict] = None,
) -> GameEvent:
    """Edit a pending game event and re-derive its scoring events."""
    game_event = await get_game_event(db, game_event_id)
    if game_event.is_approved is not None:
        raise ConflictError("Only pending game events can be edited")

    new_week = validate_week(week) if week is not None else game_event.week
    raw = payload if payload is not None else json.loads(game_event.data)
    data, derived, contestants = await _derive_checked(db, game_event.type, raw)

    await db.execute(delete(ScoringEvent).where(ScoringEvent.game_event_id == game_event.id))
    game_event.week = new_week
    game_event.data = data.model_dump_json(by_alias=True)
    await db.flush()

    _add_derived_events(db, game_event, derived, contestants, game_event.submitted_by_id)
    await db.flush()

    log.info(
        "Game event %s re-derived by %s -> %d scoring event(s)",
        game_event.id, editor.username, len(derived),
    )
    return game_event


# ---------------------------------------------------------------------------
# set_game_event_approval
# ---------------------------------------------------------------------------

async def set_game_event_approval(
    db: AsyncSession, game_event_id: int, approved: bool, approver: User
) -> GameEvent:
    """Approve or reject a game event and cascade the state to its derived events.

    Approving a tribal council or quit/medevac also marks the departing
    contestant as eliminated in that week. Rejecting an event that had
    eliminated someone restores them.
    """
    game_event = await get_game_event(db, game_event_id)
    previously_approved = game_event.is_approved is True
    approver_id = approver.id if approved else None

    game_event.is_approved = approved
    game_event.approved_by_id = approver_id
    await db.execute(
        update(ScoringEvent)
        .where(ScoringEvent.game_event_id == game_event.id)
        .values(is_approved=approved, approved_by_id=approver_id)
        .execution_options(synchronize_session="fetch")
    )

    departed = eliminated_contestant(game_event.type, json.loads(game_event.data))
    if departed is not None:
        contestant = await db.get(Contestant, int(departed)) if departed.isdigit() else None
        if contestant is None:
            raise NotFoundError(f"Contestant {departed} not found")
        if approved:
            contestant.is_eliminated = True
            contestant.eliminated_week = game_event.week
        elif previously_approved and contestant.eliminated_week == game_event.week:
            contestant.is_eliminated = False
            contestant.eliminated_week = None

    await db.flush()
    log.info(
        "Game event %s %s by %s", game_event.id, approval_status(approved), approver.username
    )
    return game_event


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------

async def delete_game_event(db: AsyncSession, game_event_id: int) -> None:
    """Hard-delete a game event together with its derived scoring events."""
    game_event = await get_game_event(db, game_event_id)
    await db.execute(delete(ScoringEvent).where(ScoringEvent.game_event_id == game_event.id))
    await db.delete(game_event)
    await db.flush()
    log.info("Game event %s deleted", game_event_id)


async def bulk_delete_game_events(db: AsyncSession, game_event_ids: list[int]) -> int:
    if not game_event_ids:
        raise ValidationError("ids must be a non-empty list")
    await db.execute(
        delete(ScoringEvent).where(ScoringEvent.game_event_id.in_(game_event_ids))
    )
    result = await db.execute(delete(GameEvent).where(GameEvent.id.in_(game_event_ids)))
    log.info("Bulk deleted %d game event(s)", result.rowcount)
    return result.rowcount


# ---------------------------------------------------------------------------
# list_game_events
# ---------------------------------------------------------------------------

async def list_game_events(
    db: AsyncSession,
    week: int | None = None,
    approved_only: bool = False,
    pending_only: bool = False,
) -> list[dict]:
    query = select(GameEvent)
    if week is not None:
        query = query.where(GameEvent.week == week)
    if approved_only:
        query = query.where(GameEvent.is_approved.is_(True))
    if pending_only:
        query = query.where(GameEvent.is_approved.is_(None))
    query = query.order_by(GameEvent.week.desc(), GameEvent.created_at.desc(), GameEvent.id.desc())

    game_events = (await db.execute(query)).scalars().all()
    derived = await derived_events_for(db, [ge.id for ge in game_events])
    names = await contestant_names(db)
    return [game_event_to_dict(ge, derived[ge.id], names) for ge in game_events]
