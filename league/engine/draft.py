"""Snake draft -- initialization, turn order and pick submission.

Picks for one draft are serialized without locks: the draft row is advanced
with an UPDATE that only matches the pick number the caller observed, so of
two simultaneous picks for the same turn exactly one advances the draft and
the other fails with ConflictError. The unique constraint on
``team_contestants.contestant_id`` rejects a contestant drafted twice.
"""
import json
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league.config import settings
from league.errors import ConflictError, NotFoundError, ValidationError
from league.models.contestant import Contestant
from league.models.draft import Draft
from league.models.team import Team, TeamContestant
from league.models.user import User

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Turn order
# ---------------------------------------------------------------------------

def current_turn_index(order_len: int, current_pick: int, current_round: int) -> int:
    """Index into the draft order of the player on the clock.

    Odd rounds run front to back, even rounds back to front.
    """
    if order_len <= 0:
        raise ValidationError("Draft order is empty")
    position = (current_pick - 1) % order_len
    if current_round % 2 == 1:
        return position
    return order_len - 1 - position


def snake_order(order_len: int, rounds: int) -> list[int]:
    """Full pick sequence as draft-order indices."""
    sequence: list[int] = []
    for round_number in range(1, rounds + 1):
        indices = list(range(order_len))
        if round_number % 2 == 0:
            indices.reverse()
        sequence.extend(indices)
    return sequence


def round_for_pick(pick: int, order_len: int) -> int:
    return (pick - 1) // order_len + 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def get_latest_draft(db: AsyncSession) -> Draft | None:
    return (
        await db.execute(select(Draft).order_by(Draft.created_at.desc(), Draft.id.desc()).limit(1))
    ).scalar_one_or_none()


async def _get_or_create_team(db: AsyncSession, user: User) -> Team:
    team = (
        await db.execute(select(Team).where(Team.user_id == user.id))
    ).scalar_one_or_none()
    if team is None:
        team = Team(user_id=user.id, name=f"{user.name}'s Team")
        db.add(team)
        await db.flush()
    return team


# ---------------------------------------------------------------------------
# initialize_draft
# ---------------------------------------------------------------------------

async def initialize_draft(
    db: AsyncSession, draft_order: list[int], picks_per_player: int | None = None
) -> Draft:
    """Start a new draft, replacing any existing one and clearing rosters."""
    if not draft_order:
        raise ValidationError("Draft order is required")
    if len(set(draft_order)) != len(draft_order):
        raise ValidationError("Draft order contains duplicate users")
    picks = picks_per_player if picks_per_player is not None else settings.PICKS_PER_PLAYER
    if picks < 1:
        raise ValidationError("picks_per_player must be at least 1")

    found = set(
        (await db.execute(select(User.id).where(User.id.in_(draft_order)))).scalars().all()
    )
    missing = [uid for uid in draft_order if uid not in found]
    if missing:
        raise ValidationError(f"Unknown user IDs in draft order: {', '.join(map(str, missing))}")

    await db.execute(delete(TeamContestant))
    await db.execute(delete(Draft))

    draft = Draft(
        draft_order=json.dumps(draft_order),
        current_pick=1,
        current_round=1,
        picks_per_player=picks,
        is_complete=False,
    )
    db.add(draft)
    await db.flush()

    log.info("Draft %s initialized: %d players x %d picks", draft.id, len(draft_order), picks)
    return draft


# ---------------------------------------------------------------------------
# get_draft_state
# ---------------------------------------------------------------------------

async def get_draft_state(db: AsyncSession) -> dict:
    draft = await get_latest_draft(db)
    if draft is None:
        return {"status": "not_started", "message": "Draft has not been initialized"}

    order: list[int] = json.loads(draft.draft_order)
    users = {
        u.id: u
        for u in (await db.execute(select(User).where(User.id.in_(order)))).scalars().all()
    }
    teams = {
        t.user_id: t
        for t in (await db.execute(select(Team).where(Team.user_id.in_(order)))).scalars().all()
    }
    picks_by_team: dict[int, list[dict]] = {}
    if teams:
        rows = (
            await db.execute(
                select(TeamContestant, Contestant)
                .join(Contestant, Contestant.id == TeamContestant.contestant_id)
                .where(TeamContestant.team_id.in_([t.id for t in teams.values()]))
                .order_by(TeamContestant.draft_order)
            )
        ).all()
        for tc, contestant in rows:
            picks_by_team.setdefault(tc.team_id, []).append(
                {"id": contestant.id, "name": contestant.name, "tribe": contestant.tribe}
            )

    participants = []
    for user_id in order:
        user = users.get(user_id)
        team = teams.get(user_id)
        participants.append({
            "user_id": user_id,
            "name": user.name if user else "Unknown",
            "picks": picks_by_team.get(team.id, []) if team else [],
        })

    state = {
        "status": "complete" if draft.is_complete else "in_progress",
        "current_pick": draft.current_pick,
        "current_round": draft.current_round,
        "picks_per_player": draft.picks_per_player,
        "draft_order": participants,
        "is_complete": draft.is_complete,
        "current_user_id": None,
    }
    if not draft.is_complete:
        index = current_turn_index(len(order), draft.current_pick, draft.current_round)
        state["current_user_id"] = order[index]
    return state


# ---------------------------------------------------------------------------
# make_pick
# ---------------------------------------------------------------------------

async def make_pick(db: AsyncSession, user: User, contestant_id: int) -> dict:
    """Draft *contestant_id* onto *user*'s team if it is their turn."""
    draft = await get_latest_draft(db)
    if draft is None:
        raise NotFoundError("Draft has not been initialized")
    if draft.is_complete:
        raise ConflictError("Draft is complete")

    order: list[int] = json.loads(draft.draft_order)
    index = current_turn_index(len(order), draft.current_pick, draft.current_round)
    if order[index] != user.id:
        raise ConflictError("Not your turn to pick")

    contestant = await db.get(Contestant, contestant_id)
    if contestant is None:
        raise NotFoundError("Contestant not found")

    already = (
        await db.execute(
            select(TeamContestant.id).where(TeamContestant.contestant_id == contestant_id)
        )
    ).scalar_one_or_none()
    if already is not None:
        raise ConflictError("Contestant already drafted")

    team = await _get_or_create_team(db, user)
    user_picks = (
        await db.execute(
            select(func.count()).select_from(TeamContestant).where(TeamContestant.team_id == team.id)
        )
    ).scalar_one()
    if user_picks >= draft.picks_per_player:
        raise ConflictError("You have already made your maximum picks")

    pick_number = draft.current_pick
    new_pick = pick_number + 1
    total_picks = len(order) * draft.picks_per_player
    advanced = await db.execute(
        update(Draft)
        .where(Draft.id == draft.id, Draft.current_pick == pick_number, Draft.is_complete.is_(False))
        .values(
            current_pick=new_pick,
            current_round=round_for_pick(new_pick, len(order)),
            is_complete=new_pick > total_picks,
        )
        .execution_options(synchronize_session=False)
    )
    if advanced.rowcount != 1:
        raise ConflictError("Not your turn to pick")

    db.add(TeamContestant(
        team_id=team.id, contestant_id=contestant.id, draft_order=user_picks + 1,
    ))
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError("Contestant already drafted") from None

    await db.refresh(draft)
    log.info(
        "Pick %d: %s drafted %s (round %d)",
        pick_number, user.username, contestant.name, round_for_pick(pick_number, len(order)),
    )
    return {
        "success": True,
        "pick": pick_number,
        "contestant_id": contestant.id,
        "is_complete": draft.is_complete,
    }
