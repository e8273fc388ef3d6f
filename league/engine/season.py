"""Season calendar and setup checks."""
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from league.config import settings
from league.errors import NotFoundError, ValidationError
from league.models.contestant import Contestant
from league.models.episode import Episode
from league.models.tribe import Tribe, TribeMembership


def current_week(now: datetime | None = None) -> int:
    """Week number since the premiere: week 1 starts on premiere day.

    Clamped to [1, MAX_WEEK].
    """
    now = now or datetime.now(timezone.utc)
    premiere = settings.SEASON_PREMIERE
    if premiere.tzinfo is None:
        premiere = premiere.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if now < premiere:
        return 1
    weeks_since = (now - premiere).days // 7
    return min(max(weeks_since + 1, 1), settings.MAX_WEEK)


async def check_season_readiness(db: AsyncSession) -> dict:
    contestant_count = (
        await db.execute(select(func.count()).select_from(Contestant))
    ).scalar_one()
    tribe_count = (await db.execute(select(func.count()).select_from(Tribe))).scalar_one()
    episode_count = (await db.execute(select(func.count()).select_from(Episode))).scalar_one()
    assigned_count = (
        await db.execute(
            select(func.count(func.distinct(TribeMembership.contestant_id))).where(
                TribeMembership.to_week.is_(None)
            )
        )
    ).scalar_one()

    unassigned_count = contestant_count - assigned_count
    has_contestants = contestant_count > 0
    has_episodes = episode_count > 0

    return {
        # Tribes are formed in episode 1, after the draft, so they are not required.
        "is_ready": has_contestants and has_episodes,
        "checks": {
            "has_contestants": has_contestants,
            "has_tribes": tribe_count > 0,
            "all_contestants_assigned": has_contestants and unassigned_count == 0,
            "has_episodes": has_episodes,
        },
        "details": {
            "contestant_count": contestant_count,
            "tribe_count": tribe_count,
            "unassigned_count": unassigned_count,
            "episode_count": episode_count,
        },
    }


async def assign_tribe(
    db: AsyncSession, contestant_id: int, tribe_id: int, from_week: int
) -> TribeMembership:
    """Move a contestant to *tribe_id*, closing any open membership."""
    if from_week < 1:
        raise ValidationError("from_week must be a positive integer")
    contestant = await db.get(Contestant, contestant_id)
    if contestant is None:
        raise NotFoundError("Contestant not found")
    tribe = await db.get(Tribe, tribe_id)
    if tribe is None:
        raise NotFoundError("Tribe not found")

    await db.execute(
        update(TribeMembership)
        .where(
            TribeMembership.contestant_id == contestant_id,
            TribeMembership.to_week.is_(None),
        )
        .values(to_week=max(from_week - 1, 1))
        .execution_options(synchronize_session="fetch")
    )
    membership = TribeMembership(
        contestant_id=contestant_id, tribe_id=tribe_id, from_week=from_week, to_week=None,
    )
    db.add(membership)
    contestant.tribe = tribe.name
    await db.flush()
    return membership
