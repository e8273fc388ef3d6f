"""Leaderboard -- team and contestant standings from approved events."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from league.engine import scoring
from league.models.contestant import Contestant
from league.models.event import ScoringEvent
from league.models.team import Team, TeamContestant
from league.models.user import User


async def _approved_events_by_contestant(
    db: AsyncSession, week: int | None = None
) -> dict[int, list[ScoringEvent]]:
    query = select(ScoringEvent).where(ScoringEvent.is_approved.is_(True))
    if week is not None:
        query = query.where(ScoringEvent.week == week)
    grouped: dict[int, list[ScoringEvent]] = {}
    for event in (await db.execute(query.order_by(ScoringEvent.week, ScoringEvent.id))).scalars():
        grouped.setdefault(event.contestant_id, []).append(event)
    return grouped


def _contestant_summary(contestant: Contestant) -> dict:
    return {
        "id": contestant.id,
        "name": contestant.name,
        "tribe": contestant.tribe,
        "image_url": contestant.image_url,
        "is_eliminated": contestant.is_eliminated,
    }


async def build_leaderboard(db: AsyncSession, week: int | None = None) -> list[dict]:
    """Rank every team by the approved points of its drafted contestants."""
    events = await _approved_events_by_contestant(db, week)

    teams = (await db.execute(select(Team, User).join(User, User.id == Team.user_id))).all()
    roster_rows = (
        await db.execute(
            select(TeamContestant, Contestant)
            .join(Contestant, Contestant.id == TeamContestant.contestant_id)
            .order_by(TeamContestant.draft_order)
        )
    ).all()
    rosters: dict[int, list[tuple[TeamContestant, Contestant]]] = {}
    for tc, contestant in roster_rows:
        rosters.setdefault(tc.team_id, []).append((tc, contestant))

    leaderboard = []
    for team, user in teams:
        contestant_scores = []
        for tc, contestant in rosters.get(team.id, []):
            contestant_events = events.get(contestant.id, [])
            contestant_scores.append({
                "contestant": _contestant_summary(contestant),
                "draft_order": tc.draft_order,
                "total_points": scoring.total_points(contestant_events),
                "weekly_points": scoring.points_by_week(contestant_events),
                "events": [
                    {"id": e.id, "type": e.type, "week": e.week, "points": e.points}
                    for e in contestant_events
                ],
            })
        leaderboard.append({
            "team_id": team.id,
            "user": {"id": user.id, "name": user.name, "is_paid": user.is_paid},
            "contestants": contestant_scores,
            "total_score": scoring.team_score(
                events.get(contestant.id, []) for _, contestant in rosters.get(team.id, [])
            ),
        })

    leaderboard.sort(key=lambda entry: entry["total_score"], reverse=True)
    for rank, entry in enumerate(leaderboard, start=1):
        entry["rank"] = rank
    return leaderboard


async def contestant_standings(db: AsyncSession) -> list[dict]:
    events = await _approved_events_by_contestant(db)
    contestants = (await db.execute(select(Contestant).order_by(Contestant.name))).scalars().all()

    standings = []
    for contestant in contestants:
        contestant_events = events.get(contestant.id, [])
        standings.append({
            "contestant": _contestant_summary(contestant),
            "total_points": scoring.total_points(contestant_events),
            "weekly_points": scoring.points_by_week(contestant_events),
            "breakdown": {
                event_type.value: points
                for event_type, points in scoring.points_by_type(contestant_events).items()
            },
        })
    standings.sort(key=lambda entry: entry["total_points"], reverse=True)
    return standings
