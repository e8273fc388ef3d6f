"""Score aggregation over scoring events.

Only approved events count. Events may be ORM rows (``is_approved``) or
plain mappings (``approved`` / ``is_approved``); pending and rejected
events contribute nothing. Every function here is an order-independent
sum, so recomputing from the same approved set always gives the same
result.
"""
from collections.abc import Iterable, Mapping

from league.engine.catalog import EventType, parse_event_type


def _get(event, field: str):
    if isinstance(event, Mapping):
        return event[field]
    return getattr(event, field)


def is_approved(event) -> bool:
    if isinstance(event, Mapping):
        if "approved" in event:
            return event["approved"] is True
        return event.get("is_approved") is True
    return getattr(event, "is_approved", None) is True


def approved_only(events: Iterable) -> list:
    return [e for e in events if is_approved(e)]


def total_points(events: Iterable) -> int:
    """Sum of points over approved events. Negative points are not clamped."""
    return sum(_get(e, "points") for e in approved_only(events))


def points_by_week(events: Iterable) -> dict[int, int]:
    """Approved points grouped by week. Weeks with no approved events are absent."""
    weekly: dict[int, int] = {}
    for event in approved_only(events):
        week = _get(event, "week")
        weekly[week] = weekly.get(week, 0) + _get(event, "points")
    return weekly


def points_by_type(events: Iterable) -> dict[EventType, int]:
    breakdown: dict[EventType, int] = {}
    for event in approved_only(events):
        event_type = parse_event_type(_get(event, "type"))
        breakdown[event_type] = breakdown.get(event_type, 0) + _get(event, "points")
    return breakdown


def team_score(per_contestant_events: Iterable[Iterable]) -> int:
    """Total of each contestant's approved points; 0 for an empty team."""
    return sum(total_points(events) for events in per_contestant_events)
