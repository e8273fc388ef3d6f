"""Balance metrics for a point scheme.

All metrics are computed against one simulation result and the season's
event log; lower Gini means team scores are more even.
"""
import math

from league.engine.catalog import EventType, resolve_points

from .score_calculator import castaway_points
from .types import SimSeason, SimulationResult

ADJUSTMENT_RANGE = 3


def gini(values: list[float]) -> float:
    """Gini coefficient: 0 is perfectly equal, 1 maximally unequal."""
    n = len(values)
    if n == 0:
        return 0.0
    mean = sum(values) / n
    if mean == 0:
        return 0.0
    total_diff = sum(abs(a - b) for a in values for b in values)
    return round(total_diff / (2 * n * n * mean), 4)


def pearson_correlation(x: list[float], y: list[float]) -> float:
    n = len(x)
    if n != len(y) or n < 2:
        return 0.0
    mean_x = sum(x) / n
    mean_y = sum(y) / n
    num = sum((a - mean_x) * (b - mean_y) for a, b in zip(x, y))
    denom = math.sqrt(
        sum((a - mean_x) ** 2 for a in x) * sum((b - mean_y) ** 2 for b in y)
    )
    if denom == 0:
        return 0.0
    return round(num / denom, 4)


def analyze_balance(
    season: SimSeason, result: SimulationResult, overrides: dict | None = None
) -> dict:
    points = resolve_points(overrides)
    team_scores = [s.total_score for s in result.scores]

    contribution: dict[str, float] = {}
    season_total = 0
    for event in season.events:
        value = abs(points[event.type])
        season_total += value
        contribution[event.type.value] = contribution.get(event.type.value, 0) + value
    if season_total > 0:
        contribution = {k: round(v / season_total, 4) for k, v in contribution.items()}

    all_points = [castaway_points(season, c.id, points) for c in season.castaways]

    winner_advantage = 0.0
    winner = next((c for c in season.castaways if c.is_winner), None)
    if winner is not None and all_points:
        mean_points = sum(all_points) / len(all_points)
        winner_advantage = round(castaway_points(season, winner.id, points) - mean_points, 2)

    # Placement 1 is the winner; invert so a longer stay is a larger number.
    longevity = [season.num_castaways - c.placement + 1 for c in season.castaways]

    return {
        "gini": gini(team_scores),
        "spread": max(team_scores) - min(team_scores) if team_scores else 0,
        "event_contribution": contribution,
        "winner_advantage": winner_advantage,
        "longevity_correlation": pearson_correlation(longevity, all_points),
    }


def suggest_adjustments(
    season: SimSeason, result: SimulationResult, overrides: dict | None = None
) -> list[dict]:
    """Try +/-3 on each event type's points and keep changes that lower the Gini.

    Team scores are recomputed from the drafted rosters for each candidate
    scheme, so a suggestion reflects how the same draft would have scored.
    """
    overrides = dict(overrides or {})
    current = resolve_points(overrides)
    rosters = [team for _, team in sorted(result.draft.teams.items())]

    def team_gini(table: dict[EventType, int]) -> float:
        return gini([sum(castaway_points(season, cid, table) for cid in team) for team in rosters])

    baseline = team_gini(current)
    suggestions = []
    for event_type, value in current.items():
        best_gini, best_value = baseline, value
        for delta in range(-ADJUSTMENT_RANGE, ADJUSTMENT_RANGE + 1):
            if delta == 0:
                continue
            candidate = dict(current)
            candidate[event_type] = value + delta
            candidate_gini = team_gini(candidate)
            if candidate_gini < best_gini:
                best_gini, best_value = candidate_gini, value + delta
        if best_value != value:
            suggestions.append({
                "type": event_type.value,
                "current_points": value,
                "suggested_points": best_value,
                "new_gini": best_gini,
            })

    suggestions.sort(key=lambda s: s["new_gini"])
    return suggestions
