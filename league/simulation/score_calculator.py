"""Fantasy scores for a simulated draft over a historical season."""
from league.engine.catalog import resolve_points

from .types import CastawayScore, DraftResult, PlayerScore, SimSeason, SimulationResult


def castaway_points(season: SimSeason, castaway_id: str, points: dict) -> int:
    return sum(points[e.type] for e in season.events if e.castaway_id == castaway_id)


def _breakdown(season: SimSeason, castaway_id: str, points: dict) -> tuple[int, dict[str, int]]:
    total = 0
    breakdown: dict[str, int] = {}
    for event in season.events_for(castaway_id):
        value = points[event.type]
        total += value
        breakdown[event.type.value] = breakdown.get(event.type.value, 0) + value
    return total, breakdown


def calculate_castaway_scores(season: SimSeason, overrides: dict | None = None) -> list[dict]:
    """Season totals for every castaway under the override-merged point table."""
    points = resolve_points(overrides)
    scores = []
    for castaway in season.castaways:
        total, breakdown = _breakdown(season, castaway.id, points)
        scores.append({
            "id": castaway.id,
            "name": castaway.name,
            "placement": castaway.placement,
            "total_points": total,
            "breakdown": breakdown,
        })
    return scores


def calculate_scores(
    season: SimSeason, draft: DraftResult, overrides: dict | None = None
) -> SimulationResult:
    points = resolve_points(overrides)
    names = {c.id: c.name for c in season.castaways}

    scores: list[PlayerScore] = []
    for player_index, castaway_ids in draft.teams.items():
        castaways = []
        by_episode: dict[int, int] = {}
        for castaway_id in castaway_ids:
            total, breakdown = _breakdown(season, castaway_id, points)
            castaways.append(CastawayScore(
                id=castaway_id,
                name=names.get(castaway_id, castaway_id),
                score=total,
                event_breakdown=breakdown,
            ))
            for event in season.events_for(castaway_id):
                by_episode[event.episode] = by_episode.get(event.episode, 0) + points[event.type]

        scores.append(PlayerScore(
            player_index=player_index,
            total_score=sum(c.score for c in castaways),
            castaways=castaways,
            score_by_episode=dict(sorted(by_episode.items())),
        ))

    rankings = [s.player_index for s in sorted(scores, key=lambda s: s.total_score, reverse=True)]
    return SimulationResult(season=season.season, draft=draft, scores=scores, rankings=rankings)
