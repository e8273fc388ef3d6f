"""Season exploration -- scoring stats across historical seasons.

Everything here is read-only over loaded seasons: per-season breakdowns,
a cross-season castaway leaderboard, category trends and a player index
that follows a castaway id across every season they played.
"""
from statistics import median

from league.engine.catalog import EventType, resolve_points

from .score_calculator import calculate_castaway_scores
from .types import SimSeason

# Coarser than the catalog categories; used only for season-over-season trends.
TREND_CATEGORIES = {
    "Challenges": (
        EventType.INDIVIDUAL_IMMUNITY_WIN,
        EventType.REWARD_CHALLENGE_WIN,
        EventType.TEAM_CHALLENGE_WIN,
        EventType.FIRE_MAKING_WIN,
    ),
    "Tribal": (
        EventType.CORRECT_VOTE,
        EventType.ZERO_VOTES_RECEIVED,
        EventType.SURVIVED_WITH_VOTES,
        EventType.CAUSED_BLINDSIDE,
    ),
    "Idols": (EventType.IDOL_FIND, EventType.IDOL_PLAY_SUCCESS),
    "Endgame": (EventType.MADE_JURY, EventType.FINALIST, EventType.WINNER),
    "Penalties": (EventType.VOTED_OUT_WITH_IDOL, EventType.QUIT),
}

LEADERBOARD_SIZE = 50


def _episode_points(season: SimSeason, points: dict) -> dict[str, dict[int, int]]:
    """castaway id -> episode -> points earned in that episode."""
    by_castaway: dict[str, dict[int, int]] = {}
    for event in season.events:
        episodes = by_castaway.setdefault(event.castaway_id, {})
        episodes[event.episode] = episodes.get(event.episode, 0) + points[event.type]
    return by_castaway


def _cumulative(episodes: dict[int, int]) -> list[dict]:
    running = 0
    trend = []
    for episode in sorted(episodes):
        running += episodes[episode]
        trend.append({"episode": episode, "points": running})
    return trend


def castaway_trends(season: SimSeason, overrides: dict | None = None) -> list[dict]:
    """Running totals per episode, one row per episode keyed by castaway name."""
    by_castaway = _episode_points(season, resolve_points(overrides))
    episodes = sorted({event.episode for event in season.events})

    running = {c.id: 0 for c in season.castaways}
    rows = []
    for episode in episodes:
        row = {"episode": episode}
        for castaway in season.castaways:
            running[castaway.id] += by_castaway.get(castaway.id, {}).get(episode, 0)
            row[castaway.name or castaway.id] = running[castaway.id]
        rows.append(row)
    return rows


# ---------------------------------------------------------------------------
# aggregate_season_scoring
# ---------------------------------------------------------------------------

def aggregate_season_scoring(season: SimSeason, overrides: dict | None = None) -> dict:
    points = resolve_points(overrides)
    castaways = calculate_castaway_scores(season, overrides)
    scores = [c["total_points"] for c in castaways]
    season_total = sum(scores)

    counts: dict[EventType, int] = {}
    earned: dict[EventType, int] = {}
    for event in season.events:
        counts[event.type] = counts.get(event.type, 0) + 1
        earned[event.type] = earned.get(event.type, 0) + points[event.type]

    breakdown = [
        {
            "type": event_type.value,
            "count": counts[event_type],
            "total_points": earned[event_type],
            "percentage": round(earned[event_type] / season_total, 4) if season_total > 0 else 0,
        }
        for event_type in points
        if counts.get(event_type)
    ]
    breakdown.sort(key=lambda item: item["total_points"], reverse=True)

    return {
        "season": season.season,
        "name": season.name,
        "num_castaways": season.num_castaways,
        "num_episodes": season.num_episodes,
        "stats": {
            "avg_points": round(season_total / len(scores), 2) if scores else 0,
            "median_points": round(median(scores), 2) if scores else 0,
            "top_points": max(scores, default=0),
            "bottom_points": min(scores, default=0),
            "event_type_breakdown": breakdown,
        },
        "castaways": sorted(castaways, key=lambda c: c["total_points"], reverse=True),
        "castaway_trends": castaway_trends(season, overrides),
    }


# ---------------------------------------------------------------------------
# Cross-season views
# ---------------------------------------------------------------------------

def build_cross_season_leaderboard(
    seasons: list[SimSeason], overrides: dict | None = None, top_n: int = LEADERBOARD_SIZE
) -> list[dict]:
    """Best single-season castaway performances across *seasons*."""
    entries = []
    for season in seasons:
        for castaway in calculate_castaway_scores(season, overrides):
            entries.append({
                "name": castaway["name"],
                "season": season.season,
                "season_name": season.name,
                "placement": castaway["placement"],
                "total_points": castaway["total_points"],
                "breakdown": castaway["breakdown"],
            })
    entries.sort(key=lambda e: e["total_points"], reverse=True)
    return entries[:top_n]


def build_event_trend_data(seasons: list[SimSeason], overrides: dict | None = None) -> list[dict]:
    """Percent of each season's points contributed by each trend category."""
    points = resolve_points(overrides)
    trends = []
    for season in sorted(seasons, key=lambda s: s.season):
        by_category = dict.fromkeys(TREND_CATEGORIES, 0)
        total = 0
        for event in season.events:
            value = points[event.type]
            total += value
            for category, types in TREND_CATEGORIES.items():
                if event.type in types:
                    by_category[category] += value
                    break

        entry = {"season": season.season}
        for category, value in by_category.items():
            entry[category] = round(value / total * 100, 1) if total > 0 else 0
        trends.append(entry)
    return trends


def build_player_index(seasons: list[SimSeason], overrides: dict | None = None) -> list[dict]:
    """One profile per castaway id with every season appearance and career totals.

    Returned by career points, highest first; appearances are in season order.
    """
    points = resolve_points(overrides)
    profiles: dict[str, dict] = {}

    for season in seasons:
        castaways = {c.id: c for c in season.castaways}
        by_castaway = _episode_points(season, points)

        for scored in calculate_castaway_scores(season, overrides):
            castaway = castaways[scored["id"]]
            appearance = {
                "season": season.season,
                "season_name": season.name,
                "placement": castaway.placement,
                "is_winner": castaway.is_winner,
                "is_finalist": castaway.is_finalist,
                "is_jury": castaway.is_jury,
                "total_points": scored["total_points"],
                "breakdown": scored["breakdown"],
                "episode_trends": _cumulative(by_castaway.get(castaway.id, {})),
            }

            profile = profiles.get(castaway.id)
            if profile is None:
                profiles[castaway.id] = {
                    "id": castaway.id,
                    "name": scored["name"],
                    "seasons": [appearance],
                    "career_points": scored["total_points"],
                    "seasons_played": 1,
                    "best_placement": castaway.placement,
                }
                continue
            profile["seasons"].append(appearance)
            profile["career_points"] += scored["total_points"]
            profile["seasons_played"] += 1
            profile["best_placement"] = min(profile["best_placement"], castaway.placement)

    for profile in profiles.values():
        profile["seasons"].sort(key=lambda a: a["season"])
    return sorted(profiles.values(), key=lambda p: p["career_points"], reverse=True)
