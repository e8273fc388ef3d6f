"""Monte Carlo runs -- many random drafts of one season under one point scheme."""
import logging
import math
import random
from dataclasses import replace

from league.errors import ValidationError

from .balance import analyze_balance
from .draft_simulator import simulate_draft
from .score_calculator import calculate_castaway_scores, calculate_scores
from .types import MonteCarloConfig, SimSeason, SimulationResult

log = logging.getLogger(__name__)


def _distribution(scores: list[int]) -> dict:
    ordered = sorted(scores)
    n = len(ordered)
    mean = sum(ordered) / n
    variance = sum((s - mean) ** 2 for s in ordered) / n
    return {
        "mean": round(mean, 2),
        "median": ordered[n // 2],
        "std_dev": round(math.sqrt(variance), 2),
        "min": ordered[0],
        "max": ordered[-1],
        "p25": ordered[int(n * 0.25)],
        "p75": ordered[int(n * 0.75)],
    }


def run_monte_carlo(
    season: SimSeason, config: MonteCarloConfig, rng: random.Random | None = None
) -> dict:
    if config.num_simulations < 1:
        raise ValidationError("num_simulations must be at least 1")
    r = rng or random.Random()

    draft_config = config.draft_config
    if config.pinned_picks is not None:
        pinned = config.pinned_picks
        if not 0 <= pinned.player_index < draft_config.num_players:
            raise ValidationError("Pinned player index is out of range")
        draft_config = replace(
            draft_config,
            mode="hybrid",
            manual_picks={pinned.player_index: list(pinned.castaway_ids)},
        )

    draft_counts: dict[str, int] = {}
    team_ranks: dict[str, list[int]] = {}
    all_scores: list[int] = []
    last: SimulationResult | None = None

    for _ in range(config.num_simulations):
        draft = simulate_draft(season, draft_config, config.overrides, rng=r)
        last = calculate_scores(season, draft, config.overrides)

        for castaway_ids in draft.teams.values():
            for cid in castaway_ids:
                draft_counts[cid] = draft_counts.get(cid, 0) + 1

        for score in last.scores:
            rank = last.rankings.index(score.player_index) + 1
            all_scores.append(score.total_score)
            for castaway in score.castaways:
                team_ranks.setdefault(castaway.id, []).append(rank)

    total_slots = draft_config.num_players * draft_config.picks_per_player * config.num_simulations
    castaway_stats = []
    for entry in calculate_castaway_scores(season, config.overrides):
        ranks = team_ranks.get(entry["id"], [])
        castaway_stats.append({
            "id": entry["id"],
            "name": entry["name"],
            "total_points": entry["total_points"],
            "avg_team_rank": round(sum(ranks) / len(ranks), 2) if ranks else 0,
            "draft_rate": round(draft_counts.get(entry["id"], 0) / total_slots, 3),
        })
    castaway_stats.sort(key=lambda c: c["total_points"], reverse=True)

    log.info(
        "Monte Carlo: season %d, %d simulations, %d players x %d picks",
        season.season, config.num_simulations,
        draft_config.num_players, draft_config.picks_per_player,
    )
    return {
        "season": season.season,
        "num_simulations": config.num_simulations,
        "num_players": draft_config.num_players,
        "picks_per_player": draft_config.picks_per_player,
        "castaway_stats": castaway_stats,
        "score_distribution": _distribution(all_scores),
        "balance": analyze_balance(season, last, config.overrides),
        "all_scores": all_scores,
    }


def build_histogram(scores: list[int], bins: int = 20) -> list[dict]:
    """Bucket team scores into at most *bins* integer-width bins.

    Empty bins are dropped.
    """
    if not scores:
        return []
    if bins < 1:
        raise ValidationError("bins must be at least 1")
    low, high = min(scores), max(scores)
    width = max(1, math.ceil((high - low) / bins))

    counts = [0] * bins
    for score in scores:
        counts[min(int((score - low) // width), bins - 1)] += 1
    return [
        {"bin_start": low + i * width, "bin_end": low + (i + 1) * width, "count": count}
        for i, count in enumerate(counts)
        if count > 0
    ]
