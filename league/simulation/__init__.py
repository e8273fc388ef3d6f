from .types import (
    DraftConfig,
    DraftResult,
    MonteCarloConfig,
    PinnedPicks,
    SimCastaway,
    SimEvent,
    SimSeason,
    SimulationResult,
)
from .loader import clear_cache, get_available_seasons, load_all_seasons, load_season
from .score_calculator import calculate_castaway_scores, calculate_scores
from .draft_simulator import simulate_draft
from .balance import analyze_balance, gini, pearson_correlation, suggest_adjustments
from .monte_carlo import build_histogram, run_monte_carlo
from .explore import (
    aggregate_season_scoring,
    build_cross_season_leaderboard,
    build_event_trend_data,
    build_player_index,
)

__all__ = [
    "DraftConfig",
    "DraftResult",
    "MonteCarloConfig",
    "PinnedPicks",
    "SimCastaway",
    "SimEvent",
    "SimSeason",
    "SimulationResult",
    "aggregate_season_scoring",
    "analyze_balance",
    "build_cross_season_leaderboard",
    "build_event_trend_data",
    "build_histogram",
    "build_player_index",
    "calculate_castaway_scores",
    "calculate_scores",
    "clear_cache",
    "get_available_seasons",
    "gini",
    "load_all_seasons",
    "load_season",
    "pearson_correlation",
    "run_monte_carlo",
    "simulate_draft",
    "suggest_adjustments",
]
