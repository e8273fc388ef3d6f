"""Simulation endpoints -- point-scheme previews, single drafts, Monte Carlo batches
and season exploration.

Handlers are plain ``def`` so FastAPI runs the CPU-bound simulation in its
threadpool instead of on the event loop.
"""
import logging
from dataclasses import asdict
from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from league.auth.deps import get_current_user, require_admin
from league.config import settings
from league.api import to_http
from league.errors import LeagueError
from league.models.user import User
from league.simulation import (
    DraftConfig,
    MonteCarloConfig,
    PinnedPicks,
    SimSeason,
    aggregate_season_scoring,
    analyze_balance,
    build_cross_season_leaderboard,
    build_event_trend_data,
    build_histogram,
    build_player_index,
    calculate_castaway_scores,
    calculate_scores,
    get_available_seasons,
    load_all_seasons,
    load_season,
    run_monte_carlo,
    simulate_draft,
    suggest_adjustments,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


class DraftSettings(BaseModel):
    players: int = Field(default_factory=lambda: settings.SIM_NUM_PLAYERS, ge=1)
    picks_per_player: int = Field(default_factory=lambda: settings.SIM_PICKS_PER_PLAYER, ge=1)
    max_owners: int = Field(default_factory=lambda: settings.SIM_MAX_OWNERS, ge=1)
    overrides: dict[str, int] = {}

    def draft_config(self, **extra) -> DraftConfig:
        return DraftConfig(
            num_players=self.players,
            picks_per_player=self.picks_per_player,
            max_owners_per_contestant=self.max_owners,
            **extra,
        )


class PreviewRequest(BaseModel):
    season: int
    overrides: dict[str, int] = {}


class RunRequest(DraftSettings):
    season: int
    mode: Literal["random", "manual", "hybrid"] = "random"
    manual_picks: dict[int, list[str]] = {}


class PinnedPicksRequest(BaseModel):
    player_index: int = Field(ge=0)
    castaway_ids: list[str]


class BatchRequest(DraftSettings):
    season: Union[int, Literal["all"]]
    sims: int = Field(default_factory=lambda: settings.SIM_NUM_SIMULATIONS, ge=1)
    pinned_picks: Optional[PinnedPicksRequest] = None


class Scheme(BaseModel):
    label: Optional[str] = None
    overrides: dict[str, int] = {}


class CompareRequest(DraftSettings):
    season: int
    sims: int = Field(default_factory=lambda: settings.SIM_NUM_SIMULATIONS, ge=1)
    scheme_a: Scheme
    scheme_b: Scheme


class ExploreRequest(BaseModel):
    seasons: Union[Literal["all"], list[int]]
    overrides: dict[str, int] = {}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_sims(sims: int) -> None:
    if sims > settings.SIM_MAX_SIMULATIONS:
        raise HTTPException(
            status_code=400,
            detail=f"sims must be at most {settings.SIM_MAX_SIMULATIONS}",
        )


def _monte_carlo(season: SimSeason, req: DraftSettings, sims: int, overrides: dict,
                 pinned: Optional[PinnedPicksRequest] = None) -> dict:
    config = MonteCarloConfig(
        num_simulations=sims,
        draft_config=req.draft_config(),
        overrides=overrides,
        pinned_picks=PinnedPicks(pinned.player_index, pinned.castaway_ids) if pinned else None,
    )
    return run_monte_carlo(season, config)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/seasons")
def list_seasons(_user: User = Depends(get_current_user)):
    return {"seasons": get_available_seasons()}


@router.post("/preview")
def preview(req: PreviewRequest, _user: User = Depends(get_current_user)):
    """Season totals for every castaway under a point scheme."""
    try:
        season = load_season(req.season)
        castaways = calculate_castaway_scores(season, req.overrides)
    except LeagueError as exc:
        raise to_http(exc)
    castaways.sort(key=lambda c: c["total_points"], reverse=True)
    return {"season": season.summary(), "castaways": castaways}


@router.post("/run")
def run(req: RunRequest, _user: User = Depends(get_current_user)):
    """One simulated draft, its scores and balance metrics."""
    try:
        season = load_season(req.season)
        draft = simulate_draft(
            season,
            req.draft_config(mode=req.mode, manual_picks=req.manual_picks),
            req.overrides,
        )
        result = calculate_scores(season, draft, req.overrides)
        balance = analyze_balance(season, result, req.overrides)
        suggestions = suggest_adjustments(season, result, req.overrides)
    except LeagueError as exc:
        raise to_http(exc)
    return {
        "season": season.summary(),
        "result": asdict(result),
        "balance": balance,
        "suggestions": suggestions,
        "castaway_names": {c.id: c.name for c in season.castaways},
    }


@router.post("/batch")
def batch(req: BatchRequest, _user: User = Depends(get_current_user)):
    """Monte Carlo over one season, or every available season with ``"all"``."""
    _check_sims(req.sims)
    try:
        seasons = load_all_seasons() if req.season == "all" else [load_season(req.season)]
        results = [
            _monte_carlo(season, req, req.sims, req.overrides, req.pinned_picks)
            for season in seasons
        ]
    except LeagueError as exc:
        raise to_http(exc)

    all_scores: list[int] = []
    for result in results:
        all_scores.extend(result.pop("all_scores"))

    response = {"results": results, "score_histogram": build_histogram(all_scores)}
    if req.season == "all":
        n = len(results)
        response["cross_season"] = {
            "avg_gini": round(sum(r["balance"]["gini"] for r in results) / n, 4),
            "avg_spread": round(sum(r["balance"]["spread"] for r in results) / n, 2),
            "avg_longevity": round(
                sum(r["balance"]["longevity_correlation"] for r in results) / n, 4
            ),
        }
    log.info("Batch simulation: %d season(s) x %d sims", len(results), req.sims)
    return response


@router.post("/compare")
def compare(req: CompareRequest, _admin: User = Depends(require_admin)):
    """Monte Carlo one season under two point schemes."""
    _check_sims(req.sims)
    try:
        season = load_season(req.season)
        result_a = _monte_carlo(season, req, req.sims, req.scheme_a.overrides)
        result_b = _monte_carlo(season, req, req.sims, req.scheme_b.overrides)
    except LeagueError as exc:
        raise to_http(exc)
    for result in (result_a, result_b):
        result.pop("all_scores")
    return {
        "scheme_a": {"label": req.scheme_a.label or "Scheme A", "result": result_a},
        "scheme_b": {"label": req.scheme_b.label or "Scheme B", "result": result_b},
    }


@router.post("/explore")
def explore(req: ExploreRequest, _user: User = Depends(get_current_user)):
    """Scoring stats, leaderboard, category trends and player index across seasons."""
    if not req.seasons:
        raise HTTPException(
            status_code=400, detail='seasons must be "all" or a non-empty list of season numbers'
        )
    try:
        if req.seasons == "all":
            seasons = load_all_seasons()
        else:
            seasons = [load_season(number) for number in req.seasons]
        return {
            "seasons": [aggregate_season_scoring(s, req.overrides) for s in seasons],
            "leaderboard": build_cross_season_leaderboard(seasons, req.overrides),
            "event_trends": build_event_trend_data(seasons, req.overrides),
            "player_index": build_player_index(seasons, req.overrides),
        }
    except LeagueError as exc:
        raise to_http(exc)
