"""Simulator: season loading, drafts, scores, balance metrics and endpoints."""
import random

import pytest

from league.errors import NotFoundError, ValidationError
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
    gini,
    load_all_seasons,
    load_season,
    pearson_correlation,
    run_monte_carlo,
    simulate_draft,
    suggest_adjustments,
)


# -- Helpers -------------------------------------------------------------------

def _manual_draft(season):
    config = DraftConfig(
        num_players=2,
        picks_per_player=2,
        mode="manual",
        manual_picks={0: ["c1", "c2"], 1: ["c3", "c4"]},
    )
    return simulate_draft(season, config)


async def _headers(client, username):
    resp = await client.post("/api/auth/register", json={
        "username": username,
        "password": "pass123",
    })
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


# -- Loader -----------------------------------------------------------------------

def test_available_seasons(sim_data):
    assert get_available_seasons() == [901, 902]


def test_load_season(sim_data):
    season = load_season(901)
    assert season.name == "Test Island"
    assert season.num_castaways == 6
    assert len(season.events) == 9
    assert season.castaways[0].is_winner is True
    assert load_season(901) is season


def test_load_camel_case_season(sim_data):
    season = load_season(902)
    assert season.num_episodes == 6
    assert season.castaways[1].is_finalist is True
    assert season.events[-1].castaway_id == "a4"


def test_load_missing_season(sim_data):
    with pytest.raises(NotFoundError):
        load_season(1)


def test_load_all_seasons(sim_data):
    assert [s.season for s in load_all_seasons()] == [901, 902]


def test_no_seasons(monkeypatch, tmp_path):
    from league.config import settings
    monkeypatch.setattr(settings, "SIM_DATA_DIR", str(tmp_path / "missing"))
    assert get_available_seasons() == []
    with pytest.raises(NotFoundError):
        load_all_seasons()


# -- Scores -------------------------------------------------------------------------

def test_castaway_scores(sim_data):
    scores = {c["id"]: c for c in calculate_castaway_scores(load_season(901))}
    assert scores["c1"]["total_points"] == 35
    assert scores["c1"]["breakdown"] == {
        "INDIVIDUAL_IMMUNITY_WIN": 5, "FINALIST": 10, "WINNER": 20,
    }
    assert scores["c5"]["total_points"] == -10
    assert scores["c6"]["total_points"] == 0


def test_castaway_scores_with_overrides(sim_data):
    scores = {c["id"]: c for c in calculate_castaway_scores(load_season(901), {"WINNER": 30})}
    assert scores["c1"]["total_points"] == 45


def test_calculate_scores(sim_data):
    season = load_season(901)
    result = calculate_scores(season, _manual_draft(season))
    by_player = {s.player_index: s for s in result.scores}
    assert by_player[0].total_score == 47
    assert by_player[1].total_score == 9
    assert by_player[0].score_by_episode == {2: 2, 5: 5, 13: 40}
    assert result.rankings == [0, 1]


# -- Draft ---------------------------------------------------------------------------

def test_snake_draft_order(sim_data):
    config = DraftConfig(num_players=3, picks_per_player=2, max_owners_per_contestant=1)
    draft = simulate_draft(load_season(901), config, rng=random.Random(7))
    assert [p[2] for p in draft.picks] == [0, 1, 2, 2, 1, 0]
    assert [(p[0], p[1]) for p in draft.picks] == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]
    drafted = [cid for team in draft.teams.values() for cid in team]
    assert sorted(drafted) == ["c1", "c2", "c3", "c4", "c5", "c6"]


def test_shared_ownership_limits(sim_data):
    config = DraftConfig(num_players=5, picks_per_player=2, max_owners_per_contestant=2)
    draft = simulate_draft(load_season(901), config, rng=random.Random(3))
    counts = {}
    for team in draft.teams.values():
        assert len(team) == len(set(team))
        for cid in team:
            counts[cid] = counts.get(cid, 0) + 1
    assert all(n <= 2 for n in counts.values())
    assert sum(counts.values()) == 10


def test_not_enough_slots(sim_data):
    config = DraftConfig(num_players=7, picks_per_player=2, max_owners_per_contestant=1)
    with pytest.raises(ValidationError, match="Not enough draft slots"):
        simulate_draft(load_season(901), config)


def test_manual_draft(sim_data):
    draft = _manual_draft(load_season(901))
    assert draft.teams == {0: ["c1", "c2"], 1: ["c3", "c4"]}


def test_manual_draft_missing_picks(sim_data):
    config = DraftConfig(num_players=2, picks_per_player=1, mode="manual", manual_picks={0: ["c1"]})
    with pytest.raises(ValidationError):
        simulate_draft(load_season(901), config)


def test_hybrid_draft_falls_back_to_random(sim_data):
    config = DraftConfig(
        num_players=2, picks_per_player=2, mode="hybrid", manual_picks={1: ["c6"]},
    )
    draft = simulate_draft(load_season(901), config, rng=random.Random(11))
    assert draft.teams[1][0] == "c6"
    assert len(draft.teams[0]) == 2
    assert len(set(draft.teams[1])) == 2


def test_seeded_draft_is_reproducible(sim_data):
    season = load_season(901)
    config = DraftConfig(num_players=3, picks_per_player=2)
    a = simulate_draft(season, config, rng=random.Random(42))
    b = simulate_draft(season, config, rng=random.Random(42))
    assert a == b


# -- Balance --------------------------------------------------------------------------

def test_gini():
    assert gini([]) == 0
    assert gini([5, 5, 5]) == 0
    assert gini([0, 0, 0]) == 0
    assert gini([0, 0, 10]) == 0.6667


def test_pearson_correlation():
    assert pearson_correlation([1, 2, 3], [2, 4, 6]) == 1.0
    assert pearson_correlation([1, 2, 3], [3, 2, 1]) == -1.0
    assert pearson_correlation([1, 1, 1], [1, 2, 3]) == 0
    assert pearson_correlation([1], [1]) == 0


def test_analyze_balance(sim_data):
    season = load_season(901)
    result = calculate_scores(season, _manual_draft(season))
    balance = analyze_balance(season, result)
    assert balance["spread"] == 38
    assert balance["winner_advantage"] == 27.33
    assert balance["longevity_correlation"] > 0.5
    assert sum(balance["event_contribution"].values()) == pytest.approx(1.0, abs=1e-3)
    # QUIT counts by magnitude: 10 of the 66 absolute points
    assert balance["event_contribution"]["QUIT"] == round(10 / 66, 4)


def test_suggest_adjustments(sim_data):
    season = load_season(901)
    result = calculate_scores(season, _manual_draft(season))
    baseline = analyze_balance(season, result)["gini"]
    suggestions = suggest_adjustments(season, result)
    assert suggestions
    assert [s["new_gini"] for s in suggestions] == sorted(s["new_gini"] for s in suggestions)
    for s in suggestions:
        assert s["new_gini"] < baseline
        assert 0 < abs(s["suggested_points"] - s["current_points"]) <= 3


# -- Monte Carlo -----------------------------------------------------------------------

def test_run_monte_carlo(sim_data):
    season = load_season(901)
    config = MonteCarloConfig(
        num_simulations=20,
        draft_config=DraftConfig(num_players=3, picks_per_player=2),
    )
    result = run_monte_carlo(season, config, rng=random.Random(1))

    assert result["num_simulations"] == 20
    assert len(result["all_scores"]) == 60
    stats = result["castaway_stats"]
    assert [c["total_points"] for c in stats] == sorted(
        (c["total_points"] for c in stats), reverse=True
    )
    assert sum(c["draft_rate"] for c in stats) == pytest.approx(1.0, abs=0.01)

    dist = result["score_distribution"]
    assert dist["min"] <= dist["p25"] <= dist["median"] <= dist["p75"] <= dist["max"]
    assert "gini" in result["balance"]


def test_monte_carlo_pinned_picks(sim_data):
    season = load_season(901)
    config = MonteCarloConfig(
        num_simulations=20,
        draft_config=DraftConfig(num_players=3, picks_per_player=2),
        pinned_picks=PinnedPicks(player_index=0, castaway_ids=["c1", "c2"]),
    )
    result = run_monte_carlo(season, config, rng=random.Random(5))
    stats = {c["id"]: c for c in result["castaway_stats"]}
    # drafted by player 0 in every run
    assert stats["c1"]["draft_rate"] >= 0.166
    assert stats["c2"]["draft_rate"] >= 0.166


def test_monte_carlo_bad_pinned_player(sim_data):
    config = MonteCarloConfig(
        num_simulations=1,
        draft_config=DraftConfig(num_players=2, picks_per_player=1),
        pinned_picks=PinnedPicks(player_index=5, castaway_ids=["c1"]),
    )
    with pytest.raises(ValidationError):
        run_monte_carlo(load_season(901), config)


def test_build_histogram():
    assert build_histogram([]) == []
    assert build_histogram([10, 10, 10]) == [{"bin_start": 10, "bin_end": 11, "count": 3}]
    bins = build_histogram([0, 5, 10, 100], bins=10)
    assert bins == [
        {"bin_start": 0, "bin_end": 10, "count": 2},
        {"bin_start": 10, "bin_end": 20, "count": 1},
        {"bin_start": 90, "bin_end": 100, "count": 1},
    ]


# -- Exploration -------------------------------------------------------------------------

def test_aggregate_season_scoring(sim_data):
    summary = aggregate_season_scoring(load_season(901))
    stats = summary["stats"]
    assert summary["name"] == "Test Island"
    assert stats["avg_points"] == 7.67
    assert stats["median_points"] == 4.5
    assert (stats["top_points"], stats["bottom_points"]) == (35, -10)

    breakdown = stats["event_type_breakdown"]
    assert breakdown[0] == {
        "type": "FINALIST", "count": 2, "total_points": 20, "percentage": 0.4348,
    }
    assert breakdown[-1]["type"] == "QUIT"
    assert [c["id"] for c in summary["castaways"]][:2] == ["c1", "c2"]

    trends = summary["castaway_trends"]
    assert [row["episode"] for row in trends] == [2, 3, 4, 5, 10, 13]
    assert trends[0]["Ben"] == 2 and trends[0]["Ana"] == 0
    assert trends[-1]["Ana"] == 35 and trends[-1]["Eli"] == -10


def test_cross_season_leaderboard(sim_data):
    board = build_cross_season_leaderboard(load_all_seasons(), top_n=3)
    assert [(e["name"], e["season"], e["total_points"]) for e in board] == [
        ("Ana", 901, 35),
        ("Gus", 902, 33),
        ("Ben", 901, 12),
    ]
    assert board[1]["season_name"] == "Camel Case Cove"


def test_event_trend_data(sim_data):
    trends = build_event_trend_data(list(reversed(load_all_seasons())))
    assert [t["season"] for t in trends] == [901, 902]
    assert trends[0] == {
        "season": 901,
        "Challenges": 10.9,
        "Tribal": 6.5,
        "Idols": 6.5,
        "Endgame": 97.8,
        "Penalties": -21.7,
    }


def test_player_index_follows_returning_castaway():
    first = SimSeason.from_dict({
        "season": 1, "name": "Borneo",
        "castaways": [{"id": "rh", "name": "Rich", "placement": 1, "isWinner": True}],
        "events": [{"type": "WINNER", "castawayId": "rh", "episode": 13}],
    })
    second = SimSeason.from_dict({
        "season": 8, "name": "All-Stars",
        "castaways": [
            {"id": "rh", "name": "Rich", "placement": 18},
            {"id": "am", "name": "Amber", "placement": 1, "isWinner": True},
        ],
        "events": [
            {"type": "QUIT", "castawayId": "rh", "episode": 1},
            {"type": "CORRECT_VOTE", "castawayId": "am", "episode": 2},
            {"type": "WINNER", "castawayId": "am", "episode": 14},
        ],
    })

    index = build_player_index([second, first])
    assert [p["id"] for p in index] == ["am", "rh"]
    rich = index[1]
    assert rich["seasons_played"] == 2
    assert rich["career_points"] == 10
    assert rich["best_placement"] == 1
    assert [a["season"] for a in rich["seasons"]] == [1, 8]
    assert rich["seasons"][0]["is_winner"] is True
    assert index[0]["seasons"][0]["episode_trends"] == [
        {"episode": 2, "points": 2},
        {"episode": 14, "points": 22},
    ]


# -- Endpoints ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_seasons_endpoint(client, sim_data):
    headers = await _headers(client, "simadmin")
    resp = await client.get("/api/simulation/seasons", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"seasons": [901, 902]}


@pytest.mark.asyncio
async def test_simulation_requires_auth(client, sim_data):
    resp = await client.get("/api/simulation/seasons")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_preview_endpoint(client, sim_data):
    headers = await _headers(client, "simadmin")
    resp = await client.post("/api/simulation/preview", json={"season": 901}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["season"]["name"] == "Test Island"
    assert data["castaways"][0]["id"] == "c1"
    assert data["castaways"][-1]["id"] == "c5"

    resp = await client.post("/api/simulation/preview", json={"season": 5}, headers=headers)
    assert resp.status_code == 404

    resp = await client.post(
        "/api/simulation/preview",
        json={"season": 901, "overrides": {"BEST_HAIR": 2}},
        headers=headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_run_endpoint(client, sim_data):
    headers = await _headers(client, "simadmin")
    resp = await client.post("/api/simulation/run", json={
        "season": 901, "players": 3, "picks_per_player": 2,
    }, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["result"]["scores"]) == 3
    assert data["castaway_names"]["c1"] == "Ana"
    assert "gini" in data["balance"]

    resp = await client.post("/api/simulation/run", json={
        "season": 901, "players": 10, "picks_per_player": 2, "max_owners": 1,
    }, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_batch_all_seasons(client, sim_data):
    headers = await _headers(client, "simadmin")
    resp = await client.post("/api/simulation/batch", json={
        "season": "all", "sims": 10, "players": 2, "picks_per_player": 2,
    }, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert [r["season"] for r in data["results"]] == [901, 902]
    assert "all_scores" not in data["results"][0]
    assert sum(b["count"] for b in data["score_histogram"]) == 2 * 10 * 2
    assert set(data["cross_season"]) == {"avg_gini", "avg_spread", "avg_longevity"}


@pytest.mark.asyncio
async def test_batch_caps_simulations(client, sim_data):
    headers = await _headers(client, "simadmin")
    resp = await client.post("/api/simulation/batch", json={
        "season": 901, "sims": 10_000_000,
    }, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_compare_is_admin_only(client, sim_data):
    admin = await _headers(client, "simadmin")
    member = await _headers(client, "simmember")
    body = {
        "season": 901, "sims": 5, "players": 2, "picks_per_player": 2,
        "scheme_a": {"overrides": {}},
        "scheme_b": {"label": "Big winner", "overrides": {"WINNER": 40}},
    }
    resp = await client.post("/api/simulation/compare", json=body, headers=member)
    assert resp.status_code == 403

    resp = await client.post("/api/simulation/compare", json=body, headers=admin)
    assert resp.status_code == 200
    data = resp.json()
    assert data["scheme_a"]["label"] == "Scheme A"
    assert data["scheme_b"]["label"] == "Big winner"
    totals = {c["id"]: c["total_points"] for c in data["scheme_b"]["result"]["castaway_stats"]}
    assert totals["c1"] == 55


@pytest.mark.asyncio
async def test_explore_endpoint(client, sim_data):
    headers = await _headers(client, "simadmin")
    resp = await client.post("/api/simulation/explore", json={"seasons": "all"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert [s["season"] for s in data["seasons"]] == [901, 902]
    assert data["leaderboard"][0]["name"] == "Ana"
    assert [t["season"] for t in data["event_trends"]] == [901, 902]
    assert len(data["player_index"]) == 10

    resp = await client.post("/api/simulation/explore", json={
        "seasons": [902], "overrides": {"WINNER": 40},
    }, headers=headers)
    assert resp.json()["leaderboard"][0] == {
        "name": "Gus", "season": 902, "season_name": "Camel Case Cove", "placement": 1,
        "total_points": 53,
        "breakdown": {"REWARD_CHALLENGE_WIN": 3, "WINNER": 40, "FINALIST": 10},
    }

    resp = await client.post("/api/simulation/explore", json={"seasons": []}, headers=headers)
    assert resp.status_code == 400
    resp = await client.post("/api/simulation/explore", json={"seasons": [5]}, headers=headers)
    assert resp.status_code == 404
