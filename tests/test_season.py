"""Season setup: contestants, tribes, memberships, episodes, readiness, calendar."""
from datetime import datetime, timedelta, timezone

import pytest

from league.config import settings
from league.engine.season import current_week


# -- Helpers -------------------------------------------------------------------

async def _register(client, username):
    resp = await client.post("/api/auth/register", json={
        "username": username,
        "password": "pass123",
    })
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


# -- Calendar ------------------------------------------------------------------------

def test_current_week(monkeypatch):
    premiere = datetime(2025, 2, 26, 20, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(settings, "SEASON_PREMIERE", premiere)
    monkeypatch.setattr(settings, "MAX_WEEK", 14)

    assert current_week(premiere - timedelta(days=30)) == 1
    assert current_week(premiere) == 1
    assert current_week(premiere + timedelta(days=6, hours=23)) == 1
    assert current_week(premiere + timedelta(days=7)) == 2
    assert current_week(premiere + timedelta(days=365)) == 14
    # naive datetimes are read as UTC
    assert current_week(datetime(2025, 3, 12, 21, 0)) == 3


# -- Contestants -----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_contestant_crud(client):
    admin = await _register(client, "admin")
    player = await _register(client, "player")

    resp = await client.post("/api/contestants", json={"name": "Tony", "nickname": "Cop"}, headers=player)
    assert resp.status_code == 403

    resp = await client.post("/api/contestants", json={
        "name": "Tony", "nickname": "Cop", "original_seasons": "28, 40",
    }, headers=admin)
    assert resp.status_code == 201
    tony = resp.json()
    assert tony["is_eliminated"] is False

    resp = await client.patch(f"/api/contestants/{tony['id']}", json={
        "is_eliminated": True, "eliminated_week": 3,
    }, headers=admin)
    assert resp.json()["eliminated_week"] == 3

    await client.post("/api/contestants", json={"name": "Sarah"}, headers=admin)
    everyone = (await client.get("/api/contestants", headers=player)).json()
    assert [c["name"] for c in everyone] == ["Sarah", "Tony"]
    active = (await client.get("/api/contestants?active_only=true", headers=player)).json()
    assert [c["name"] for c in active] == ["Sarah"]

    assert (await client.delete(f"/api/contestants/{tony['id']}", headers=admin)).status_code == 200
    assert (await client.get(f"/api/contestants/{tony['id']}", headers=admin)).status_code == 404


# -- Tribes and memberships ----------------------------------------------------------------

@pytest.mark.asyncio
async def test_tribes(client):
    admin = await _register(client, "admin")
    resp = await client.post("/api/tribes", json={"name": "Kele", "color": "#ff0000"}, headers=admin)
    assert resp.status_code == 201
    tribe_id = resp.json()["id"]

    resp = await client.post("/api/tribes", json={"name": "Kele"}, headers=admin)
    assert resp.status_code == 409

    resp = await client.patch(f"/api/tribes/{tribe_id}", json={"color": "#00ff00"}, headers=admin)
    assert resp.json()["color"] == "#00ff00"

    assert (await client.delete(f"/api/tribes/{tribe_id}", headers=admin)).status_code == 200
    assert (await client.get("/api/tribes", headers=admin)).json() == []


@pytest.mark.asyncio
async def test_tribe_swap_closes_previous_membership(client):
    admin = await _register(client, "admin")
    cid = (await client.post("/api/contestants", json={"name": "Tony"}, headers=admin)).json()["id"]
    first = (await client.post("/api/tribes", json={"name": "Luzon"}, headers=admin)).json()["id"]
    second = (await client.post("/api/tribes", json={"name": "Merge"}, headers=admin)).json()["id"]

    resp = await client.post("/api/tribe-memberships", json={
        "contestant_id": cid, "tribe_id": first, "from_week": 1,
    }, headers=admin)
    assert resp.status_code == 201
    resp = await client.post("/api/tribe-memberships", json={
        "contestant_id": cid, "tribe_id": second, "from_week": 7,
    }, headers=admin)
    assert resp.status_code == 201

    memberships = (await client.get(f"/api/tribe-memberships?contestant_id={cid}", headers=admin)).json()
    assert [(m["tribe"]["name"], m["from_week"], m["to_week"]) for m in memberships] == [
        ("Luzon", 1, 6),
        ("Merge", 7, None),
    ]
    tony = (await client.get(f"/api/contestants/{cid}", headers=admin)).json()
    assert tony["tribe"] == "Merge"

    tribes = {t["name"]: t["member_count"] for t in (await client.get("/api/tribes", headers=admin)).json()}
    assert tribes == {"Luzon": 0, "Merge": 1}

    resp = await client.post("/api/tribe-memberships", json={
        "contestant_id": 999, "tribe_id": first,
    }, headers=admin)
    assert resp.status_code == 404


# -- Episodes and readiness ------------------------------------------------------------------

@pytest.mark.asyncio
async def test_episodes(client):
    admin = await _register(client, "admin")
    resp = await client.post("/api/episodes", json={
        "number": 1, "title": "Premiere", "air_date": "2025-02-26T20:00:00",
    }, headers=admin)
    assert resp.status_code == 201
    episode_id = resp.json()["id"]
    assert (await client.post("/api/episodes", json={"number": 1}, headers=admin)).status_code == 409

    await client.post("/api/episodes", json={"number": 2}, headers=admin)
    resp = await client.patch(f"/api/episodes/{episode_id}", json={"title": "Day One"}, headers=admin)
    assert resp.json()["title"] == "Day One"

    episodes = (await client.get("/api/episodes", headers=admin)).json()
    assert [e["number"] for e in episodes] == [1, 2]
    assert (await client.delete(f"/api/episodes/{episode_id}", headers=admin)).status_code == 200


@pytest.mark.asyncio
async def test_season_readiness(client):
    admin = await _register(client, "admin")
    resp = await client.get("/api/season-readiness", headers=admin)
    assert resp.status_code == 200
    assert resp.json()["is_ready"] is False

    cid = (await client.post("/api/contestants", json={"name": "Tony"}, headers=admin)).json()["id"]
    await client.post("/api/contestants", json={"name": "Sarah"}, headers=admin)
    await client.post("/api/episodes", json={"number": 1}, headers=admin)
    tribe = (await client.post("/api/tribes", json={"name": "Luzon"}, headers=admin)).json()["id"]
    await client.post("/api/tribe-memberships", json={"contestant_id": cid, "tribe_id": tribe}, headers=admin)

    data = (await client.get("/api/season-readiness", headers=admin)).json()
    assert data["is_ready"] is True
    assert data["checks"] == {
        "has_contestants": True,
        "has_tribes": True,
        "all_contestants_assigned": False,
        "has_episodes": True,
    }
    assert data["details"]["unassigned_count"] == 1

    player = await _register(client, "player")
    assert (await client.get("/api/season-readiness", headers=player)).status_code == 403


# -- Catalog ------------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_catalog_endpoint(client):
    resp = await client.get("/api/catalog")
    assert resp.status_code == 200
    data = resp.json()
    points = {t["type"]: t["points"] for t in data["event_types"]}
    assert points["WINNER"] == 20
    assert len(points) == 15
    assert "Deductions" in data["categories"]
    assert {g["type"] for g in data["game_event_types"]} >= {"TRIBAL_COUNCIL", "IDOL_PLAYED"}


@pytest.mark.asyncio
async def test_current_week_endpoint(client):
    resp = await client.get("/api/season/current-week")
    assert resp.status_code == 200
    assert 1 <= resp.json()["week"] <= resp.json()["max_week"]
