"""Snake draft: turn order, pick validation and serialization of concurrent picks."""
import pytest
from sqlalchemy import update

from league.engine.draft import (
    current_turn_index,
    get_latest_draft,
    initialize_draft,
    make_pick,
    round_for_pick,
    snake_order,
)
from league.errors import ConflictError, ValidationError
from league.models.contestant import Contestant
from league.models.draft import Draft
from league.models.user import User


# -- Helpers -------------------------------------------------------------------

async def _register(client, username):
    resp = await client.post("/api/auth/register", json={
        "username": username,
        "password": "pass123",
    })
    data = resp.json()
    return data["user_id"], {"Authorization": f"Bearer {data['access_token']}"}


async def _cast(client, headers, *names):
    ids = []
    for name in names:
        resp = await client.post("/api/contestants", json={"name": name}, headers=headers)
        ids.append(resp.json()["id"])
    return ids


async def _setup(client, players=3):
    users = [await _register(client, f"player{i}") for i in range(players)]
    admin = users[0][1]
    cast = await _cast(client, admin, "Ana", "Ben", "Cleo", "Dev", "Eli", "Fay", "Gus")
    order = [uid for uid, _ in users]
    resp = await client.post("/api/draft", json={
        "action": "initialize", "draft_order": order, "picks_per_player": 2,
    }, headers=admin)
    assert resp.status_code == 200
    return users, cast


async def _pick(client, headers, contestant_id):
    return await client.post("/api/draft", json={
        "action": "pick", "contestant_id": contestant_id,
    }, headers=headers)


# -- Turn order --------------------------------------------------------------------

def test_current_turn_index_snakes():
    # 3 players: round 1 forward, round 2 backward, round 3 forward
    turns = [current_turn_index(3, pick, round_for_pick(pick, 3)) for pick in range(1, 10)]
    assert turns == [0, 1, 2, 2, 1, 0, 0, 1, 2]


def test_snake_order():
    assert snake_order(2, 3) == [0, 1, 1, 0, 0, 1]
    assert snake_order(1, 2) == [0, 0]


def test_current_turn_index_empty_order():
    with pytest.raises(ValidationError):
        current_turn_index(0, 1, 1)


# -- Endpoints ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_not_started(client):
    _, headers = await _register(client, "host")
    resp = await client.get("/api/draft", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "not_started"

    resp = await _pick(client, headers, 1)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_initialize_requires_admin(client):
    host_id, _ = await _register(client, "host")
    player_id, player = await _register(client, "player")
    resp = await client.post("/api/draft", json={
        "action": "initialize", "draft_order": [host_id, player_id],
    }, headers=player)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_initialize_validation(client):
    host_id, host = await _register(client, "host")
    for order in ([], [host_id, host_id], [host_id, 999]):
        resp = await client.post("/api/draft", json={
            "action": "initialize", "draft_order": order,
        }, headers=host)
        assert resp.status_code == 400


@pytest.mark.asyncio
async def test_full_snake_draft(client):
    users, cast = await _setup(client)
    headers = {uid: h for uid, h in users}
    order = [uid for uid, _ in users]
    expected_turns = [order[0], order[1], order[2], order[2], order[1], order[0]]

    for pick_number, (user_id, contestant_id) in enumerate(zip(expected_turns, cast), start=1):
        state = (await client.get("/api/draft", headers=headers[user_id])).json()
        assert state["status"] == "in_progress"
        assert state["current_pick"] == pick_number
        assert state["current_user_id"] == user_id

        resp = await _pick(client, headers[user_id], contestant_id)
        assert resp.status_code == 200
        assert resp.json()["pick"] == pick_number

    assert resp.json()["is_complete"] is True
    state = (await client.get("/api/draft", headers=headers[order[0]])).json()
    assert state["status"] == "complete"
    assert state["current_user_id"] is None
    picks = {p["user_id"]: [c["id"] for c in p["picks"]] for p in state["draft_order"]}
    assert picks == {
        order[0]: [cast[0], cast[5]],
        order[1]: [cast[1], cast[4]],
        order[2]: [cast[2], cast[3]],
    }

    resp = await _pick(client, headers[order[0]], cast[6])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_not_your_turn(client):
    users, cast = await _setup(client)
    resp = await _pick(client, users[1][1], cast[0])
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Not your turn to pick"


@pytest.mark.asyncio
async def test_already_drafted(client):
    users, cast = await _setup(client)
    assert (await _pick(client, users[0][1], cast[0])).status_code == 200
    resp = await _pick(client, users[1][1], cast[0])
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Contestant already drafted"

    # the failed pick did not advance the draft
    state = (await client.get("/api/draft", headers=users[1][1])).json()
    assert state["current_pick"] == 2
    assert state["current_user_id"] == users[1][0]


@pytest.mark.asyncio
async def test_unknown_contestant(client):
    users, _ = await _setup(client)
    resp = await _pick(client, users[0][1], 999)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_reinitialize_clears_rosters(client):
    users, cast = await _setup(client)
    await _pick(client, users[0][1], cast[0])
    order = [uid for uid, _ in users]
    resp = await client.post("/api/draft", json={
        "action": "initialize", "draft_order": list(reversed(order)),
    }, headers=users[0][1])
    assert resp.status_code == 200

    state = (await client.get("/api/draft", headers=users[0][1])).json()
    assert state["current_pick"] == 1
    assert state["current_user_id"] == order[-1]
    assert all(p["picks"] == [] for p in state["draft_order"])


# -- Serialization -------------------------------------------------------------------

@pytest.mark.asyncio
async def test_stale_pick_is_rejected(db_session):
    first = User(username="first", password_hash="x", name="First")
    second = User(username="second", password_hash="x", name="Second")
    contestant = Contestant(name="Ana")
    db_session.add_all([first, second, contestant])
    await db_session.flush()

    await initialize_draft(db_session, [first.id, second.id], picks_per_player=1)
    draft = await get_latest_draft(db_session)
    assert draft.current_pick == 1

    # Another request takes pick 1 behind this session's back.
    await db_session.execute(
        update(Draft)
        .where(Draft.id == draft.id)
        .values(current_pick=2)
        .execution_options(synchronize_session=False)
    )

    with pytest.raises(ConflictError):
        await make_pick(db_session, first, contestant.id)
