import pytest
from fastapi.testclient import TestClient

from main import app
from api.deps import get_service
from tests.conftest import ADMIN, ALICE, BOB, CAROL, COMMITMENT, NULL, OWNER, OWNER2


@pytest.fixture()
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def as_caller(address):
    return {"X-Caller": address}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_owner_and_admin_management(client):
    assert client.get("/api/roles/owner").json() == {"owner": OWNER}

    res = client.post("/api/roles/admins", json={"address": ADMIN}, headers=as_caller(OWNER))
    assert res.status_code == 200
    assert client.get(f"/api/roles/admins/{ADMIN}").json()["is_admin"] is True

    res = client.delete(f"/api/roles/admins/{ADMIN}", headers=as_caller(OWNER))
    assert res.status_code == 200
    assert client.get(f"/api/roles/admins/{ADMIN}").json()["is_admin"] is False

    res = client.delete(f"/api/roles/admins/{ADMIN}", headers=as_caller(OWNER))
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "NotAdmin"


def test_non_owner_gets_403(client):
    res = client.post("/api/roles/admins", json={"address": ADMIN}, headers=as_caller(ALICE))
    assert res.status_code == 403
    assert res.json()["detail"]["error"] == "Unauthorized"


def test_missing_caller_header_is_rejected(client):
    res = client.post("/api/roles/admins", json={"address": ADMIN})
    assert res.status_code == 422


def test_null_address_rejected(client):
    res = client.post("/api/roles/owner", json={"new_owner": NULL}, headers=as_caller(OWNER))
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "InvalidAddress"


def test_ownership_transfer(client):
    res = client.post("/api/roles/owner", json={"new_owner": OWNER2}, headers=as_caller(OWNER))
    assert res.status_code == 200
    assert client.get("/api/roles/owner").json() == {"owner": OWNER2}

    res = client.post("/api/roles/admins", json={"address": ADMIN}, headers=as_caller(OWNER))
    assert res.status_code == 403
    res = client.post("/api/roles/admins", json={"address": ADMIN}, headers=as_caller(OWNER2))
    assert res.status_code == 200


def test_game_lifecycle(client):
    client.post("/api/roles/admins", json={"address": ADMIN}, headers=as_caller(OWNER))

    res = client.post("/api/games", json={"commitment": COMMITMENT, "value": 10}, headers=as_caller(ALICE))
    assert res.status_code == 201
    game_id = res.json()["game_id"]
    assert game_id == 1

    res = client.post(f"/api/games/{game_id}/accept", json={"value": 9}, headers=as_caller(BOB))
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "StakeMismatch"

    res = client.post(f"/api/games/{game_id}/accept", json={"value": 10}, headers=as_caller(BOB))
    assert res.status_code == 200

    res = client.post(f"/api/games/{game_id}/accept", json={"value": 10}, headers=as_caller(CAROL))
    assert res.status_code == 409

    res = client.post(
        f"/api/games/{game_id}/finalize",
        json={"winner": ALICE, "outcome_data": "X wins by card reveal"},
        headers=as_caller(OWNER)
    )
    assert res.status_code == 403

    res = client.post(
        f"/api/games/{game_id}/finalize",
        json={"winner": ALICE, "outcome_data": "X wins by card reveal"},
        headers=as_caller(ADMIN)
    )
    assert res.status_code == 200

    game = client.get(f"/api/games/{game_id}").json()
    assert game["winner"] == ALICE
    assert game["status"] == "SETTLED"
    assert game["outcome_data"] == "X wins by card reveal"
    assert client.get(f"/api/accounts/{ALICE}").json()["balance"] == 20

    res = client.post(
        f"/api/games/{game_id}/finalize",
        json={"winner": ALICE},
        headers=as_caller(ADMIN)
    )
    assert res.status_code == 409
    assert res.json()["detail"]["error"] == "AlreadyFinalized"


def test_zero_stake_rejected(client):
    res = client.post("/api/games", json={"commitment": COMMITMENT, "value": 0}, headers=as_caller(ALICE))
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "InvalidStake"
    assert client.get("/api/games/1").status_code == 404


def test_owner_games(client):
    for value in (1, 2):
        client.post("/api/games", json={"commitment": COMMITMENT, "value": value}, headers=as_caller(ALICE))
    client.post("/api/games", json={"commitment": COMMITMENT, "value": 3}, headers=as_caller(BOB))

    data = client.get(f"/api/owners/{ALICE}/games").json()
    assert data["game_ids"] == [1, 2]
    assert data["count"] == 2


def test_events_endpoint(client):
    client.post("/api/games", json={"commitment": COMMITMENT, "value": 5}, headers=as_caller(ALICE))
    events = client.get("/api/events").json()
    assert [e["event_type"] for e in events] == ["NewGame"]
    assert events[0]["data"]["game_id"] == 1
    assert client.get("/api/events", params={"after_id": events[0]["id"]}).json() == []
