"""Tests for the Flask JSON API."""

import pytest

from sideline.services import MatchService, MemoryStore
from sideline.utils import STORAGE_KEYS
from sideline.ui.web_app import create_app

from tests.helpers import FailingStore, FakeClock


@pytest.fixture
def time():
    return FakeClock()


@pytest.fixture
def service(time):
    return MatchService(MemoryStore(), now=time).load()


@pytest.fixture
def client(service):
    app = create_app(service=service)
    app.config["TESTING"] = True
    return app.test_client()


def test_state_endpoint_returns_snapshot(client):
    response = client.get("/api/state")

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["state"]["formation"] == "433"
    assert len(body["state"]["lineup"]) == 11
    assert response.headers["Cache-Control"].startswith("no-cache")


def test_assign_flow(client, service, time):
    assert client.post("/api/attendance", json={"player_id": "p1", "present": True}).status_code == 200

    response = client.post("/api/assignments", json={"position": "GK", "player_id": "p1"})
    assert response.status_code == 200
    gk = response.get_json()["state"]["lineup"][0]
    assert gk["player_id"] == "p1"

    client.post("/api/clock/start")
    time.advance(30_000)
    response = client.post("/api/clock/pause")

    assert response.get_json()["state"]["clock"]["elapsed_ms"] == 30_000
    assert service.match_state.ledger["p1"].total_ms == 30_000


def test_precondition_rejection_is_400(client, service):
    response = client.post("/api/assignments", json={"position": "GK", "player_id": "p1"})

    assert response.status_code == 400
    assert response.get_json()["success"] is False
    assert len(service.match_state.assignments) == 0


def test_missing_fields_are_400(client):
    assert client.post("/api/assignments", json={"position": "GK"}).status_code == 400
    assert client.post("/api/attendance", json={}).status_code == 400
    assert client.post("/api/formation", json={}).status_code == 400
    assert client.post("/api/orientation", data="not json").status_code == 400


def test_reset_requires_confirmation(client, service, time):
    client.post("/api/clock/start")
    time.advance(5_000)

    response = client.post("/api/clock/reset")
    assert response.status_code == 400
    assert service.match_state.clock.running is True

    response = client.post("/api/clock/reset", json={"confirm": True})
    assert response.status_code == 200
    assert response.get_json()["state"]["clock"] == {
        "running": False, "elapsed_ms": 0, "display": "00:00",
    }


def test_clear_and_unassign(client, service):
    client.post("/api/attendance", json={"player_id": "p1", "present": True})
    client.post("/api/attendance", json={"player_id": "p2", "present": True})
    client.post("/api/assignments", json={"position": "GK", "player_id": "p1"})
    client.post("/api/assignments", json={"position": "ST", "player_id": "p2"})

    assert client.delete("/api/assignments/GK").status_code == 200
    assert client.post("/api/players/p2/unassign").status_code == 200

    assert service.match_state.assignments.snapshot() == {}


def test_formation_and_orientation(client, service):
    client.post("/api/attendance", json={"player_id": "p1", "present": True})
    client.post("/api/assignments", json={"position": "ST", "player_id": "p1"})

    response = client.post("/api/formation", json={"formation": "442"})
    assert response.status_code == 200
    assert service.match_state.assignments.position_of("p1") is None

    response = client.post("/api/orientation", json={"orientation": "up"})
    gk = response.get_json()["state"]["lineup"][0]
    assert (gk["x"], gk["y"]) == (50, 92)


def test_formations_endpoint(client):
    body = client.get("/api/formations?orientation=up").get_json()

    assert set(body["formations"]) == {"433", "442", "352"}
    spots = body["formations"]["442"]["spots"]
    assert spots[0] == {"position": "GK", "x": 50, "y": 92}


def test_present_must_be_a_boolean(client, service):
    response = client.post("/api/attendance", json={"player_id": "p1", "present": "false"})

    assert response.status_code == 400
    assert response.get_json()["success"] is False
    assert service.match_state.is_present("p1") is False

    response = client.post("/api/attendance", json={"player_id": "p1", "present": 0})
    assert response.status_code == 400


def test_failed_save_reports_unchanged_state(time):
    store = FailingStore([STORAGE_KEYS["clock"]])
    service = MatchService(store, now=time).load()
    service.set_attendance("p1", True)
    service.assign("GK", "p1")
    app = create_app(service=service)
    app.config["TESTING"] = True
    client = app.test_client()

    store.broken = True
    response = client.post("/api/clock/start")

    assert response.status_code == 503
    body = response.get_json()
    assert body["success"] is False
    assert body["state"]["clock"]["running"] is False
    assert service.match_state.ledger["p1"].is_open is False

    store.broken = False
    assert client.post("/api/clock/start").status_code == 200
