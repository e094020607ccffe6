"""Tests for the voting HTTP API."""

from fastapi.testclient import TestClient

from movie_voting.adapters.memory_repositories import InMemoryEventRepository
from movie_voting.api.app import create_app
from movie_voting.containers import AppContainer
from tests.conftest import START_TIME, ManualClock

OWNER = {"X-Caller-Id": "0xowner"}
ALICE = {"X-Caller-Id": "0xalice"}
BOB = {"X-Caller-Id": "0xbob"}


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def test_health(container: AppContainer) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_full_voting_flow(container: AppContainer, clock: ManualClock) -> None:
    client = _client(container)

    response = client.post(
        "/votings",
        json={"candidates": ["Movie1", "Movie2"], "duration": 3600},
        headers=OWNER,
    )
    assert response.status_code == 201
    assert response.json() == {"voting_id": 0}

    assert client.post("/votings/0/start", headers=OWNER).status_code == 200
    assert (
        client.post("/votings/0/votes", json={"candidate": "Movie1"}, headers=ALICE)
    ).status_code == 200
    assert (
        client.post("/votings/0/votes", json={"candidate": "Movie1"}, headers=BOB)
    ).status_code == 200

    clock.advance(3601)
    response = client.post("/votings/0/finish", headers=OWNER)
    assert response.status_code == 200
    assert response.json() == {"winner": "Movie1"}

    response = client.get("/votings/0")
    assert response.json() == {
        "creator": "0xowner",
        "end_time": START_TIME + 3600,
        "state": 2,
        "candidates": [
            {"name": "Movie1", "vote_count": 2},
            {"name": "Movie2", "vote_count": 0},
        ],
    }
    assert client.get("/votings/0/voters/0xalice").json() == {"has_voted": True}
    assert client.get("/votings/0/voters/0xcarol").json() == {"has_voted": False}
    assert client.get("/votings/count").json() == {"count": 1}


def test_voting_errors_map_to_status_codes(container: AppContainer) -> None:
    client = _client(container)
    client.post(
        "/votings", json={"candidates": ["Movie1"], "duration": 3600}, headers=OWNER
    )

    response = client.post("/votings/0/start", headers=ALICE)
    assert response.status_code == 403
    assert response.json()["error"] == "unauthorized"

    response = client.post(
        "/votings/0/votes", json={"candidate": "Movie1"}, headers=ALICE
    )
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_state"

    client.post("/votings/0/start", headers=OWNER)
    response = client.post(
        "/votings/0/votes", json={"candidate": "Movie3"}, headers=ALICE
    )
    assert response.status_code == 404
    assert response.json()["error"] == "candidate_not_found"

    response = client.post("/votings/0/finish", headers=OWNER)
    assert response.status_code == 409
    assert response.json()["detail"] == "Voting still ongoing"


def test_create_voting_without_candidates(container: AppContainer) -> None:
    response = _client(container).post(
        "/votings", json={"candidates": [], "duration": 3600}, headers=OWNER
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "invalid_input",
        "detail": "No movies provided",
    }


def test_unknown_voting_returns_not_found(container: AppContainer) -> None:
    response = _client(container).get("/votings/999")

    assert response.status_code == 404
    assert response.json()["error"] == "voting_not_found"


def test_mutations_require_caller_identity(container: AppContainer) -> None:
    response = _client(container).post(
        "/votings", json={"candidates": ["Movie1"], "duration": 60}
    )

    assert response.status_code == 401


def test_negative_duration_is_rejected(container: AppContainer) -> None:
    response = _client(container).post(
        "/votings", json={"candidates": ["Movie1"], "duration": -5}, headers=OWNER
    )

    assert response.status_code == 422


def test_extra_payload_fields_are_rejected(container: AppContainer) -> None:
    client = _client(container)

    response = client.post(
        "/votings",
        json={"candidates": ["Movie1"], "duration": 60, "value": "1.0"},
        headers=OWNER,
    )

    assert response.status_code == 422
    assert container.voting_service.voting_count() == 0


def test_direct_transfer_is_rejected(container: AppContainer) -> None:
    client = _client(container)

    response = client.post("/", json={"value": "1.0"}, headers=ALICE)
    assert response.status_code == 405
    assert response.json()["detail"] == "Direct value transfers are not allowed"

    response = client.post("/", headers=ALICE)
    assert response.status_code == 405


def test_unknown_call_is_rejected(container: AppContainer) -> None:
    client = _client(container)

    response = client.post("/0x1234567890abcdef", content=b"\x12\x34", headers=ALICE)
    assert response.status_code == 404
    assert response.json()["detail"] == "Fallback function not supported"

    response = client.delete("/votings", headers=ALICE)
    assert response.status_code == 404


def test_vote_reports_success_when_event_store_fails(
    container: AppContainer,
) -> None:
    class FailingEventRepository(InMemoryEventRepository):
        def create_event(self, event: object) -> None:
            raise RuntimeError("event store down")

    container.event_service.repository = FailingEventRepository()
    client = _client(container)
    client.post(
        "/votings", json={"candidates": ["Movie1"], "duration": 3600}, headers=OWNER
    )
    client.post("/votings/0/start", headers=OWNER)

    response = client.post(
        "/votings/0/votes", json={"candidate": "Movie1"}, headers=ALICE
    )

    assert response.status_code == 200
    assert client.get("/votings/0/voters/0xalice").json() == {"has_voted": True}
