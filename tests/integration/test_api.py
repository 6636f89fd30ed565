"""
Integration Tests for the HTTP API

Drives the FastAPI application through its lifespan with a scripted
generator and in-memory collaborators.
"""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedGenerator
from saathi.main import create_application


pytestmark = pytest.mark.integration

API = "/api/v1"


@pytest.fixture
def client(test_settings, store, notifier) -> Iterator[TestClient]:
    app = create_application(
        test_settings,
        generator=ScriptedGenerator("I'm here with you."),
        store=store,
        notifier=notifier,
    )
    with TestClient(app) as test_client:
        yield test_client


def start_session(client: TestClient, user_id: str = "user-1", **body) -> str:
    response = client.post(f"{API}/sessions", json={"user_id": user_id, **body})
    assert response.status_code == 201
    return response.json()["session_id"]


class TestHealth:
    """Health and liveness probes."""

    def test_health(self, client: TestClient) -> None:
        response = client.get(f"{API}/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "development"
        assert body["active_sessions"] == 0

    def test_liveness(self, client: TestClient) -> None:
        response = client.get(f"{API}/health/live")

        assert response.json()["status"] == "alive"

    def test_metrics_exposed(self, client: TestClient) -> None:
        start_session(client)

        response = client.get(f"{API}/metrics")

        assert response.status_code == 200
        assert "saathi_sessions_started_total" in response.text


class TestSessions:
    """Session lifecycle over HTTP."""

    def test_create_session(self, client: TestClient) -> None:
        response = client.post(f"{API}/sessions", json={"user_id": "user-1", "modality": "multimodal"})

        assert response.status_code == 201
        body = response.json()
        assert body["state"] == "active"
        assert body["modality"] == "multimodal"
        assert client.get(f"{API}/health").json()["active_sessions"] == 1

    def test_second_session_conflicts(self, client: TestClient) -> None:
        start_session(client)

        response = client.post(f"{API}/sessions", json={"user_id": "user-1"})

        assert response.status_code == 409
        assert response.json()["error"] == "active_session_exists"

    def test_concurrent_session_on_request(self, client: TestClient) -> None:
        start_session(client)

        assert start_session(client, allow_concurrent=True)

    def test_severe_turn(self, client: TestClient) -> None:
        session_id = start_session(client)

        response = client.post(f"{API}/sessions/{session_id}/turns", json={"message": "I want to kill myself"})

        assert response.status_code == 200
        body = response.json()
        assert body["assessment"]["level"] == "severe"
        assert body["strategy"]["strategy"] == "crisis_intervention"
        assert body["crisis_event"]["immediate_actions"][0] == "contact emergency services immediately"
        assert body["crisis_event"]["professional_contacts"][0]["contact"] == "112"
        assert body["reply"]["source"] == "generator"

    def test_calm_turn(self, client: TestClient) -> None:
        session_id = start_session(client)

        response = client.post(
            f"{API}/sessions/{session_id}/turns",
            json={"message": "I feel a little stressed about exams"},
        )

        body = response.json()
        assert body["assessment"]["level"] == "none"
        assert body["crisis_event"] is None
        assert body["signals"][0]["modality"] == "text"

    def test_malformed_facial_vector_degrades(self, client: TestClient) -> None:
        session_id = start_session(client)

        response = client.post(
            f"{API}/sessions/{session_id}/turns",
            json={"message": "fine", "facial": {"probabilities": [0.5, 0.5]}},
        )

        assert response.status_code == 200
        facial = [s for s in response.json()["signals"] if s["modality"] == "facial"]
        assert facial[0]["confidence"] == 0.0
        assert "reason" in facial[0]["details"]

    def test_oversized_message_rejected(self, client: TestClient) -> None:
        session_id = start_session(client)

        response = client.post(f"{API}/sessions/{session_id}/turns", json={"message": "a" * 4001})

        assert response.status_code == 422

    def test_unknown_session(self, client: TestClient) -> None:
        response = client.post(f"{API}/sessions/missing/turns", json={"message": "hello"})

        assert response.status_code == 404
        assert response.json()["error"] == "session_not_found"

    def test_end_and_history(self, client: TestClient) -> None:
        session_id = start_session(client)
        client.post(f"{API}/sessions/{session_id}/turns", json={"message": "I feel hopeless"})

        ended = client.post(f"{API}/sessions/{session_id}/end")
        history = client.get(f"{API}/sessions/{session_id}/risk-history")
        again = client.post(f"{API}/sessions/{session_id}/end")

        assert ended.status_code == 200
        assert ended.json()["summary"]["turn_count"] == 1
        assert history.json()["session_id"] == session_id
        assert [a["level"] for a in history.json()["assessments"]] == ["moderate"]
        assert again.status_code == 404


class TestUserData:
    """Export and deletion endpoints."""

    def test_export_then_delete(self, client: TestClient) -> None:
        session_id = start_session(client)
        client.post(f"{API}/sessions/{session_id}/turns", json={"message": "I feel hopeless"})
        client.post(f"{API}/sessions/{session_id}/end")

        exported = client.get(f"{API}/users/user-1/data").json()
        deleted = client.delete(f"{API}/users/user-1/data")

        assert len(exported["archived_sessions"]) == 1
        assert len(exported["crisis_events"]) == 1
        assert deleted.status_code == 200
        assert deleted.json() == {
            "user_id": "user-1",
            "active_sessions_evicted": 0,
            "archives_deleted": 1,
            "plan_deleted": True,
            "crisis_events_retained": 1,
        }


class TestCorrelation:
    """Correlation id propagation."""

    def test_header_echoed(self, client: TestClient) -> None:
        response = client.get(f"{API}/health", headers={"X-Correlation-ID": "req-42"})

        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_error_body_carries_correlation_id(self, client: TestClient) -> None:
        response = client.post(
            f"{API}/sessions/missing/end",
            headers={"X-Correlation-ID": "req-43"},
        )

        assert response.status_code == 404
        assert response.json()["correlation_id"] == "req-43"
        assert response.headers["X-Correlation-ID"] == "req-43"

    def test_generated_when_absent(self, client: TestClient) -> None:
        response = client.get(f"{API}/health")

        assert response.headers["X-Correlation-ID"]
