"""Tests for the reminder HTTP interface."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.domain.activity import VerificationResult
from src.main import app


@pytest.fixture
def client(workflow) -> Generator[TestClient, None, None]:
    """Test client bound to the fixture workflow (lifespan not started)."""
    app.state.workflow = workflow
    yield TestClient(app)
    del app.state.workflow


@pytest.mark.unit
def test_health_endpoint_returns_healthy(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
class TestTasksEndpoints:
    """Test task CRUD over HTTP."""

    def test_list_tasks(self, client: TestClient) -> None:
        response = client.get("/api/tasks")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["pills", "water"]
        assert response.json()[1]["scheduled_time"] == "10:30:00"

    def test_create_task(self, client: TestClient) -> None:
        response = client.post("/api/tasks", json={"type": "FOOD", "label": "Dinner", "scheduled_time": "20:15"})

        assert response.status_code == 201
        body = response.json()
        assert body["label"] == "Dinner"
        assert body["completed"] is False
        assert len(client.get("/api/tasks").json()) == 3

    def test_create_task_rejects_unknown_type(self, client: TestClient) -> None:
        response = client.post("/api/tasks", json={"type": "NAP", "label": "Nap"})

        assert response.status_code == 422

    def test_update_task(self, client: TestClient) -> None:
        response = client.patch("/api/tasks/water", json={"label": "Herbal tea"})

        assert response.status_code == 200
        assert response.json()["label"] == "Herbal tea"
        assert response.json()["type"] == "WATER"

    def test_update_unknown_task(self, client: TestClient) -> None:
        response = client.patch("/api/tasks/missing", json={"label": "x"})

        assert response.status_code == 404

    def test_delete_task(self, client: TestClient) -> None:
        assert client.delete("/api/tasks/pills").status_code == 204
        assert client.delete("/api/tasks/pills").status_code == 404


@pytest.mark.unit
class TestAlarmEndpoints:
    """Test the alarm workflow over HTTP."""

    def test_trigger_and_state(self, client: TestClient) -> None:
        response = client.post("/api/alarm/trigger/water")

        assert response.status_code == 200
        assert response.json()["alarm"]["task_id"] == "water"

        state = client.get("/api/state").json()
        assert state["alarm_task"]["id"] == "water"
        assert state["task_states"] == {"pills": "PENDING", "water": "ALARMING"}
        assert state["is_verifying"] is False

    def test_second_trigger_returns_no_alarm(self, client: TestClient) -> None:
        client.post("/api/alarm/trigger/water")

        response = client.post("/api/alarm/trigger/pills")

        assert response.json() == {"alarm": None}

    def test_trigger_unknown_task(self, client: TestClient) -> None:
        assert client.post("/api/alarm/trigger/missing").status_code == 404

    def test_test_alarm(self, client: TestClient) -> None:
        response = client.post("/api/alarm/test")

        assert response.json()["alarm"]["task_id"] == "pills"

    def test_submit_photo_completes_task(self, client: TestClient, mock_verifier) -> None:
        client.post("/api/alarm/trigger/water")

        response = client.post("/api/alarm/photo", content=b"jpeg-bytes", headers={"Content-Type": "image/jpeg"})

        assert response.status_code == 200
        assert response.json()["kind"] == "whatsapp"
        state = client.get("/api/state").json()
        assert state["alarm"] is None
        assert state["completed_count"] == 1
        assert mock_verifier.verify.await_args.args[0] == b"jpeg-bytes"

    def test_submit_rejected_photo(self, client: TestClient, mock_verifier) -> None:
        mock_verifier.verify.return_value = VerificationResult(
            verified=False, reason="No beverage visible", confidence=0.3
        )
        client.post("/api/alarm/trigger/water")

        response = client.post("/api/alarm/photo", content=b"jpeg-bytes", headers={"Content-Type": "image/jpeg"})

        assert response.json() == {"kind": "error", "message": "Could not verify: No beverage visible"}
        assert client.get("/api/state").json()["alarm"]["task_id"] == "water"

    def test_submit_photo_without_alarm(self, client: TestClient) -> None:
        response = client.post("/api/alarm/photo", content=b"jpeg-bytes", headers={"Content-Type": "image/jpeg"})

        assert response.status_code == 409

    def test_submit_non_image(self, client: TestClient) -> None:
        client.post("/api/alarm/trigger/water")

        response = client.post("/api/alarm/photo", content=b"hello", headers={"Content-Type": "text/plain"})

        assert response.status_code == 415

    def test_submit_empty_photo(self, client: TestClient) -> None:
        response = client.post("/api/alarm/photo", content=b"", headers={"Content-Type": "image/jpeg"})

        assert response.status_code == 400

    def test_cancel_alarm(self, client: TestClient) -> None:
        client.post("/api/alarm/trigger/water")

        response = client.post("/api/alarm/cancel")

        assert response.json() == {"cancelled": True, "notified": True}
        assert client.get("/api/state").json()["alarm"] is None
        assert client.post("/api/alarm/cancel").status_code == 409

    def test_cancel_alarm_of_deleted_task(self, client: TestClient) -> None:
        client.post("/api/alarm/trigger/water")
        client.delete("/api/tasks/water")

        response = client.post("/api/alarm/cancel")

        assert response.status_code == 200
        assert response.json() == {"cancelled": True, "notified": False}
        assert client.get("/api/state").json()["alarm"] is None


@pytest.mark.unit
class TestContactEndpoints:
    """Test contact editing and status dismissal."""

    def test_update_contact(self, client: TestClient) -> None:
        response = client.put("/api/contact", json={"name": "Lucia", "phone": "+34622222222"})

        assert response.status_code == 200
        assert client.get("/api/state").json()["contact"] == {"name": "Lucia", "phone": "+34622222222"}

    def test_update_contact_rejects_bad_phone(self, client: TestClient) -> None:
        response = client.put("/api/contact", json={"name": "Lucia", "phone": "622222222"})

        assert response.status_code == 422

    def test_clear_status(self, client: TestClient) -> None:
        client.post("/api/alarm/trigger/water")
        client.post("/api/alarm/cancel")
        assert client.get("/api/state").json()["status"]["kind"] == "info"

        assert client.delete("/api/status").status_code == 204
        assert client.get("/api/state").json()["status"] is None
