"""
Integration tests for the log buffer WebSocket
"""

import pytest

from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from logstream.main import app
from logstream.services.logs import ActivityTracker, LogPollingCoordinator, StreamLogsService


SOURCES = [{
    "id": "coolify-1",
    "slug": "coolify",
    "name": "Coolify app",
    "config": {"server": "https://coolify.example.com", "appId": "app-1", "accessKey": "ck_1"},
}]


@pytest.fixture
def client(scripted_service):
    activity_tracker = ActivityTracker()
    app.state.stream_service = StreamLogsService()
    app.state.activity_tracker = activity_tracker
    app.state.coordinator = LogPollingCoordinator(
        scripted_service,
        activity_tracker=activity_tracker,
        poll_interval=60,
        throttle_window=0
    )

    with TestClient(app) as test_client:
        yield test_client

    app.state.stream_service = None
    app.state.activity_tracker = None
    app.state.coordinator = None


class TestLogsWebSocket:
    """Test cases for /ws/logs/{source_id}"""

    def test_unregistered_source_is_rejected(self, client):
        with client.websocket_connect("/api/v1/ws/logs/ghost") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "error"
            assert message["message"] == "Source ghost is not being polled"

            with pytest.raises(WebSocketDisconnect) as exc_info:
                websocket.receive_json()
            assert exc_info.value.code == 1008

    def test_snapshot_changes_and_unregister(self, client, scripted_service):
        scripted_service.queue("coolify-1", ["2", "1"])
        client.put("/api/v1/sources/", json={"sources": SOURCES})
        client.post("/api/v1/polling/coolify-1")

        with client.websocket_connect("/api/v1/ws/logs/coolify-1") as websocket:
            snapshot = websocket.receive_json()
            assert snapshot["type"] == "snapshot"
            assert snapshot["source_id"] == "coolify-1"
            assert snapshot["count"] == 2
            assert [record["id"] for record in snapshot["logs"]] == ["2", "1"]

            client.delete("/api/v1/polling/coolify-1/logs")
            changed = websocket.receive_json()
            assert changed["type"] == "logs_changed"
            assert changed["count"] == 0

            client.delete("/api/v1/polling/coolify-1")
            assert websocket.receive_json()["type"] == "unregistered"

            with pytest.raises(WebSocketDisconnect) as exc_info:
                websocket.receive_json()
            assert exc_info.value.code == 1000

    def test_lifespan_keeps_injected_services(self, client):
        response = client.get("/api/v1/health/")
        assert response.json()["registered_sources"] == 0
        assert isinstance(app.state.coordinator, LogPollingCoordinator)
