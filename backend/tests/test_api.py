"""
Tests for API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

import swing_engine.services.analyzer as analyzer_module
import swing_engine.services.recorder as recorder_module
import swing_engine.services.repository as repository_module
from swing_engine.config import EngineConfig
from swing_engine.main import app
from swing_engine.services.analyzer import SwingAnalyzer
from swing_engine.services.classifier import HeuristicSwingClassifier
from swing_engine.services.recorder import SwingRecorder
from swing_engine.services.repository import SessionRepository
from swing_engine.utils.sample_data import generate_swing_samples


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def sample_payload(sample) -> dict:
    return {
        "timestamp": sample.timestamp,
        "time_offset": sample.time_offset,
        "user_acceleration": vars(sample.user_acceleration),
        "gravity": vars(sample.gravity),
        "rotation_rate": vars(sample.rotation_rate),
        "attitude": vars(sample.attitude),
    }


@pytest.fixture
def swing_payload():
    return [sample_payload(s) for s in generate_swing_samples(peak_g=9.2)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(tmp_path, clock, monkeypatch):
    """Test client with fresh repository, recorder and analyzer."""
    monkeypatch.setattr(repository_module, "_repository", SessionRepository(tmp_path / "sessions"))
    monkeypatch.setattr(recorder_module, "_recorder", SwingRecorder(EngineConfig(), clock=clock))
    monkeypatch.setattr(
        analyzer_module, "_analyzer", SwingAnalyzer(HeuristicSwingClassifier(), EngineConfig())
    )
    return TestClient(app)


def analyze(client, samples, **kwargs):
    body = {"equipment_id": "driver", "samples": samples}
    body.update(kwargs)
    return client.post("/swings/analyze", json=body)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Swing Analysis Engine"
        assert data["status"] == "running"

    def test_health_endpoint(self, client, tmp_path):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["data_folder"] == str(tmp_path / "sessions")
        assert data["session_count"] == 0
        assert data["recording_status"] == "idle"
        assert data["equipment_count"] == 3


class TestEquipmentEndpoints:
    """Tests for equipment endpoints."""

    def test_list_equipment(self, client):
        response = client.get("/equipment")
        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == ["driver", "steel_7", "steel_9"]

    def test_get_by_display_name(self, client):
        response = client.get("/equipment/Steel 9")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "steel_9"
        assert data["launch_angle_min_deg"] == 28.0

    def test_unknown_equipment(self, client):
        response = client.get("/equipment/putter")
        assert response.status_code == 404


class TestSwingEndpoints:
    """Tests for analysis and stored swing endpoints."""

    def test_analyze_swing(self, client, swing_payload):
        response = analyze(client, swing_payload)
        assert response.status_code == 200

        data = response.json()
        assert data["classification"]["rating"] == "Excellent"
        assert data["equipment_id"] == "driver"
        assert data["sample_count"] == 60
        assert len(data["features"]) == 60
        assert data["distance"]["estimated_distance_yd"] > 0
        assert data["distance"]["method"] == "physics"
        assert data["kinematics"]["impact_index"] == 30
        assert data["samples"] is None

    def test_analyze_include_samples(self, client, swing_payload):
        response = analyze(client, swing_payload, save=False, include_samples=True)
        assert response.status_code == 200
        assert len(response.json()["samples"]) == 60
        assert client.get("/swings").json() == []

    def test_too_few_samples(self, client, swing_payload):
        response = analyze(client, swing_payload[:10])
        assert response.status_code == 422
        assert response.json()["code"] == "insufficient_data"

    def test_unknown_equipment(self, client, swing_payload):
        response = analyze(client, swing_payload, equipment_id="putter")
        assert response.status_code == 400

    def test_unordered_samples(self, client, swing_payload):
        swing_payload[10], swing_payload[11] = swing_payload[11], swing_payload[10]
        response = analyze(client, swing_payload)
        assert response.status_code == 400

    def test_model_unavailable(self, client, swing_payload, monkeypatch):
        monkeypatch.setattr(analyzer_module, "_analyzer", SwingAnalyzer(None, EngineConfig()))
        response = analyze(client, swing_payload)
        assert response.status_code == 503
        assert response.json()["code"] == "ml_model_unavailable"

    def test_stored_swing_lifecycle(self, client, swing_payload):
        session_id = analyze(client, swing_payload).json()["session_id"]

        listing = client.get("/swings").json()
        assert [s["session_id"] for s in listing] == [session_id]
        assert listing[0]["has_samples"] is True

        stored = client.get(f"/swings/{session_id}").json()
        assert stored["session_id"] == session_id
        assert stored["samples"] is None

        with_samples = client.get(f"/swings/{session_id}", params={"include_samples": True}).json()
        assert len(with_samples["samples"]) == 60

        assert client.delete(f"/swings/{session_id}").json() == {"deleted": session_id}
        assert client.get(f"/swings/{session_id}").status_code == 404
        assert client.delete(f"/swings/{session_id}").status_code == 404

    def test_statistics(self, client, swing_payload):
        assert client.get("/swings/stats").json()["total_swings"] == 0

        analyze(client, swing_payload)
        analyze(client, swing_payload)

        stats = client.get("/swings/stats").json()
        assert stats["total_swings"] == 2
        assert stats["excellent_count"] == 2
        assert stats["success_rate"] == 100.0
        assert stats["max_distance_yd"] > 0
        assert stats["last_swing_at"] is not None


class TestRecordingEndpoints:
    """Tests for the live recording flow."""

    def test_start_and_status(self, client):
        response = client.post("/recording/start")
        assert response.status_code == 200
        assert response.json()["status"] == "waiting"
        assert response.json()["is_active"] is True

        assert client.post("/recording/start").status_code == 409

    def test_start_unknown_equipment(self, client):
        response = client.post("/recording/start", json={"equipment_id": "putter"})
        assert response.status_code == 400

    def test_samples_without_session(self, client, swing_payload):
        response = client.post("/recording/samples", json={"samples": swing_payload[:5]})
        assert response.status_code == 409

    def test_full_recording_flow(self, client, clock, swing_payload):
        client.post("/recording/start", json={"equipment_id": "driver"})

        response = client.post("/recording/samples", json={"samples": swing_payload})
        data = response.json()
        assert data["phase"] == "finish"
        assert data["status"] == "processing"
        assert data["sample_count"] == 60

        # Not settled yet
        assert client.post("/recording/analyze", json={"equipment_id": "driver"}).status_code == 409

        clock.advance(1.0)
        assert client.get("/recording/status").json()["status"] == "completed"

        response = client.post("/recording/analyze", json={"equipment_id": "driver"})
        assert response.status_code == 200
        result = response.json()
        assert result["sample_count"] == 60
        assert len(result["samples"]) == 60

        assert client.get("/recording/status").json()["status"] == "idle"
        assert len(client.get("/swings").json()) == 1

    def test_timeout_reported_on_analyze(self, client, clock):
        client.post("/recording/start")
        clock.advance(10.0)

        status = client.get("/recording/status").json()
        assert status["status"] == "error"
        assert status["error"] == "AnalysisTimeout"

        response = client.post("/recording/analyze", json={"equipment_id": "driver"})
        assert response.status_code == 408
        assert response.json()["code"] == "analysis_timeout"
        assert client.get("/recording/status").json()["status"] == "idle"

    def test_stop_and_reset(self, client, swing_payload):
        client.post("/recording/start")
        client.post("/recording/samples", json={"samples": swing_payload[:20]})

        response = client.post("/recording/stop")
        assert response.json()["status"] == "completed"
        assert response.json()["sample_count"] == 20
        assert client.post("/recording/stop").status_code == 409

        response = client.post("/recording/reset")
        assert response.json()["status"] == "idle"
        assert response.json()["sample_count"] == 0


class TestRecordingSessionContext:
    """Tests for session-level context carried across recording requests."""

    def _record(self, client, clock, payload, start_body=None, batch_size=60):
        client.post("/recording/start", json=start_body)
        for i in range(0, len(payload), batch_size):
            client.post("/recording/samples", json={"samples": payload[i:i + batch_size]})
        clock.advance(1.0)
        assert client.get("/recording/status").json()["status"] == "completed"

    def test_batched_offsets_count_from_session_start(self, client, clock):
        payload = [sample_payload(s) for s in generate_swing_samples(start_time=5.0)]
        for item in payload:
            del item["time_offset"]

        self._record(client, clock, payload, {"equipment_id": "driver"}, batch_size=10)
        result = client.post("/recording/analyze", json={}).json()

        offsets = [s["time_offset"] for s in result["samples"]]
        assert offsets == pytest.approx([i * 0.02 for i in range(60)])
        assert offsets[-1] == pytest.approx(1.18)

    def test_analyze_defaults_to_start_equipment(self, client, clock, swing_payload):
        self._record(client, clock, swing_payload, {"equipment_id": "Steel 7"})

        response = client.post("/recording/analyze", json={})
        assert response.status_code == 200
        assert response.json()["equipment_id"] == "steel_7"

    def test_analyze_without_any_equipment(self, client, clock, swing_payload):
        self._record(client, clock, swing_payload)

        assert client.post("/recording/analyze", json={}).status_code == 400
        assert client.get("/recording/status").json()["status"] == "completed"

    def test_bad_analyze_request_keeps_recording(self, client, clock, swing_payload):
        self._record(client, clock, swing_payload)

        assert client.post("/recording/analyze", json={"equipment_id": "putter"}).status_code == 400
        response = client.post("/recording/analyze", json={"equipment_id": "driver", "handedness": "both"})
        assert response.status_code == 400
        assert client.get("/recording/status").json()["sample_count"] == 60

        response = client.post("/recording/analyze", json={"equipment_id": "driver"})
        assert response.status_code == 200
        assert response.json()["sample_count"] == 60
