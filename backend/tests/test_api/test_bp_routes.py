"""Tests for blood pressure endpoints."""

from fastapi.testclient import TestClient


def add_reading(client: TestClient, systolic=120, diastolic=80, **extra):
    return client.post("/api/bp/readings", json={"systolic": systolic, "diastolic": diastolic, **extra})


class TestReadings:
    """Test single readings and saved sessions."""

    def test_add_reading(self, client: TestClient):
        """Test a valid reading becomes a completed session."""
        response = add_reading(client, heart_rate=70)
        assert response.status_code == 201
        data = response.json()
        assert data["display"] == "120/80 • HR: 70"
        assert data["category"] == "High Stage 1"
        assert data["end_time"] is not None

        sessions = client.get("/api/bp/sessions").json()
        assert sessions["count"] == 1
        assert sessions["sessions"][0]["id"] == data["id"]

    def test_invalid_reading_rejected(self, client: TestClient):
        """Test out-of-range readings return the error envelope."""
        response = add_reading(client, systolic=80, diastolic=90)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert client.get("/api/bp/sessions").json()["count"] == 0

    def test_validate_reading(self, client: TestClient):
        """Test the validity check without saving."""
        ok = client.post("/api/bp/readings/validate", json={"systolic": 120, "diastolic": 80})
        bad = client.post(
            "/api/bp/readings/validate", json={"systolic": 120, "diastolic": 80, "heart_rate": 250}
        )
        assert ok.json() == {"valid": True}
        assert bad.json() == {"valid": False}

    def test_delete_session(self, client: TestClient):
        """Test deleting by id, then deleting again."""
        session_id = add_reading(client).json()["id"]

        assert client.delete(f"/api/bp/sessions/{session_id}").json() == {"deleted": 1}
        response = client.delete(f"/api/bp/sessions/{session_id}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_delete_by_date_and_all(self, client: TestClient):
        """Test bulk deletes report how many sessions went."""
        add_reading(client, timestamp="2025-06-15T08:00:00Z")
        add_reading(client, timestamp="2025-06-14T08:00:00Z")
        add_reading(client, timestamp="2025-06-13T08:00:00Z")

        assert client.delete("/api/bp/sessions/by-date/2025-06-15").json() == {"deleted": 1}
        assert client.delete("/api/bp/sessions").json() == {"deleted": 2}
        assert client.get("/api/bp/sessions").json()["count"] == 0


class TestCurrentSession:
    """Test the in-progress recording session."""

    def test_session_flow(self, client: TestClient):
        """Test start, add, remove, stop and save."""
        started = client.post("/api/bp/current/start").json()
        assert started["is_active"] is True

        assert client.post("/api/bp/current/readings", json={"systolic": 120, "diastolic": 80}).status_code == 201
        response = client.post("/api/bp/current/readings", json={"systolic": 40, "diastolic": 20})
        assert response.status_code == 422

        current = client.post("/api/bp/current/readings", json={"systolic": 130, "diastolic": 84}).json()
        assert len(current["readings"]) == 2
        assert client.delete("/api/bp/current/readings/0").json()["readings"][0]["systolic"] == 130

        assert client.post("/api/bp/current/stop").json()["is_active"] is False
        saved = client.post("/api/bp/current/save")
        assert saved.status_code == 201
        assert saved.json()["display"] == "130/84"
        assert client.get("/api/bp/current").json()["readings"] == []

    def test_saving_empty_session_fails(self, client: TestClient):
        """Test a session without readings cannot be saved."""
        client.post("/api/bp/current/start")
        response = client.post("/api/bp/current/save")
        assert response.status_code == 422

    def test_clear_current_session(self, client: TestClient):
        """Test clearing discards unsaved readings."""
        client.post("/api/bp/current/start")
        client.post("/api/bp/current/readings", json={"systolic": 120, "diastolic": 80})
        assert client.delete("/api/bp/current").json()["readings"] == []
        assert client.get("/api/bp/sessions").json()["count"] == 0


class TestRollingAverages:
    """Test rolling average endpoints."""

    def test_averages(self, client: TestClient):
        """Test averages over the standard windows."""
        add_reading(client, 120, 80, timestamp="2025-06-14T12:00:00Z")
        add_reading(client, 130, 90, timestamp="2025-06-13T12:00:00Z")

        averages = client.get("/api/bp/rolling-averages").json()["averages"]
        assert [a["period"] for a in averages] == [3, 7, 14, 21, 30]
        assert averages[0]["display"] == "125/85"
        assert averages[0]["label"] == "3-Day"
        assert averages[0]["category"] == "High Stage 1"

        single = client.get("/api/bp/rolling-averages/7").json()["average"]
        assert single["session_count"] == 2

    def test_empty_window(self, client: TestClient):
        """Test a window without data returns null."""
        assert client.get("/api/bp/rolling-averages/3").json() == {"average": None}

    def test_window_bounds(self, client: TestClient):
        """Test out-of-range windows are rejected."""
        assert client.get("/api/bp/rolling-averages/0").status_code == 422
        assert client.get("/api/bp/rolling-averages/400").status_code == 422
