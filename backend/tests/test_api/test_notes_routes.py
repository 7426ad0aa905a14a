"""Tests for health note endpoints."""

from fastapi.testclient import TestClient

NOTE = {"metric_type": "weight", "date": "2025-06-15T09:00:00Z", "note": "after travel"}


class TestNotes:
    """Test note CRUD and lookup."""

    def test_create_and_lookup(self, client: TestClient):
        """Test a note is found by metric type and day."""
        response = client.post("/api/notes", json=NOTE)
        assert response.status_code == 201
        assert response.json()["note"] == "after travel"

        found = client.get("/api/notes", params={"metric_type": "weight", "day": "2025-06-15"}).json()
        assert found["count"] == 1
        other_day = client.get("/api/notes", params={"metric_type": "weight", "day": "2025-06-14"}).json()
        assert other_day["count"] == 0
        assert client.get("/api/notes").json()["count"] == 1

    def test_blank_note_rejected(self, client: TestClient):
        """Test blank notes fail validation."""
        response = client.post("/api/notes", json={**NOTE, "note": "   "})
        assert response.status_code == 422

    def test_update_and_delete(self, client: TestClient):
        """Test editing the text, then deleting the note."""
        note_id = client.post("/api/notes", json=NOTE).json()["id"]

        updated = client.put(f"/api/notes/{note_id}", json={"note": "after a long flight"})
        assert updated.json()["note"] == "after a long flight"
        assert client.put(f"/api/notes/{note_id}", json={"note": ""}).status_code == 422

        assert client.delete(f"/api/notes/{note_id}").status_code == 200
        assert client.delete(f"/api/notes/{note_id}").status_code == 404
        assert client.put(f"/api/notes/{note_id}", json={"note": "x"}).status_code == 404
