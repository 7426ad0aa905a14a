"""Tests for nutrition endpoints."""

from fastapi.testclient import TestClient


def add_entry(client: TestClient, **fields):
    body = {"date": "2025-06-15T08:00:00Z", **fields}
    return client.post("/api/nutrition/entries", json=body)


class TestEntries:
    """Test nutrition entries."""

    def test_add_and_list(self, client: TestClient):
        """Test adding an entry and listing by day."""
        response = add_entry(client, calories=400, protein=25, carbohydrates=50, fat=10)
        assert response.status_code == 201
        data = response.json()
        assert data["protein_percentage"] == 25
        assert data["added_sugar"] == 0

        assert client.get("/api/nutrition/entries", params={"day": "2025-06-15"}).json()["count"] == 1
        assert client.get("/api/nutrition/entries", params={"day": "2025-06-14"}).json()["count"] == 0
        assert client.get("/api/nutrition/entries").json()["count"] == 1

    def test_negative_values_rejected(self, client: TestClient):
        """Test negative nutrients are invalid."""
        response = add_entry(client, calories=-10)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_update_and_delete(self, client: TestClient):
        """Test updating an entry in place, then deleting it."""
        entry_id = add_entry(client, calories=400).json()["id"]

        updated = client.put(
            f"/api/nutrition/entries/{entry_id}", json={"date": "2025-06-15T08:00:00Z", "calories": 450}
        )
        assert updated.status_code == 200
        assert updated.json()["id"] == entry_id
        assert client.get("/api/nutrition/entries").json()["entries"][0]["calories"] == 450

        assert client.delete(f"/api/nutrition/entries/{entry_id}").status_code == 200
        missing = client.put(f"/api/nutrition/entries/{entry_id}", json={"calories": 1})
        assert missing.status_code == 404


class TestGoalsAndSummary:
    """Test daily goals and the summary."""

    def test_default_goals(self, client: TestClient):
        """Test goals start at their defaults."""
        goals = client.get("/api/nutrition/goals").json()
        assert goals["daily_calories"] == 2000
        assert goals["daily_added_sugar"] == 20

    def test_update_goals(self, client: TestClient):
        """Test valid goals are stored and invalid ones rejected."""
        assert client.put("/api/nutrition/goals", json={"daily_calories": 1800}).json()["daily_calories"] == 1800
        assert client.put("/api/nutrition/goals", json={"daily_fat": -5}).status_code == 422
        assert client.get("/api/nutrition/goals").json()["daily_calories"] == 1800

    def test_summary(self, client: TestClient):
        """Test totals and progress toward goals for one day."""
        add_entry(client, calories=500, sodium=1150)
        add_entry(client, calories=3000, date="2025-06-14T08:00:00Z")

        summary = client.get("/api/nutrition/summary", params={"day": "2025-06-15"}).json()

        assert summary["entry_count"] == 1
        assert summary["totals"]["calories"] == 500
        assert summary["progress"]["calories"] == 0.25
        assert summary["progress"]["sodium"] == 0.5


class TestTemplates:
    """Test nutrition templates."""

    def test_save_apply_delete(self, client: TestClient):
        """Test a template logs an entry when applied."""
        created = client.post("/api/nutrition/templates", json={"name": "Oatmeal", "calories": 300, "fiber": 8})
        assert created.status_code == 201
        template_id = created.json()["id"]

        applied = client.post(
            f"/api/nutrition/templates/{template_id}/apply", json={"at": "2025-06-15T07:00:00Z"}
        )
        assert applied.status_code == 201
        assert applied.json()["label"] == "Oatmeal"
        assert applied.json()["calories"] == 300

        templates = client.get("/api/nutrition/templates").json()
        assert templates["templates"][0]["use_count"] == 1
        assert client.get("/api/nutrition/entries", params={"day": "2025-06-15"}).json()["count"] == 1

        assert client.delete(f"/api/nutrition/templates/{template_id}").status_code == 200
        assert client.post(f"/api/nutrition/templates/{template_id}/apply").status_code == 404

    def test_blank_template_name(self, client: TestClient):
        """Test templates need a name."""
        assert client.post("/api/nutrition/templates", json={"name": " "}).status_code == 422
