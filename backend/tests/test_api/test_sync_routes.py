"""Tests for sync endpoints."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import NOW
from puremetrics.main import app
from puremetrics.services.data_manager import DataManager
from puremetrics.services.firestore import FirestoreRemote


class TestSyncSignedOut:
    """Test sync endpoints while no one is signed in."""

    def test_status(self, client: TestClient):
        """Test the status of a signed-out manager."""
        status = client.get("/api/sync/status").json()
        assert status["is_authenticated"] is False
        assert status["is_syncing"] is False
        assert status["last_sync_error"] is None

    def test_push_and_pull_do_nothing(self, client: TestClient, remote):
        """Test push and pull are skipped without a session."""
        assert client.post("/api/sync/push").json()["ok"] is False
        assert client.post("/api/sync/pull").json()["ok"] is False
        assert remote.pushes == []
        assert remote.pull_calls == 0

    def test_sign_in_without_remote_store(self, client: TestClient):
        """Test sign-in needs a configured Firestore remote."""
        response = client.post("/api/sync/sign-in", json={"email": "a@b.c", "password": "x"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    def test_backup(self, client: TestClient):
        """Test the backup download."""
        client.post("/api/bp/readings", json={"systolic": 120, "diastolic": 80})

        response = client.get("/api/sync/backup")

        assert response.status_code == 200
        assert "attachment" in response.headers["Content-Disposition"]
        backup = json.loads(response.content)
        assert backup["version"] == "1.0"
        assert len(backup["bp_sessions"]) == 1


class TestSignIn:
    """Test sign-in against a mocked Firestore."""

    @pytest.fixture
    def firestore_client(self, store, observer, test_settings):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path.endswith("accounts:signInWithPassword"):
                return httpx.Response(200, json={"localId": "user-9", "idToken": "tok"})
            return httpx.Response(200, json={})

        remote = FirestoreRemote(
            test_settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
        app.state.manager = DataManager(store, remote, observer, test_settings, clock=lambda: NOW)
        try:
            yield TestClient(app), requests
        finally:
            del app.state.manager

    def test_sign_in_then_sign_out(self, firestore_client):
        """Test sign-in pulls once and sign-out resets sync state."""
        client, requests = firestore_client

        response = client.post("/api/sync/sign-in", json={"email": "a@b.c", "password": "secret"})

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user-9"
        assert data["synced"] is True
        assert data["is_authenticated"] is True
        # One identity call plus one listing per record kind
        assert len(requests) == 10

        status = client.post("/api/sync/sign-out").json()
        assert status["is_authenticated"] is False
        assert status["user_id"] is None
