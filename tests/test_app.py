"""Tests for the Flask routes."""

import pytest

import app as app_module
from auth import is_allowed_email
from config import TargetConfig
from sync.models import PushResult, TargetResult


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def cron_secret(monkeypatch):
    monkeypatch.setattr(app_module.Config, "CRON_SECRET", "s3cret")
    return "s3cret"


class TestHealth:
    def test_reports_missing_config(self, client, monkeypatch):
        monkeypatch.setattr(app_module.Config, "AIRTABLE_API_KEY", "")

        response = client.get("/health")

        assert response.status_code == 500
        assert "AIRTABLE_API_KEY" in response.get_json()["missing_config"]

    def test_healthy(self, client, monkeypatch):
        monkeypatch.setattr(app_module.Config, "validate", classmethod(lambda cls: []))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"


class TestAutoSync:
    def test_not_configured(self, client, monkeypatch):
        monkeypatch.setattr(app_module.Config, "CRON_SECRET", "")
        assert client.post("/sync/auto").status_code == 503

    def test_wrong_secret(self, client, cron_secret):
        response = client.post("/sync/auto", headers={"X-Cron-Secret": "nope"})
        assert response.status_code == 403

    def test_runs_scheduled_sync(self, client, cron_secret, monkeypatch):
        result = TargetResult(target=TargetConfig("appA", "tblA").label, status="updated",
                              records=2, rows=2, updates=1, push=PushResult(1, 0))
        monkeypatch.setattr(app_module, "scheduled_sync", lambda: [result])

        response = client.post("/sync/auto", headers={"X-Cron-Secret": cron_secret})

        body = response.get_json()
        assert response.status_code == 200
        assert body["status"] == "completed"
        assert body["targets"][0]["target"] == "appA/tblA"
        assert body["targets"][0]["updated"] == 1

    def test_rate_limited(self, client, cron_secret, monkeypatch):
        monkeypatch.setattr(app_module, "scheduled_sync", lambda: None)

        response = client.post("/sync/auto", headers={"X-Cron-Secret": cron_secret})

        assert response.get_json() == {"status": "skipped", "reason": "rate limited", "targets": []}


class TestManualSync:
    def test_requires_login(self, client, monkeypatch):
        calls = []
        monkeypatch.setattr(app_module, "manual_sync", lambda dry_run=False: calls.append(dry_run))

        response = client.post("/sync", json={"dry_run": True})

        assert response.status_code == 401
        assert calls == []

    def test_status_page_redirects_to_login(self, client):
        response = client.get("/")
        assert response.status_code == 302
        assert "/login" in response.headers["Location"]


class TestAuth:
    def test_allowed_domain_only(self, monkeypatch):
        monkeypatch.setattr(app_module.Config, "ALLOWED_DOMAIN", "example.org")

        assert is_allowed_email("Staff@Example.org") is True
        assert is_allowed_email("someone@example.org.evil.com") is False
        assert is_allowed_email("") is False

    def test_login_error_is_reported(self, client):
        response = client.get("/login?error=Authentication%20failed")
        assert response.status_code == 401
        assert response.get_json() == {"error": "Authentication failed"}

    def test_logout_without_session(self, client):
        assert client.get("/logout").get_json() == {"status": "logged out"}
