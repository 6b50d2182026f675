"""
Tests for application wiring: health, middleware and authentication.
"""

import os
import time
from datetime import timedelta

from fastapi.testclient import TestClient

import core.security
from conftest import make_token
from core.dependencies import get_print_backend
from core.security import SecurityEvent, create_access_token, session_from_token
from main import app
from services.print_service import SpoolPrintBackend


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client):
        response = client.get("/health")
        assert response.json()["status"] == "healthy"


class TestMiddleware:
    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-Id": "req-123"})
        assert response.headers["X-Request-Id"] == "req-123"

    def test_request_id_is_generated(self, client):
        assert client.get("/").headers["X-Request-Id"]

    def test_security_headers(self, client):
        response = client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestErrorBody:
    def test_bad_query_parameter_uses_uniform_body(self, client, admin_headers):
        response = client.get(
            "/api/v1/reports/daily/2026-10-19/orders", headers=admin_headers, params={"page": 0}
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] is True
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["status_code"] == 422
        assert body["errors"][0]["field"] == "query.page"

    def test_bad_path_parameter_uses_uniform_body(self, client, admin_headers):
        body = client.get("/api/v1/reports/daily/19-10-2026", headers=admin_headers).json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["errors"][0]["field"] == "path.report_date"


class TestStartup:
    def test_expired_print_jobs_are_removed(self, spool_dir):
        spool_dir.mkdir(parents=True)
        stale = spool_dir / "old_DailySummary.html"
        stale.write_text("old")
        old = time.time() - 600
        os.utime(stale, (old, old))
        fresh = spool_dir / "new_DailySummary.html"
        fresh.write_text("new")

        app.dependency_overrides[get_print_backend] = lambda: SpoolPrintBackend(str(spool_dir), ttl_seconds=300)
        try:
            with TestClient(app):
                pass
        finally:
            app.dependency_overrides.clear()

        assert not stale.exists()
        assert fresh.exists()


class TestAuthentication:
    def test_invalid_token(self, client):
        response = client.get("/api/v1/dashboard/", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_expired_token(self, client):
        token = create_access_token(
            {"sub": "u-admin", "role": "admin", "branch": "dhanmondi"}, expires_delta=timedelta(minutes=-1)
        )
        response = client.get("/api/v1/dashboard/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_without_branch(self):
        token = create_access_token({"sub": "u-admin", "role": "admin"})
        assert session_from_token(token) is None

    def test_rejected_tokens_log_security_events(self, monkeypatch):
        events = []
        monkeypatch.setattr(core.security, "log_security_event", lambda event, **kwargs: events.append(event))

        session_from_token("not-a-token")
        session_from_token(create_access_token({"sub": "u-admin", "role": "admin"}))

        assert events == [SecurityEvent.INVALID_TOKEN, SecurityEvent.INCOMPLETE_TOKEN]

    def test_session_context(self):
        ctx = session_from_token(make_token("Manager", "u-7", name="Karim"))
        assert ctx.user_id == "u-7"
        assert ctx.normalized_role == "manager"
        assert ctx.name == "Karim"
