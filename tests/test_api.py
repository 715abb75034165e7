"""Tests for the FastAPI routes."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from redis_healthcheck.api.server import create_app
from redis_healthcheck.health.connector import ConnectionStatus


@pytest.fixture
def client(cache_config, fake_redis):
    app = create_app(cache_config)
    with patch(
        "redis_healthcheck.health.engine.connect",
        return_value=ConnectionStatus(connected=True, client=fake_redis),
    ):
        yield TestClient(app)


@pytest.fixture
def disabled_client(disabled_config):
    return TestClient(create_app(disabled_config))


class TestStatusRoutes:
    def test_liveness(self, client) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_json_report(self, client) -> None:
        resp = client.get("/api/status/redis")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["messages"]) == 1
        assert data["messages"][0]["name"] == "redis_healthcheck"
        assert data["messages"][0]["level"] == "info"
        assert data["report"]["status"] == "ok"
        assert len(data["report"]["checks"]) == 8
        assert data["report"]["checks"][2]["details"]["Used Memory"] == "1 MB"

    def test_html_report(self, client) -> None:
        resp = client.get("/api/status/redis", params={"format": "html"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert '<div class="redis-check-group">' in resp.text

    def test_unknown_format(self, client) -> None:
        resp = client.get("/api/status/redis", params={"format": "xml"})
        assert resp.status_code == 400

    def test_disabled_json(self, disabled_client) -> None:
        resp = disabled_client.get("/api/status/redis")
        assert resp.status_code == 200
        data = resp.json()
        assert data["report"] is None
        assert data["messages"][0]["level"] == "warning"

    def test_disabled_html(self, disabled_client) -> None:
        resp = disabled_client.get("/api/status/redis", params={"format": "html"})
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Redis caching is not enabled in CRM configuration"
