"""Unit tests for /health and CheckLatencyTracker.

Covers:
  - GET /health returns 503 before app.state.ready = True
  - GET /health returns 200 with all fields after startup
  - status "degraded" when credentials are missing
  - CheckLatencyTracker: avg, p99 threshold, window eviction, failure count
"""

from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from greengate.config import Config, Credentials
from greengate.main import create_app
from greengate.utils.health import CheckLatencyTracker


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _patch_startup(
    monkeypatch: pytest.MonkeyPatch, mock_green: Any, credentials: Credentials
) -> None:
    """Patch load_config and the client factory in greengate.main."""
    config = Config(green=credentials)
    monkeypatch.setattr("greengate.main.load_config", lambda: config)
    monkeypatch.setattr(
        "greengate.main.create_green_client", lambda creds: mock_green().client(creds)
    )


# ─── GET /health — 503 before ready ───────────────────────────────────────────


class TestHealth503BeforeReady:
    @pytest.mark.asyncio
    async def test_health_returns_503_before_ready(self) -> None:
        application = create_app()
        # ASGITransport does not run the lifespan, so ready stays False.
        transport = ASGITransport(app=application)  # type: ignore[arg-type]
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")
        assert response.status_code == 503
        assert response.json()["error"]["status"] == "starting"


# ─── GET /health — 200 after ready ────────────────────────────────────────────


class TestHealth200AfterReady:
    def test_all_fields(
        self, monkeypatch: pytest.MonkeyPatch, mock_green: Any, credentials: Credentials
    ) -> None:
        _patch_startup(monkeypatch, mock_green, credentials)
        with TestClient(create_app()) as client:
            response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body == {
            "status": "ok",
            "service": "running",
            "region": "shanghai",
            "endpoint": "http://green.cn-shanghai.aliyuncs.com/green/text/scan",
            "credentials_configured": True,
            "checks": 0,
            "scan_failures": 0,
            "avg_check_ms": 0.0,
            "p99_check_ms": 0.0,
        }

    def test_degraded_without_credentials(
        self, monkeypatch: pytest.MonkeyPatch, mock_green: Any
    ) -> None:
        _patch_startup(monkeypatch, mock_green, Credentials())
        with TestClient(create_app()) as client:
            body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert body["credentials_configured"] is False

    def test_counts_checks(
        self, monkeypatch: pytest.MonkeyPatch, mock_green: Any, credentials: Credentials
    ) -> None:
        _patch_startup(monkeypatch, mock_green, credentials)
        with TestClient(create_app()) as client:
            client.post("/hooks/filter:post.create", json={"post": {"content": "hi"}})
            body = client.get("/health").json()
        assert body["checks"] == 1
        assert body["scan_failures"] == 0


# ─── CheckLatencyTracker ──────────────────────────────────────────────────────


class TestCheckLatencyTracker:
    def test_empty(self) -> None:
        tracker = CheckLatencyTracker()
        assert tracker.avg_ms == 0.0
        assert tracker.p99_ms == 0.0
        assert tracker.count == 0

    def test_avg(self) -> None:
        tracker = CheckLatencyTracker()
        for ms in (10.0, 20.0, 30.0):
            tracker.record(ms)
        assert tracker.avg_ms == pytest.approx(20.0)
        assert tracker.count == 3

    def test_p99_zero_below_ten_samples(self) -> None:
        tracker = CheckLatencyTracker()
        for _ in range(9):
            tracker.record(50.0)
        assert tracker.p99_ms == 0.0

    def test_p99_with_enough_samples(self) -> None:
        tracker = CheckLatencyTracker()
        for ms in range(1, 101):
            tracker.record(float(ms))
        assert tracker.p99_ms == 99.0

    def test_window_evicts_oldest(self) -> None:
        tracker = CheckLatencyTracker(window=3)
        for ms in (1000.0, 1.0, 2.0, 3.0):
            tracker.record(ms)
        assert tracker.count == 3
        assert tracker.avg_ms == pytest.approx(2.0)

    def test_failures_not_windowed(self) -> None:
        tracker = CheckLatencyTracker(window=2)
        for _ in range(5):
            tracker.record_failure()
        assert tracker.failures == 5
        assert tracker.count == 0
