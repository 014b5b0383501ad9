"""Health endpoint for GreenGate.

GET /health — 503 before ``app.state.ready`` (lifespan still starting),
200 afterwards with the bound endpoint and rolling check latency.

Polled by container probes and by the forum plugin before it starts
forwarding hooks.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request

from greengate.config import Config
from greengate.utils.health import CheckLatencyTracker

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {
          "status": "ok" | "degraded",
          "service": "running",
          "region": "shanghai",
          "endpoint": "http://green.cn-shanghai.aliyuncs.com/green/text/scan",
          "credentials_configured": true,
          "checks": 42,
          "scan_failures": 0,
          "avg_check_ms": 83.1,
          "p99_check_ms": 190.4
        }

    ``status`` is "degraded" when credentials are missing — every check would
    fail with ``[[green:scan_fail]]``.
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "GreenGate is starting up.",
            },
        )

    config: Config = request.app.state.config
    tracker: Optional[CheckLatencyTracker] = getattr(
        request.app.state, "latency_tracker", None
    )
    if tracker is None:
        tracker = CheckLatencyTracker()

    configured = config.green.configured
    return {
        "status": "ok" if configured else "degraded",
        "service": "running",
        "region": config.green.region,
        "endpoint": config.green.endpoint,
        "credentials_configured": configured,
        "checks": tracker.count,
        "scan_failures": tracker.failures,
        "avg_check_ms": tracker.avg_ms,
        "p99_check_ms": tracker.p99_ms,
    }
