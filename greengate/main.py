"""GreenGate FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /health router — delegated to greengate/health.py
  - /hooks router  — delegated to greengate/hooks/router.py
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()            → app.state.config
  2. create_green_client()    → app.state.green_client (signed, shared)
  3. CheckLatencyTracker()    → app.state.latency_tracker
  4. ContentChecker(...)      → app.state.checker
  5. app.state.ready = True

Shutdown: app.state.ready = False → close the Green client.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from greengate.checker import ContentChecker
from greengate.client.factory import create_green_client
from greengate.config import Config, load_config
from greengate.health import router as health_router
from greengate.hooks.router import router as hooks_router
from greengate.utils.health import CheckLatencyTracker
from greengate.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("GreenGate starting up...")

    # load_config() raises SystemExit on parse error or missing version field,
    # so the process exits non-zero before ready=True is ever set.
    config: Config = load_config()
    app.state.config = config

    # One shared, signing client for the process lifetime.
    green_client = create_green_client(config.green)
    app.state.green_client = green_client

    latency_tracker = CheckLatencyTracker()
    app.state.latency_tracker = latency_tracker

    app.state.checker = ContentChecker(
        green_client,
        logger=get_logger("greengate.checker"),
        latency_tracker=latency_tracker,
    )

    app.state.ready = True
    logger.info("GreenGate ready", region=config.green.region, endpoint=green_client.endpoint)

    yield

    logger.info("GreenGate shutting down...")
    app.state.ready = False

    try:
        await green_client.aclose()
        logger.info("Green client closed")
    except Exception as exc:
        logger.warning("Green client close error (non-fatal)", error=str(exc))

    logger.info("GreenGate shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    """Create and configure the GreenGate FastAPI application.

    Call this function directly in tests to get an isolated app instance.
    The module-level `app` is created at import time for uvicorn:
        uvicorn greengate.main:app --host 127.0.0.1 --port 4343
    """
    application = FastAPI(
        title="GreenGate",
        description="Aliyun Green text moderation for forum hooks",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    # Initialize ready flag before lifespan; /health and /hooks return 503
    # for any request that arrives before startup completes.
    application.state.ready = False

    application.include_router(health_router)
    application.include_router(hooks_router)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


app = create_app()
