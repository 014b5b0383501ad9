"""Programmatic uvicorn entry point for GreenGate.

Reads host and port from the loaded config (127.0.0.1:4343 by default) and
starts uvicorn.

Usage:
    python -m greengate.run
    greengate                  # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from greengate.config import load_config

UVICORN_LIMIT_CONCURRENCY: int = 100
UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the GreenGate hook service.

    Raises:
        SystemExit: Propagated from load_config() on config parse errors.
    """
    config = load_config()

    uvicorn.run(
        "greengate.main:app",
        host=config.service.host,
        port=config.service.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
