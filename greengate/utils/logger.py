"""Structured logging for GreenGate.

structlog, rendered as JSON lines (or coloured console output for local
runs). Each hook call binds a ``request_id`` and the hook name through
``structlog.contextvars`` so the Green API calls it triggers log under the
same id, including the sibling checks of a topic post.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor

from greengate.utils.ulid import generate_ulid

#: Event keys whose values are replaced before rendering.
SECRET_KEYS = frozenset({"access_key_secret", "secret_access_key", "authorization"})

_HOOK_CONTEXT_KEYS = ("request_id", "hook")


def redact_secrets(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the process.

    Args:
        log_level: DEBUG shows the raw Green response bodies (``scan_response``).
        json_output: JSON lines when True, console renderer otherwise.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        redact_secrets,
        structlog.processors.format_exc_info,
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "greengate") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_hook_context(hook: str, request_id: Optional[str] = None) -> str:
    """Bind ``request_id`` and ``hook`` for every log line of this hook call.

    Returns the request id (a fresh ULID unless one is given).
    """
    request_id = request_id or generate_ulid()
    structlog.contextvars.bind_contextvars(request_id=request_id, hook=hook)
    return request_id


def clear_hook_context() -> None:
    structlog.contextvars.unbind_contextvars(*_HOOK_CONTEXT_KEYS)


# main.py reconfigures from the environment at import.
configure_logging()
