"""Forum hook endpoints.

``POST /hooks/{hook_name}`` receives a forum hook payload as JSON, runs it
through the matching ``ContentChecker`` entry point, and replies with:

  200  the payload, unchanged          → forum continues the user action
  400  IllegalContent (X-Green-Rejected: true)
  502  ScanFailure (no X-Green-Rejected)
  404  unknown hook name
  422  payload missing the fields the hook reads
  503  service still starting

The forum plugin aborts the user action on any non-2xx reply and shows
``error.code`` through its translator.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Body, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from greengate.checker import ContentChecker
from greengate.constants import HOOK_POST_CREATE, HOOK_TOPIC_POST, HOOK_USER_UPDATE_PROFILE
from greengate.errors import IllegalContent, ScanFailure
from greengate.models.rejection import build_illegal_content_response, build_scan_failure_response
from greengate.utils.logger import bind_hook_context, clear_hook_context, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/hooks", tags=["hooks"])

HookHandler = Callable[[ContentChecker, dict], Awaitable[dict]]

#: Forum hook name → dispatcher entry point.
HOOK_HANDLERS: dict[str, HookHandler] = {
    HOOK_POST_CREATE: ContentChecker.on_post,
    HOOK_TOPIC_POST: ContentChecker.on_topic_post,
    HOOK_USER_UPDATE_PROFILE: ContentChecker.on_user_update_profile,
}


@router.post("/{hook_name}")
async def run_hook(
    request: Request,
    hook_name: str,
    payload: dict[str, Any] = Body(...),
) -> Response:
    """Dispatch one forum hook call."""
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={"status": "starting", "message": "GreenGate is starting up."},
        )

    handler = HOOK_HANDLERS.get(hook_name)
    if handler is None:
        raise HTTPException(status_code=404, detail=f"Unknown hook: {hook_name}")

    checker: ContentChecker = request.app.state.checker
    bind_hook_context(hook_name)
    try:
        result = await handler(checker, payload)
        logger.info("hook_completed")
    except IllegalContent as exc:
        logger.info("hook_rejected", code=exc.code)
        return build_illegal_content_response(exc)
    except ScanFailure as exc:
        logger.warning("hook_scan_failed", code=exc.code, reason=exc.reason)
        return build_scan_failure_response(exc)
    except (KeyError, TypeError, AttributeError) as exc:
        logger.warning("hook_payload_invalid", error=str(exc))
        raise HTTPException(
            status_code=422,
            detail=f"Payload is missing fields required by {hook_name}",
        )
    finally:
        clear_hook_context()

    return JSONResponse(status_code=200, content=result)
