"""Rejection HTTP response builders for the hook endpoints.

Two factory functions build the responses for the two failure modes a hook
call can end in:

  build_illegal_content_response():
      HTTP 400 — the Green API flagged the content (``IllegalContent``).
      MUST include ``X-Green-Rejected: true``.

  build_scan_failure_response():
      HTTP 502 — the Green API could not be reached or parsed (``ScanFailure``).
      MUST NOT include ``X-Green-Rejected`` — a failed scan is NOT a verdict.

In both cases ``error.code`` is the forum translation key, so the forum
plugin can surface it to the user untouched.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse

from greengate.errors import IllegalContent, ScanFailure

REJECTED_HEADER: str = "X-Green-Rejected"


def build_illegal_content_response(exc: IllegalContent) -> JSONResponse:
    """Build the HTTP 400 rejection for flagged content.

    .. code-block:: json

        {
          "error": {
            "code": "[[green:illegal_content]]",
            "message": "Content rejected by moderation",
            "type": "green_illegal_content"
          },
          "green": {
            "request_id": "<Green requestId or null>",
            "labels": ["abuse"],
            "suggestions": ["block"]
          }
        }

    The scanned text itself is never echoed back.
    """
    rejected = exc.rejected
    response = JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": exc.code,
                "message": "Content rejected by moderation",
                "type": "green_illegal_content",
            },
            "green": {
                "request_id": exc.request_id,
                "labels": [v.label for v in rejected],
                "suggestions": [v.suggestion for v in rejected],
            },
        },
    )
    response.headers[REJECTED_HEADER] = "true"
    return response


def build_scan_failure_response(exc: ScanFailure) -> JSONResponse:
    """Build the HTTP 502 response for a failed moderation call.

    ``detail`` is the failure reason (exception class name) for operator
    debugging; it never contains credentials or the scanned text.
    """
    return JSONResponse(
        status_code=502,
        content={
            "error": {
                "code": exc.code,
                "message": "Moderation service unavailable",
                "detail": exc.reason or None,
            }
        },
    )
