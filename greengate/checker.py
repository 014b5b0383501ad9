"""Content check dispatcher.

``ContentChecker.check()`` is the single moderation primitive: one signed POST
to the Green text-scan endpoint per call. The three forum hook entry points
extract text fields from the hook payload and run them through ``check()``:

  on_post                 post.content                      one call
  on_topic_post           title, content                    two calls, concurrent
  on_user_update_profile  username, signature, aboutme,     one call per non-empty
                          location, fullname                field, sequential

Outcome contract:
  - Any failure to complete or parse the call → ``ScanFailure``.
  - Any verdict other than "pass"             → ``IllegalContent``.
  - Otherwise the entry points return the payload they were given, unmodified.

No retries, no caching, no cancellation. In ``on_topic_post`` the first failure
propagates while the other call is left to finish on its own.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional, TypeVar

import structlog

from greengate.client.factory import GreenClient
from greengate.constants import BIZ_TYPE, PROFILE_FIELDS, SCENES
from greengate.errors import IllegalContent, ScanFailure
from greengate.models.scan import ScanResponse
from greengate.utils.health import CheckLatencyTracker
from greengate.utils.logger import get_logger

Payload = TypeVar("Payload", bound=dict)


def build_scan_body(content: str) -> dict[str, Any]:
    """JSON body for a single-task text scan."""
    return {
        "bizType": BIZ_TYPE,
        "scenes": list(SCENES),
        "tasks": [{"content": content}],
    }


def _consume_exception(task: "asyncio.Future[Any]") -> None:
    # gather() only re-raises the first error; mark the sibling's as seen.
    if not task.cancelled():
        task.exception()


class ContentChecker:
    """Runs forum text through the Green API and raises on rejection.

    Args:
        client:          Shared ``GreenClient`` built at startup.
        logger:          Structured logger; defaults to this module's logger.
        latency_tracker: Optional tracker fed with each call's duration.
    """

    def __init__(
        self,
        client: GreenClient,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
        latency_tracker: Optional[CheckLatencyTracker] = None,
    ) -> None:
        self._client = client
        self._logger = logger or get_logger(__name__)
        self._latency_tracker = latency_tracker

    async def check(self, content: str) -> ScanResponse:
        """Scan one piece of text.

        Returns:
            The parsed response envelope when every verdict is "pass".

        Raises:
            ScanFailure:    Transport error, non-2xx status, undecodable JSON,
                            malformed envelope, or a non-200 envelope/task code.
            IllegalContent: At least one verdict's suggestion is not "pass".
        """
        t0 = time.perf_counter()
        try:
            response = await self._client.post(build_scan_body(content))
            response.raise_for_status()
            envelope = ScanResponse.from_dict(response.json())
            if not envelope.ok:
                raise ValueError(f"green returned code {envelope.code}")
        except Exception as exc:  # noqa: BLE001
            # No verdict was read; every cause maps to ScanFailure.
            self._logger.error(
                "scan_failed",
                endpoint=self._client.endpoint,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            if self._latency_tracker is not None:
                self._latency_tracker.record_failure()
            raise ScanFailure(reason=type(exc).__name__) from exc

        if self._latency_tracker is not None:
            self._latency_tracker.record((time.perf_counter() - t0) * 1000)
        self._logger.debug("scan_response", body=response.text)

        if not envelope.passed:
            rejected = [v for v in envelope.verdicts if not v.passed]
            self._logger.info(
                "content_rejected",
                green_request_id=envelope.request_id,
                labels=[v.label for v in rejected],
                suggestions=[v.suggestion for v in rejected],
            )
            raise IllegalContent(envelope)
        return envelope

    async def on_post(self, data: Payload) -> Payload:
        """Post-submission hook: checks ``data["post"]["content"]``."""
        await self.check(data["post"]["content"])
        return data

    async def on_topic_post(self, data: Payload) -> Payload:
        """Topic-submission hook: checks title and content concurrently.

        The first failure propagates; the other check runs to completion.
        """
        title, content = data["title"], data["content"]
        tasks = [asyncio.ensure_future(self.check(text)) for text in (title, content)]
        for task in tasks:
            task.add_done_callback(_consume_exception)
        await asyncio.gather(*tasks)
        return data

    async def on_user_update_profile(self, data: Payload) -> Payload:
        """Profile-update hook: checks each populated profile field in order.

        Empty or absent fields are skipped; the first failing field stops
        the remaining checks.
        """
        fields = data["data"]
        for name in PROFILE_FIELDS:
            value = fields.get(name)
            if not value:
                continue
            await self.check(value)
        return data
