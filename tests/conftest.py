"""Root test configuration for GreenGate.

Provides:
  - an autouse fixture that clears GREENGATE_* environment variables so a
    developer's shell never leaks credentials into the suite
  - ``MockGreen``: an in-process Green text-scan service on httpx.MockTransport
  - ``credentials`` / ``mock_green`` fixtures
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import pytest

from greengate.client.factory import GreenClient, create_green_client
from greengate.config import Credentials

GREEN_ENV_VARS = (
    "GREENGATE_CONFIG",
    "GREENGATE_ACCESS_KEY_ID",
    "GREENGATE_SECRET_ACCESS_KEY",
    "GREENGATE_REGION",
    "GREENGATE_PORT",
)


@pytest.fixture(autouse=True)
def clear_green_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in GREEN_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def green_body(
    *suggestions: str,
    code: int = 200,
    task_code: int = 200,
    request_id: str = "REQ-0001",
) -> dict[str, Any]:
    """Build a Green text-scan response envelope with one verdict per suggestion."""
    return {
        "code": code,
        "msg": "OK",
        "requestId": request_id,
        "data": [
            {
                "code": task_code,
                "msg": "OK",
                "dataId": None,
                "taskId": "txt-task-1",
                "content": "…",
                "filteredContent": "…",
                "results": [
                    {
                        "scene": "antispam",
                        "suggestion": suggestion,
                        "label": "normal" if suggestion == "pass" else "abuse",
                        "rate": 99.9,
                        "extras": {},
                        "details": [],
                    }
                    for suggestion in (suggestions or ("pass",))
                ],
            }
        ],
    }


class MockGreen:
    """Mock Green text-scan service that records received requests.

    Args:
        suggestions: Verdicts returned for any content not in ``flagged``.
        flagged:     Content → suggestion overrides (e.g. {"spam": "block"}).
        status_code: HTTP status of every reply.
        body:        Raw reply bytes; replaces the generated envelope.
        raise_on_send: Exception raised instead of replying.
    """

    def __init__(
        self,
        *,
        suggestions: tuple[str, ...] = ("pass",),
        flagged: Optional[dict[str, str]] = None,
        status_code: int = 200,
        body: Optional[bytes] = None,
        raise_on_send: Optional[Exception] = None,
    ) -> None:
        self.received_requests: list[httpx.Request] = []
        self._suggestions = suggestions
        self._flagged = flagged or {}
        self._status_code = status_code
        self._body = body
        self._raise_on_send = raise_on_send

    def reply(self, request: httpx.Request) -> httpx.Response:
        if self._body is not None:
            content = self._body
        else:
            scanned = json.loads(request.content)["tasks"][0]["content"]
            if scanned in self._flagged:
                envelope = green_body(self._flagged[scanned])
            else:
                envelope = green_body(*self._suggestions)
            content = json.dumps(envelope).encode("utf-8")
        return httpx.Response(
            self._status_code,
            content=content,
            headers={"content-type": "application/json"},
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.received_requests.append(request)
        if self._raise_on_send is not None:
            raise self._raise_on_send
        return self.reply(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self, credentials: Credentials) -> GreenClient:
        return create_green_client(credentials, transport=self.transport)

    @property
    def request_count(self) -> int:
        return len(self.received_requests)

    @property
    def scanned(self) -> list[str]:
        """Content of each received scan task, in arrival order."""
        return [json.loads(r.content)["tasks"][0]["content"] for r in self.received_requests]


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        access_key_id="LTAI-test-id",
        access_key_secret="test-secret",
        region="shanghai",
    )


@pytest.fixture
def mock_green() -> type[MockGreen]:
    return MockGreen


@pytest.fixture(name="green_body")
def green_body_fixture() -> Any:
    return green_body
