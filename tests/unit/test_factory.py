"""Unit tests for greengate/client/factory.py — the signing client factory.

Covers:
  - create_green_client() binds the regional text-scan endpoint
  - every POST carries the fixed ACS headers and a signature
  - the JSON body is sent as given, one request per post()
  - init(reader) reads the forum's aliGreenConfig:* keys
"""

from __future__ import annotations

import json

import httpx
import pytest

from greengate.client import GreenClient, create_green_client, init
from greengate.config import Credentials


def _capture() -> tuple[list[httpx.Request], httpx.MockTransport]:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"code": 200})

    return captured, httpx.MockTransport(handler)


class TestCreateGreenClient:
    def test_endpoint_uses_region(self) -> None:
        client = create_green_client(Credentials(region="beijing"))
        assert isinstance(client, GreenClient)
        assert client.endpoint == "http://green.cn-beijing.aliyuncs.com/green/text/scan"

    @pytest.mark.asyncio
    async def test_post_targets_endpoint(self, credentials: Credentials) -> None:
        captured, transport = _capture()
        client = create_green_client(credentials, transport=transport)
        await client.post({"tasks": [{"content": "hi"}]})
        await client.aclose()

        assert len(captured) == 1
        sent = captured[0]
        assert sent.method == "POST"
        assert str(sent.url) == "http://green.cn-shanghai.aliyuncs.com/green/text/scan"
        assert json.loads(sent.content) == {"tasks": [{"content": "hi"}]}

    @pytest.mark.asyncio
    async def test_fixed_headers_on_the_wire(self, credentials: Credentials) -> None:
        captured, transport = _capture()
        client = create_green_client(credentials, transport=transport)
        await client.post({"n": 1})
        await client.aclose()

        headers = captured[0].headers
        assert headers["accept"] == "application/json"
        assert headers["content-type"] == "application/json"
        assert headers["x-acs-version"] == "2018-05-09"
        assert headers["x-acs-signature-version"] == "1.0"
        assert headers["x-acs-signature-method"] == "HMAC-SHA1"

    @pytest.mark.asyncio
    async def test_requests_are_signed(self, credentials: Credentials) -> None:
        captured, transport = _capture()
        client = create_green_client(credentials, transport=transport)
        await client.post({"n": 1})
        await client.aclose()

        headers = captured[0].headers
        assert headers["authorization"].startswith("acs LTAI-test-id:")
        assert "content-md5" in headers
        assert "date" in headers
        assert "x-acs-signature-nonce" in headers

    @pytest.mark.asyncio
    async def test_custom_auth_replaces_signing(self, credentials: Credentials) -> None:
        captured, transport = _capture()
        client = create_green_client(
            credentials, transport=transport, auth=httpx.BasicAuth("u", "p")
        )
        await client.post({"n": 1})
        await client.aclose()
        assert captured[0].headers["authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_no_retry_on_error_status(self, credentials: Credentials) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        client = create_green_client(credentials, transport=httpx.MockTransport(handler))
        response = await client.post({"n": 1})
        await client.aclose()
        assert response.status_code == 503
        assert len(calls) == 1


class TestInit:
    @pytest.mark.asyncio
    async def test_reads_forum_settings(self) -> None:
        settings = {
            "aliGreenConfig:ACCESS_KEY_ID": "LTAI-forum",
            "aliGreenConfig:SECRET_ACCESS_KEY": "forum-secret",
            "aliGreenConfig:REGION": "hangzhou",
        }
        captured, transport = _capture()
        client = init(settings.get, transport=transport)
        assert client.endpoint == "http://green.cn-hangzhou.aliyuncs.com/green/text/scan"

        await client.post({"n": 1})
        await client.aclose()
        assert captured[0].headers["authorization"].startswith("acs LTAI-forum:")

    def test_reader_called_per_key(self) -> None:
        asked: list[str] = []

        def reader(key: str) -> None:
            asked.append(key)
            return None

        init(reader)
        assert sorted(asked) == [
            "aliGreenConfig:ACCESS_KEY_ID",
            "aliGreenConfig:REGION",
            "aliGreenConfig:SECRET_ACCESS_KEY",
        ]
