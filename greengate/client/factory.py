"""Signing client factory for the Green text-scan endpoint.

``create_green_client()`` builds one ``GreenClient`` bound to
``http://green.cn-{region}.aliyuncs.com/green/text/scan``. It is created once
at startup (lifespan, or ``init()`` for in-process use) and passed to the
``ContentChecker`` — it is NEVER instantiated per request.

The wrapped ``httpx.AsyncClient`` carries the fixed ACS headers and the
``AcsSignatureAuth`` flow, so every POST is signed just before it is sent.
No retries and no explicit timeout: one network call per ``post()``, bounded
only by the transport's default timeout.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from greengate.client.signing import AcsSignatureAuth
from greengate.config import Config, ConfigReader, Credentials
from greengate.constants import ACS_FIXED_HEADERS
from greengate.utils.logger import get_logger

logger = get_logger(__name__)

POOL_MAX_CONNECTIONS: int = 20
POOL_MAX_KEEPALIVE: int = 20
POOL_KEEPALIVE_EXPIRY: float = 30.0  # seconds


class GreenClient:
    """HTTP client pre-bound to the Green text-scan endpoint."""

    def __init__(self, http_client: httpx.AsyncClient, endpoint: str) -> None:
        self._http = http_client
        self.endpoint = endpoint

    async def post(self, body: dict[str, Any]) -> httpx.Response:
        """POST ``body`` as JSON to the bound endpoint (signed by the auth flow)."""
        return await self._http.post(self.endpoint, json=body)

    async def aclose(self) -> None:
        await self._http.aclose()


def create_green_client(
    credentials: Credentials,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    auth: Optional[httpx.Auth] = None,
) -> GreenClient:
    """Create the shared Green client.

    Args:
        credentials: Access key pair and region.
        transport:   Optional transport override (``httpx.MockTransport`` in tests).
        auth:        Optional signing flow override (fixed clock/nonce in tests).
                     Defaults to ``AcsSignatureAuth(credentials)``.
    """
    http_client = httpx.AsyncClient(
        headers=ACS_FIXED_HEADERS,
        auth=auth if auth is not None else AcsSignatureAuth(credentials),
        limits=httpx.Limits(
            max_connections=POOL_MAX_CONNECTIONS,
            max_keepalive_connections=POOL_MAX_KEEPALIVE,
            keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
        ),
        transport=transport,
        follow_redirects=False,
    )
    logger.info(
        "Green client created",
        endpoint=credentials.endpoint,
        access_key_id=credentials.access_key_id,
    )
    return GreenClient(http_client, credentials.endpoint)


def init(reader: ConfigReader, transport: Optional[httpx.AsyncBaseTransport] = None) -> GreenClient:
    """Build the Green client from the forum's settings store.

    Reads the three ``aliGreenConfig:*`` keys through ``reader`` once; there is
    no runtime reconfiguration.
    """
    config = Config.from_reader(reader)
    return create_green_client(config.green, transport=transport)
