"""ACS request signing (signature version 1.0, HMAC-SHA1) for the Green API.

Every outgoing request is signed immediately before transmission by
``AcsSignatureAuth``, an ``httpx.Auth`` flow:

  1. ``content-md5``           base64(MD5(body bytes exactly as sent))
  2. ``date``                  RFC 7231 IMF-fixdate, GMT
  3. ``x-acs-signature-nonce`` fresh ULID
  4. canonical string, newline-joined:

         METHOD
         application/json
         <content-md5>
         application/json
         <date>
         x-acs-a:value          ← every x-acs-* header, sorted by name
         x-acs-b:value
         /path

  5. ``authorization``         "acs <access_key_id>:<base64(HMAC-SHA1(secret, canonical))>"

The helpers below are pure so the signature can be reproduced from its inputs
(secret, method, body, date, nonce, headers, path). Nothing is cached: every
request gets its own nonce, date and signature.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from email.utils import formatdate
from typing import Callable, Generator, Iterable, Mapping

import httpx

from greengate.config import Credentials
from greengate.constants import ACS_HEADER_PREFIX, JSON_CONTENT_TYPE
from greengate.utils.ulid import generate_ulid


def content_md5(body: bytes) -> str:
    """Base64-encoded MD5 digest of the request body."""
    return base64.b64encode(hashlib.md5(body).digest()).decode("ascii")


def format_http_date(timestamp: float) -> str:
    """Format a POSIX timestamp as an RFC 7231 HTTP date (``Sun, 06 Nov 1994 08:49:37 GMT``)."""
    return formatdate(timestamp, usegmt=True)


def acs_headers(headers: Mapping[str, str]) -> list[tuple[str, str]]:
    """Return the vendor headers as ``(name, value)`` pairs sorted by name.

    Names are compared as given (case-sensitive, ascending). httpx exposes
    header names lower-cased, which is the form the service signs.
    """
    names = sorted(name for name in headers.keys() if name.startswith(ACS_HEADER_PREFIX))
    return [(name, headers[name]) for name in names]


def build_canonical_string(
    method: str,
    md5: str,
    date: str,
    vendor_headers: Iterable[tuple[str, str]],
    path: str,
) -> str:
    """Build the string-to-sign.

    ``vendor_headers`` must already be sorted (see ``acs_headers``).
    """
    parts = [method, JSON_CONTENT_TYPE, md5, JSON_CONTENT_TYPE, date]
    parts.extend(f"{name}:{value}" for name, value in vendor_headers)
    parts.append(path)
    return "\n".join(parts)


def compute_signature(secret: str, canonical: str) -> str:
    """Base64-encoded HMAC-SHA1 of ``canonical`` keyed with ``secret``."""
    digest = hmac.new(secret.encode("utf-8"), canonical.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_request(
    request: httpx.Request,
    credentials: Credentials,
    *,
    timestamp: float,
    nonce: str,
) -> str:
    """Sign ``request`` in place and return the canonical string that was signed.

    The request body must already be read (``request.content``).
    """
    md5 = content_md5(request.content)
    date = format_http_date(timestamp)

    request.headers["content-md5"] = md5
    request.headers["x-acs-signature-nonce"] = nonce
    request.headers["date"] = date

    canonical = build_canonical_string(
        method=request.method,
        md5=md5,
        date=date,
        vendor_headers=acs_headers(request.headers),
        path=request.url.path,
    )
    signature = compute_signature(credentials.access_key_secret, canonical)
    request.headers["authorization"] = f"acs {credentials.access_key_id}:{signature}"
    return canonical


class AcsSignatureAuth(httpx.Auth):
    """httpx auth flow that signs each request once, right before it is sent.

    Args:
        credentials: Access key pair used for the ``authorization`` header.
        clock:       Returns the current POSIX time; injectable for tests.
        nonce_factory: Returns a fresh nonce per request; injectable for tests.
    """

    requires_request_body = True

    def __init__(
        self,
        credentials: Credentials,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = generate_ulid,
    ) -> None:
        self._credentials = credentials
        self._clock = clock
        self._nonce_factory = nonce_factory

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        sign_request(
            request,
            self._credentials,
            timestamp=self._clock(),
            nonce=self._nonce_factory(),
        )
        yield request
