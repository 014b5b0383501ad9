"""ULID generation utility for GreenGate.

Provides ``generate_ulid()``, used for:
  - ``x-acs-signature-nonce`` — a fresh, unique nonce on every signed request
  - ``request_id`` bound into the log context for each hook call

ULIDs are 26 characters of Crockford Base32 (0-9A-HJKMNP-TV-Z): a 48-bit
millisecond timestamp plus 80 random bits, unique within the same millisecond
and URL/header safe.

Uses the `python-ulid` library — do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Example::

        nonce = generate_ulid()
        # "01KJ0JRVHYA7KX32VPN5ZSCTMV"
    """
    return str(ULID())
