"""Green API client package.

  - signing.py — ACS signature v1.0 (content-md5, canonical string, HMAC-SHA1)
                 and the ``AcsSignatureAuth`` httpx auth flow
  - factory.py — ``GreenClient`` and ``create_green_client()`` / ``init()``
"""

from greengate.client.factory import GreenClient, create_green_client, init
from greengate.client.signing import AcsSignatureAuth

__all__ = ["AcsSignatureAuth", "GreenClient", "create_green_client", "init"]
