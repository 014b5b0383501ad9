"""GreenGate — Aliyun Green text moderation for forum hooks.

In-process use::

    from greengate import ContentChecker, init

    checker = ContentChecker(init(settings.get))
    await checker.on_post({"post": {"content": "hello"}})

Or run the hook service: ``python -m greengate.run``.
"""

from greengate.checker import ContentChecker
from greengate.client.factory import GreenClient, create_green_client, init
from greengate.errors import GreenError, IllegalContent, ScanFailure

__all__ = [
    "ContentChecker",
    "GreenClient",
    "GreenError",
    "IllegalContent",
    "ScanFailure",
    "create_green_client",
    "init",
]

__version__ = "1.0.0"
