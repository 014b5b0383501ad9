"""Domain errors raised by the content check dispatcher.

Both errors carry an opaque, machine-readable ``code`` — a forum translation
key such as ``[[green:scan_fail]]``. ``str(exc)`` is that code, so the forum
can hand the message straight to its localization layer.

  ScanFailure:    the Green API call could not be completed or parsed
                  (network error, non-2xx status, malformed JSON/envelope).
  IllegalContent: the call succeeded but at least one verdict was not "pass".

The two are never confused: a connectivity failure is NOT a content verdict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from greengate.constants import ERROR_ILLEGAL_CONTENT, ERROR_SCAN_FAIL

if TYPE_CHECKING:
    from greengate.models.scan import ScanResponse, Verdict


class GreenError(Exception):
    """Base class for GreenGate errors. Subclasses pin ``code``."""

    code: str = ""

    def __init__(self) -> None:
        super().__init__(self.code)


class ScanFailure(GreenError):
    """The moderation call failed before a verdict could be read.

    Args:
        reason: Short cause for operators (usually the exception class name).
                Never contains credentials.
    """

    code = ERROR_SCAN_FAIL

    def __init__(self, reason: str = "") -> None:
        super().__init__()
        self.reason = reason


class IllegalContent(GreenError):
    """At least one scanned segment came back with a non-"pass" suggestion."""

    code = ERROR_ILLEGAL_CONTENT

    def __init__(self, response: "ScanResponse") -> None:
        super().__init__()
        self.response = response

    @property
    def rejected(self) -> list["Verdict"]:
        """Verdicts that caused the rejection."""
        return [v for v in self.response.verdicts if not v.passed]

    @property
    def request_id(self) -> Optional[str]:
        return self.response.request_id
