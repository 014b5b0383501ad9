"""Green text-scan response envelope.

Response body shape (Aliyun Green 2018-05-09):

.. code-block:: json

    {
      "code": 200,
      "msg": "OK",
      "requestId": "…",
      "data": [
        {
          "code": 200, "msg": "OK", "dataId": "…", "taskId": "…",
          "content": "…", "filteredContent": "…",
          "results": [
            {"scene": "antispam", "suggestion": "pass", "label": "normal",
             "rate": 99.9, "extras": {}, "details": []}
          ]
        }
      ]
    }

``from_dict`` is strict about the fields the pass/fail decision reads
(``data``, ``results``) and lenient about everything else. A verdict with a
missing or non-string ``suggestion`` is kept and counts as not passed.
Structural problems raise ``ValueError`` so the dispatcher can map them to
``ScanFailure``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from greengate.constants import GREEN_OK_CODE, SUGGESTION_PASS


@dataclass(frozen=True)
class Verdict:
    """One moderation verdict for one scanned segment and scene."""

    scene: str
    suggestion: Optional[str]
    label: str = ""
    rate: float = 0.0
    extras: dict[str, Any] = field(default_factory=dict)
    details: list[dict[str, Any]] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.suggestion == SUGGESTION_PASS

    @classmethod
    def from_dict(cls, raw: Any) -> "Verdict":
        if not isinstance(raw, dict):
            raise ValueError(f"verdict is not an object: {type(raw).__name__}")
        return cls(
            scene=raw.get("scene", ""),
            suggestion=raw.get("suggestion"),
            label=raw.get("label", ""),
            rate=float(raw.get("rate") or 0.0),
            extras=raw.get("extras") or {},
            details=raw.get("details") or [],
        )


@dataclass(frozen=True)
class TextTaskResult:
    """Per-task result. GreenGate always submits exactly one task."""

    code: int
    results: list[Verdict]
    msg: str = ""
    data_id: Optional[str] = None
    task_id: Optional[str] = None
    content: Optional[str] = None
    filtered_content: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "TextTaskResult":
        if not isinstance(raw, dict):
            raise ValueError(f"task result is not an object: {type(raw).__name__}")
        results = raw.get("results")
        if not isinstance(results, list):
            raise ValueError("task result has no 'results' list")
        return cls(
            code=int(raw.get("code", GREEN_OK_CODE)),
            results=[Verdict.from_dict(r) for r in results],
            msg=raw.get("msg", ""),
            data_id=raw.get("dataId"),
            task_id=raw.get("taskId"),
            content=raw.get("content"),
            filtered_content=raw.get("filteredContent"),
        )


@dataclass(frozen=True)
class ScanResponse:
    """Parsed response envelope — the result returned by ``check()``.

    ``raw`` keeps the decoded JSON body for callers that need fields not
    modelled here.
    """

    code: int
    data: list[TextTaskResult]
    msg: str = ""
    request_id: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, raw: Any) -> "ScanResponse":
        """Parse a decoded response body.

        Raises:
            ValueError: Body is not an object, ``data`` is missing or empty,
                        or a task/verdict is malformed.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"response body is not an object: {type(raw).__name__}")
        data = raw.get("data")
        if not isinstance(data, list) or not data:
            raise ValueError("response has no 'data' entries")
        return cls(
            code=int(raw.get("code", GREEN_OK_CODE)),
            data=[TextTaskResult.from_dict(item) for item in data],
            msg=raw.get("msg", ""),
            request_id=raw.get("requestId"),
            raw=raw,
        )

    @property
    def ok(self) -> bool:
        """True when the envelope and every task report success."""
        return self.code == GREEN_OK_CODE and all(t.code == GREEN_OK_CODE for t in self.data)

    @property
    def verdicts(self) -> list[Verdict]:
        return [v for task in self.data for v in task.results]

    @property
    def passed(self) -> bool:
        """True when every verdict in every task is "pass"."""
        return all(v.passed for v in self.verdicts)
