"""Check latency tracking for the /health endpoint.

``CheckLatencyTracker`` keeps a rolling window of the last 100 Green API call
durations so /health can report ``avg_check_ms`` and ``p99_check_ms`` without
storing unbounded history.
"""

from __future__ import annotations

from collections import deque


class CheckLatencyTracker:
    """Rolling window of check latency measurements (last *window* samples).

    Safe for single-threaded asyncio use (all access from the event loop).

    Usage::

        tracker = CheckLatencyTracker()
        tracker.record(120.5)
        avg = tracker.avg_ms
        p99 = tracker.p99_ms     # 0.0 until 10+ samples
    """

    def __init__(self, window: int = 100) -> None:
        self._times: deque[float] = deque(maxlen=window)
        self._failures = 0

    def record(self, duration_ms: float) -> None:
        """Append a latency sample; the oldest is evicted when the window is full."""
        self._times.append(duration_ms)

    def record_failure(self) -> None:
        self._failures += 1

    @property
    def avg_ms(self) -> float:
        if not self._times:
            return 0.0
        return sum(self._times) / len(self._times)

    @property
    def p99_ms(self) -> float:
        """99th percentile of the window; 0.0 with fewer than 10 samples."""
        if len(self._times) < 10:
            return 0.0
        sorted_times = sorted(self._times)
        idx = max(0, int(len(sorted_times) * 0.99) - 1)
        return sorted_times[idx]

    @property
    def count(self) -> int:
        """Number of samples currently in the window (0 ≤ count ≤ window)."""
        return len(self._times)

    @property
    def failures(self) -> int:
        """Total scan failures since startup (not windowed)."""
        return self._failures
