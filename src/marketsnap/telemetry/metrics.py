"""
Metrics collection for refresh runs.

Tracks request counters, per-step timings and written item counts
with plain in-memory storage.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any


@dataclass
class StepStats:
    """Timing and outcome of one refresh step."""

    duration_s: float = 0.0
    items: int = 0
    failed: bool = False


class RunMetrics:
    """
    Collects counters for a single refresh run.

    Features:
    - Request / retry / failure counters
    - Per-step wall-clock timing
    - Items produced per step
    """

    def __init__(self) -> None:
        self._start_time = time.monotonic()
        self._requests = 0
        self._retries = 0
        self._failures = 0
        self._steps: dict[str, StepStats] = {}

    def record_request(self) -> None:
        """Record one HTTP attempt."""
        self._requests += 1

    def record_retry(self) -> None:
        """Record one failed attempt."""
        self._retries += 1

    def record_failure(self, step: str) -> None:
        """Record a step-level failure that was skipped."""
        self._failures += 1
        self._step(step).failed = True

    def record_items(self, step: str, count: int) -> None:
        """Record how many items a step produced."""
        self._step(step).items = count

    @contextmanager
    def time_step(self, step: str) -> Iterator[StepStats]:
        """Measure wall-clock time spent inside the block."""
        stats = self._step(step)
        start = time.monotonic()
        try:
            yield stats
        finally:
            stats.duration_s = time.monotonic() - start

    def _step(self, step: str) -> StepStats:
        if step not in self._steps:
            self._steps[step] = StepStats()
        return self._steps[step]

    @property
    def requests(self) -> int:
        """Total HTTP attempts."""
        return self._requests

    @property
    def retries(self) -> int:
        """Total failed attempts."""
        return self._retries

    @property
    def failures(self) -> int:
        """Total skipped step-level failures."""
        return self._failures

    @property
    def elapsed_s(self) -> float:
        """Seconds since the run started."""
        return time.monotonic() - self._start_time

    def get_step(self, step: str) -> StepStats | None:
        """Get stats for a step, if it ran."""
        return self._steps.get(step)

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for embedding in a snapshot."""
        return {
            "requests": self._requests,
            "retries": self._retries,
            "failures": self._failures,
            "elapsed_s": round(self.elapsed_s, 3),
            "steps": {
                name: {
                    "duration_s": round(stats.duration_s, 3),
                    "items": stats.items,
                    "failed": stats.failed,
                }
                for name, stats in self._steps.items()
            },
        }
