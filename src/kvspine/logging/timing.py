"""
Timing utilities for command logging.

Design:
- Monotonic clock (time.perf_counter), ~1μs overhead
- Durations exposed as float seconds/milliseconds and integer microseconds
- No logging here; callers decide what to emit
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class TimingResult:
    """Result of a timed block."""

    step: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None

    def stop(self) -> "TimingResult":
        """Record end time."""
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_seconds(self) -> float:
        """Duration in seconds."""
        if self.ended_at is None:
            return time.perf_counter() - self.started_at
        return self.ended_at - self.started_at

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        return self.duration_seconds * 1000

    @property
    def duration_us(self) -> int:
        """Duration in whole microseconds (truncated)."""
        return int(self.duration_seconds * 1_000_000)


@contextmanager
def timed_block(step: str = "unnamed") -> Iterator[TimingResult]:
    """
    Low-level timing context manager.

    The timer is stopped even when the block raises.

    Usage:
        with timed_block("get") as timer:
            result = driver.execute("get", "k")
        print(timer.duration_us)
    """
    timer = TimingResult(step=step)
    try:
        yield timer
    finally:
        timer.stop()
