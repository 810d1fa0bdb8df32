"""Bounded latency window for the metrics aggregator.

Keeps the most recent observations in a fixed-size circular buffer. When
the buffer is full, the oldest observation is evicted to make room.
"""

from collections import deque
from collections.abc import Iterator


class LatencyWindow:
    """Ring buffer of recent latency observations in milliseconds.

    Args:
        capacity: Maximum number of observations to retain.
    """

    def __init__(self, capacity: int = 1000) -> None:
        self._buffer: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of retained observations."""
        return self._buffer.maxlen or 0

    def append(self, latency_ms: float) -> None:
        """Record one observation, evicting the oldest when full."""
        self._buffer.append(latency_ms)

    def mean(self) -> float | None:
        """Arithmetic mean of retained observations, None when empty."""
        if not self._buffer:
            return None
        return sum(self._buffer) / len(self._buffer)

    def trim(self, threshold: int = 100, keep: int = 50) -> None:
        """Drop all but the last *keep* observations once above *threshold*."""
        if len(self._buffer) <= threshold:
            return
        recent = list(self._buffer)[-keep:]
        self._buffer.clear()
        self._buffer.extend(recent)

    def __len__(self) -> int:
        return len(self._buffer)

    def __iter__(self) -> Iterator[float]:
        return iter(self._buffer)
