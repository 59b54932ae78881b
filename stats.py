"""
Rolling latency statistics.

A fixed-capacity circular buffer of latency samples (in seconds)
with the summary statistics shown on the status display.
"""

import math
from typing import List

from utils import round_half_up


class RollingStatsWindow:
    """
    Bounded FIFO window of latency samples.

    Backed by a preallocated list plus a head index and a count, so
    recording a sample never allocates and eviction is O(1). Once the
    window is full, each new sample overwrites the oldest one.
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"Window capacity must be an integer >= 1, got {capacity!r}")
        self._capacity = capacity
        self._buffer: List[float] = [0.0] * capacity
        self._head = 0  # index of the oldest sample
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._count

    def record(self, sample: float) -> None:
        """Append a sample, evicting the oldest one when full."""
        if self._count < self._capacity:
            self._buffer[(self._head + self._count) % self._capacity] = sample
            self._count += 1
        else:
            self._buffer[self._head] = sample
            self._head = (self._head + 1) % self._capacity

    def values(self) -> List[float]:
        """Return a copy of the retained samples, oldest first."""
        return [
            self._buffer[(self._head + i) % self._capacity]
            for i in range(self._count)
        ]

    def last_n(self, n: int) -> List[float]:
        """Return up to `n` most recent samples, most recent first."""
        n = max(0, min(n, self._count))
        newest = self._head + self._count - 1
        return [self._buffer[(newest - i) % self._capacity] for i in range(n)]

    def last(self) -> float:
        """Most recent sample, or 0.0 when empty."""
        recent = self.last_n(1)
        return recent[0] if recent else 0.0

    def mean(self) -> float:
        """Arithmetic mean of the retained samples; 0.0 when empty."""
        if self._count == 0:
            return 0.0
        return sum(self.values()) / self._count

    def min(self) -> float:
        return min(self.values()) if self._count else 0.0

    def max(self) -> float:
        return max(self.values()) if self._count else 0.0

    def stddev(self) -> float:
        """Population standard deviation (Welford); 0.0 below two samples."""
        if self._count < 2:
            return 0.0
        mean = 0.0
        m2 = 0.0
        for k, value in enumerate(self.values(), 1):
            delta = value - mean
            mean += delta / k
            m2 += delta * (value - mean)
        return math.sqrt(m2 / self._count)

    def percentile(self, percentile: float) -> float:
        """
        Compute the given percentile of the retained samples.

        The rank index is `percentile / 100 * len`. When it lands exactly
        on an integer boundary the result is the midpoint of the two
        samples around it; otherwise the index is rounded half-up and the
        sample at that rank is returned. A rank below 1 yields 0.0.

        Args:
            percentile: Percentile in [0, 100].

        Returns:
            The percentile latency in seconds.

        Raises:
            ValueError: If percentile is outside [0, 100].
        """
        if not 0.0 <= percentile <= 100.0:
            raise ValueError(f"Percentile must be within [0, 100], got {percentile}")
        if self._count == 0:
            return 0.0

        values = sorted(self.values())
        index = percentile * len(values) / 100.0

        if index == int(index):
            i = int(index)
            if i < 1:
                return 0.0
            if i >= len(values):
                return values[-1]
            return (values[i - 1] + values[i]) / 2

        i = round_half_up(index)
        if i < 1:
            return 0.0
        return values[i - 1]
