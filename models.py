"""
Data Models for Host Monitor.

Defines the host status state machine, probe results, and the
immutable snapshots handed to the formatter and status API.
"""

import time
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from stats import RollingStatsWindow

# Number of recent errors kept per host for the error section
MAX_ERRORS = 5
# Number of recent samples shown in the sparkline
SPARKLINE_SAMPLES = 5


class HostStatus(str, Enum):
    """Host availability status."""
    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"


@dataclass
class ProbeResult:
    """Outcome of a single HTTP probe."""
    url: str
    elapsed: float = 0.0
    success: bool = False
    status_code: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class HostSnapshot:
    """Read-only view of a host taken at a single instant."""
    url: str
    status: HostStatus
    uptime_fraction: float
    total_time: float
    total_downtime: float
    down_for: Optional[float]
    probe_count: int
    sample_count: int
    last: float
    mean: float
    p99: float
    p90: float
    p75: float
    min_latency: float
    max_latency: float
    recent: Tuple[float, ...] = ()
    last_error: Optional[str] = None
    errors: Tuple[str, ...] = ()

    @property
    def is_up(self) -> bool:
        return self.status != HostStatus.DOWN


class HostState:
    """
    A monitored host and its availability history.

    Tracks the UNKNOWN -> UP <-> DOWN state machine, the cumulative
    downtime across outages, and a rolling window of probe latencies.
    Every probe records its latency, failed ones included.
    """

    def __init__(
        self,
        url: str,
        timeout: float,
        max_stats: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url
        self.timeout = timeout
        self._clock = clock
        self.created_at = clock()
        self.status = HostStatus.UNKNOWN
        self.down_since: Optional[float] = None
        self.downtime = 0.0
        self.window = RollingStatsWindow(max_stats)
        self.last_error: Optional[str] = None
        self.errors = deque(maxlen=MAX_ERRORS)
        self.probe_count = 0
        self._lock = threading.Lock()

    @property
    def is_up(self) -> bool:
        """A host is up unless it is in the DOWN state."""
        return self.down_since is None

    def record_probe(self, elapsed: float, error: Optional[str] = None) -> HostStatus:
        """
        Record the outcome of a probe.

        Args:
            elapsed: Probe latency in seconds.
            error: Failure description, or None on success.

        Returns:
            The host's status after the probe.
        """
        with self._lock:
            self.probe_count += 1
            if error is None:
                self._set_up()
            else:
                self._set_down(self._clock())
                self.last_error = error
                self.errors.append(error)
            self.window.record(elapsed)
            return self.status

    def mark_up(self) -> None:
        """Transition to UP, closing any open down window."""
        with self._lock:
            self._set_up()

    def mark_down(self, at: Optional[float] = None) -> None:
        """Transition to DOWN; a no-op for the timestamp if already down."""
        with self._lock:
            self._set_down(self._clock() if at is None else at)

    def _set_up(self) -> None:
        if self.down_since is not None:
            self.downtime += max(0.0, self._clock() - self.down_since)
        self.down_since = None
        self.status = HostStatus.UP

    def _set_down(self, at: float) -> None:
        if self.down_since is None:
            self.down_since = at
        self.status = HostStatus.DOWN

    def total_time(self, now: Optional[float] = None) -> float:
        """Seconds since this host started being monitored."""
        now = self._clock() if now is None else now
        return max(0.0, now - self.created_at)

    def total_downtime(self, now: Optional[float] = None) -> float:
        """Cumulative downtime including the currently open down window."""
        now = self._clock() if now is None else now
        downtime = self.downtime
        if self.down_since is not None:
            downtime += max(0.0, now - self.down_since)
        return downtime

    def down_for(self, now: Optional[float] = None) -> Optional[float]:
        if self.down_since is None:
            return None
        now = self._clock() if now is None else now
        return max(0.0, now - self.down_since)

    def uptime_fraction(self, now: Optional[float] = None) -> float:
        """Share of the monitored time spent not DOWN, within [0, 1]."""
        now = self._clock() if now is None else now
        total = self.total_time(now)
        if total <= 0:
            return 1.0
        fraction = (total - self.total_downtime(now)) / total
        return min(1.0, max(0.0, fraction))

    def snapshot(self) -> HostSnapshot:
        """Capture a consistent, immutable view of this host."""
        with self._lock:
            now = self._clock()
            window = self.window
            return HostSnapshot(
                url=self.url,
                status=self.status,
                uptime_fraction=self.uptime_fraction(now),
                total_time=self.total_time(now),
                total_downtime=self.total_downtime(now),
                down_for=self.down_for(now),
                probe_count=self.probe_count,
                sample_count=len(window),
                last=window.last(),
                mean=window.mean(),
                p99=window.percentile(99.0),
                p90=window.percentile(90.0),
                p75=window.percentile(75.0),
                min_latency=window.min(),
                max_latency=window.max(),
                recent=tuple(window.last_n(SPARKLINE_SAMPLES)),
                last_error=self.last_error,
                errors=tuple(self.errors),
            )
