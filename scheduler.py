"""Probe scheduler: runs synchronized rounds of concurrent host probes."""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Tuple, Union

from models import HostSnapshot, HostState, HostStatus, ProbeResult
from config import DEFAULT_MAX_STATS, DEFAULT_PING_TIMEOUT, DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)

# Extra time allowed past a probe's own timeout before it is abandoned
PROBE_GRACE = 0.5

IntervalAction = Callable[[List[HostSnapshot]], Union[None, Awaitable[None]]]
HostAction = Callable[[HostSnapshot], Union[None, Awaitable[None]]]


class Prober(Protocol):
    async def probe(self, url: str, timeout: float) -> ProbeResult:
        ...


@dataclass
class SchedulerConfig:
    poll_interval: float = DEFAULT_POLL_INTERVAL
    ping_timeout: float = DEFAULT_PING_TIMEOUT
    max_stats: int = DEFAULT_MAX_STATS


async def _maybe_await(result) -> None:
    if inspect.isawaitable(result):
        await result


class ProbeScheduler:
    """
    Probes every host once per interval.

    Each round fans out one probe per host and waits for all of them
    before the interval callback sees the results, so a round is never
    observed half-finished and rounds never overlap.
    """

    def __init__(
        self,
        urls: Sequence[str],
        prober: Prober,
        config: Optional[SchedulerConfig] = None,
        on_interval: Optional[IntervalAction] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or SchedulerConfig()
        self.prober = prober
        self.on_interval = on_interval
        self.on_host_down: Optional[HostAction] = None
        self.on_host_up: Optional[HostAction] = None
        self._hosts: List[HostState] = [
            HostState(url, self.config.ping_timeout, self.config.max_stats, clock=clock)
            for url in urls
        ]
        self._running = False
        self._stop_event: Optional[asyncio.Event] = None
        self.rounds = 0

    @property
    def hosts(self) -> List[HostState]:
        return list(self._hosts)

    @property
    def host_count(self) -> int:
        return len(self._hosts)

    @property
    def is_running(self) -> bool:
        return self._running

    def effective_timeout(self, host: HostState) -> float:
        """A probe may never outlast the poll interval."""
        return min(host.timeout, self.config.poll_interval)

    async def start(self) -> None:
        """
        Run probing rounds until stop() is called.

        The first round starts immediately; later rounds start on a
        fixed cadence. Ticks missed by a slow round are skipped.
        """
        self._stop_event = asyncio.Event()
        self._running = True
        loop = asyncio.get_running_loop()
        interval = self.config.poll_interval
        next_tick = loop.time()
        logger.info(
            "Monitoring %d hosts every %.2fs", len(self._hosts), interval
        )

        try:
            while self._running:
                await self.probe_all()
                if not self._running:
                    break
                if self.on_interval is not None:
                    try:
                        await _maybe_await(self.on_interval(self.snapshots()))
                    except Exception:
                        logger.exception("Interval callback failed")

                next_tick += interval
                now = loop.time()
                if next_tick < now:
                    missed = int((now - next_tick) // interval) + 1
                    logger.debug("Round overran the interval, skipping %d tick(s)", missed)
                    next_tick += missed * interval
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=next_tick - now)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            logger.info("Monitoring stopped after %d rounds", self.rounds)

    def stop(self) -> None:
        """Signal the loop to exit; an in-flight round is allowed to drain."""
        self._running = False
        if self._stop_event is not None:
            self._stop_event.set()

    async def probe_all(self) -> List[ProbeResult]:
        """
        Probe every host concurrently and wait for all of them.

        Results are recorded into the hosts only once the whole round
        has settled.

        Returns:
            One ProbeResult per host, in host order.
        """
        start_time = time.monotonic()
        results = await asyncio.gather(
            *[self._probe_host(h) for h in self._hosts],
            return_exceptions=True,
        )

        settled: List[ProbeResult] = []
        transitions: List[Tuple[HostAction, HostSnapshot]] = []
        for host, result in zip(self._hosts, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(
                    "Unexpected error probing %s",
                    host.url,
                    exc_info=(type(result), result, result.__traceback__),
                )
                result = ProbeResult(url=host.url, error=f"{type(result).__name__}: {result}")
            hook = self._record(host, result)
            if hook is not None:
                transitions.append((hook, host.snapshot()))
            settled.append(result)

        self.rounds += 1
        logger.debug(
            "Round %d complete: %d/%d up (%.2fs)",
            self.rounds,
            sum(1 for r in settled if r.success),
            len(settled),
            time.monotonic() - start_time,
        )

        for hook, snapshot in transitions:
            try:
                await _maybe_await(hook(snapshot))
            except Exception:
                logger.exception("Transition hook failed for %s", snapshot.url)
        return settled

    async def _probe_host(self, host: HostState) -> ProbeResult:
        timeout = self.effective_timeout(host)
        start_time = time.monotonic()
        try:
            # the prober enforces its own timeout; this bounds a prober that does not
            return await asyncio.wait_for(
                self.prober.probe(host.url, timeout), timeout=timeout + PROBE_GRACE
            )
        except asyncio.TimeoutError:
            return ProbeResult(
                url=host.url,
                elapsed=time.monotonic() - start_time,
                error=f"Timed out after {timeout:g}s",
            )

    def _record(self, host: HostState, result: ProbeResult) -> Optional[HostAction]:
        """Record a result; returns the hook to fire if the host changed state."""
        was_down = not host.is_up
        error = None if result.success else (result.error or "probe failed")
        status = host.record_probe(result.elapsed, error)

        if status == HostStatus.DOWN and not was_down:
            logger.warning("Host %s is down: %s", host.url, error)
            return self.on_host_down
        if status == HostStatus.UP and was_down:
            logger.info("Host %s is back up", host.url)
            return self.on_host_up
        return None

    def snapshots(self) -> List[HostSnapshot]:
        return [h.snapshot() for h in self._hosts]

    def max_elapsed(self) -> float:
        """Largest retained latency across every host."""
        return max((h.window.max() for h in self._hosts), default=0.0)

    def has_errors(self) -> bool:
        return any(h.errors for h in self._hosts)
