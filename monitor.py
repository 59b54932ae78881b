"""
Host Monitor Core Module.

Wires configuration, the HTTP prober, the probe scheduler, the live
terminal display and the optional status API together, and provides
the command-line entry point.
"""

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import replace
from typing import List, Optional, TextIO

import uvicorn

from api import create_app
from config import ConfigError, MonitorConfig, load_config_file
from formatter import format_report, render
from health_checker import HealthChecker
from models import HostSnapshot, HostStatus
from notifier import notify_host_down
from scheduler import Prober, ProbeScheduler, SchedulerConfig
from utils import parse_duration, setup_logging

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = ("SIGTERM", "SIGHUP", "SIGQUIT")
UVICORN_SIGNALS = ("SIGINT", "SIGTERM")


class HostMonitor:
    """
    Runs the monitor described by a MonitorConfig.

    Owns the prober and the scheduler; after every round the full
    report is rendered to `writer`.
    """

    def __init__(
        self,
        config: MonitorConfig,
        prober: Optional[Prober] = None,
        writer: Optional[TextIO] = None,
        live: bool = True,
    ):
        self.config = config.validate()
        self.prober = prober or HealthChecker(skip_verify=config.skip_verify)
        self.writer = writer or sys.stdout
        self.live = live
        self.scheduler = ProbeScheduler(
            config.hosts,
            self.prober,
            SchedulerConfig(
                poll_interval=config.poll_interval,
                ping_timeout=config.ping_timeout,
                max_stats=config.max_stats,
            ),
            on_interval=self._on_interval,
        )
        if config.show_notifications:
            self.scheduler.on_host_down = self._on_host_down
        self._server: Optional[uvicorn.Server] = None

    def report(self, snapshots: Optional[List[HostSnapshot]] = None) -> List[str]:
        snapshots = self.scheduler.snapshots() if snapshots is None else snapshots
        return format_report(
            snapshots,
            max_elapsed=self.scheduler.max_elapsed(),
            color=self.config.color,
        )

    def _on_interval(self, snapshots: List[HostSnapshot]) -> None:
        render(self.report(snapshots), self.writer, clear=self.live)

    async def _on_host_down(self, snapshot: HostSnapshot) -> None:
        # the notifier shells out; keep the event loop free while it runs
        await asyncio.to_thread(notify_host_down, snapshot)

    def stop(self) -> None:
        self.scheduler.stop()
        if self._server is not None:
            self._server.should_exit = True

    async def run(self) -> None:
        """Monitor until stopped, serving the status API if enabled."""
        installed = self._install_signal_handlers()
        try:
            if self.config.api_enabled:
                app = create_app(self.scheduler)
                self._server = uvicorn.Server(
                    uvicorn.Config(
                        app,
                        host=self.config.api_host,
                        port=self.config.api_port,
                        log_level=self.config.effective_log_level.lower(),
                    )
                )
                logger.info(
                    "Serving status API on %s:%d",
                    self.config.api_host,
                    self.config.api_port,
                )
                await asyncio.gather(self.scheduler.start(), self._serve())
            else:
                await self.scheduler.start()
        finally:
            loop = asyncio.get_running_loop()
            for sig in installed:
                loop.remove_signal_handler(sig)
            self.stop()
            await self._close_prober()

    def _install_signal_handlers(self) -> List[signal.Signals]:
        """Route termination signals to stop(); uvicorn keeps SIGINT and SIGTERM while serving."""
        names = SHUTDOWN_SIGNALS
        if self.config.api_enabled:
            names = tuple(n for n in names if n not in UVICORN_SIGNALS)
        loop = asyncio.get_running_loop()
        installed = []
        for name in names:
            sig = getattr(signal, name, None)
            if sig is None:
                continue
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError, ValueError):
                # no loop signal support on this platform
                continue
            installed.append(sig)
        return installed

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, stopping", sig.name)
        self.stop()

    async def _serve(self) -> None:
        try:
            await self._server.serve()
        finally:
            # uvicorn exits on SIGINT; take the scheduler down with it
            self.scheduler.stop()

    async def run_once(self) -> bool:
        """
        Run a single round and render the report.

        Returns:
            True if every host is up.
        """
        try:
            await self.scheduler.probe_all()
        finally:
            await self._close_prober()
        snapshots = self.scheduler.snapshots()
        render(self.report(snapshots), self.writer)
        return all(s.status == HostStatus.UP for s in snapshots)

    async def _close_prober(self) -> None:
        close = getattr(self.prober, "close", None)
        if close is not None:
            await close()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="host-monitor",
        description="Poll HTTP endpoints and show live availability and latency.",
    )
    parser.add_argument("--host", action="append", dest="hosts", metavar="URL",
                        help="Host to ping (repeatable)")
    parser.add_argument("--interval", type=parse_duration,
                        help="Polling interval, e.g. 2s or 500ms")
    parser.add_argument("--timeout", type=parse_duration,
                        help="Per-probe timeout, e.g. 1500ms")
    parser.add_argument("--max-stats", type=int,
                        help="Number of latency samples kept per host")
    parser.add_argument("--config", help="Load configuration from a .json/.yml/.yaml file")
    parser.add_argument("--notify", action="store_true", default=None,
                        help="Show a desktop notification when a host goes down")
    parser.add_argument("--insecure", action="store_true", default=None,
                        help="Skip TLS certificate verification")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colours")
    parser.add_argument("--once", action="store_true",
                        help="Probe every host once, print the report and exit")
    parser.add_argument("--serve", action="store_true", default=None,
                        help="Serve the read-only status API")
    parser.add_argument("--api-host", help="Status API bind address")
    parser.add_argument("--api-port", type=int, help="Status API port")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="Debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, base: Optional[MonitorConfig] = None) -> MonitorConfig:
    """Merge command-line flags over the config file over the environment."""
    config = base or MonitorConfig()
    if args.config:
        config = load_config_file(args.config, config)

    overrides = {
        "hosts": args.hosts,
        "poll_interval": args.interval,
        "ping_timeout": args.timeout,
        "max_stats": args.max_stats,
        "show_notifications": args.notify,
        "skip_verify": args.insecure,
        "api_enabled": args.serve,
        "api_host": args.api_host,
        "api_port": args.api_port,
        "log_level": args.log_level,
        "log_file": args.log_file,
        "verbose": args.verbose,
    }
    if args.no_color:
        overrides["color"] = False
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = build_config(args).validate()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.effective_log_level, config.log_file or None)

    monitor = HostMonitor(config, live=not args.once)
    if args.once:
        return 0 if asyncio.run(monitor.run_once()) else 2

    try:
        asyncio.run(monitor.run())
    except KeyboardInterrupt:
        print("\nStopping host monitor...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
