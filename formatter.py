"""
Status Line Formatting.

Pure functions that turn host snapshots into the lines of the live
status display, plus render() to write them to a stream.
"""

from typing import Iterable, List, Optional, Sequence, TextIO

from models import HostSnapshot, HostStatus
from utils import format_duration, round_duration

SPARKS = ("▁", "▂", "▃", "▅", "▇")

RESET = "\033[0m"
GREEN = "32"
LIGHT_GREEN = "92"
YELLOW = "33"
RED = "31"
GRAY = "90"

CLEAR_SCREEN = "\033[H\033[2J"


def colorize(text: str, code: str, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"\033[{code};01m{text}{RESET}"


def format_sparkline(values: Sequence[float], max_value: Optional[float] = None) -> str:
    """
    Render values as sparkline glyphs relative to a max reference.

    With no reference the largest value is used. A zero reference
    renders every value as the lowest glyph.
    """
    if max_value is None:
        max_value = max(values, default=0.0)
    output = []
    for value in values:
        ratio = value / max_value if max_value > 0 else 0.0
        if ratio > 0.8:
            output.append(SPARKS[4])
        elif ratio > 0.6:
            output.append(SPARKS[3])
        elif ratio > 0.4:
            output.append(SPARKS[2])
        elif ratio > 0.2:
            output.append(SPARKS[1])
        else:
            output.append(SPARKS[0])
    return "".join(output)


def format_uptime(fraction: float, color: bool = False) -> str:
    """Format an uptime fraction as "100%" or "99.512%"."""
    if fraction < 1.0:
        text = f"{fraction * 100:.3f}"
    else:
        text = f"{int(fraction * 100)}"

    if fraction > 0.995:
        code = GREEN
    elif fraction > 0.990:
        code = LIGHT_GREEN
    elif fraction > 0.95:
        code = YELLOW
    else:
        code = RED
    return colorize(text, code, color) + "%"


def _latency(seconds: float) -> str:
    return format_duration(round_duration(seconds, 0.001))


def format_status_line(
    snapshot: HostSnapshot,
    host_width: int = 0,
    max_elapsed: Optional[float] = None,
    color: bool = False,
) -> str:
    """
    Format the status line for a single host.

    Args:
        snapshot: The host to describe.
        host_width: Width of the longest host name, for alignment.
        max_elapsed: Sparkline reference; defaults to the host's own max.
        color: Whether to emit ANSI colour codes.

    Returns:
        One of the DOWN, UP or UNKNOWN lines.
    """
    host = snapshot.url.ljust(host_width + 2) if host_width else snapshot.url
    uptime = format_uptime(snapshot.uptime_fraction, color)

    if snapshot.status == HostStatus.DOWN:
        down_for = snapshot.down_for or 0.0
        return (
            f"{host} {colorize('DOWN', RED, color)} {uptime} "
            f"Down For: {format_duration(down_for)}"
        )

    if snapshot.sample_count == 0:
        return f"{host} {colorize('UNKNOWN', GRAY, color)}"

    sparkline = format_sparkline(snapshot.recent, max_elapsed)

    def label(name: str) -> str:
        return colorize(name, GRAY, color)

    return (
        f"{host} {colorize('UP', GREEN, color)} {uptime} {sparkline.ljust(5)} "
        f"{label('Last')}: {_latency(snapshot.last)} "
        f"{label('Average')}: {_latency(snapshot.mean)} "
        f"{label('99th')}: {_latency(snapshot.p99)} "
        f"{label('90th')}: {_latency(snapshot.p90)}"
    )


def format_downtime_line(snapshot: HostSnapshot, host_width: int = 0) -> Optional[str]:
    """Summarize total vs. down time; None for a host never down."""
    if snapshot.total_downtime <= 0:
        return None
    host = snapshot.url.ljust(host_width + 2) if host_width else snapshot.url
    return (
        f"{host} total: {format_duration(snapshot.total_time)} "
        f"down: {format_duration(snapshot.total_downtime)} "
        f"Δ: {snapshot.uptime_fraction * 100:.3f}%"
    )


def format_error_lines(snapshot: HostSnapshot, host_width: int = 0) -> List[str]:
    host = snapshot.url.ljust(host_width + 2) if host_width else snapshot.url
    return [f"{host} {err}" for err in snapshot.errors]


def format_report(
    snapshots: Sequence[HostSnapshot],
    max_elapsed: Optional[float] = None,
    color: bool = False,
) -> List[str]:
    """
    Build the full display: one status line per host, followed by the
    Downtime and Errors sections when any host has reported errors.
    """
    host_width = max((len(s.url) for s in snapshots), default=0)
    if max_elapsed is None:
        max_elapsed = max((s.max_latency for s in snapshots), default=0.0)

    lines = [format_status_line(s, host_width, max_elapsed, color) for s in snapshots]

    if not any(s.errors for s in snapshots):
        return lines

    lines.append("")
    lines.append(colorize("Downtime:", YELLOW, color))
    for s in snapshots:
        line = format_downtime_line(s, host_width)
        if line:
            lines.append(line)

    lines.append("")
    lines.append(colorize("Errors:", RED, color))
    for s in snapshots:
        lines.extend(format_error_lines(s, host_width))
    return lines


def render(lines: Iterable[str], writer: TextIO, clear: bool = False) -> None:
    """
    Write lines to a text stream.

    Raises:
        OSError: If the stream cannot be written; host state is unaffected.
    """
    if clear:
        writer.write(CLEAR_SCREEN)
    for line in lines:
        writer.write(line)
        writer.write("\n")
    writer.flush()
