"""
Utility Functions for Host Monitor.

Common helpers for duration formatting and parsing, rounding,
URL validation, and logging setup used across the application.
"""

import math
import re
import logging
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Matches one "<number><unit>" component of a duration string like "1m30s"
DURATION_PART_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(h|ms|us|µs|m|s)")

_UNIT_SECONDS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 0.001,
    "us": 0.000001,
    "µs": 0.000001,
}


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    Python's built-in round() uses banker's rounding, which would
    turn 2.5 into 2; percentile indexes need 2.5 -> 3.
    """
    sign = -1 if value < 0 else 1
    fraction, whole = math.modf(abs(value))
    rounded = whole + 1 if fraction >= 0.5 else whole
    return int(rounded) * sign


def explode_duration(seconds: float):
    """Split a duration into (hours, minutes, seconds, ms, µs) parts."""
    total_us = int(round(max(seconds, 0.0) * 1_000_000))
    hours, total_us = divmod(total_us, 3_600_000_000)
    minutes, total_us = divmod(total_us, 60_000_000)
    secs, total_us = divmod(total_us, 1_000_000)
    millis, micros = divmod(total_us, 1_000)
    return hours, minutes, secs, millis, micros


def round_duration(seconds: float, round_to: float = 0.001) -> float:
    """
    Drop every component of a duration smaller than `round_to`.

    Args:
        seconds: Duration in seconds.
        round_to: Smallest unit to keep, in seconds (default 1ms).

    Returns:
        The truncated duration in seconds.
    """
    hours, minutes, secs, millis, micros = explode_duration(seconds)
    parts = [
        (hours, 3600.0),
        (minutes, 60.0),
        (secs, 1.0),
        (millis, 0.001),
        (micros, 0.000001),
    ]
    total = 0.0
    for count, unit in parts:
        if count * unit >= round_to - 1e-12:
            total += count * unit
    return total


def format_duration(seconds: float) -> str:
    """
    Format a duration as a compact string such as "1h2m3s" or "250ms".

    Zero (or anything below a microsecond) formats as "0s".
    """
    hours, minutes, secs, millis, micros = explode_duration(seconds)
    value = ""
    if hours > 0:
        value += f"{hours}h"
    if minutes > 0:
        value += f"{minutes}m"
    if secs > 0:
        value += f"{secs}s"
    if millis > 0:
        value += f"{millis}ms"
    if micros > 0:
        value += f"{micros}µs"
    return value or "0s"


def parse_duration(value) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (already seconds), numeric strings, or
    compound strings made of h/m/s/ms/µs components ("1m30s", "1500ms").

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass

    parts = DURATION_PART_PATTERN.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ValueError(f"Invalid duration: {value!r}")
    return sum(float(number) * _UNIT_SECONDS[unit] for number, unit in parts)


def validate_host_url(url: str) -> bool:
    """Check that a target is an absolute http(s) URL."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application logging.

    Logs go to `log_file` when given so they do not scribble over the
    live status display; otherwise to stderr.
    """
    if log_file:
        handlers = [logging.FileHandler(log_file)]
    else:
        handlers = [logging.StreamHandler()]

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
