"""Local desktop notifications for hosts going down."""

import shutil
import logging
import subprocess
import sys
from datetime import datetime, timezone
from typing import List, Optional

from models import HostSnapshot

logger = logging.getLogger(__name__)


def _applescript_string(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _notification_command(title: str, message: str) -> Optional[List[str]]:
    if sys.platform == "darwin":
        osascript = shutil.which("osascript")
        if osascript:
            script = (
                f'display notification "{_applescript_string(message)}" '
                f'with title "{_applescript_string(title)}" sound name "Basso"'
            )
            return [osascript, "-e", script]
        return None
    notify_send = shutil.which("notify-send")
    if notify_send:
        return [notify_send, title, message]
    return None


def notify(title: str, message: str) -> bool:
    """
    Show a desktop notification if the platform has a notifier.

    Returns:
        True if the notifier ran successfully.
    """
    cmd = _notification_command(title, message)
    if cmd is None:
        logger.debug("No desktop notifier available, skipping: %s", title)
        return False
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Notification failed: %s", e)
        return False
    return True


def notify_host_down(snapshot: HostSnapshot) -> bool:
    """Announce that a host has just gone down."""
    down_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    return notify(f"{snapshot.url} is down.", f"Down at {down_at}")
