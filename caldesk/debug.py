"""
Debug output for caldesk.

Messages go to stderr with a timestamp and a short tag naming the
component, e.g. ``[14:02:11] STORE: added 'Standup'``. Output is off
until enabled with set_debug() or ``debug = true`` in the config file.
"""

import sys
from datetime import datetime


_debug_enabled: bool = False


def set_debug(enabled: bool):
    """Turn debug output on or off for the whole process."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    return _debug_enabled


def debug_print(tag: str, msg: str) -> None:
    if not _debug_enabled:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {tag}: {msg}", file=sys.stderr)
