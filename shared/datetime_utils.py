"""
Clock helpers, framework-agnostic.
"""

from __future__ import annotations

import time


def now_millis() -> int:
    """Current wall-clock time as integer Unix epoch milliseconds."""
    return time.time_ns() // 1_000_000
