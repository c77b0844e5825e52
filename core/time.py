"""
core/time.py - Time helpers.
"""

import time
from datetime import datetime, timezone


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return now_utc().isoformat()


def now_ms() -> int:
    """Get current Unix timestamp in milliseconds."""
    return int(time.time() * 1000)


def elapsed_seconds(started_at: datetime) -> int:
    """Whole seconds since a UTC datetime."""
    return int((now_utc() - started_at).total_seconds())
