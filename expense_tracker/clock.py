"""
Clock capability.

Anything that needs "now" (default expense dates, the default summary
month) takes a Clock instead of calling datetime directly, so tests can pin
the time.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def fixed_clock(moment: datetime) -> Clock:
    """Build a clock that always returns the same instant."""
    return lambda: moment
