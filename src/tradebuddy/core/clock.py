"""Clock abstraction for report dating.

WallClock: real wall-clock time (CLI, services)
FixedClock: frozen time (tests, reproducible batch runs)

Aggregators never call datetime.now() directly; the report assembler
asks the injected clock once and passes the value down.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant.

    Time only moves when explicitly set, so repeated reports built with
    the same clock are identical.
    """

    def __init__(self, at: datetime | None = None) -> None:
        self._time = _as_utc(at or datetime(2024, 1, 1, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Move the clock.  Must be monotonically increasing."""
        t = _as_utc(t)
        if t < self._time:
            raise ValueError(
                f"FixedClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t


def _as_utc(t: datetime) -> datetime:
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)
