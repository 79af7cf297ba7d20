"""Clock abstraction so "now" can be injected.

WallClock: real wall-clock time
SimClock: fixed, manually advanced time (tests, reproducible reports)

Importers and time windows never call datetime.now() directly.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as a timezone-aware datetime."""
        ...


class WallClock:
    """Real wall-clock time, optionally in a given timezone."""

    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz or timezone.utc

    def now(self) -> datetime:
        return datetime.now(self._tz)


class SimClock:
    """Simulated clock.  Time advances only when explicitly set."""

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Move the clock.  Must be monotonically increasing."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance(self, **kwargs: float) -> None:
        """Advance by a ``timedelta(**kwargs)``."""
        self.set_time(self._time + timedelta(**kwargs))
