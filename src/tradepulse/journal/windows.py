"""Time-window filtering on the realization (exit) date.

Every window resolves to an inclusive start timestamp snapped to
midnight in the reference time's timezone; the All-time window (and a
custom window without a date) resolves to no start at all.  "Now" is
always passed in, so trailing windows are evaluated at query time.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from tradepulse.core.enums import TimeWindow
from tradepulse.core.ids import ensure_aware

from .record import TradeRecord


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def window_start(
    window: TimeWindow,
    now: datetime,
    custom_start: date | None = None,
) -> datetime | None:
    """Inclusive lower bound for *window*, or ``None`` for no bound."""
    now = ensure_aware(now)
    if window == TimeWindow.LAST_7_DAYS:
        return _midnight(now - timedelta(days=7))
    if window == TimeWindow.LAST_30_DAYS:
        return _midnight(now - timedelta(days=30))
    if window == TimeWindow.MONTH_TO_DATE:
        return _midnight(now.replace(day=1))
    if window == TimeWindow.YEAR_TO_DATE:
        return _midnight(now.replace(month=1, day=1))
    if window == TimeWindow.CUSTOM and custom_start is not None:
        if isinstance(custom_start, datetime):
            custom_start = custom_start.date()
        return datetime.combine(custom_start, time.min, tzinfo=now.tzinfo)
    return None


def filter_trades(
    trades: Iterable[TradeRecord],
    window: TimeWindow,
    now: datetime,
    custom_start: date | None = None,
) -> list[TradeRecord]:
    """Trades whose exit date falls inside *window*, in original order."""
    start = window_start(window, now, custom_start)
    if start is None:
        return list(trades)
    return [t for t in trades if t.exit_date >= start]
