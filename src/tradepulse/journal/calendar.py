"""Day-by-day P&L buckets for a calendar month view.

Trades are bucketed by the calendar day of their exit date (converted
to the requested timezone).  Days without trades are absent from the
mapping, which is how a "no data" day is told apart from a flat day.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timezone, tzinfo

from .record import TradeRecord


@dataclass
class DayStats:
    """P&L sum and trade count for one calendar day."""

    pnl: float = 0.0
    count: int = 0


def daily_stats(
    trades: Iterable[TradeRecord],
    year: int,
    month: int,
    *,
    tz: tzinfo = timezone.utc,
) -> dict[int, DayStats]:
    """Map day-of-month -> :class:`DayStats` for trades exiting in *year*/*month*."""
    stats: dict[int, DayStats] = {}
    for trade in trades:
        local = trade.exit_date.astimezone(tz)
        if local.year != year or local.month != month:
            continue
        bucket = stats.setdefault(local.day, DayStats())
        bucket.pnl += trade.pnl
        bucket.count += 1
    return stats


def month_total(days: dict[int, DayStats]) -> DayStats:
    """Collapse a month of day buckets into one total."""
    total = DayStats()
    for bucket in days.values():
        total.pnl += bucket.pnl
        total.count += bucket.count
    return total


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move *delta* months forward (negative for backward)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
