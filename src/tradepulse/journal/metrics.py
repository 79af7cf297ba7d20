"""Performance metrics over an (already time-filtered) trade collection.

* Dashboard stats: totals, win rate, averages, profit factor, extremes,
  streaks.
* Grouped stats: per-label breakdown along one classification
  dimension (setup, bias, type, POI, target) or any composite key.
* Combination stats: setup + bias + type combos above a noise floor.
* Equity curve: cumulative net P&L in exit-date order.

Win/loss predicates are asymmetric and used consistently:
a win is ``pnl > 0``; everything else (``pnl <= 0``, break-even
included) counts on the loss side.

All functions are pure and recompute from scratch on every call.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from tradepulse.core.enums import GroupKey

from .record import TradeRecord

# Profit factor reported when there are wins but no losses at all
# (the true ratio is infinite).
PROFIT_FACTOR_NO_LOSSES = 999.0

UNSPECIFIED_LABEL = "Unspecified"
NO_DATA_LABEL = "No Data"
COMBINATION_SEPARATOR = " + "

KeySelector = Callable[[TradeRecord], "str | None"]


# ---------------------------------------------------------------------- #
# Result types                                                             #
# ---------------------------------------------------------------------- #

@dataclass(frozen=True)
class DashboardStats:
    total_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0  # Signed: negative (or 0) by construction
    profit_factor: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0
    consecutive_wins: int = 0
    consecutive_losses: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GroupStat:
    label: str
    count: int
    wins: int
    losses: int
    win_rate: float
    pnl: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EquityPoint:
    date: datetime
    cumulative_equity: float
    trade_pnl: float


@dataclass
class _GroupAccumulator:
    """Running counters for one label."""

    count: int = 0
    wins: int = 0
    losses: int = 0
    pnl: float = 0.0

    def record(self, trade: TradeRecord) -> None:
        self.count += 1
        self.pnl += trade.pnl
        if trade.pnl > 0:
            self.wins += 1
        else:
            self.losses += 1

    def freeze(self, label: str) -> GroupStat:
        return GroupStat(
            label=label,
            count=self.count,
            wins=self.wins,
            losses=self.losses,
            win_rate=(self.wins / self.count) * 100 if self.count else 0.0,
            pnl=self.pnl,
        )


# ---------------------------------------------------------------------- #
# Dashboard                                                                #
# ---------------------------------------------------------------------- #

def profit_factor(gross_win: float, gross_loss: float) -> float:
    """Gross wins over absolute gross losses.

    ``gross_loss`` is the absolute value of the loss-side sum.  With no
    losses, returns :data:`PROFIT_FACTOR_NO_LOSSES` if anything was won
    and 0.0 otherwise.
    """
    if gross_loss > 0:
        return gross_win / gross_loss
    if gross_win > 0:
        return PROFIT_FACTOR_NO_LOSSES
    return 0.0


def _longest_streaks(trades: Sequence[TradeRecord]) -> tuple[int, int]:
    best_wins = best_losses = run_wins = run_losses = 0
    for trade in sort_by_exit(trades):
        if trade.pnl > 0:
            run_wins += 1
            run_losses = 0
        else:
            run_losses += 1
            run_wins = 0
        best_wins = max(best_wins, run_wins)
        best_losses = max(best_losses, run_losses)
    return best_wins, best_losses


def dashboard_stats(trades: Sequence[TradeRecord]) -> DashboardStats:
    """Headline statistics for the dashboard cards."""
    total = len(trades)
    if total == 0:
        return DashboardStats()

    win_pnls = [t.pnl for t in trades if t.pnl > 0]
    loss_pnls = [t.pnl for t in trades if t.pnl <= 0]
    gross_win = sum(win_pnls)
    loss_sum = sum(loss_pnls)
    pnls = [t.pnl for t in trades]
    streak_wins, streak_losses = _longest_streaks(trades)

    return DashboardStats(
        total_trades=total,
        win_rate=len(win_pnls) / total * 100,
        total_pnl=sum(pnls),
        avg_win=gross_win / len(win_pnls) if win_pnls else 0.0,
        avg_loss=loss_sum / len(loss_pnls) if loss_pnls else 0.0,
        profit_factor=profit_factor(gross_win, abs(loss_sum)),
        best_trade=max(pnls),
        worst_trade=min(pnls),
        consecutive_wins=streak_wins,
        consecutive_losses=streak_losses,
    )


# ---------------------------------------------------------------------- #
# Grouping                                                                 #
# ---------------------------------------------------------------------- #

def _enum_label(value: Any) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", value)


_SELECTORS: dict[GroupKey, KeySelector] = {
    GroupKey.SETUP: lambda t: t.setup,
    GroupKey.BIAS: lambda t: _enum_label(t.bias),
    GroupKey.TYPE: lambda t: _enum_label(t.type),
    GroupKey.POI: lambda t: t.poi,
    GroupKey.TARGET: lambda t: t.target,
}


def selector_for(key: GroupKey | KeySelector) -> KeySelector:
    if isinstance(key, GroupKey):
        return _SELECTORS[key]
    return key


def grouped_stats(
    trades: Sequence[TradeRecord],
    key: GroupKey | KeySelector,
) -> list[GroupStat]:
    """Per-label count / wins / losses / win rate / P&L, best P&L first.

    Missing or blank labels are collected under ``"Unspecified"``.  Ties
    keep first-seen order.
    """
    select = selector_for(key)
    groups: dict[str, _GroupAccumulator] = {}
    for trade in trades:
        raw = select(trade)
        label = raw.strip() if raw else ""
        label = label or UNSPECIFIED_LABEL
        groups.setdefault(label, _GroupAccumulator()).record(trade)

    stats = [acc.freeze(label) for label, acc in groups.items()]
    stats.sort(key=lambda g: g.pnl, reverse=True)
    return stats


def combination_label(trade: TradeRecord) -> str:
    """``"<setup> + <bias> + <type>"`` from whichever parts are present."""
    parts = [
        p
        for p in (trade.setup.strip(), _enum_label(trade.bias), _enum_label(trade.type))
        if p
    ]
    return COMBINATION_SEPARATOR.join(parts) if parts else NO_DATA_LABEL


def combination_stats(
    trades: Sequence[TradeRecord],
    *,
    min_count: int = 2,
    top_n: int | None = None,
) -> list[GroupStat]:
    """Grouped stats over setup + bias + type combos with ``count >= min_count``."""
    stats = [
        g for g in grouped_stats(trades, combination_label) if g.count >= min_count
    ]
    if top_n is not None:
        stats = stats[:top_n]
    return stats


# ---------------------------------------------------------------------- #
# Equity curve                                                             #
# ---------------------------------------------------------------------- #

def sort_by_exit(trades: Sequence[TradeRecord]) -> list[TradeRecord]:
    """Ascending by exit date; stable for equal timestamps."""
    return sorted(trades, key=lambda t: t.exit_date)


def equity_curve(trades: Sequence[TradeRecord]) -> list[EquityPoint]:
    """One point per trade with the running total of net P&L."""
    points: list[EquityPoint] = []
    cumulative = 0.0
    for trade in sort_by_exit(trades):
        cumulative += trade.pnl
        points.append(
            EquityPoint(
                date=trade.exit_date,
                cumulative_equity=cumulative,
                trade_pnl=trade.pnl,
            )
        )
    return points
