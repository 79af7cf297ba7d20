"""Trade Journal & Analytics.

Turns a list of trade records into normalized statistics and ingests
third-party CSV exports into the same model.

Key components
--------------
TradeRecord        Immutable trade with derived P&L, return, R and status
CsvTradeImporter   Keyword-matched CSV ingestion
filter_trades      Time-window selection on exit date
dashboard_stats    Headline metrics (win rate, profit factor, ...)
grouped_stats      Per-setup / bias / type / POI / target breakdowns
combination_stats  Setup + bias + type combos above a noise floor
equity_curve       Cumulative P&L series
daily_stats        Calendar-month day buckets
TradeBook          Owned collection with persistence hooks
TradeCoach         Prompting and fallbacks for the AI coach
"""

from .backup import ImportResult, dump_backup, dump_csv, load_backup, read_import
from .book import TradeBook, TradeStore
from .calendar import DayStats, daily_stats, month_total, shift_month
from .coach import TextGenerator, TradeCoach
from .csv_import import CsvTradeImporter, parse_csv
from .metrics import (
    PROFIT_FACTOR_NO_LOSSES,
    DashboardStats,
    EquityPoint,
    GroupStat,
    combination_stats,
    dashboard_stats,
    equity_curve,
    grouped_stats,
)
from .record import TradeRecord
from .windows import filter_trades, window_start

__all__ = [
    "TradeRecord",
    "CsvTradeImporter",
    "parse_csv",
    "filter_trades",
    "window_start",
    "PROFIT_FACTOR_NO_LOSSES",
    "DashboardStats",
    "GroupStat",
    "EquityPoint",
    "dashboard_stats",
    "grouped_stats",
    "combination_stats",
    "equity_curve",
    "DayStats",
    "daily_stats",
    "month_total",
    "shift_month",
    "TradeBook",
    "TradeStore",
    "ImportResult",
    "dump_backup",
    "dump_csv",
    "load_backup",
    "read_import",
    "TextGenerator",
    "TradeCoach",
]
