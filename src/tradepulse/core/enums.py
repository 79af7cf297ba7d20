"""Enumerations used across the journal."""

from enum import Enum


class TradeType(str, Enum):
    LONG = "Long"
    SHORT = "Short"

    @property
    def multiplier(self) -> int:
        """+1 for long, -1 for short."""
        return 1 if self is TradeType.LONG else -1


class TradeStatus(str, Enum):
    WIN = "Win"
    LOSS = "Loss"
    BREAK_EVEN = "Break Even"
    OPEN = "Open"  # Reserved; closed-trade derivation never produces it


class Bias(str, Enum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"


class TimeWindow(str, Enum):
    """Relative or absolute date range used to filter trades."""

    ALL = "all"
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    MONTH_TO_DATE = "mtd"
    YEAR_TO_DATE = "ytd"
    CUSTOM = "custom"


class GroupKey(str, Enum):
    """Classification dimension for grouped statistics."""

    SETUP = "setup"
    BIAS = "bias"
    TYPE = "type"
    POI = "poi"
    TARGET = "target"


class ImportMode(str, Enum):
    APPEND = "append"    # CSV: add to the existing collection
    REPLACE = "replace"  # JSON backup: overwrite the collection
