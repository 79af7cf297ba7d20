"""CSV import -- map arbitrary spreadsheet exports onto TradeRecord.

Column positions and header spellings vary between brokers and
spreadsheets, so columns are located by keyword containment rather than
by position: for every logical field the header row is scanned left to
right and the first header containing any of the field's alias keywords
wins.  Fields with no matching header are treated as absent.

Malformed rows are dropped silently; only the overall count is
reported.  An empty result is the caller's signal that the file could
not be understood.

Usage::

    importer = CsvTradeImporter()
    trades = importer.parse(text)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from dateutil import parser as date_parser
from pydantic import ValidationError

from tradepulse.core.clock import IClock, WallClock
from tradepulse.core.enums import Bias, TradeType

from .record import TradeRecord, compute_pnl_percentage

logger = logging.getLogger(__name__)

# Logical field -> alias keywords, matched as case-insensitive substrings
# of the header cells.
FIELD_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ticker", ("ticker", "symbol", "pair", "instrument")),
    ("type", ("type", "direction", "side")),
    ("entry_date", ("entry date", "open date", "date", "time")),
    ("exit_date", ("exit date", "close date")),
    ("entry_price", ("entry price", "entry", "open price")),
    ("exit_price", ("exit price", "exit", "close price")),
    ("quantity", ("quantity", "qty", "size", "volume")),
    ("pnl", ("pnl", "profit", "loss", "net", "p&l")),
    ("setup", ("setup", "strategy", "system")),
    ("notes", ("notes", "comment", "description")),
    ("bias", ("bias",)),
    ("poi", ("poi", "interest")),
    ("target", ("target", "take profit")),
    ("fees", ("fee", "commission")),
)

UNKNOWN_TICKER = "UNKNOWN"

# Commas outside double quotes: an even number of quotes follows.
_FIELD_SPLIT = re.compile(r',(?=(?:(?:[^"]*"){2})*[^"]*$)')
_LINE_SPLIT = re.compile(r"\r\n|\n")
_EDGE_QUOTES = re.compile(r'^"|"$')
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")


def _unquote(cell: str) -> str:
    cell = cell.strip()
    if len(cell) >= 2 and cell[0] == cell[-1] == '"':
        return cell[1:-1].replace('""', '"')
    return _EDGE_QUOTES.sub("", cell)


def split_row(line: str) -> list[str]:
    """Split one CSV line on commas outside quotes and unquote each cell.

    Inside a fully quoted cell a doubled quote (``""``) reads as one.
    """
    return [_unquote(cell) for cell in _FIELD_SPLIT.split(line)]


def parse_number(cell: str) -> float:
    """Lenient numeric parse: ``"$1,234.50"`` -> 1234.5, garbage -> 0.0."""
    cleaned = _NON_NUMERIC.sub("", cell)
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0.0
    return float(match.group(0))


def parse_trade_type(cell: str) -> TradeType:
    return TradeType.SHORT if "short" in cell.lower() else TradeType.LONG


def parse_bias(cell: str) -> Bias | None:
    text = cell.lower()
    bias = None
    if "bull" in text:
        bias = Bias.BULLISH
    if "bear" in text:
        bias = Bias.BEARISH
    return bias


def resolve_columns(header_line: str) -> dict[str, int]:
    """Map each logical field to its column index.  Absent fields are omitted."""
    headers = [
        _EDGE_QUOTES.sub("", h.strip()) for h in header_line.lower().split(",")
    ]
    columns: dict[str, int] = {}
    for field_name, keywords in FIELD_ALIASES:
        for idx, header in enumerate(headers):
            if any(k in header for k in keywords):
                columns[field_name] = idx
                break
    return columns


@dataclass
class ImportStats:
    """Outcome counters for the most recent parse."""

    rows: int = 0
    parsed: int = 0
    skipped: int = 0


class CsvTradeImporter:
    """Parse CSV text into TradeRecords.

    Parameters
    ----------
    clock : IClock | None
        Source of the fallback timestamp for missing or unparsable
        dates.  Defaults to the wall clock.
    """

    def __init__(self, *, clock: IClock | None = None) -> None:
        self._clock = clock or WallClock()
        self.last_stats = ImportStats()

    def parse(self, text: str) -> list[TradeRecord]:
        """Parse a whole CSV document.  Returns trades in row order."""
        self.last_stats = ImportStats()
        lines = _LINE_SPLIT.split(text)
        if len(lines) < 2:
            return []

        columns = resolve_columns(lines[0])
        now = self._clock.now()
        trades: list[TradeRecord] = []

        for raw in lines[1:]:
            line = raw.strip()
            if not line:
                continue
            self.last_stats.rows += 1
            values = split_row(line)
            if len(values) < 2:
                self.last_stats.skipped += 1
                continue
            trade = self._build_trade(values, columns, now)
            if trade is None:
                self.last_stats.skipped += 1
                continue
            trades.append(trade)

        self.last_stats.parsed = len(trades)
        logger.info(
            "CSV import parsed %d trades (%d rows, %d skipped)",
            self.last_stats.parsed,
            self.last_stats.rows,
            self.last_stats.skipped,
        )
        return trades

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _build_trade(
        self,
        values: list[str],
        columns: dict[str, int],
        now: datetime,
    ) -> TradeRecord | None:
        def cell(name: str) -> str:
            idx = columns.get(name)
            if idx is None or idx >= len(values):
                return ""
            return values[idx]

        def number(name: str) -> float:
            return parse_number(cell(name)) if name in columns else 0.0

        ticker = cell("ticker") or UNKNOWN_TICKER
        trade_type = parse_trade_type(cell("type")) if "type" in columns else TradeType.LONG
        bias = parse_bias(cell("bias")) if "bias" in columns else None

        # Brokers sign quantities and commissions by side; the record stores magnitudes.
        entry_price = abs(number("entry_price"))
        exit_price = abs(number("exit_price"))
        quantity = abs(number("quantity"))
        fees = abs(number("fees"))
        pnl = number("pnl")

        entry_date = now
        exit_date = now
        entry_cell = cell("entry_date")
        exit_cell = cell("exit_date")
        if "entry_date" in columns and entry_cell:
            entry_date = self._parse_date(entry_cell, now)
        if "exit_date" in columns and exit_cell:
            exit_date = self._parse_date(exit_cell, now)
        elif "entry_date" in columns:
            exit_date = entry_date

        try:
            return TradeRecord(
                ticker=ticker,
                type=trade_type,
                bias=bias,
                entry_date=entry_date,
                exit_date=exit_date,
                entry_price=entry_price,
                exit_price=exit_price,
                quantity=quantity,
                fees=fees,
                pnl=pnl,
                pnl_percentage=compute_pnl_percentage(entry_price, exit_price, trade_type),
                setup=cell("setup"),
                notes=cell("notes"),
                poi=cell("poi"),
                target=cell("target"),
            )
        except ValidationError as exc:
            logger.debug("Dropping CSV row %r: %s", values, exc)
            return None

    @staticmethod
    def _parse_date(value: str, fallback: datetime) -> datetime:
        # Missing date parts come from the import day, not the wall clock.
        default = fallback.replace(
            hour=0, minute=0, second=0, microsecond=0, tzinfo=None
        )
        try:
            return date_parser.parse(value, default=default)
        except (ValueError, OverflowError):
            return fallback


def parse_csv(text: str, *, clock: IClock | None = None) -> list[TradeRecord]:
    """Convenience wrapper around :class:`CsvTradeImporter`."""
    return CsvTradeImporter(clock=clock).parse(text)
