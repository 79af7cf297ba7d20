"""Backup/restore and file import/export.

The JSON backup is the persisted format itself: a pretty-printed array
of camelCase trade objects.  Restoring validates the whole file before
anything is handed back, so a bad file never half-replaces a journal.

CSV export writes a header the CSV importer understands, so an exported
file can be re-imported (append mode) into another journal.

Usage::

    text = dump_backup(book.trades)
    trades = load_backup(text)
    result = read_import("broker.csv", csv_text)
    book.apply(result.mode, result.trades)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from tradepulse.core.clock import IClock
from tradepulse.core.enums import ImportMode
from tradepulse.core.errors import EmptyImportError, ImportFormatError

from .csv_import import CsvTradeImporter
from .record import TradeRecord

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "tradepulse_backup"

# Ordered so that keyword-based header matching on re-import resolves
# every field to its own column (e.g. "Entry Price" before "Entry Date").
CSV_EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Ticker", "ticker"),
    ("Type", "type"),
    ("Bias", "bias"),
    ("Entry Price", "entry_price"),
    ("Exit Price", "exit_price"),
    ("Quantity", "quantity"),
    ("Fees", "fees"),
    ("PnL", "pnl"),
    ("Entry Date", "entry_date"),
    ("Exit Date", "exit_date"),
    ("Setup", "setup"),
    ("POI", "poi"),
    ("Target", "target"),
    ("Notes", "notes"),
)


@dataclass(frozen=True)
class ImportResult:
    """Trades read from a file plus how they should be applied."""

    mode: ImportMode
    trades: list[TradeRecord]
    source: str = ""


# ---------------------------------------------------------------------- #
# JSON backup                                                              #
# ---------------------------------------------------------------------- #

def dump_backup(trades: Iterable[TradeRecord], *, indent: int = 2) -> str:
    """Serialize trades to the backup JSON format."""
    return json.dumps([t.to_dict() for t in trades], indent=indent)


def load_backup(text: str) -> list[TradeRecord]:
    """Parse and validate a backup file.

    Raises
    ------
    ImportFormatError
        If the text is not JSON, not an array, or any element is not a
        valid trade.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ImportFormatError("Invalid JSON format: expected an array of trades")

    trades: list[TradeRecord] = []
    for position, item in enumerate(data):
        try:
            trades.append(TradeRecord.model_validate(item))
        except ValidationError as exc:
            raise ImportFormatError(
                f"Invalid trade at index {position}: {exc.error_count()} error(s)"
            ) from exc
    return trades


def backup_filename(today: date) -> str:
    """``tradepulse_backup_<YYYY-MM-DD>.json``"""
    return f"{BACKUP_PREFIX}_{today.isoformat()}.json"


# ---------------------------------------------------------------------- #
# CSV export                                                               #
# ---------------------------------------------------------------------- #

def _csv_cell(trade: TradeRecord, attr: str) -> Any:
    value = getattr(trade, attr)
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, str):
        # The importer reads one record per physical line.
        return " ".join(value.splitlines())
    if isinstance(value, float):
        # Positional notation; the importer does not read exponents.
        return format(Decimal(repr(value)), "f")
    return value


def dump_csv(trades: Iterable[TradeRecord]) -> str:
    """Export trades as CSV with a re-importable header row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([header for header, _ in CSV_EXPORT_COLUMNS])
    for trade in trades:
        writer.writerow([_csv_cell(trade, attr) for _, attr in CSV_EXPORT_COLUMNS])
    return buf.getvalue()


# ---------------------------------------------------------------------- #
# File import dispatch                                                     #
# ---------------------------------------------------------------------- #

def read_import(
    filename: str,
    text: str,
    *,
    clock: IClock | None = None,
) -> ImportResult:
    """Read an import file by extension.

    ``.csv`` files are parsed heuristically and appended; anything else
    is treated as a JSON backup and replaces the journal.

    Raises
    ------
    EmptyImportError
        The CSV produced no trades.
    ImportFormatError
        The JSON is invalid.
    """
    if filename.lower().endswith(".csv"):
        trades = CsvTradeImporter(clock=clock).parse(text)
        if not trades:
            raise EmptyImportError(
                "Could not parse any trades from CSV. Please check column "
                "headers (Ticker, PnL, Date, etc)."
            )
        return ImportResult(mode=ImportMode.APPEND, trades=trades, source=filename)

    trades = load_backup(text)
    logger.info("Read %d trades from backup %s", len(trades), filename)
    return ImportResult(mode=ImportMode.REPLACE, trades=trades, source=filename)
