"""Tests for JSON backup/restore, CSV export and import dispatch."""

import json

import pytest
from datetime import date

from tradepulse.core.enums import ImportMode
from tradepulse.core.errors import EmptyImportError, ImportFormatError
from tradepulse.journal.backup import (
    CSV_EXPORT_COLUMNS,
    backup_filename,
    dump_backup,
    dump_csv,
    load_backup,
    read_import,
)
from tradepulse.journal.csv_import import parse_csv, resolve_columns

from .conftest import make_trade


class TestJsonBackup:

    def test_round_trip(self, mock_trades):
        restored = load_backup(dump_backup(mock_trades))
        assert restored == mock_trades

    def test_shape_is_camel_case_array(self, mock_trades):
        data = json.loads(dump_backup(mock_trades))
        assert isinstance(data, list)
        assert data[0]["ticker"] == "TSLA"
        assert data[0]["rMultiple"] == 3.0
        assert data[0]["status"] == "Win"

    def test_empty(self):
        assert load_backup(dump_backup([])) == []

    def test_invalid_json(self):
        with pytest.raises(ImportFormatError, match="Invalid JSON"):
            load_backup("{not json")

    def test_not_an_array(self):
        with pytest.raises(ImportFormatError, match="expected an array"):
            load_backup('{"ticker": "AAPL"}')

    def test_invalid_element_reports_index(self, mock_trades):
        data = json.loads(dump_backup(mock_trades[:2]))
        data.append({"ticker": "BAD"})
        with pytest.raises(ImportFormatError, match="index 2"):
            load_backup(json.dumps(data))

    def test_filename(self):
        assert backup_filename(date(2024, 3, 15)) == "tradepulse_backup_2024-03-15.json"


class TestCsvExport:

    def test_header_resolves_every_column(self):
        header = ",".join(h for h, _ in CSV_EXPORT_COLUMNS)
        cols = resolve_columns(header)
        for position, (_, attr) in enumerate(CSV_EXPORT_COLUMNS):
            assert cols[attr] == position

    def test_reimport_preserves_core_fields(self, mock_trades, clock):
        reimported = parse_csv(dump_csv(mock_trades), clock=clock)
        assert len(reimported) == len(mock_trades)
        for before, after in zip(mock_trades, reimported):
            assert after.ticker == before.ticker
            assert after.type == before.type
            assert after.bias == before.bias
            assert after.pnl == pytest.approx(before.pnl)
            assert after.fees == before.fees
            assert after.exit_date == before.exit_date
            assert after.setup == before.setup
            assert after.poi == before.poi
            assert after.notes == before.notes
            assert after.id != before.id

    def test_multiline_notes_flattened(self, clock):
        trade = make_trade(5, notes="first line\nsecond, with comma")
        text = dump_csv([trade])
        assert len(text.strip().splitlines()) == 2
        (reimported,) = parse_csv(text, clock=clock)
        assert reimported.notes == "first line second, with comma"

    def test_quoted_notes_round_trip(self, clock):
        notes = 'Said "hold", then "sold" early'
        (reimported,) = parse_csv(dump_csv([make_trade(5, notes=notes)]), clock=clock)
        assert reimported.notes == notes

    def test_missing_bias_exports_blank(self, clock):
        (reimported,) = parse_csv(dump_csv([make_trade(5)]), clock=clock)
        assert reimported.bias is None


class TestReadImport:

    def test_csv_appends(self, clock):
        result = read_import("broker.CSV", "Ticker,PnL\nES,10\nNQ,-2", clock=clock)
        assert result.mode == ImportMode.APPEND
        assert [t.ticker for t in result.trades] == ["ES", "NQ"]
        assert result.source == "broker.CSV"

    def test_broker_export_with_debit_commissions(self, clock):
        text = (
            "Symbol,Side,Qty,Commission,Realized P&L\n"
            "AAPL,SELL,-100,-1.00,120\n"
            "TSLA,BUY,20,-1.00,-35"
        )
        result = read_import("ibkr.csv", text, clock=clock)
        assert [t.fees for t in result.trades] == [1.0, 1.0]
        assert [t.pnl for t in result.trades] == [120, -35]

    def test_empty_csv_fails(self, clock):
        with pytest.raises(EmptyImportError, match="Could not parse any trades"):
            read_import("empty.csv", "Ticker,PnL\n", clock=clock)

    def test_json_replaces(self, mock_trades):
        result = read_import("backup.json", dump_backup(mock_trades))
        assert result.mode == ImportMode.REPLACE
        assert result.trades == mock_trades

    def test_other_extensions_are_json(self):
        with pytest.raises(ImportFormatError):
            read_import("notes.txt", "Ticker,PnL\nES,10")

    def test_empty_json_array_is_allowed(self):
        result = read_import("backup.json", "[]")
        assert result.trades == []
