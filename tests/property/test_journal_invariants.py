"""Property tests: journal analytics invariants.

Uses hypothesis to check that grouping partitions the input, that the
win/loss split is exhaustive, and that backups restore exactly.
"""

import pytest
from datetime import datetime, timedelta, timezone

from hypothesis import given, settings, strategies as st

from tradepulse.core.clock import SimClock
from tradepulse.core.enums import Bias, GroupKey, TradeStatus, TradeType
from tradepulse.journal.backup import dump_backup, dump_csv, load_backup
from tradepulse.journal.csv_import import parse_csv
from tradepulse.journal.metrics import dashboard_stats, equity_curve, grouped_stats
from tradepulse.journal.record import TradeRecord

START = datetime(2024, 1, 1, tzinfo=timezone.utc)

pnls = st.integers(min_value=-1_000_000, max_value=1_000_000).map(lambda cents: cents / 100)
labels = st.sampled_from(["", "ORB", "Fade", "Breakout", "  "])


@st.composite
def trades(draw):
    pnl = draw(pnls)
    offset = draw(st.integers(min_value=0, max_value=365 * 24))
    exit_date = START + timedelta(hours=offset)
    return TradeRecord(
        ticker=draw(st.sampled_from(["ES", "NQ", "AAPL"])),
        entry_date=exit_date - timedelta(hours=1),
        exit_date=exit_date,
        type=draw(st.sampled_from(list(TradeType))),
        bias=draw(st.sampled_from([None, *Bias])),
        setup=draw(labels),
        poi=draw(labels),
        pnl=pnl,
    )


trade_lists = st.lists(trades(), max_size=30)


@given(batch=trade_lists, key=st.sampled_from(list(GroupKey)))
@settings(max_examples=100)
def test_grouping_partitions_trades(batch, key):
    groups = grouped_stats(batch, key)
    assert sum(g.count for g in groups) == len(batch)
    assert sum(g.pnl for g in groups) == pytest.approx(sum(t.pnl for t in batch), abs=1e-6)
    for g in groups:
        assert g.wins + g.losses == g.count
    assert [g.pnl for g in groups] == sorted((g.pnl for g in groups), reverse=True)


@given(batch=trade_lists)
@settings(max_examples=100)
def test_win_loss_split_is_exhaustive(batch):
    stats = dashboard_stats(batch)
    wins = sum(1 for t in batch if t.status == TradeStatus.WIN)
    losses = sum(1 for t in batch if t.status == TradeStatus.LOSS)
    even = sum(1 for t in batch if t.status == TradeStatus.BREAK_EVEN)
    assert wins + losses + even == len(batch)
    if batch:
        assert stats.win_rate == pytest.approx(wins / len(batch) * 100)
        assert stats.worst_trade <= stats.best_trade
    assert stats.profit_factor >= 0


@given(batch=trade_lists)
@settings(max_examples=50)
def test_equity_curve_ends_at_total(batch):
    curve = equity_curve(batch)
    assert len(curve) == len(batch)
    if curve:
        assert curve[-1].cumulative_equity == pytest.approx(sum(t.pnl for t in batch), abs=1e-6)
        assert all(a.date <= b.date for a, b in zip(curve, curve[1:]))


@given(batch=trade_lists)
@settings(max_examples=50)
def test_backup_restores_exactly(batch):
    assert load_backup(dump_backup(batch)) == batch


@given(batch=st.lists(trades(), min_size=1, max_size=10))
@settings(max_examples=50)
def test_csv_export_reimport_keeps_pnl(batch):
    reimported = parse_csv(dump_csv(batch), clock=SimClock(START))
    assert [t.pnl for t in reimported] == pytest.approx([t.pnl for t in batch])
    assert [t.exit_date for t in reimported] == [t.exit_date for t in batch]
