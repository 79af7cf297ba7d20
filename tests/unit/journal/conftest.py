"""Shared fixtures for journal tests."""

import pytest
from datetime import datetime, timedelta, timezone

from tradepulse.core.clock import SimClock
from tradepulse.core.enums import Bias, TradeType
from tradepulse.journal.record import TradeRecord


BASE_TIME = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def clock():
    return SimClock(BASE_TIME)


def make_trade(
    pnl: float = 100.0,
    *,
    exit_date: datetime | None = None,
    ticker: str = "AAPL",
    type: TradeType = TradeType.LONG,
    bias: Bias | None = None,
    setup: str = "",
    poi: str = "",
    target: str = "",
    notes: str = "",
    trade_id: str | None = None,
) -> TradeRecord:
    """Create a trade with an explicit net P&L (no prices)."""
    exit_date = exit_date or datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc)
    extra = {"id": trade_id} if trade_id else {}
    return TradeRecord(
        ticker=ticker,
        entry_date=exit_date - timedelta(hours=1),
        exit_date=exit_date,
        type=type,
        bias=bias,
        setup=setup,
        poi=poi,
        target=target,
        notes=notes,
        pnl=pnl,
        **extra,
    )


def make_series(pnls: list[float], start: datetime | None = None) -> list[TradeRecord]:
    """One trade per day starting at *start*, with the given P&Ls."""
    start = start or datetime(2024, 1, 1, 16, 0, tzinfo=timezone.utc)
    return [
        make_trade(pnl, exit_date=start + timedelta(days=i))
        for i, pnl in enumerate(pnls)
    ]


@pytest.fixture
def mock_trades():
    """Five detailed-mode trades across both directions."""
    def at(day: int) -> datetime:
        return datetime(2023, 10, day, tzinfo=timezone.utc)

    return [
        TradeRecord.from_prices(
            ticker="TSLA", entry_date=at(1), exit_date=at(2), type=TradeType.LONG,
            bias=Bias.BULLISH, entry_price=240, stop_loss=235, exit_price=255,
            quantity=10, fees=5, setup="Gap Fill", poi="Daily Open", target="260",
            notes="Strong momentum at open",
        ),
        TradeRecord.from_prices(
            ticker="NVDA", entry_date=at(3), exit_date=at(3), type=TradeType.SHORT,
            bias=Bias.BEARISH, entry_price=450, stop_loss=455, exit_price=455,
            quantity=5, fees=5, setup="Rejection", poi="Supply Zone", target="440",
            notes="Stopped out too early",
        ),
        TradeRecord.from_prices(
            ticker="BTC", entry_date=at(5), exit_date=at(6), type=TradeType.LONG,
            bias=Bias.BULLISH, entry_price=27500, stop_loss=27000, exit_price=28100,
            quantity=0.1, fees=10, setup="Trendline Bounce", poi="200 EMA",
            target="28500", notes="Perfect execution",
        ),
        TradeRecord.from_prices(
            ticker="AAPL", entry_date=at(8), exit_date=at(8), type=TradeType.LONG,
            bias=Bias.BULLISH, entry_price=175, stop_loss=173, exit_price=172,
            quantity=20, fees=5, setup="Breakout", poi="Pre-market High",
            target="180", notes="False breakout",
        ),
        TradeRecord.from_prices(
            ticker="AMD", entry_date=at(10), exit_date=at(12), type=TradeType.LONG,
            bias=Bias.BULLISH, entry_price=105, stop_loss=102, exit_price=115,
            quantity=15, fees=5, setup="Earnings Play", poi="Volume Support",
            target="120", notes="Held through volatility",
        ),
    ]
