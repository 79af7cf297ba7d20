"""Tests for time-window resolution and filtering."""

import pytest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from tradepulse.core.enums import TimeWindow
from tradepulse.journal.windows import filter_trades, window_start

from .conftest import make_trade


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestWindowStart:

    @pytest.mark.parametrize("window, expected", [
        (TimeWindow.LAST_7_DAYS, utc(2024, 3, 8)),
        (TimeWindow.LAST_30_DAYS, utc(2024, 2, 14)),
        (TimeWindow.MONTH_TO_DATE, utc(2024, 3, 1)),
        (TimeWindow.YEAR_TO_DATE, utc(2024, 1, 1)),
    ])
    def test_snapped_to_midnight(self, base_time, window, expected):
        assert window_start(window, base_time) == expected

    def test_all_has_no_bound(self, base_time):
        assert window_start(TimeWindow.ALL, base_time) is None

    def test_custom_without_date_is_all(self, base_time):
        assert window_start(TimeWindow.CUSTOM, base_time) is None

    def test_custom_date(self, base_time):
        start = window_start(TimeWindow.CUSTOM, base_time, date(2023, 12, 24))
        assert start == utc(2023, 12, 24)

    def test_custom_datetime_uses_its_date(self, base_time):
        start = window_start(TimeWindow.CUSTOM, base_time, datetime(2023, 12, 24, 17, 45))
        assert start == utc(2023, 12, 24)

    def test_naive_now_treated_as_utc(self):
        start = window_start(TimeWindow.MONTH_TO_DATE, datetime(2024, 3, 15, 12))
        assert start == utc(2024, 3, 1)

    def test_local_timezone_midnight(self):
        ny = ZoneInfo("America/New_York")
        now = datetime(2024, 3, 15, 1, 0, tzinfo=ny)
        start = window_start(TimeWindow.MONTH_TO_DATE, now)
        assert start == datetime(2024, 3, 1, tzinfo=ny)


class TestFilterTrades:

    def test_seven_day_boundary_inclusive(self, base_time):
        inside = make_trade(1, exit_date=utc(2024, 3, 8, 0, 0))
        outside = make_trade(2, exit_date=utc(2024, 3, 7, 23, 59))
        assert filter_trades([inside, outside], TimeWindow.LAST_7_DAYS, base_time) == [inside]

    def test_year_to_date(self, base_time):
        last_year = make_trade(1, exit_date=utc(2023, 12, 31, 23))
        this_year = make_trade(2, exit_date=utc(2024, 1, 1, 0, 1))
        result = filter_trades([last_year, this_year], TimeWindow.YEAR_TO_DATE, base_time)
        assert result == [this_year]

    def test_all_returns_everything_in_order(self, base_time):
        trades = [make_trade(i, exit_date=utc(2020 + i, 1, 1)) for i in range(3)]
        result = filter_trades(trades, TimeWindow.ALL, base_time)
        assert result == trades
        assert result is not trades

    def test_order_preserved(self, base_time):
        late = make_trade(1, exit_date=utc(2024, 3, 14))
        early = make_trade(2, exit_date=utc(2024, 3, 10))
        result = filter_trades([late, early], TimeWindow.MONTH_TO_DATE, base_time)
        assert result == [late, early]

    def test_custom_window(self, base_time):
        before = make_trade(1, exit_date=utc(2024, 2, 9, 23))
        after = make_trade(2, exit_date=utc(2024, 2, 10, 8))
        result = filter_trades(
            [before, after], TimeWindow.CUSTOM, base_time, date(2024, 2, 10)
        )
        assert result == [after]

    def test_timezone_moves_boundary(self):
        ny = ZoneInfo("America/New_York")
        now = datetime(2024, 3, 15, 9, 0, tzinfo=ny)
        # 03:00 UTC on the 1st is still February 29th in New York
        trade = make_trade(1, exit_date=utc(2024, 3, 1, 3))
        assert filter_trades([trade], TimeWindow.MONTH_TO_DATE, now) == []
        assert filter_trades([trade], TimeWindow.MONTH_TO_DATE, now.astimezone(timezone.utc)) == [trade]

    def test_empty(self, base_time):
        assert filter_trades([], TimeWindow.LAST_30_DAYS, base_time) == []
