"""Tests for pre-aggregation trade filters."""

from datetime import datetime, timezone

import pytest

from tradebuddy.core.config import TradeFilter
from tradebuddy.core.enums import OutcomeFilter
from tradebuddy.journal.filters import apply_filters, matches

from .conftest import BASE_TIME, make_trade


@pytest.fixture
def trades():
    return [
        make_trade(0, 100.0, setup_type="Breakout", emotion="calm", symbol="EURUSD",
                   r_multiple=2.0, risk_percent=1.0, checklist_completion_percent=90.0),
        make_trade(1, -50.0, setup_type="Pullback", emotion="fomo", symbol="GBPUSD",
                   r_multiple=-1.0, risk_percent=2.0, checklist_completion_percent=40.0),
        make_trade(2, 0.0, setup_type="Breakout", emotion="neutral", symbol="EURUSD"),
        make_trade(3, 25.0, setup_type="Range", closed=False),
    ]


def _ids(trades):
    return [t.trade_id for t in trades]


class TestApplyFilters:
    def test_none_keeps_everything(self, trades):
        assert apply_filters(trades, None) == trades

    def test_empty_filter_keeps_everything(self, trades):
        assert apply_filters(trades, TradeFilter()) == trades

    def test_date_range_inclusive(self, trades):
        f = TradeFilter(start=trades[1].entry_time, end=trades[2].entry_time)
        assert _ids(apply_filters(trades, f)) == ["t1", "t2"]

    def test_naive_bounds_are_utc(self, trades):
        naive_start = trades[2].entry_time.replace(tzinfo=None)
        assert _ids(apply_filters(trades, TradeFilter(start=naive_start))) == ["t2", "t3"]

    def test_setups_case_insensitive(self, trades):
        f = TradeFilter(setups=["breakout"])
        assert _ids(apply_filters(trades, f)) == ["t0", "t2"]

    def test_emotions_and_symbols(self, trades):
        assert _ids(apply_filters(trades, TradeFilter(emotions=["FOMO"]))) == ["t1"]
        assert _ids(apply_filters(trades, TradeFilter(symbols=["eurusd"]))) == ["t0", "t2"]

    @pytest.mark.parametrize("outcome,expected", [
        (OutcomeFilter.WIN, ["t0"]),
        (OutcomeFilter.LOSS, ["t1"]),
        (OutcomeFilter.BREAKEVEN, ["t2"]),
    ])
    def test_outcome_excludes_open_trades(self, trades, outcome, expected):
        assert _ids(apply_filters(trades, TradeFilter(outcome=outcome))) == expected

    def test_r_range_excludes_unknown(self, trades):
        f = TradeFilter(min_r=0.0)
        assert _ids(apply_filters(trades, f)) == ["t0"]

    def test_risk_and_checklist_ranges(self, trades):
        assert _ids(apply_filters(trades, TradeFilter(max_risk_percent=1.5))) == ["t0"]
        assert _ids(apply_filters(trades, TradeFilter(min_checklist_percent=50))) == ["t0"]

    def test_criteria_combine(self, trades):
        f = TradeFilter(setups=["Breakout"], outcome=OutcomeFilter.WIN)
        assert _ids(apply_filters(trades, f)) == ["t0"]


class TestMatches:
    def test_single_trade(self):
        trade = make_trade(0, 10.0, setup_type="Range")
        assert matches(trade, TradeFilter(setups=["range"]))
        assert not matches(trade, TradeFilter(start=datetime(2030, 1, 1, tzinfo=timezone.utc)))

    def test_blank_labels_ignored(self):
        trade = make_trade(0, 10.0)
        assert matches(trade, TradeFilter(setups=["  "]))
