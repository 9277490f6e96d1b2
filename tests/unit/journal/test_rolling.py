"""Tests for rolling-window metrics and trend classification."""

from datetime import datetime, timezone

import pytest

from tradebuddy.core.enums import TrendDirection
from tradebuddy.journal.rolling import RollingPoint, classify_trend, compute_rolling_metrics

from .conftest import make_series, make_trade


def _point(index, expectancy, expectancy_r=None):
    return RollingPoint(
        index=index,
        trade_id=f"t{index}",
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        win_rate=50.0,
        expectancy=expectancy,
        expectancy_r=expectancy_r,
        drawdown=0.0,
        std_dev=None,
    )


class TestWindowThreshold:
    def test_19_trades_window_20_is_empty(self):
        result = compute_rolling_metrics(make_series([10.0] * 19), 20)
        assert result.series == []
        assert result.trades_needed == 1
        assert result.trend is TrendDirection.STABLE

    def test_20_trades_window_20_has_one_point(self):
        result = compute_rolling_metrics(make_series([10.0] * 20), 20)
        assert len(result.series) == 1
        assert result.series[0].index == 19
        assert result.series[0].trade_id == "t19"
        assert result.trades_needed == 0

    def test_open_trades_do_not_count(self):
        trades = make_series([10.0] * 19) + [make_trade(30, 5.0, closed=False)]
        assert compute_rolling_metrics(trades, 20).series == []

    def test_invalid_window_returns_empty(self):
        result = compute_rolling_metrics(make_series([10.0] * 5), 0)
        assert result.series == []

    def test_empty_input(self):
        result = compute_rolling_metrics([], 3)
        assert result.series == []
        assert result.trades_needed == 3


class TestWindowValues:
    @pytest.fixture
    def result(self):
        return compute_rolling_metrics(make_series([10.0, -10.0, 20.0, 30.0]), 3)

    def test_series_length(self, result):
        assert [p.index for p in result.series] == [2, 3]

    def test_first_window(self, result):
        first = result.series[0]
        assert first.win_rate == pytest.approx(200 / 3)
        assert first.expectancy == pytest.approx(20 / 3)
        assert first.drawdown == pytest.approx(10.0)
        assert first.expectancy_r is None
        assert first.std_dev is not None

    def test_second_window(self, result):
        second = result.series[1]
        assert second.win_rate == pytest.approx(200 / 3)
        assert second.expectancy == pytest.approx(40 / 3)
        assert second.drawdown == pytest.approx(0.0)

    def test_drawdown_peak_starts_at_first_value(self):
        result = compute_rolling_metrics(make_series([-10.0, -5.0, 8.0]), 3)
        assert result.series[0].drawdown == pytest.approx(5.0)

    def test_expectancy_r_when_available(self):
        trades = [make_trade(i, 10.0, r_multiple=r) for i, r in enumerate([1.0, 2.0, -1.0])]
        result = compute_rolling_metrics(trades, 2)
        assert [p.expectancy_r for p in result.series] == [pytest.approx(1.5), pytest.approx(0.5)]


class TestTrend:
    def test_improving(self):
        result = compute_rolling_metrics(make_series([-10.0] * 5 + [20.0] * 5), 3)
        assert result.trend is TrendDirection.IMPROVING

    def test_deteriorating(self):
        result = compute_rolling_metrics(make_series([20.0] * 5 + [-10.0] * 5), 3)
        assert result.trend is TrendDirection.DETERIORATING

    def test_flat_is_stable(self):
        result = compute_rolling_metrics(make_series([10.0, -5.0] * 6), 2)
        assert result.trend is TrendDirection.STABLE

    def test_single_point_is_stable(self):
        assert classify_trend([_point(0, 5.0)]) is TrendDirection.STABLE

    def test_r_basis_uses_r_margin(self):
        series = [_point(0, 0.0, 0.50), _point(1, 0.0, 0.54)]
        assert classify_trend(series, margin_r=0.05) is TrendDirection.STABLE
        series = [_point(0, 0.0, 0.50), _point(1, 0.0, 0.56)]
        assert classify_trend(series, margin_r=0.05) is TrendDirection.IMPROVING

    def test_pnl_basis_scales_margin(self):
        series = [_point(0, 10.0), _point(1, 14.0)]
        assert classify_trend(series, margin_r=0.05, pnl_scale=100.0) is TrendDirection.STABLE
        assert classify_trend(series, margin_r=0.05, pnl_scale=10.0) is TrendDirection.IMPROVING

    def test_compares_with_point_half_the_series_earlier(self):
        series = [_point(0, 100.0), _point(1, 0.0), _point(2, 0.0), _point(3, 0.0)]
        # earlier = series[1]: flat despite the large first value
        assert classify_trend(series, pnl_scale=10.0) is TrendDirection.STABLE
