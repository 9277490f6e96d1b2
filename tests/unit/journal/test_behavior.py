"""Tests for post-loss behaviour analysis."""

from datetime import datetime, timedelta, timezone

import pytest

from tradebuddy.core.config import BehaviorThresholds
from tradebuddy.core.enums import WarningSeverity
from tradebuddy.journal.behavior import (
    CHECKLIST_DROP,
    CONFIDENCE_DROP,
    EXPECTANCY_AFTER_LOSS,
    FREQUENCY_SPIKE,
    RISK_INCREASE,
    _later_same_day,
    compute_post_loss_behavior,
)

from .conftest import make_series, make_trade


def _warning(report, kind):
    matches = [w for w in report.warnings if w.type == kind]
    return matches[0] if matches else None


def _intraday(days: list[list[float]]):
    """Trades opened hourly from 09:00 UTC, one inner list per day."""
    trades = []
    for d, pnls in enumerate(days):
        for h, pnl in enumerate(pnls):
            entry = datetime(2024, 3, 4 + d, 9 + h, tzinfo=timezone.utc)
            trades.append(make_trade(len(trades), pnl, entry_time=entry))
    return trades


class TestAfterLossCohort:
    def test_cohort_scenario(self):
        report = compute_post_loss_behavior(make_series([-100, 50, -80, 20, -30, 200]))
        assert report.total_losses == 3
        assert report.after_loss.trades == 3
        assert report.after_loss.win_rate == pytest.approx(100.0)
        assert report.after_loss.expectancy == pytest.approx(90.0)
        assert report.overall.trades == 6
        assert report.overall.expectancy == pytest.approx(10.0)

    def test_trailing_loss_has_no_successor(self):
        report = compute_post_loss_behavior(make_series([10, -10]))
        assert report.total_losses == 1
        assert report.after_loss.trades == 0
        assert report.risk_increase_percent is None

    def test_no_losses_means_no_shifts(self):
        trades = [make_trade(i, 10.0, risk_percent=1.0) for i in range(5)]
        report = compute_post_loss_behavior(trades)
        assert report.total_losses == 0
        assert report.risk_increase_percent is None
        assert report.checklist_drop_points is None
        assert report.trade_frequency_spike is None
        assert report.warnings == []
        assert report.overall.trades == 5

    def test_empty(self):
        report = compute_post_loss_behavior([])
        assert report.total_losses == 0
        assert report.warnings == []


class TestRiskAndChecklistShift:
    @pytest.fixture
    def report(self):
        trades = [
            make_trade(i, pnl, risk_percent=risk, checklist_completion_percent=check)
            for i, (pnl, risk, check) in enumerate([
                (-10, 1.0, 90), (10, 2.0, 60),
                (-10, 1.0, 90), (10, 2.0, 60),
                (-10, 1.0, 90), (10, 2.0, 60),
            ])
        ]
        return compute_post_loss_behavior(trades)

    def test_risk_increase(self, report):
        assert report.overall.avg_risk_percent == pytest.approx(1.5)
        assert report.after_loss.avg_risk_percent == pytest.approx(2.0)
        assert report.risk_increase_percent == pytest.approx(100 / 3)

    def test_risk_warning_is_high(self, report):
        warning = _warning(report, RISK_INCREASE)
        assert warning is not None
        assert warning.severity is WarningSeverity.HIGH

    def test_checklist_drop(self, report):
        assert report.checklist_drop_points == pytest.approx(15.0)
        assert report.checklist_drop_percent == pytest.approx(-20.0)

    def test_checklist_warning_is_medium(self, report):
        warning = _warning(report, CHECKLIST_DROP)
        assert warning is not None
        assert warning.severity is WarningSeverity.MEDIUM

    def test_missing_risk_is_ignored_not_zero(self):
        trades = [
            make_trade(0, -10, risk_percent=1.0),
            make_trade(1, 10),
            make_trade(2, 10, risk_percent=1.0),
        ]
        report = compute_post_loss_behavior(trades)
        assert report.overall.avg_risk_percent == pytest.approx(1.0)
        assert report.after_loss.avg_risk_percent is None
        assert report.risk_increase_percent is None

    def test_thresholds_are_injectable(self):
        trades = [
            make_trade(i, pnl, risk_percent=risk)
            for i, (pnl, risk) in enumerate([(-10, 1.0), (10, 2.0), (-10, 1.0), (10, 2.0)])
        ]
        strict = compute_post_loss_behavior(
            trades, BehaviorThresholds(risk_increase_warning_pct=50.0)
        )
        assert _warning(strict, RISK_INCREASE) is None


class TestExpectancyAfterLoss:
    def test_flip_to_negative_warns(self):
        report = compute_post_loss_behavior(make_series([300, -10, -30, 5, -10, -30, 5]))
        assert report.overall.expectancy > 0
        assert report.after_loss.expectancy < 0
        warning = _warning(report, EXPECTANCY_AFTER_LOSS)
        assert warning.severity is WarningSeverity.HIGH

    def test_no_warning_when_overall_negative(self):
        report = compute_post_loss_behavior(make_series([-100, -10, -30, 5]))
        assert _warning(report, EXPECTANCY_AFTER_LOSS) is None


class TestFrequencySpike:
    def test_spike_after_consecutive_losses(self):
        trades = _intraday([[-10, -10, 5, 5, 5], [-10, -10, 5, 5, 5]])
        report = compute_post_loss_behavior(trades)
        assert report.consecutive_loss_events == 2
        assert report.trades_after_consecutive_losses == pytest.approx(3.0)
        assert report.baseline_trades_after == pytest.approx(2.0)
        assert report.trade_frequency_spike == pytest.approx(50.0)
        assert _warning(report, FREQUENCY_SPIKE).severity is WarningSeverity.MEDIUM

    def test_single_event_is_insufficient(self):
        trades = _intraday([[-10, -10, 5, 5, 5], [5, 5]])
        report = compute_post_loss_behavior(trades)
        assert report.consecutive_loss_events == 1
        assert report.trade_frequency_spike is None

    def test_zero_baseline(self):
        report = compute_post_loss_behavior(make_series([-10, -10, -10, 5]))
        assert report.baseline_trades_after == 0.0
        assert report.trade_frequency_spike is None


class TestLaterSameDay:
    def test_counts_per_day(self):
        trades = _intraday([[1, 1, 1], [1], [1, 1]])
        assert _later_same_day(trades) == [2, 1, 0, 0, 1, 0]

    def test_busy_day(self):
        start = datetime(2024, 3, 4, tzinfo=timezone.utc)
        trades = [make_trade(i, 1.0, entry_time=start + timedelta(seconds=i)) for i in range(5000)]
        counts = _later_same_day(trades)
        assert counts[0] == 4999
        assert counts[-1] == 0

    def test_empty(self):
        assert _later_same_day([]) == []


class TestConfidenceShift:
    def test_confidence_drop_warning(self):
        trades = [
            make_trade(i, pnl, confidence_level=conf, execution_quality=q)
            for i, (pnl, conf, q) in enumerate([(-10, 8, 4), (10, 3, 2), (-10, 8, 4), (10, 3, 2)])
        ]
        report = compute_post_loss_behavior(trades)
        assert report.confidence_shift == pytest.approx(-2.5)
        assert report.execution_shift == pytest.approx(-1.0)
        assert _warning(report, CONFIDENCE_DROP).severity is WarningSeverity.MEDIUM

    def test_no_ratings(self):
        report = compute_post_loss_behavior(make_series([-10, 10]))
        assert report.confidence_shift is None
        assert _warning(report, CONFIDENCE_DROP) is None
