"""Post-loss behaviour: does the trader change after a losing trade?

The after-loss cohort is every closed trade that immediately follows a
losing trade (pnl < 0) in chronological order.  The cohort is compared
with the whole closed-trade population on risk taken, checklist
discipline, results and self-ratings.  Large adverse shifts become
``BehavioralWarning`` entries.

Shift conventions:

* ``risk_increase_percent``  = (after - overall) / overall * 100
* ``checklist_drop_percent`` = (after - overall) / overall * 100
  (signed; negative means the checklist was completed less)
* ``checklist_drop_points``  = overall - after (positive means a drop)
* ``confidence_shift`` / ``execution_shift`` = after - overall

A shift is ``None`` whenever either side lacks data or the baseline is
zero.  With no losing trades there is no cohort and no warnings.

Trade frequency spike
---------------------
A consecutive-loss event is a loss whose predecessor was also a loss.
For each event, count the trades opened later on the same UTC day; the
baseline is that count averaged over every closed trade.  The spike is
the signed percentage deviation of the event average from the baseline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timezone
from itertools import groupby

from tradebuddy.core.config import BehaviorThresholds
from tradebuddy.core.enums import WarningSeverity

from .record import NormalizedTrade, closed_trades
from .stats import mean, mean_or_zero, pct_change, percent

logger = logging.getLogger(__name__)

RISK_INCREASE = "risk_increase"
CHECKLIST_DROP = "checklist_drop"
EXPECTANCY_AFTER_LOSS = "expectancy_after_loss"
FREQUENCY_SPIKE = "frequency_spike"
CONFIDENCE_DROP = "confidence_drop"


@dataclass(frozen=True)
class BehavioralWarning:
    type: str
    message: str
    severity: WarningSeverity


@dataclass(frozen=True)
class CohortStats:
    """Averages over one group of trades; ``None`` where no trade has data."""

    trades: int = 0
    win_rate: float = 0.0
    avg_risk_percent: float | None = None
    avg_checklist_percent: float | None = None
    avg_r: float | None = None
    expectancy: float = 0.0
    expectancy_r: float | None = None
    avg_confidence: float | None = None
    avg_execution_quality: float | None = None


@dataclass(frozen=True)
class PostLossBehaviorReport:
    total_losses: int = 0
    after_loss: CohortStats = field(default_factory=CohortStats)
    overall: CohortStats = field(default_factory=CohortStats)
    risk_increase_percent: float | None = None
    checklist_drop_percent: float | None = None
    checklist_drop_points: float | None = None
    confidence_shift: float | None = None
    execution_shift: float | None = None
    consecutive_loss_events: int = 0
    trades_after_consecutive_losses: float | None = None
    baseline_trades_after: float | None = None
    trade_frequency_spike: float | None = None
    warnings: list[BehavioralWarning] = field(default_factory=list)


def _cohort(trades: list[NormalizedTrade]) -> CohortStats:
    if not trades:
        return CohortStats()
    r_vals = [t.r_value for t in trades if t.r_value is not None]
    return CohortStats(
        trades=len(trades),
        win_rate=percent(sum(1 for t in trades if t.pnl > 0), len(trades)),
        avg_risk_percent=mean(t.risk_percent for t in trades if t.risk_percent is not None),
        avg_checklist_percent=mean(
            t.checklist_completion_percent
            for t in trades
            if t.checklist_completion_percent is not None
        ),
        avg_r=mean(r_vals),
        expectancy=mean_or_zero(t.pnl for t in trades),
        expectancy_r=mean(r_vals),
        avg_confidence=mean(t.confidence_level for t in trades if t.confidence_level is not None),
        avg_execution_quality=mean(
            t.execution_quality for t in trades if t.execution_quality is not None
        ),
    )


def _difference(after: float | None, overall: float | None) -> float | None:
    if after is None or overall is None:
        return None
    return after - overall


def _utc_day(trade: NormalizedTrade) -> date:
    return trade.entry_time.astimezone(timezone.utc).date()


def _later_same_day(closed: list[NormalizedTrade]) -> list[int]:
    """For each trade, how many later trades were opened on its UTC day."""
    counts: list[int] = []
    # Chronological order means same-day trades are contiguous
    for _, day_trades in groupby(closed, key=_utc_day):
        n = len(list(day_trades))
        counts.extend(range(n - 1, -1, -1))
    return counts


def _frequency_spike(
    closed: list[NormalizedTrade],
    min_events: int,
) -> tuple[int, float | None, float | None, float | None]:
    """Return (events, event average, baseline average, spike percent)."""
    events = [
        i for i in range(1, len(closed))
        if closed[i].pnl < 0 and closed[i - 1].pnl < 0
    ]
    if not closed:
        return 0, None, None, None

    counts = _later_same_day(closed)
    baseline = mean_or_zero(counts)
    after = mean(counts[i] for i in events)

    if len(events) < min_events or baseline == 0:
        return len(events), after, baseline, None
    return len(events), after, baseline, pct_change(baseline, after)


def _warnings(
    report: PostLossBehaviorReport,
    thresholds: BehaviorThresholds,
) -> list[BehavioralWarning]:
    warnings: list[BehavioralWarning] = []

    risk = report.risk_increase_percent
    if risk is not None and risk > thresholds.risk_increase_warning_pct:
        warnings.append(BehavioralWarning(
            type=RISK_INCREASE,
            message=f"Risk per trade rises {risk:.1f}% after a loss",
            severity=WarningSeverity.HIGH,
        ))

    drop = report.checklist_drop_points
    if drop is not None and drop > thresholds.checklist_drop_warning_points:
        warnings.append(BehavioralWarning(
            type=CHECKLIST_DROP,
            message=f"Checklist completion falls {drop:.1f} points after a loss",
            severity=WarningSeverity.MEDIUM,
        ))

    if report.overall.expectancy > 0 and report.after_loss.trades and report.after_loss.expectancy < 0:
        warnings.append(BehavioralWarning(
            type=EXPECTANCY_AFTER_LOSS,
            message=(
                f"Expectancy turns negative after a loss "
                f"({report.after_loss.expectancy:.2f} vs {report.overall.expectancy:.2f} overall)"
            ),
            severity=WarningSeverity.HIGH,
        ))

    spike = report.trade_frequency_spike
    if spike is not None and spike > thresholds.frequency_spike_warning_pct:
        severity = (
            WarningSeverity.HIGH
            if spike > thresholds.frequency_spike_high_pct
            else WarningSeverity.MEDIUM
        )
        warnings.append(BehavioralWarning(
            type=FREQUENCY_SPIKE,
            message=f"Trade frequency spikes {spike:.1f}% after consecutive losses",
            severity=severity,
        ))

    base_conf = report.overall.avg_confidence
    shift = report.confidence_shift
    if shift is not None and base_conf:
        ratio = shift / base_conf
        if ratio < -thresholds.confidence_drop_warning_ratio:
            severity = (
                WarningSeverity.HIGH
                if ratio < -thresholds.confidence_drop_high_ratio
                else WarningSeverity.MEDIUM
            )
            warnings.append(BehavioralWarning(
                type=CONFIDENCE_DROP,
                message=f"Confidence drops {abs(ratio) * 100:.0f}% after a loss",
                severity=severity,
            ))

    return warnings


def compute_post_loss_behavior(
    trades: list[NormalizedTrade],
    thresholds: BehaviorThresholds | None = None,
) -> PostLossBehaviorReport:
    """Compare trades taken right after a loss with all closed trades."""
    thresholds = thresholds or BehaviorThresholds()
    closed = closed_trades(trades)
    total_losses = sum(1 for t in closed if t.pnl < 0)
    overall = _cohort(closed)

    if total_losses == 0:
        return PostLossBehaviorReport(overall=overall)

    after_loss = _cohort([
        closed[i] for i in range(1, len(closed)) if closed[i - 1].pnl < 0
    ])
    events, after_avg, baseline_avg, spike = _frequency_spike(
        closed, thresholds.min_consecutive_loss_events
    )

    checklist_points = _difference(overall.avg_checklist_percent, after_loss.avg_checklist_percent)
    if not overall.avg_checklist_percent:
        checklist_points = None

    report = PostLossBehaviorReport(
        total_losses=total_losses,
        after_loss=after_loss,
        overall=overall,
        risk_increase_percent=pct_change(overall.avg_risk_percent, after_loss.avg_risk_percent),
        checklist_drop_percent=pct_change(
            overall.avg_checklist_percent, after_loss.avg_checklist_percent
        ),
        checklist_drop_points=checklist_points,
        confidence_shift=_difference(after_loss.avg_confidence, overall.avg_confidence),
        execution_shift=_difference(
            after_loss.avg_execution_quality, overall.avg_execution_quality
        ),
        consecutive_loss_events=events,
        trades_after_consecutive_losses=after_avg,
        baseline_trades_after=baseline_avg,
        trade_frequency_spike=spike,
    )

    warnings = _warnings(report, thresholds)
    if warnings:
        logger.debug("Post-loss behaviour raised %d warning(s)", len(warnings))
    return replace(report, warnings=warnings)
