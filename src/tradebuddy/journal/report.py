"""Report assembler: raw journal entries in, full analytics report out.

Pipeline::

    raw trades -> normalize -> optional TradeFilter -> aggregators -> Report

Every aggregator is a pure function over the same normalized list; the
assembler only wires them together and supplies configuration.  The
clock is read only to date the synthetic point of a balance curve with
no closed trades, and only when ``config.as_of`` is unset.  Any history
with a closed trade therefore yields a deep-equal report for the same
input and config, whatever the wall-clock time.

Usage::

    report = assemble_report(raw_trades, AnalyticsConfig(initial_balance=25_000))
    print(report.summary.win_rate)
    for row in report.setup_performance:   # ranked leaderboard
        print(row.setup_type, row.reliability)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tradebuddy.core.clock import IClock, WallClock
from tradebuddy.core.config import AnalyticsConfig

from .balance import BalanceCurve, compute_balance_curve
from .behavior import PostLossBehaviorReport, compute_post_loss_behavior
from .discipline import DisciplineReport, compute_discipline
from .filters import apply_filters
from .insights import generate_insights
from .monte_carlo import MonteCarloSummary, run_monte_carlo
from .normalizer import normalize_trades, to_timestamp
from .rolling import RollingMetricsResult, compute_rolling_metrics
from .session_analysis import TimePerformanceReport, compute_time_performance
from .setups import (
    EmotionPerformanceRow,
    SetupPerformanceRow,
    compute_emotion_performance,
    compute_setup_performance,
    rank_setups,
)
from .summary import SummaryMetrics, compute_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataQuality:
    """How much of the raw input survived normalization and filtering."""

    input_count: int = 0
    normalized_count: int = 0
    dropped_count: int = 0
    flagged_count: int = 0
    filtered_out_count: int = 0
    closed_count: int = 0
    open_count: int = 0


@dataclass(frozen=True)
class Report:
    as_of: datetime | None
    data_quality: DataQuality
    balance_curve: BalanceCurve
    summary: SummaryMetrics
    rolling: RollingMetricsResult
    setup_performance: list[SetupPerformanceRow] = field(default_factory=list)
    emotion_performance: list[EmotionPerformanceRow] = field(default_factory=list)
    post_loss_behavior: PostLossBehaviorReport = field(default_factory=PostLossBehaviorReport)
    time_performance: TimePerformanceReport = field(default_factory=TimePerformanceReport)
    discipline: DisciplineReport = field(default_factory=DisciplineReport)
    monte_carlo: MonteCarloSummary | None = None
    insights: list[str] = field(default_factory=list)


def assemble_report(
    trades: Any,
    config: AnalyticsConfig | None = None,
    *,
    clock: IClock | None = None,
) -> Report:
    """Normalize ``trades`` and run every aggregator over them.

    Raises
    ------
    InvalidInputError
        If ``trades`` is not a list (or tuple) of records.  Malformed
        individual records never raise; they are dropped or coerced and
        counted in ``Report.data_quality``.
    """
    config = config or AnalyticsConfig()
    started = time.perf_counter()

    normalized = normalize_trades(trades)
    as_of = to_timestamp(config.as_of) if config.as_of is not None else None

    selected = apply_filters(normalized.trades, config.filters)
    closed_count = sum(1 for t in selected if t.is_closed)

    curve_start = as_of
    if curve_start is None and closed_count == 0:
        curve_start = (clock or WallClock()).now()

    summary = compute_summary(selected)
    rolling = compute_rolling_metrics(
        selected,
        config.rolling_window_size,
        trend_margin_r=config.trend_margin_r,
    )
    setups = rank_setups(
        compute_setup_performance(
            selected,
            min_sample_high=config.min_sample_high,
            min_sample_moderate=config.min_sample_moderate,
        )
    )
    behavior = compute_post_loss_behavior(selected, config.behavior)
    discipline = compute_discipline(selected, rolling)

    report = Report(
        as_of=as_of,
        data_quality=DataQuality(
            input_count=normalized.input_count,
            normalized_count=len(normalized.trades),
            dropped_count=normalized.dropped_count,
            flagged_count=normalized.flagged_count,
            filtered_out_count=len(normalized.trades) - len(selected),
            closed_count=closed_count,
            open_count=len(selected) - closed_count,
        ),
        balance_curve=compute_balance_curve(selected, config.initial_balance, as_of=curve_start),
        summary=summary,
        rolling=rolling,
        setup_performance=setups,
        emotion_performance=compute_emotion_performance(selected),
        post_loss_behavior=behavior,
        time_performance=compute_time_performance(selected),
        discipline=discipline,
        monte_carlo=run_monte_carlo(
            selected,
            config.initial_balance,
            simulations=config.monte_carlo_simulations,
            seed=config.monte_carlo_seed,
            ruin_threshold_pct=config.monte_carlo_ruin_pct,
        ),
        insights=generate_insights(summary, rolling, setups, behavior, discipline),
    )

    logger.info(
        "Report assembled: %d closed / %d open trades, %d setups in %.1f ms",
        closed_count,
        len(selected) - closed_count,
        len(setups),
        (time.perf_counter() - started) * 1000.0,
    )
    return report
