"""Rolling-window performance and trend classification.

For every closed trade from the ``window_size``-th onward, the trailing
window of ``window_size`` trades is summarised (win rate, expectancy in
currency and R, drawdown, dispersion).  Each window is recomputed from
scratch with exact summation so that values do not depend on how many
windows came before.

The trend compares the latest rolling expectancy with the value half
the series earlier:

* basis is expectancy in R when both points have it, with margin
  ``trend_margin_r`` (default 0.05 R);
* otherwise expectancy in currency, with margin ``trend_margin_r``
  times the mean absolute trade pnl (0.05 of a typical trade).

Later > earlier + margin is ``Improving``, later < earlier - margin is
``Deteriorating``, anything in between is ``Stable``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from tradebuddy.core.config import TREND_MARGIN_R
from tradebuddy.core.enums import TrendDirection

from .record import NormalizedTrade, closed_trades
from .stats import max_drawdown, mean, mean_or_zero, percent, std_dev

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollingPoint:
    """Metrics of the window ending at closed trade ``index``."""

    index: int
    trade_id: str
    timestamp: datetime
    win_rate: float
    expectancy: float
    expectancy_r: float | None
    drawdown: float  # currency, peak-to-trough within the window
    std_dev: float | None


@dataclass(frozen=True)
class RollingMetricsResult:
    window_size: int
    series: list[RollingPoint] = field(default_factory=list)
    trend: TrendDirection = TrendDirection.STABLE
    trades_needed: int = 0  # closed trades still missing for a first point


def _window_point(index: int, window: list[NormalizedTrade]) -> RollingPoint:
    pnls = [t.pnl for t in window]
    r_vals = [t.r_value for t in window if t.r_value is not None]
    last = window[-1]
    return RollingPoint(
        index=index,
        trade_id=last.trade_id,
        timestamp=last.entry_time,
        win_rate=percent(sum(1 for p in pnls if p > 0), len(pnls)),
        expectancy=mean_or_zero(pnls),
        expectancy_r=mean(r_vals),
        drawdown=max_drawdown(pnls),
        std_dev=std_dev(pnls),
    )


def classify_trend(
    series: list[RollingPoint],
    *,
    margin_r: float = TREND_MARGIN_R,
    pnl_scale: float = 0.0,
) -> TrendDirection:
    """Classify the direction of rolling expectancy.

    ``pnl_scale`` converts the R margin to currency when the comparison
    falls back to pnl expectancy (typically the mean absolute pnl).
    """
    if len(series) < 2:
        return TrendDirection.STABLE

    later = series[-1]
    earlier = series[len(series) - 1 - len(series) // 2]

    if later.expectancy_r is not None and earlier.expectancy_r is not None:
        delta = later.expectancy_r - earlier.expectancy_r
        margin = margin_r
    else:
        delta = later.expectancy - earlier.expectancy
        margin = margin_r * pnl_scale

    if delta > margin:
        return TrendDirection.IMPROVING
    if delta < -margin:
        return TrendDirection.DETERIORATING
    return TrendDirection.STABLE


def compute_rolling_metrics(
    trades: list[NormalizedTrade],
    window_size: int,
    *,
    trend_margin_r: float = TREND_MARGIN_R,
) -> RollingMetricsResult:
    """Compute trailing-window metrics over closed trades.

    Returns an empty series (never raises) when there are fewer closed
    trades than ``window_size``; ``trades_needed`` then tells the caller
    how many more are required.
    """
    closed = closed_trades(trades)

    if window_size < 1:
        logger.debug("Rolling window size %d < 1, returning empty series", window_size)
        return RollingMetricsResult(window_size=window_size)

    if len(closed) < window_size:
        return RollingMetricsResult(
            window_size=window_size,
            trades_needed=window_size - len(closed),
        )

    series = [
        _window_point(i, closed[i - window_size + 1 : i + 1])
        for i in range(window_size - 1, len(closed))
    ]
    pnl_scale = mean_or_zero(abs(t.pnl) for t in closed)

    return RollingMetricsResult(
        window_size=window_size,
        series=series,
        trend=classify_trend(series, margin_r=trend_margin_r, pnl_scale=pnl_scale),
    )
