"""Per-setup performance and reliability.

Groups closed trades by setup label and reports, for each group, how
often it wins, what it earns per trade (currency and R), how deep its
own R curve has drawn down, and whether the sample is large enough to
trust.

Reliability (sample thresholds from ``AnalyticsConfig``):

* ``High``     : at least ``min_sample_high`` trades and positive expectancy
* ``Moderate`` : at least ``min_sample_moderate`` trades and expectancy >= 0
* ``Low``      : anything else

Expectancy here is the R expectancy when the setup has R data, else the
currency expectancy.

The aggregator returns rows in first-appearance order.  Ranking is left
to the caller (``rank_setups``).
"""

from __future__ import annotations

from dataclasses import dataclass

from tradebuddy.core.config import MIN_SAMPLE_HIGH, MIN_SAMPLE_MODERATE
from tradebuddy.core.enums import Reliability

from .buckets import TradeBucket, group_trades
from .record import NormalizedTrade, closed_trades
from .stats import max_drawdown, mean, percent, std_dev

# R at or below this is a full 1R stop-out (allows for fees/slippage).
FULL_LOSS_R = -0.99
BIG_WIN_R = 2.0
CONFIDENCE_POINTS_PER_TRADE = 2


@dataclass(frozen=True)
class SetupPerformanceRow:
    setup_type: str
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    total_pnl: float
    expectancy: float
    avg_r: float | None
    expectancy_r: float | None
    profit_factor: float
    max_drawdown_r: float
    average_win_r: float | None
    average_loss_r: float | None  # magnitude
    percent_above_2r: float
    percent_full_loss: float
    r_std_dev: float | None
    reliability: Reliability
    confidence_score: int


@dataclass(frozen=True)
class EmotionPerformanceRow:
    emotion: str
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    total_pnl: float
    expectancy: float
    expectancy_r: float | None
    profit_factor: float


def classify_reliability(
    total_trades: int,
    expectancy: float,
    *,
    min_sample_high: int = MIN_SAMPLE_HIGH,
    min_sample_moderate: int = MIN_SAMPLE_MODERATE,
) -> Reliability:
    if total_trades >= min_sample_high and expectancy > 0:
        return Reliability.HIGH
    if total_trades >= min_sample_moderate and expectancy >= 0:
        return Reliability.MODERATE
    return Reliability.LOW


def _setup_row(
    name: str,
    bucket: TradeBucket,
    min_sample_high: int,
    min_sample_moderate: int,
) -> SetupPerformanceRow:
    r_vals = bucket.r_values
    win_r = [r for r in r_vals if r > 0]
    loss_r = [r for r in r_vals if r < 0]
    avg_loss_r = mean(loss_r)
    exp_r = mean(r_vals)

    return SetupPerformanceRow(
        setup_type=name,
        total_trades=bucket.count,
        wins=bucket.wins,
        losses=bucket.losses,
        win_rate=bucket.win_rate,
        total_pnl=bucket.total_pnl,
        expectancy=bucket.expectancy,
        avg_r=exp_r,
        expectancy_r=exp_r,
        profit_factor=bucket.profit_factor,
        max_drawdown_r=max_drawdown(r_vals),
        average_win_r=mean(win_r),
        average_loss_r=abs(avg_loss_r) if avg_loss_r is not None else None,
        percent_above_2r=percent(sum(1 for r in r_vals if r >= BIG_WIN_R), len(r_vals)),
        percent_full_loss=percent(sum(1 for r in r_vals if r <= FULL_LOSS_R), len(r_vals)),
        r_std_dev=std_dev(r_vals),
        reliability=classify_reliability(
            bucket.count,
            bucket.ranking_expectancy,
            min_sample_high=min_sample_high,
            min_sample_moderate=min_sample_moderate,
        ),
        confidence_score=min(100, bucket.count * CONFIDENCE_POINTS_PER_TRADE),
    )


def compute_setup_performance(
    trades: list[NormalizedTrade],
    *,
    min_sample_high: int = MIN_SAMPLE_HIGH,
    min_sample_moderate: int = MIN_SAMPLE_MODERATE,
) -> list[SetupPerformanceRow]:
    """Per-setup statistics over closed trades (unordered)."""
    groups = group_trades(closed_trades(trades), lambda t: t.setup_type)
    return [
        _setup_row(name, bucket, min_sample_high, min_sample_moderate)
        for name, bucket in groups.items()
    ]


def rank_setups(rows: list[SetupPerformanceRow]) -> list[SetupPerformanceRow]:
    """Leaderboard order: best expectancy first, then by name."""

    def _key(row: SetupPerformanceRow) -> tuple[float, str]:
        exp = row.expectancy if row.expectancy_r is None else row.expectancy_r
        return (-exp, row.setup_type)

    return sorted(rows, key=_key)


def compute_emotion_performance(
    trades: list[NormalizedTrade],
) -> list[EmotionPerformanceRow]:
    """Per-emotion statistics over closed trades (unordered)."""
    groups = group_trades(closed_trades(trades), lambda t: t.emotion)
    return [
        EmotionPerformanceRow(
            emotion=emotion,
            total_trades=bucket.count,
            wins=bucket.wins,
            losses=bucket.losses,
            win_rate=bucket.win_rate,
            total_pnl=bucket.total_pnl,
            expectancy=bucket.expectancy,
            expectancy_r=bucket.expectancy_r,
            profit_factor=bucket.profit_factor,
        )
        for emotion, bucket in groups.items()
    ]
