"""Deterministic plain-language hints derived from finished aggregates.

Insights never recompute anything: they read the summary, rolling,
setup, behaviour and discipline results and turn notable values into
short sentences.  Order is fixed (behaviour warnings first, then edge,
discipline, setups, trend and streaks) and the list is capped at
``MAX_INSIGHTS``.
"""

from __future__ import annotations

from tradebuddy.core.enums import Reliability, TrendDirection

from .behavior import PostLossBehaviorReport
from .discipline import DisciplineReport
from .rolling import RollingMetricsResult
from .setups import SetupPerformanceRow
from .summary import SummaryMetrics

MAX_INSIGHTS = 8
LOSING_STREAK_ALERT = 3


def _setup_expectancy(row: SetupPerformanceRow) -> tuple[float, str]:
    if row.expectancy_r is not None:
        return row.expectancy_r, f"{row.expectancy_r:+.2f}R"
    return row.expectancy, f"{row.expectancy:+.2f}"


def _discipline_hints(discipline: DisciplineReport) -> list[str]:
    hints: list[str] = []
    rules = discipline.rule_impact
    gap = rules.high_vs_low
    if gap is not None and gap > 0:
        hints.append(
            f"Checklist pays: {rules.high.expectancy_r:+.2f}R per trade at 90%+ completion "
            f"vs {rules.low.expectancy_r:+.2f}R below 70%."
        )
    risk = discipline.risk_behavior
    if (
        risk.risk_after_loss is not None
        and risk.risk_after_win is not None
        and risk.risk_after_loss > risk.risk_after_win
    ):
        hints.append(
            f"Risk rises after losses ({risk.risk_after_loss:.2f}% vs "
            f"{risk.risk_after_win:.2f}% after wins); keep size fixed."
        )
    return hints


def generate_insights(
    summary: SummaryMetrics,
    rolling: RollingMetricsResult,
    setups: list[SetupPerformanceRow],
    behavior: PostLossBehaviorReport,
    discipline: DisciplineReport | None = None,
) -> list[str]:
    """Up to eight hints, most actionable first.  Empty with no closed trades."""
    if summary.total_trades == 0:
        return []

    hints: list[str] = [w.message + "." for w in behavior.warnings]

    if summary.expectancy > 0:
        hints.append(
            f"Positive edge: {summary.expectancy:.2f} per trade over "
            f"{summary.total_trades} closed trades (win rate {summary.win_rate:.1f}%)."
        )
    elif summary.expectancy < 0:
        hints.append(
            f"Negative edge: losing {abs(summary.expectancy):.2f} per trade on average; "
            "review setups before adding size."
        )

    if summary.losing_trades and summary.risk_reward_ratio < 1.0 and summary.win_rate < 50.0:
        hints.append(
            f"Average win is {summary.risk_reward_ratio:.2f}x the average loss with a "
            "sub-50% win rate; let winners run or cut losers sooner."
        )

    if discipline is not None:
        hints.extend(_discipline_hints(discipline))

    trusted = [r for r in setups if r.reliability is not Reliability.LOW]
    if trusted:
        best = max(trusted, key=lambda r: (_setup_expectancy(r)[0], r.setup_type))
        value, label = _setup_expectancy(best)
        if value > 0:
            hints.append(
                f"Best reliable setup: {best.setup_type} ({label} per trade, "
                f"{best.total_trades} trades)."
            )

    for row in setups:
        value, label = _setup_expectancy(row)
        if value < 0 and row.total_trades >= 3:
            hints.append(
                f"{row.setup_type} is losing ({label} per trade over "
                f"{row.total_trades} trades); consider pausing it."
            )

    if rolling.trades_needed:
        hints.append(
            f"{rolling.trades_needed} more closed trade(s) needed for a "
            f"{rolling.window_size}-trade rolling view."
        )
    elif rolling.trend is TrendDirection.IMPROVING:
        hints.append("Rolling expectancy is improving.")
    elif rolling.trend is TrendDirection.DETERIORATING:
        hints.append("Rolling expectancy is deteriorating; recent trades underperform.")

    if summary.current_streak <= -LOSING_STREAK_ALERT:
        hints.append(
            f"Currently on a {-summary.current_streak}-trade losing streak; "
            "consider reducing size."
        )

    return hints[:MAX_INSIGHTS]
