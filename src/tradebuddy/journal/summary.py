"""Headline performance metrics: win rate, profit factor, expectancy.

Only closed trades count.  A break-even trade (pnl == 0) is neither a
win nor a loss but does count toward the total, so win rate and loss
rate need not sum to 100.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .record import NormalizedTrade, closed_trades
from .stats import mean, mean_or_zero, percent, profit_factor


@dataclass(frozen=True)
class SummaryMetrics:
    """Aggregate statistics over closed trades."""

    total_trades: int = 0
    open_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0
    loss_rate: float = 0.0

    total_pnl: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0  # signed, <= 0
    profit_factor: float = 0.0
    expectancy: float = 0.0
    expectancy_r: float | None = None

    avg_win: float = 0.0
    avg_loss: float = 0.0  # magnitude, >= 0
    risk_reward_ratio: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0  # signed, <= 0

    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    current_streak: int = 0  # +n wins / -n losses in a row


def _streaks(pnls: list[float]) -> tuple[int, int, int]:
    """Return (max win streak, max loss streak, current streak).

    A break-even trade ends any streak.
    """
    best_win = best_loss = 0
    current = 0
    for pnl in pnls:
        if pnl > 0:
            current = current + 1 if current > 0 else 1
            best_win = max(best_win, current)
        elif pnl < 0:
            current = current - 1 if current < 0 else -1
            best_loss = max(best_loss, -current)
        else:
            current = 0
    return best_win, best_loss, current


def compute_summary(trades: list[NormalizedTrade]) -> SummaryMetrics:
    """Compute win rate, profit factor and expectancy over closed trades."""
    closed = closed_trades(trades)
    open_count = len(trades) - len(closed)
    if not closed:
        return SummaryMetrics(open_trades=open_count)

    pnls = [t.pnl for t in closed]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    total = len(pnls)

    total_profit = math.fsum(wins)
    total_loss = math.fsum(losses)
    avg_win = mean_or_zero(wins)
    avg_loss = abs(mean_or_zero(losses))
    best_win, best_loss, current = _streaks(pnls)

    return SummaryMetrics(
        total_trades=total,
        open_trades=open_count,
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=total - len(wins) - len(losses),
        win_rate=percent(len(wins), total),
        loss_rate=percent(len(losses), total),
        total_pnl=math.fsum(pnls),
        total_profit=total_profit,
        total_loss=total_loss,
        profit_factor=profit_factor(total_profit, total_loss),
        expectancy=mean_or_zero(pnls),
        expectancy_r=mean(t.r_value for t in closed if t.r_value is not None),
        avg_win=avg_win,
        avg_loss=avg_loss,
        risk_reward_ratio=avg_win / avg_loss if avg_loss > 0 else avg_win,
        largest_win=max(wins, default=0.0),
        largest_loss=min(losses, default=0.0),
        max_consecutive_wins=best_win,
        max_consecutive_losses=best_loss,
        current_streak=current,
    )
