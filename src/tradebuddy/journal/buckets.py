"""Trade buckets: grouped accumulators shared by the breakdown reports.

Setup, emotion and time-of-day breakdowns all answer the same question
("how did trades with this label perform?"), so they share one
accumulator.  Buckets keep their trades in chronological order, which
the per-bucket drawdown needs.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import TypeVar

from .record import NormalizedTrade
from .stats import mean, mean_or_zero, percent, profit_factor

K = TypeVar("K", bound=Hashable)


@dataclass
class TradeBucket:
    """Accumulator for one group of closed trades."""

    trades: list[NormalizedTrade] = field(default_factory=list)

    def record(self, trade: NormalizedTrade) -> None:
        self.trades.append(trade)

    @property
    def count(self) -> int:
        return len(self.trades)

    @property
    def pnls(self) -> list[float]:
        return [t.pnl for t in self.trades]

    @property
    def r_values(self) -> list[float]:
        return [t.r_value for t in self.trades if t.r_value is not None]

    @property
    def wins(self) -> int:
        return sum(1 for t in self.trades if t.pnl > 0)

    @property
    def losses(self) -> int:
        return sum(1 for t in self.trades if t.pnl < 0)

    @property
    def win_rate(self) -> float:
        return percent(self.wins, self.count)

    @property
    def total_pnl(self) -> float:
        return math.fsum(self.pnls)

    @property
    def expectancy(self) -> float:
        return mean_or_zero(self.pnls)

    @property
    def expectancy_r(self) -> float | None:
        return mean(self.r_values)

    @property
    def profit_factor(self) -> float:
        gross_profit = math.fsum(p for p in self.pnls if p > 0)
        gross_loss = math.fsum(p for p in self.pnls if p < 0)
        return profit_factor(gross_profit, gross_loss)

    @property
    def ranking_expectancy(self) -> float:
        """Expectancy in R when known, else in currency."""
        exp_r = self.expectancy_r
        return self.expectancy if exp_r is None else exp_r


def group_trades(
    trades: list[NormalizedTrade],
    key: Callable[[NormalizedTrade], K],
) -> dict[K, TradeBucket]:
    """Bucket trades by ``key``, preserving first-appearance order."""
    buckets: dict[K, TradeBucket] = {}
    for trade in trades:
        k = key(trade)
        if k not in buckets:
            buckets[k] = TradeBucket()
        buckets[k].record(trade)
    return buckets
