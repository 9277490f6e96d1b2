"""Account balance curve and drawdown.

Walks closed trades chronologically, tracking running balance and the
running equity peak.  Drawdown at each point is the percentage decline
from that peak.  The peak never decreases, so drawdown resets to zero
on every new high.

Usage::

    curve = compute_balance_curve(trades, initial_balance=10_000, as_of=today)
    print(curve.max_drawdown)           # 12.5  (percent)
    for p in curve.points:              # first point is the synthetic start
        print(p.timestamp, p.balance, p.drawdown)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .record import NormalizedTrade, closed_trades
from .stats import clamp_percent, mean


@dataclass(frozen=True)
class BalanceCurvePoint:
    """Account state after one closed trade (or the synthetic start)."""

    index: int
    timestamp: datetime | None
    trade_id: str | None
    pnl: float
    balance: float
    peak: float
    drawdown: float  # percent below peak, [0, 100]

    @property
    def is_synthetic(self) -> bool:
        return self.trade_id is None


@dataclass(frozen=True)
class BalanceCurve:
    """Balance series with drawdown statistics."""

    points: list[BalanceCurvePoint] = field(default_factory=list)
    initial_balance: float = 0.0
    final_balance: float = 0.0
    peak_balance: float = 0.0
    max_drawdown: float = 0.0
    total_return_percent: float | None = None
    longest_drawdown_trades: int = 0
    average_recovery_trades: float | None = None


def _drawdown_pct(peak: float, balance: float) -> float:
    if peak <= 0:
        return 0.0
    return clamp_percent((peak - balance) / peak * 100.0)


def compute_balance_curve(
    trades: list[NormalizedTrade],
    initial_balance: float,
    *,
    as_of: datetime | None = None,
) -> BalanceCurve:
    """Build the balance curve over closed trades.

    Parameters
    ----------
    trades : list[NormalizedTrade]
        Normalized trades; open trades are ignored.
    initial_balance : float
        Starting account balance.  With ``initial_balance <= 0`` the
        drawdown percentage is undefined and reported as 0.
    as_of : datetime | None
        Date of the synthetic leading point when there are no closed
        trades.  Left undated if not given.
    """
    closed = closed_trades(trades)

    if closed:
        start_ts: datetime | None = closed[0].entry_time - timedelta(days=1)
    else:
        start_ts = as_of

    balance = float(initial_balance)
    peak = balance
    points = [
        BalanceCurvePoint(
            index=0,
            timestamp=start_ts,
            trade_id=None,
            pnl=0.0,
            balance=balance,
            peak=peak,
            drawdown=0.0,
        )
    ]

    # Under-water run tracking
    run = 0
    longest_run = 0
    recoveries: list[int] = []

    for i, trade in enumerate(closed, start=1):
        balance += trade.pnl
        if balance > peak:
            peak = balance
        dd = _drawdown_pct(peak, balance)

        if balance < peak:
            run += 1
            longest_run = max(longest_run, run)
        else:
            if run:
                recoveries.append(run)
            run = 0

        points.append(
            BalanceCurvePoint(
                index=i,
                timestamp=trade.entry_time,
                trade_id=trade.trade_id,
                pnl=trade.pnl,
                balance=balance,
                peak=peak,
                drawdown=dd,
            )
        )

    total_return = None
    if initial_balance > 0:
        total_return = (balance - initial_balance) / initial_balance * 100.0

    return BalanceCurve(
        points=points,
        initial_balance=float(initial_balance),
        final_balance=balance,
        peak_balance=peak,
        max_drawdown=max(p.drawdown for p in points),
        total_return_percent=total_return,
        longest_drawdown_trades=longest_run,
        average_recovery_trades=mean(recoveries),
    )
