"""Time-of-day and session performance analysis.

Breaks down closed-trade performance by UTC entry hour, trading session
(Asia/London/NY) and day of week.  Answers questions like "Am I better
in the London session?" or "Should I avoid Mondays?"

Sessions overlap (London and New York share 13:00-16:00 UTC); a trade
in the overlap counts toward both.

Usage::

    report = compute_time_performance(trades)
    print(report.by_session["london"].win_rate)
    print(report.best_day)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone

from .buckets import TradeBucket
from .record import NormalizedTrade, closed_trades

# Session definitions (UTC hours, inclusive start, exclusive end)
SESSIONS = {
    "asia":   (0, 8),     # 00:00-08:00 UTC
    "london": (8, 16),    # 08:00-16:00 UTC
    "new_york": (13, 21), # 13:00-21:00 UTC (overlaps with London)
}
OFF_HOURS = "off_hours"

DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DEFAULT_MIN_TRADES = 3


@dataclass(frozen=True)
class TimeBucketStats:
    trades: int
    wins: int
    losses: int
    win_rate: float
    total_pnl: float
    expectancy: float
    expectancy_r: float | None
    profit_factor: float

    @classmethod
    def from_bucket(cls, bucket: TradeBucket) -> TimeBucketStats:
        return cls(
            trades=bucket.count,
            wins=bucket.wins,
            losses=bucket.losses,
            win_rate=bucket.win_rate,
            total_pnl=bucket.total_pnl,
            expectancy=bucket.expectancy,
            expectancy_r=bucket.expectancy_r,
            profit_factor=bucket.profit_factor,
        )


@dataclass(frozen=True)
class TimePerformanceReport:
    total_trades: int = 0
    by_hour: dict[int, TimeBucketStats] = field(default_factory=dict)
    by_session: dict[str, TimeBucketStats] = field(default_factory=dict)
    by_day: dict[str, TimeBucketStats] = field(default_factory=dict)
    best_hour: int | None = None
    worst_hour: int | None = None
    best_session: str | None = None
    best_day: str | None = None


def sessions_for_hour(hour: int) -> list[str]:
    """Names of every session covering a UTC hour."""
    names = [name for name, (start_h, end_h) in SESSIONS.items() if start_h <= hour < end_h]
    return names or [OFF_HOURS]


def _eligible(stats: dict, min_trades: int) -> dict:
    return {k: v for k, v in stats.items() if v.trades >= min_trades}


def _best_key(stats: dict, min_trades: int):
    valid = _eligible(stats, min_trades)
    if not valid:
        return None
    # Ties resolve to the first key in iteration order
    return max(valid, key=lambda k: valid[k].expectancy)


def _worst_key(stats: dict, min_trades: int):
    valid = _eligible(stats, min_trades)
    if not valid:
        return None
    return min(valid, key=lambda k: valid[k].expectancy)


def compute_time_performance(
    trades: list[NormalizedTrade],
    *,
    min_trades: int = DEFAULT_MIN_TRADES,
) -> TimePerformanceReport:
    """Bucket closed trades by entry hour, session and weekday.

    Best and worst picks consider only buckets holding at least
    ``min_trades`` trades and are ``None`` when no bucket qualifies.
    """
    closed = closed_trades(trades)
    if not closed:
        return TimePerformanceReport()

    by_hour: dict[int, TradeBucket] = {}
    by_session: dict[str, TradeBucket] = {}
    by_day: dict[str, TradeBucket] = {}

    for trade in closed:
        opened = trade.entry_time.astimezone(timezone.utc)
        by_hour.setdefault(opened.hour, TradeBucket()).record(trade)
        by_day.setdefault(DAY_NAMES[opened.weekday()], TradeBucket()).record(trade)
        for session in sessions_for_hour(opened.hour):
            by_session.setdefault(session, TradeBucket()).record(trade)

    hour_stats = {h: TimeBucketStats.from_bucket(b) for h, b in sorted(by_hour.items())}
    session_order = [*SESSIONS, OFF_HOURS]
    session_stats = {
        s: TimeBucketStats.from_bucket(by_session[s]) for s in session_order if s in by_session
    }
    day_stats = {d: TimeBucketStats.from_bucket(by_day[d]) for d in DAY_NAMES if d in by_day}

    return TimePerformanceReport(
        total_trades=len(closed),
        by_hour=hour_stats,
        by_session=session_stats,
        by_day=day_stats,
        best_hour=_best_key(hour_stats, min_trades),
        worst_hour=_worst_key(hour_stats, min_trades),
        best_session=_best_key(session_stats, min_trades),
        best_day=_best_key(day_stats, min_trades),
    )
