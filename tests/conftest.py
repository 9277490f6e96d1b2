"""Shared fixtures for the tradebuddy test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tradebuddy.core.clock import FixedClock
from tradebuddy.core.config import AnalyticsConfig


# ---------------------------------------------------------------------------
# Clock / config
# ---------------------------------------------------------------------------

@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock frozen at 2024-06-01 00:00 UTC."""
    return FixedClock(datetime(2024, 6, 1, tzinfo=timezone.utc))


@pytest.fixture
def analytics_config() -> AnalyticsConfig:
    """Default config with a small Monte Carlo run and a fixed report date."""
    return AnalyticsConfig(
        monte_carlo_simulations=200,
        as_of=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )


# ---------------------------------------------------------------------------
# Raw journal entries
# ---------------------------------------------------------------------------

def raw_trade(
    index: int,
    pnl: float | None,
    *,
    start: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
    spacing: timedelta = timedelta(days=1),
    **fields,
) -> dict:
    """Build one raw journal entry, closed one hour after entry."""
    entry = start + spacing * index
    record = {
        "id": f"t{index}",
        "symbol": "eurusd",
        "type": "long",
        "entryTime": entry.isoformat(),
        "exitTime": (entry + timedelta(hours=1)).isoformat(),
        "pnl": pnl,
    }
    record.update(fields)
    return record


@pytest.fixture
def raw_trades() -> list[dict]:
    """A small mixed journal: wins, losses, two setups, one open trade."""
    trades = [
        raw_trade(0, 120.0, setupType="Breakout", riskPercent=1.0, rMultiple=1.2,
                  checklistCompletionPercent=90, emotion="Calm"),
        raw_trade(1, -100.0, setupType="Breakout", riskPercent=1.0, rMultiple=-1.0,
                  checklistCompletionPercent=80, emotion="calm"),
        raw_trade(2, 60.0, setupType="Pullback", riskPercent=1.5, rMultiple=0.6,
                  checklistCompletionPercent=60, emotion="fomo"),
        raw_trade(3, -50.0, setupType="Pullback", riskPercent=1.5, rMultiple=-0.5,
                  checklistCompletionPercent=70, emotion="fomo"),
        raw_trade(4, 200.0, setupType="Breakout", riskPercent=1.0, rMultiple=2.0,
                  checklistCompletionPercent=100, emotion="calm"),
        raw_trade(5, 0.0, setupType="Pullback", riskPercent=1.0, rMultiple=0.0),
    ]
    open_trade = raw_trade(6, None, setupType="Breakout")
    open_trade["exitTime"] = None
    trades.append(open_trade)
    return trades
