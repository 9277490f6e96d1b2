"""Shared helpers for journal tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tradebuddy.journal.record import NormalizedTrade

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time():
    return BASE_TIME


def make_trade(
    index: int = 0,
    pnl: float = 0.0,
    *,
    entry_time: datetime | None = None,
    closed: bool = True,
    **fields,
) -> NormalizedTrade:
    """Helper to create a NormalizedTrade entered ``index`` days after BASE_TIME."""
    entry = entry_time or BASE_TIME + timedelta(days=index)
    return NormalizedTrade(
        trade_id=fields.pop("trade_id", f"t{index}"),
        entry_time=entry,
        sequence=index,
        exit_time=entry + timedelta(hours=1) if closed else None,
        pnl=pnl,
        **fields,
    )


def make_series(pnls: list[float], **fields) -> list[NormalizedTrade]:
    """Closed trades on consecutive days with the given pnl values."""
    return [make_trade(i, pnl, **fields) for i, pnl in enumerate(pnls)]
