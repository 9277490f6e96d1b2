"""Pre-aggregation trade filters.

``apply_filters`` narrows a list of normalized trades with a
``TradeFilter``: date range on entry time, label sets (setup, emotion,
symbol), outcome, and numeric ranges on R, risk percent and checklist
completion.  Every criterion is optional and criteria combine with AND.

A trade whose value is unknown (``None``) fails any numeric bound set
on that value.  Non-``all`` outcome filters only keep closed trades.
"""

from __future__ import annotations

import logging
from datetime import datetime

from tradebuddy.core.config import TradeFilter
from tradebuddy.core.enums import OutcomeFilter

from .normalizer import to_timestamp
from .record import NormalizedTrade

logger = logging.getLogger(__name__)


def _in_range(value: float | None, low: float | None, high: float | None) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _fold(values: list[str]) -> set[str]:
    return {v.strip().casefold() for v in values if v.strip()}


def matches(
    trade: NormalizedTrade,
    trade_filter: TradeFilter,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> bool:
    """Whether one trade passes every criterion of ``trade_filter``.

    ``start`` and ``end`` are the filter's bounds already converted to
    UTC; they default to converting the filter's own values.
    """
    start = start if start is not None else to_timestamp(trade_filter.start)
    end = end if end is not None else to_timestamp(trade_filter.end)

    if start is not None and trade.entry_time < start:
        return False
    if end is not None and trade.entry_time > end:
        return False

    for wanted, actual in (
        (trade_filter.setups, trade.setup_type),
        (trade_filter.emotions, trade.emotion),
        (trade_filter.symbols, trade.symbol),
    ):
        folded = _fold(wanted)
        if folded and actual.casefold() not in folded:
            return False

    if trade_filter.outcome is not OutcomeFilter.ALL:
        if not trade.is_closed or trade.outcome.value != trade_filter.outcome.value:
            return False

    return (
        _in_range(trade.r_value, trade_filter.min_r, trade_filter.max_r)
        and _in_range(
            trade.risk_percent,
            trade_filter.min_risk_percent,
            trade_filter.max_risk_percent,
        )
        and _in_range(
            trade.checklist_completion_percent,
            trade_filter.min_checklist_percent,
            trade_filter.max_checklist_percent,
        )
    )


def apply_filters(
    trades: list[NormalizedTrade],
    trade_filter: TradeFilter | None,
) -> list[NormalizedTrade]:
    """Keep trades matching ``trade_filter``, preserving order."""
    if trade_filter is None:
        return list(trades)

    start = to_timestamp(trade_filter.start)
    end = to_timestamp(trade_filter.end)
    kept = [t for t in trades if matches(t, trade_filter, start=start, end=end)]

    if len(kept) != len(trades):
        logger.debug("Filter kept %d of %d trades", len(kept), len(trades))
    return kept
