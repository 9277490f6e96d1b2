"""Normalized trade record: the canonical input of every aggregator.

A NormalizedTrade is produced once by the normalizer from a raw journal
entry.  Every optional numeric field is either a finite ``float`` or
``None``; ``None`` means "unknown" and is never conflated with zero, so
an aggregator can tell "risked 0 %" apart from "risk not recorded".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from tradebuddy.core.enums import TradeOutcome, TradeType

UNKNOWN_SETUP = "Unknown"
NEUTRAL_EMOTION = "neutral"


@dataclass(frozen=True)
class NormalizedTrade:
    """Validated, sentinel-safe view of one journal entry.

    Parameters
    ----------
    trade_id : str
        Identifier from the persistence layer (``""`` if absent).
    entry_time : datetime
        UTC-aware entry timestamp.  Always present.
    exit_time : datetime | None
        UTC-aware exit timestamp.  ``None`` marks an open trade.
    pnl : float
        Realised P&L.  ``0.0`` with ``pnl_missing=True`` when the raw
        value was absent or not a finite number.
    sequence : int
        Position in the raw input; breaks ``entry_time`` ties.
    """

    trade_id: str
    entry_time: datetime
    sequence: int = field(default=0, compare=False)
    symbol: str = ""
    trade_type: TradeType | None = None
    exit_time: datetime | None = None

    pnl: float = 0.0
    pnl_missing: bool = False

    setup_type: str = UNKNOWN_SETUP
    emotion: str = NEUTRAL_EMOTION

    # Risk and discipline context (None = not recorded)
    risk_percent: float | None = None
    planned_risk_amount: float | None = None
    checklist_completion_percent: float | None = None
    r_multiple: float | None = None
    confidence_level: float | None = None
    execution_quality: float | None = None
    trade_number_of_day: float | None = None

    # Execution detail, carried for presentation only
    entry_price: float | None = None
    exit_price: float | None = None
    quantity: float | None = None

    # Names of raw fields that had to be coerced to a default
    flags: tuple[str, ...] = field(default_factory=tuple)

    # ------------------------------------------------------------------ #
    # Computed properties                                                  #
    # ------------------------------------------------------------------ #

    @property
    def is_closed(self) -> bool:
        """Closed trades have both an entry and an exit."""
        return self.exit_time is not None

    @property
    def is_flagged(self) -> bool:
        return bool(self.flags)

    @property
    def outcome(self) -> TradeOutcome:
        if self.pnl > 0:
            return TradeOutcome.WIN
        if self.pnl < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAKEVEN

    @property
    def r_value(self) -> float | None:
        """Realised R: the recorded multiple, else pnl / planned risk.

        Returns None when neither is computable.
        """
        if self.r_multiple is not None:
            return self.r_multiple
        if self.pnl_missing or self.planned_risk_amount is None:
            return None
        if self.planned_risk_amount <= 0:
            return None
        return self.pnl / self.planned_risk_amount

    @property
    def realised_at(self) -> datetime:
        """When the P&L landed: exit time for closed trades, else entry."""
        return self.exit_time or self.entry_time


@dataclass(frozen=True)
class NormalizationResult:
    """Normalized trades plus data-quality counters."""

    trades: list[NormalizedTrade] = field(default_factory=list)
    input_count: int = 0
    dropped_count: int = 0
    flagged_count: int = 0

    @property
    def closed_count(self) -> int:
        return sum(1 for t in self.trades if t.is_closed)

    @property
    def open_count(self) -> int:
        return len(self.trades) - self.closed_count


def closed_trades(trades: list[NormalizedTrade]) -> list[NormalizedTrade]:
    """Closed trades in chronological order.

    Inputs from the normalizer are already sorted; re-sorting keeps the
    aggregators correct when called with hand-built lists.
    """
    return sorted(
        (t for t in trades if t.is_closed),
        key=lambda t: (t.entry_time, t.sequence),
    )
