"""Enumerations used across the analytics engine."""

from enum import Enum


class TradeType(str, Enum):
    LONG = "long"
    SHORT = "short"
    BUY = "buy"
    SELL = "sell"


class TradeOutcome(str, Enum):
    """Win / loss / break-even classification by realised P&L."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class Reliability(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class TrendDirection(str, Enum):
    IMPROVING = "Improving"
    DETERIORATING = "Deteriorating"
    STABLE = "Stable"


class WarningSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OutcomeFilter(str, Enum):
    ALL = "all"
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"
