"""Trade normalizer: raw journal entries -> NormalizedTrade.

The persistence layer hands over loosely-typed dictionaries (numbers as
strings, blank fields, NaN from spreadsheet imports).  This module is
the only place that deals with that mess.  A malformed field is coerced
to ``None`` (or ``0.0`` + flag for pnl); a record without a usable entry
time is dropped.  Nothing short of a non-list input raises.

Usage::

    result = normalize_trades(rows)
    print(result.dropped_count, result.flagged_count)
    for trade in result.trades:   # sorted by entry_time
        ...
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from tradebuddy.core.enums import TradeType
from tradebuddy.core.errors import InvalidInputError

from .record import (
    NEUTRAL_EMOTION,
    UNKNOWN_SETUP,
    NormalizationResult,
    NormalizedTrade,
)

logger = logging.getLogger(__name__)

# Epoch numbers above this are taken as milliseconds (JS Date.getTime()).
_EPOCH_MS_THRESHOLD = 1e11

# Raw key -> accepted spellings, first match wins.
_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "trade_id", "tradeId"),
    "symbol": ("symbol", "asset"),
    "type": ("type", "trade_type", "direction"),
    "entryTime": ("entryTime", "entry_time"),
    "exitTime": ("exitTime", "exit_time"),
    "pnl": ("pnl", "profitLoss", "profit_loss"),
    "setupType": ("setupType", "setup_type"),
    "emotion": ("emotion",),
    "riskPercent": (
        "riskPercent", "risk_percent", "plannedRiskPercent", "planned_risk_percent",
    ),
    "plannedRiskAmount": ("plannedRiskAmount", "planned_risk_amount"),
    "checklistCompletionPercent": (
        "checklistCompletionPercent", "checklist_completion_percent",
    ),
    "rMultiple": ("rMultiple", "r_multiple"),
    "confidenceLevel": ("confidenceLevel", "confidence_level"),
    "executionQuality": ("executionQuality", "execution_quality"),
    "tradeNumberOfDay": ("tradeNumberOfDay", "trade_number_of_day"),
    "entryPrice": ("entryPrice", "entry_price"),
    "exitPrice": ("exitPrice", "exit_price"),
    "quantity": ("quantity", "qty"),
}

# Optional numeric fields: raw key -> NormalizedTrade attribute
_NUMERIC_FIELDS: dict[str, str] = {
    "riskPercent": "risk_percent",
    "plannedRiskAmount": "planned_risk_amount",
    "checklistCompletionPercent": "checklist_completion_percent",
    "rMultiple": "r_multiple",
    "confidenceLevel": "confidence_level",
    "executionQuality": "execution_quality",
    "tradeNumberOfDay": "trade_number_of_day",
    "entryPrice": "entry_price",
    "exitPrice": "exit_price",
    "quantity": "quantity",
}


# ---------------------------------------------------------------------- #
# Coercion helpers                                                         #
# ---------------------------------------------------------------------- #

def to_finite(value: Any) -> float | None:
    """Coerce ``value`` to a finite float, or None if it is not one.

    Bools are rejected (``True`` is not a P&L), as are blank strings,
    non-numeric strings, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_timestamp(value: Any) -> datetime | None:
    """Parse a timestamp into a UTC-aware datetime.

    Accepts datetimes (naive = UTC), dates, ISO-8601 strings (a trailing
    ``Z`` is allowed) and epoch numbers in seconds or milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError:
            return None
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float, Decimal)):
        seconds = to_finite(value)
        if seconds is None:
            return None
        if abs(seconds) > _EPOCH_MS_THRESHOLD:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return to_timestamp(parsed)
    return None


def _label(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _lookup(raw: Mapping[str, Any], key: str) -> tuple[bool, Any]:
    """Return (present, value) for a raw field under any of its aliases."""
    for alias in _ALIASES[key]:
        if alias in raw:
            return True, raw[alias]
    return False, None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ---------------------------------------------------------------------- #
# Record normalization                                                     #
# ---------------------------------------------------------------------- #

def normalize_record(raw: Any, sequence: int = 0) -> NormalizedTrade | None:
    """Normalize one raw record.  Returns None if it must be dropped."""
    if not isinstance(raw, Mapping):
        logger.debug("Dropping record #%d: not a mapping (%s)", sequence, type(raw).__name__)
        return None

    _, entry_raw = _lookup(raw, "entryTime")
    entry_time = to_timestamp(entry_raw)
    if entry_time is None:
        logger.debug("Dropping record #%d: missing or unparseable entryTime", sequence)
        return None

    flags: list[str] = []

    exit_present, exit_raw = _lookup(raw, "exitTime")
    exit_time = to_timestamp(exit_raw)
    if exit_time is None and exit_present and not _is_blank(exit_raw):
        flags.append("exitTime")

    _, pnl_raw = _lookup(raw, "pnl")
    pnl = to_finite(pnl_raw)
    pnl_missing = pnl is None
    if pnl_missing:
        flags.append("pnl")

    type_present, type_raw = _lookup(raw, "type")
    trade_type: TradeType | None = None
    if type_present and not _is_blank(type_raw):
        try:
            trade_type = TradeType(_label(type_raw).lower())
        except ValueError:
            flags.append("type")

    numeric: dict[str, float | None] = {}
    for key, attr in _NUMERIC_FIELDS.items():
        present, value = _lookup(raw, key)
        number = to_finite(value)
        if number is None and present and not _is_blank(value):
            flags.append(key)
        numeric[attr] = number

    checklist = numeric["checklist_completion_percent"]
    if checklist is not None and not 0.0 <= checklist <= 100.0:
        numeric["checklist_completion_percent"] = min(100.0, max(0.0, checklist))
        flags.append("checklistCompletionPercent")

    _, id_raw = _lookup(raw, "id")
    _, symbol_raw = _lookup(raw, "symbol")
    _, setup_raw = _lookup(raw, "setupType")
    _, emotion_raw = _lookup(raw, "emotion")

    return NormalizedTrade(
        trade_id=_label(id_raw),
        entry_time=entry_time,
        sequence=sequence,
        symbol=_label(symbol_raw).upper(),
        trade_type=trade_type,
        exit_time=exit_time,
        pnl=0.0 if pnl is None else pnl,
        pnl_missing=pnl_missing,
        setup_type=_label(setup_raw) or UNKNOWN_SETUP,
        emotion=_label(emotion_raw).lower() or NEUTRAL_EMOTION,
        flags=tuple(flags),
        **numeric,
    )


def normalize_trades(raw_trades: Any) -> NormalizationResult:
    """Normalize a batch of raw trades and report data-quality counts.

    Raises
    ------
    InvalidInputError
        If ``raw_trades`` is not a list or tuple.
    """
    if not isinstance(raw_trades, (list, tuple)):
        raise InvalidInputError(raw_trades)

    kept: list[NormalizedTrade] = []
    for sequence, raw in enumerate(raw_trades):
        trade = normalize_record(raw, sequence)
        if trade is not None:
            kept.append(trade)

    # Stable: equal entry times keep input order.
    kept.sort(key=lambda t: t.entry_time)

    dropped = len(raw_trades) - len(kept)
    flagged = sum(1 for t in kept if t.is_flagged)
    if dropped or flagged:
        logger.info(
            "Normalized %d trades: %d dropped, %d flagged",
            len(raw_trades),
            dropped,
            flagged,
        )

    return NormalizationResult(
        trades=kept,
        input_count=len(raw_trades),
        dropped_count=dropped,
        flagged_count=flagged,
    )


def normalize(raw_trades: Any) -> list[NormalizedTrade]:
    """Validate, coerce and chronologically sort raw trades."""
    return normalize_trades(raw_trades).trades
