"""Report export: JSON and CSV output.

``to_dict`` turns any report object (dataclasses, enums, datetimes,
nested lists and dicts) into plain JSON-compatible values so the
report can be serialised or handed to another process.

Usage::

    json_str = report_to_json(report)
    csv_str = balance_curve_to_csv(report.balance_curve)
"""

from __future__ import annotations

import csv
import dataclasses
import io
import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from .balance import BalanceCurve
from .report import Report

# Balance curve CSV columns
_CURVE_COLUMNS = [
    "index",
    "timestamp",
    "trade_id",
    "pnl",
    "balance",
    "peak",
    "drawdown",
]


def to_dict(obj: Any) -> Any:
    """Recursively convert ``obj`` to JSON-compatible values.

    Enums become their values, datetimes ISO-8601 strings, dataclasses
    dicts of their fields.  Dict keys are stringified.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    return obj


def report_to_json(report: Report, *, indent: int | None = 2) -> str:
    """Serialise a report as a JSON string."""
    return json.dumps(to_dict(report), indent=indent)


def balance_curve_to_csv(curve: BalanceCurve) -> str:
    """Export the balance curve as CSV with a header row.

    The synthetic starting point is included with an empty ``trade_id``.
    """
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_CURVE_COLUMNS)
    writer.writeheader()

    for point in curve.points:
        writer.writerow({
            "index": point.index,
            "timestamp": point.timestamp.isoformat() if point.timestamp else "",
            "trade_id": point.trade_id or "",
            "pnl": round(point.pnl, 4),
            "balance": round(point.balance, 4),
            "peak": round(point.peak, 4),
            "drawdown": round(point.drawdown, 4),
        })

    return buf.getvalue()
