"""Structured logging scoped to one report run.

Uses structlog for structured logging with JSON or console output.
``start_run`` opens a run context (run_id, package version, the trades
file and whatever analytics settings the caller binds); every entry
logged while it is current carries those fields, whether it comes from
a structlog logger or from a library module's plain ``logging`` logger.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from tradebuddy import __version__

ROOT_LOGGER = "tradebuddy"

# Context var for the current report run
_run_context: ContextVar[dict[str, Any] | None] = ContextVar("run_context", default=None)


def start_run(trades_file: str | None = None, **context: Any) -> str:
    """Open a new report run and return its run ID.

    Extra keyword arguments (e.g. ``initial_balance``, ``window``) are
    attached to every log entry of the run.
    """
    rid = uuid.uuid4().hex[:12]
    ctx: dict[str, Any] = {"run_id": rid, "version": __version__}
    if trades_file is not None:
        ctx["trades_file"] = trades_file
    ctx.update({k: v for k, v in context.items() if v is not None})
    _run_context.set(ctx)
    return rid


def current_run() -> dict[str, Any]:
    """Fields of the current run; empty outside a run."""
    return dict(_run_context.get() or {})


def _add_run_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add the current run's fields to every entry."""
    for key, value in (_run_context.get() or {}).items():
        event_dict.setdefault(key, value)
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "console",
) -> None:
    """Configure structured logging for the ``tradebuddy`` logger tree.

    Calling it again replaces the previous configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_run_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so JSON reports on stdout stay parseable.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
