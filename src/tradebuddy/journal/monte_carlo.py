"""Monte Carlo equity projection: forward-looking risk analysis.

Bootstrap-resamples historical closed-trade pnl to project future
equity paths, then reports probability of ruin, terminal-equity
percentiles and the distribution of maximum drawdown.  Answers "given
my historical edge, what's the range of possible outcomes over the next
N trades?"

The generator is seeded, so the same trades, seed and parameters always
produce the same projection.

Usage::

    mc = run_monte_carlo(trades, 10_000, simulations=1000, seed=42)
    print(mc.ruin_probability)        # 0.02
    print(mc.median_terminal_equity)  # 11_500
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .record import NormalizedTrade, closed_trades

logger = logging.getLogger(__name__)

MIN_TRADES = 5
BAND_PERCENTILES = (5, 25, 50, 75, 95)


@dataclass(frozen=True)
class EquityBand:
    """Equity percentiles across all paths after ``step`` trades."""

    step: int
    p5: float
    p25: float
    p50: float
    p75: float
    p95: float


@dataclass(frozen=True)
class MonteCarloSummary:
    initial_balance: float
    horizon: int
    simulations: int
    source_trades: int
    seed: int | None
    ruin_threshold_pct: float
    ruin_probability: float
    profit_probability: float
    mean_terminal_equity: float
    median_terminal_equity: float
    percentile_5: float
    percentile_25: float
    percentile_75: float
    percentile_95: float
    min_terminal_equity: float
    max_terminal_equity: float
    mean_max_drawdown_pct: float
    worst_case_drawdown_95_pct: float
    equity_bands: list[EquityBand] = field(default_factory=list)


def run_monte_carlo(
    trades: list[NormalizedTrade],
    initial_balance: float,
    *,
    simulations: int = 1000,
    seed: int | None = 42,
    ruin_threshold_pct: float = 50.0,
    horizon: int | None = None,
) -> MonteCarloSummary | None:
    """Project equity by resampling closed-trade pnl with replacement.

    Parameters
    ----------
    trades : list[NormalizedTrade]
        Normalized trades; open trades are ignored.
    initial_balance : float
        Starting equity of every path.
    simulations : int
        Number of paths.  ``0`` disables the projection.
    seed : int | None
        Seed for ``numpy.random.default_rng``.
    ruin_threshold_pct : float
        A path is ruined once equity falls to ``initial_balance`` less
        this percentage at any step.
    horizon : int | None
        Trades per path.  Defaults to the number of closed trades.

    Returns ``None`` with fewer than 5 closed trades, a non-positive
    balance or ``simulations == 0``.
    """
    closed = closed_trades(trades)
    if simulations <= 0 or initial_balance <= 0 or len(closed) < MIN_TRADES:
        logger.debug(
            "Monte Carlo skipped: %d closed trades, balance %.2f, %d simulations",
            len(closed), initial_balance, simulations,
        )
        return None

    source = np.array([t.pnl for t in closed], dtype=float)
    steps = horizon if horizon is not None and horizon > 0 else len(source)

    rng = np.random.default_rng(seed)
    draws = source[rng.integers(0, len(source), size=(simulations, steps))]

    equity = initial_balance + np.cumsum(draws, axis=1)
    paths = np.hstack([np.full((simulations, 1), float(initial_balance)), equity])

    peaks = np.maximum.accumulate(paths, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        dd = np.where(peaks > 0, (peaks - paths) / peaks * 100.0, 0.0)
    max_dd = np.clip(dd.max(axis=1), 0.0, 100.0)

    ruin_level = initial_balance * (1.0 - ruin_threshold_pct / 100.0)
    ruined = (paths <= ruin_level).any(axis=1)

    terminal = paths[:, -1]
    p5, p25, p50, p75, p95 = np.percentile(terminal, BAND_PERCENTILES)

    band_values = np.percentile(paths, BAND_PERCENTILES, axis=0)
    bands = [
        EquityBand(
            step=i,
            p5=float(band_values[0, i]),
            p25=float(band_values[1, i]),
            p50=float(band_values[2, i]),
            p75=float(band_values[3, i]),
            p95=float(band_values[4, i]),
        )
        for i in range(paths.shape[1])
    ]

    return MonteCarloSummary(
        initial_balance=float(initial_balance),
        horizon=steps,
        simulations=simulations,
        source_trades=len(source),
        seed=seed,
        ruin_threshold_pct=ruin_threshold_pct,
        ruin_probability=float(ruined.mean()),
        profit_probability=float((terminal > initial_balance).mean()),
        mean_terminal_equity=float(terminal.mean()),
        median_terminal_equity=float(p50),
        percentile_5=float(p5),
        percentile_25=float(p25),
        percentile_75=float(p75),
        percentile_95=float(p95),
        min_terminal_equity=float(terminal.min()),
        max_terminal_equity=float(terminal.max()),
        mean_max_drawdown_pct=float(max_dd.mean()),
        worst_case_drawdown_95_pct=float(np.percentile(max_dd, 95)),
        equity_bands=bands,
    )
