"""CLI entry point for the analytics engine."""

from __future__ import annotations

import json

import click


@click.group()
def main() -> None:
    """TradeBuddy trade-performance analytics."""


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="TOML config file path")
@click.option(
    "--format", "output_format",
    type=click.Choice(["json", "summary"]), default="summary",
    help="Output format",
)
@click.option("--initial-balance", default=None, type=float, help="Starting account balance")
@click.option("--window", default=None, type=int, help="Rolling window size (trades)")
@click.option("--as-of", default=None, help="Report date (ISO-8601); also dates an empty balance curve")
@click.option("--balance-csv", default=None, type=click.Path(dir_okay=False), help="Write the balance curve to this CSV file")
def report(
    trades_file: str,
    config: str | None,
    output_format: str,
    initial_balance: float | None,
    window: int | None,
    as_of: str | None,
    balance_csv: str | None,
) -> None:
    """Build a performance report from a JSON array of journal entries."""
    from pydantic import ValidationError

    from .core.errors import TradeBuddyError
    from .core.config import load_settings
    from .journal.export import balance_curve_to_csv, report_to_json
    from .journal.report import assemble_report
    from .observability.logger import get_logger, setup_logging, start_run

    analytics: dict = {}
    if initial_balance is not None:
        analytics["initial_balance"] = initial_balance
    if window is not None:
        analytics["rolling_window_size"] = window
    if as_of:
        analytics["as_of"] = as_of

    try:
        settings = load_settings(config, {"analytics": analytics} if analytics else None)
    except (TradeBuddyError, ValidationError) as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(settings.observability.log_level, settings.observability.log_format)
    log = get_logger(__name__)
    start_run(
        trades_file,
        initial_balance=settings.analytics.initial_balance,
        window=settings.analytics.rolling_window_size,
    )

    try:
        with open(trades_file, encoding="utf-8") as f:
            raw_trades = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise click.ClickException(f"{trades_file} is not valid JSON: {exc}") from exc

    try:
        result = assemble_report(raw_trades, settings.analytics)
    except TradeBuddyError as exc:
        raise click.ClickException(str(exc)) from exc

    log.info(
        "report_built",
        closed_trades=result.data_quality.closed_count,
        dropped=result.data_quality.dropped_count,
    )

    if balance_csv:
        with open(balance_csv, "w", encoding="utf-8", newline="") as f:
            f.write(balance_curve_to_csv(result.balance_curve))

    if output_format == "json":
        click.echo(report_to_json(result))
        return

    s = result.summary
    curve = result.balance_curve
    click.echo(f"Trades:          {s.total_trades} closed, {s.open_trades} open")
    click.echo(f"Win rate:        {s.win_rate:.1f}%")
    click.echo(f"Total P&L:       {s.total_pnl:.2f}")
    click.echo(f"Profit factor:   {s.profit_factor:.2f}")
    click.echo(f"Expectancy:      {s.expectancy:.2f}")
    if s.expectancy_r is not None:
        click.echo(f"Expectancy (R):  {s.expectancy_r:.2f}")
    click.echo(f"Final balance:   {curve.final_balance:.2f}")
    click.echo(f"Max drawdown:    {curve.max_drawdown:.1f}%")
    click.echo(f"Rolling trend:   {result.rolling.trend.value}")
    if result.discipline.discipline.score is not None:
        click.echo(f"Discipline:      {result.discipline.discipline.score}/100")

    if result.setup_performance:
        click.echo("\nSetups:")
        for row in result.setup_performance:
            click.echo(
                f"  {row.setup_type:<20} {row.total_trades:>4} trades  "
                f"{row.win_rate:5.1f}%  {row.reliability.value}"
            )

    if result.insights:
        click.echo("\nInsights:")
        for hint in result.insights:
            click.echo(f"  - {hint}")


if __name__ == "__main__":
    main()
