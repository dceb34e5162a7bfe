"""Analytics commands for Trade Journal CLI.

Handles the performance summary and the cumulative P&L curve.
"""

import json
import math
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, format_money, get_ledger, parse_range


@click.command()
@click.option("--start", type=str, default=None, help="Start date (YYYY-MM-DD), inclusive.")
@click.option("--end", type=str, default=None, help="End date (YYYY-MM-DD), inclusive.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a panel.")
def metrics(start: Optional[str], end: Optional[str], as_json: bool) -> None:
    """Show performance metrics for closed trades.

    \b
    Examples:
      tradejournal metrics
      tradejournal metrics --start 2024-12-01 --end 2024-12-31
    """
    from tradejournal.api import metrics_to_dict

    start_dt, end_dt = parse_range(start, end)
    summary = get_ledger().get_trading_metrics(start_dt, end_dt)

    if as_json:
        click.echo(json.dumps(metrics_to_dict(summary), indent=2))
        return

    if math.isinf(summary.profit_factor):
        profit_factor = "∞ (no losses)"
    else:
        profit_factor = f"{summary.profit_factor:.2f}"

    period = f"{start} to {end}" if start_dt is not None else "All time"
    lines = [
        f"[bold]Period:[/bold]        {period}\n",
        f"[bold]Total P&L:[/bold]     {format_money(summary.total_pnl)}",
        f"[bold]Win Rate:[/bold]      {summary.win_rate:.1f}% "
        f"({summary.winning_trades}W / {summary.losing_trades}L)",
        f"[bold]Closed Trades:[/bold] {summary.total_trades}",
        f"[bold]Avg Win:[/bold]       {format_money(summary.avg_win)}",
        f"[bold]Avg Loss:[/bold]      {format_money(-summary.avg_loss)}",
        f"[bold]Profit Factor:[/bold] {profit_factor}",
    ]
    console.print(Panel(
        "\n".join(lines),
        title="[bold cyan]Performance[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.option("--start", type=str, default=None, help="Start date (YYYY-MM-DD), inclusive.")
@click.option("--end", type=str, default=None, help="End date (YYYY-MM-DD), inclusive.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
def equity(start: Optional[str], end: Optional[str], as_json: bool) -> None:
    """Show cumulative P&L trade by trade."""
    from tradejournal.api import equity_point_to_dict

    start_dt, end_dt = parse_range(start, end)
    points = get_ledger().get_equity_curve(start_dt, end_dt)

    if as_json:
        click.echo(json.dumps([equity_point_to_dict(p) for p in points], indent=2))
        return

    if not points:
        console.print("[dim]No closed trades yet[/dim]")
        return

    table = Table(title="Cumulative P&L")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Symbol", style="cyan")
    table.add_column("P&L", justify="right")
    table.add_column("Cumulative", justify="right")
    for point in points:
        table.add_row(
            str(point.trade_number),
            point.date.strftime("%Y-%m-%d"),
            point.symbol,
            format_money(point.pnl),
            format_money(point.cumulative_pnl),
        )
    console.print(table)
