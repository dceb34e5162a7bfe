"""Helpers shared by the Trade Journal commands."""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tradejournal.config import JournalConfig, load_config
from tradejournal.dates import parse_range_bound
from tradejournal.models import FieldError, Trade

console = Console()


def get_config() -> JournalConfig:
    """Load configuration once per invocation."""
    ctx = click.get_current_context(silent=True)
    cache = ctx.find_root().ensure_object(dict) if ctx else {}
    if "config" not in cache:
        cache["config"] = load_config()
    return cache["config"]


def get_ledger():
    """Ledger backed by the configured SQLite database."""
    from tradejournal.db.store import SqliteTradeRepository
    from tradejournal.ledger import TradeLedger

    return TradeLedger(SqliteTradeRepository(get_config().db_path))


def report_error(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def report_field_errors(errors: list[FieldError], title: str = "Validation Error") -> None:
    lines = [f"[bold]{error.field}[/bold]: {escape(error.message)}" for error in errors]
    console.print(Panel(
        "\n".join(lines),
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def parse_range(start: Optional[str], end: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Parse --start/--end options; both or neither must be given."""
    try:
        start_dt = parse_range_bound(start)
        end_dt = parse_range_bound(end, end=True)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    if (start_dt is None) != (end_dt is None):
        raise click.UsageError("--start and --end must be used together")
    if start_dt is not None and start_dt > end_dt:
        raise click.UsageError("--start must not be after --end")
    return start_dt, end_dt


def format_money(value: Optional[float]) -> str:
    if value is None:
        return "[dim]-[/dim]"
    color = "green" if value >= 0 else "red"
    sign = "-" if value < 0 else ""
    return f"[{color}]{sign}${abs(value):,.2f}[/{color}]"


def format_number(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:,.4f}".rstrip("0").rstrip(".")


def trades_table(trades: list[Trade], title: str = "Trades") -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Symbol", style="cyan")
    table.add_column("Side")
    table.add_column("Type")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Status")

    for trade in trades:
        side_color = "green" if trade.side == "LONG" else "red"
        table.add_row(
            str(trade.id),
            trade.entry_date.strftime("%Y-%m-%d %H:%M"),
            trade.symbol,
            f"[{side_color}]{trade.side}[/{side_color}]",
            trade.instrument_type,
            format_number(trade.quantity),
            format_number(trade.entry_price),
            format_number(trade.exit_price),
            format_money(trade.pnl),
            "[yellow]OPEN[/yellow]" if trade.is_open else "CLOSED",
        )
    return table


def trade_panel(trade: Trade, title: str = "Trade") -> Panel:
    lines = [
        f"[bold]ID:[/bold]         {trade.id}",
        f"[bold]Symbol:[/bold]     {trade.symbol} ({trade.instrument_type})",
        f"[bold]Side:[/bold]       {trade.side}",
        f"[bold]Quantity:[/bold]   {format_number(trade.quantity)}",
        f"[bold]Entry:[/bold]      {format_number(trade.entry_price)} @ {trade.entry_date:%Y-%m-%d %H:%M}",
    ]
    if trade.exit_price is not None:
        exit_date = f" @ {trade.exit_date:%Y-%m-%d %H:%M}" if trade.exit_date else ""
        lines.append(f"[bold]Exit:[/bold]       {format_number(trade.exit_price)}{exit_date}")
    lines.append(f"[bold]Commission:[/bold] ${trade.commission:,.2f}")
    lines.append(f"[bold]P&L:[/bold]        {format_money(trade.pnl)}")
    lines.append(f"[bold]Status:[/bold]     {'OPEN' if trade.is_open else 'CLOSED'}")
    if trade.strategy:
        lines.append(f"[bold]Strategy:[/bold]   {trade.strategy}")
    if trade.notes:
        lines.append(f"[bold]Notes:[/bold]      {trade.notes}")
    return Panel("\n".join(lines), title=f"[bold cyan]{title}[/bold cyan]", border_style="cyan")
