"""Trade commands for Trade Journal CLI.

Handles manual entry, history, single-trade display, updates and deletion.
"""

import json
from datetime import datetime, timezone
from typing import Optional

import click
from rich.panel import Panel

from tradejournal.cli.common import (
    console,
    get_ledger,
    parse_range,
    report_error,
    report_field_errors,
    trade_panel,
    trades_table,
)
from tradejournal.models import INSTRUMENT_TYPES

INSTRUMENT_CHOICE = click.Choice(INSTRUMENT_TYPES, case_sensitive=False)


def _side(value: str) -> str:
    """Accept any recognised side token (BUY, s, long, ...)."""
    from tradejournal.errors import NormalizationError
    from tradejournal.importers.normalizer import normalize_side

    try:
        return normalize_side(value)
    except NormalizationError as e:
        raise click.BadParameter(str(e)) from e


@click.command()
@click.argument("symbol")
@click.argument("side")
@click.argument("quantity", type=float)
@click.argument("entry_price", type=float)
@click.option("-x", "--exit-price", type=float, default=None, help="Exit price (omit for an open position).")
@click.option("--entry-date", type=str, default=None, help="Entry date/time (ISO-8601). Defaults to now.")
@click.option("--exit-date", type=str, default=None, help="Exit date/time (ISO-8601).")
@click.option("-c", "--commission", type=float, default=0.0, show_default=True, help="Total commission.")
@click.option("-i", "--instrument", type=INSTRUMENT_CHOICE, default="stock", show_default=True, help="Instrument type.")
@click.option("-s", "--strategy", type=str, default=None, help="Strategy label.")
@click.option("-n", "--notes", type=str, default=None, help="Notes.")
@click.option("--open", "is_open", is_flag=True, default=False, help="Record as an open position.")
@click.option("--pnl", type=float, default=None, help="Override the calculated P&L.")
def add(
    symbol: str,
    side: str,
    quantity: float,
    entry_price: float,
    exit_price: Optional[float],
    entry_date: Optional[str],
    exit_date: Optional[str],
    commission: float,
    instrument: str,
    strategy: Optional[str],
    notes: Optional[str],
    is_open: bool,
    pnl: Optional[float],
) -> None:
    """Record a trade manually.

    SIDE accepts BUY/SELL or LONG/SHORT (or B, L, S, SH).

    \b
    Examples:
      tradejournal add AAPL long 100 175.42 -x 178.91 -c 2.50
      tradejournal add TSLA sell 50 248.76 --open
    """
    from tradejournal.validation import validate_trade_input

    values = {
        "symbol": symbol,
        "side": _side(side),
        "quantity": quantity,
        "entry_price": entry_price,
        "exit_price": exit_price,
        "entry_date": entry_date or datetime.now(timezone.utc),
        "exit_date": exit_date,
        "commission": commission,
        "instrument_type": instrument,
        "strategy": strategy,
        "notes": notes,
        "is_open": is_open or exit_price is None,
        "pnl": pnl,
    }
    result = validate_trade_input(values)
    if not result.ok:
        report_field_errors(result.errors)
        raise SystemExit(1)

    trade = get_ledger().create_trade(result.trade)
    console.print(trade_panel(trade, title="Trade Recorded"))


@click.command("list")
@click.option("--start", type=str, default=None, help="Start date (YYYY-MM-DD), inclusive.")
@click.option("--end", type=str, default=None, help="End date (YYYY-MM-DD), inclusive.")
@click.option("--symbol", type=str, default=None, help="Filter by symbol (substring).")
@click.option("--side", type=click.Choice(["LONG", "SHORT"], case_sensitive=False), default=None, help="Filter by side.")
@click.option("--instrument", type=INSTRUMENT_CHOICE, default=None, help="Filter by instrument type.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
def list_trades(
    start: Optional[str],
    end: Optional[str],
    symbol: Optional[str],
    side: Optional[str],
    instrument: Optional[str],
    as_json: bool,
) -> None:
    """Show trade history, most recent first.

    \b
    Examples:
      tradejournal list
      tradejournal list --start 2024-12-01 --end 2024-12-31 --side long
    """
    from tradejournal.analytics import filter_trades
    from tradejournal.api import trade_to_dict

    start_dt, end_dt = parse_range(start, end)
    ledger = get_ledger()
    if start_dt is not None:
        trades = ledger.get_trades_by_date_range(start_dt, end_dt)
    else:
        trades = ledger.get_all_trades()
    trades = filter_trades(trades, symbol=symbol, side=side, instrument_type=instrument)

    if as_json:
        click.echo(json.dumps([trade_to_dict(t) for t in trades], indent=2))
        return

    if not trades:
        console.print(Panel(
            "[dim]No trades found[/dim]\n\n"
            "[dim]Run 'tradejournal import' or 'tradejournal add' to record trades[/dim]",
            title="[bold]Trade History[/bold]",
            border_style="dim",
        ))
        return

    console.print(trades_table(trades, title="Trade History"))
    open_count = sum(1 for t in trades if t.is_open)
    wins = sum(1 for t in trades if (t.pnl or 0) > 0)
    losses = sum(1 for t in trades if (t.pnl or 0) < 0)
    console.print(
        f"[dim]{len(trades)} trades: {wins} winning, {losses} losing, {open_count} open[/dim]"
    )


@click.command()
@click.argument("trade_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a panel.")
def show(trade_id: int, as_json: bool) -> None:
    """Show a single trade."""
    from tradejournal.api import trade_to_dict

    trade = get_ledger().get_trade(trade_id)
    if trade is None:
        report_error(f"Trade {trade_id} not found", title="Not Found")
        raise SystemExit(1)
    if as_json:
        click.echo(json.dumps(trade_to_dict(trade), indent=2))
        return
    console.print(trade_panel(trade))


@click.command()
@click.argument("trade_id", type=int)
@click.option("--symbol", type=str, default=None, help="New symbol.")
@click.option("--side", type=str, default=None, help="New side (BUY/SELL or LONG/SHORT).")
@click.option("-q", "--quantity", type=float, default=None, help="New quantity.")
@click.option("--entry-price", type=float, default=None, help="New entry price.")
@click.option("-x", "--exit-price", type=float, default=None, help="Exit price (closes the trade).")
@click.option("--entry-date", type=str, default=None, help="New entry date (ISO-8601).")
@click.option("--exit-date", type=str, default=None, help="Exit date (ISO-8601).")
@click.option("-c", "--commission", type=float, default=None, help="New commission.")
@click.option("-i", "--instrument", type=INSTRUMENT_CHOICE, default=None, help="New instrument type.")
@click.option("-s", "--strategy", type=str, default=None, help="New strategy label.")
@click.option("-n", "--notes", type=str, default=None, help="New notes.")
@click.option("--pnl", type=float, default=None, help="Override the P&L.")
@click.option("--open/--closed", "is_open", default=None, help="Reopen or close the position.")
def update(trade_id: int, **options) -> None:
    """Update fields of a trade.

    Supplying an exit price closes an open trade; P&L is recalculated
    whenever a price, side, quantity or commission changes. Reopening a
    trade clears its exit price and P&L.

    \b
    Examples:
      tradejournal update 4 --exit-price 181.20 --exit-date 2024-12-16T15:30
      tradejournal update 4 --notes "Held overnight"
    """
    from tradejournal.validation import validate_trade_patch

    names = {
        "instrument": "instrument_type",
    }
    values = {names.get(key, key): value for key, value in options.items() if value is not None}
    if "side" in values:
        values["side"] = _side(values["side"])
    if "exit_price" in values and "is_open" not in values:
        values["is_open"] = False

    if not values:
        raise click.UsageError("Nothing to update; pass at least one option")

    result = validate_trade_patch(values)
    if not result.ok:
        report_field_errors(result.errors)
        raise SystemExit(1)

    trade = get_ledger().update_trade(trade_id, result.changes)
    if trade is None:
        report_error(f"Trade {trade_id} not found", title="Not Found")
        raise SystemExit(1)
    console.print(trade_panel(trade, title="Trade Updated"))


@click.command()
@click.argument("trade_id", type=int)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
def delete(trade_id: int, yes: bool) -> None:
    """Delete a trade."""
    if not yes:
        click.confirm(f"Delete trade {trade_id}?", abort=True)
    if not get_ledger().delete_trade(trade_id):
        report_error(f"Trade {trade_id} not found", title="Not Found")
        raise SystemExit(1)
    console.print(f"[green]Trade {trade_id} deleted[/green]")


@click.command()
def seed() -> None:
    """Add three demonstration trades to the journal."""
    from tradejournal.ledger import seed_sample_trades

    trades = seed_sample_trades(get_ledger())
    console.print(trades_table(trades, title="Sample Trades Added"))
