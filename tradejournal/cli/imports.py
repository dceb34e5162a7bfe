"""Import commands for Trade Journal CLI.

Handles CSV import from broker exports and the list of supported brokers.
"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, get_config, get_ledger, report_error
from tradejournal.models import RowError


def _errors_table(errors: list[RowError], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Row", justify="right", style="dim")
    table.add_column("Error", style="red")
    table.add_column("Data", style="dim")
    for error in errors:
        table.add_row(
            str(error.row),
            escape(error.error),
            escape(", ".join(f"{key}={value}" for key, value in error.data.items())),
        )
    return table


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-b", "--broker", type=str, default=None, help="Broker profile (see 'tradejournal brokers').")
@click.option("--json", "as_json", is_flag=True, help="Print the import result as JSON.")
def import_trades(csv_file: Path, broker: Optional[str], as_json: bool) -> None:
    """Import trades from a broker CSV export.

    Rows that cannot be read are reported and skipped; the rest are imported.

    \b
    Examples:
      tradejournal import trades.csv
      tradejournal import export.csv --broker tradestation
    """
    from tradejournal.api import import_report_to_dict, rejection_to_dict
    from tradejournal.errors import AllRowsFailedError, ImportRejectedError
    from tradejournal.importers.pipeline import import_csv

    config = get_config()
    broker = broker or config.default_broker

    try:
        report = import_csv(
            get_ledger(),
            csv_file.read_bytes(),
            broker=broker,
            filename=csv_file.name,
            max_bytes=config.max_import_bytes,
            error_detail_limit=config.error_detail_limit,
            rejection_sample_limit=config.rejection_sample_limit,
        )
    except AllRowsFailedError as e:
        if as_json:
            click.echo(json.dumps(rejection_to_dict(e), indent=2))
            raise SystemExit(1)
        report_error(
            f"All trades failed validation ({e.total_failures} rejected, {e.skipped} skipped)",
            title="Import Failed",
        )
        if e.failures:
            console.print(_errors_table(e.failures, title="Rejected Rows"))
        raise SystemExit(1)
    except ImportRejectedError as e:
        report_error(str(e), title="Import Failed")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(import_report_to_dict(report), indent=2))
        return

    summary = (
        f"[bold]Import Complete[/bold]\n\n"
        f"File:     {csv_file.name}\n"
        f"Broker:   {broker}\n"
        f"Imported: [green]{report.imported}[/green] trades\n"
        f"Rejected: [red]{report.failed}[/red] rows\n"
        f"Skipped:  {report.skipped} (column count mismatch)"
    )
    console.print(Panel(summary, title="[bold cyan]CSV Import[/bold cyan]", border_style="cyan"))
    if report.error_details:
        console.print(_errors_table(report.error_details, title="Rejected Rows (first few)"))


@click.command()
def brokers() -> None:
    """List supported broker CSV formats."""
    from tradejournal.importers.profiles import PROFILES

    table = Table(title="Broker Profiles")
    table.add_column("Name", style="cyan")
    table.add_column("Broker")
    table.add_column("Format")
    for profile in PROFILES.values():
        table.add_row(profile.name, profile.label, profile.description)
    console.print(table)
