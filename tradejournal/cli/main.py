"""Main CLI entry point for Trade Journal.

Commands live in their own modules and are imported on first use, so
``tradejournal --help`` stays fast.
"""

import importlib

import click

# Command name -> "module:attribute" of the click command.
LAZY_SUBCOMMANDS = {
    # Trades
    "add": "tradejournal.cli.trades:add",
    "list": "tradejournal.cli.trades:list_trades",
    "show": "tradejournal.cli.trades:show",
    "update": "tradejournal.cli.trades:update",
    "delete": "tradejournal.cli.trades:delete",
    "seed": "tradejournal.cli.trades:seed",
    # Import
    "import": "tradejournal.cli.imports:import_trades",
    "brokers": "tradejournal.cli.imports:brokers",
    # Analytics
    "metrics": "tradejournal.cli.metrics:metrics",
    "equity": "tradejournal.cli.metrics:equity",
}


class LazyGroup(click.Group):
    """Click group resolving commands from ``module:attribute`` references.

    Args:
        lazy_subcommands: Command name -> ``module:attribute``.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)).union(self.lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is not None or cmd_name not in self.lazy_subcommands:
            return command

        module_path, _, attribute = self.lazy_subcommands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_path), attribute, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(
                f"'{cmd_name}' does not resolve to a command ({module_path}:{attribute})"
            )
        self.add_command(command, cmd_name)
        return command


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Trade Journal - import, record and analyse your trades.

    \b
    Quick Start:
      tradejournal import trades.csv --broker generic
      tradejournal list
      tradejournal metrics --start 2024-12-01 --end 2024-12-31
    """
    from tradejournal.cli.common import get_config, report_error
    from tradejournal.errors import ConfigError
    from tradejournal.log import setup_logging

    ctx.ensure_object(dict)
    try:
        config = get_config()
    except ConfigError as e:
        report_error(str(e))
        raise SystemExit(1)
    setup_logging("DEBUG" if verbose else config.log_level, config.log_file)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
