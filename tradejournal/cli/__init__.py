"""CLI commands for Trade Journal.

This package provides the command-line interface for Trade Journal,
including CSV import, manual trade entry, trade history and metrics.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
