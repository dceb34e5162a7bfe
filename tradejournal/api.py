"""Boundary adapters for Trade Journal.

Each function mirrors one HTTP route of the journal: it takes and returns
plain mappings with camelCase keys and ISO-8601 date strings, so any web
framework can expose the ledger without knowing its Python types.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional, Union

from tradejournal.dates import parse_range_bound, to_iso
from tradejournal.errors import AllRowsFailedError, TradeValidationError
from tradejournal.importers.pipeline import (
    ERROR_DETAIL_LIMIT,
    MAX_IMPORT_BYTES,
    REJECTION_SAMPLE_LIMIT,
    import_csv,
)
from tradejournal.importers.profiles import PROFILES
from tradejournal.ledger import TradeLedger
from tradejournal.models import (
    EquityPoint,
    FieldError,
    ImportReport,
    MetricsSummary,
    RowError,
    Trade,
)
from tradejournal.validation import validate_trade_input, validate_trade_patch

# camelCase boundary name -> snake_case model field
FIELD_NAMES: dict[str, str] = {
    "symbol": "symbol",
    "side": "side",
    "quantity": "quantity",
    "entryPrice": "entry_price",
    "exitPrice": "exit_price",
    "entryDate": "entry_date",
    "exitDate": "exit_date",
    "commission": "commission",
    "instrumentType": "instrument_type",
    "strategy": "strategy",
    "notes": "notes",
    "isOpen": "is_open",
    "pnl": "pnl",
}
BOUNDARY_NAMES: dict[str, str] = {value: key for key, value in FIELD_NAMES.items()}


def payload_to_values(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Rename boundary keys to model fields; unknown keys pass through unchanged."""
    return {FIELD_NAMES.get(key, key): value for key, value in payload.items()}


def field_error_to_dict(error: FieldError) -> dict[str, Any]:
    return {
        "field": BOUNDARY_NAMES.get(error.field, error.field),
        "message": error.message,
    }


def validation_error_to_dict(error: TradeValidationError) -> dict[str, Any]:
    """Body of a 400 response for an invalid trade payload."""
    return {
        "message": "Validation error",
        "errors": [field_error_to_dict(field_error) for field_error in error.errors],
    }


def trade_to_dict(trade: Trade) -> dict[str, Any]:
    """Serialize a trade to its boundary mapping."""
    return {
        "id": trade.id,
        "symbol": trade.symbol,
        "side": trade.side,
        "quantity": trade.quantity,
        "entryPrice": trade.entry_price,
        "exitPrice": trade.exit_price,
        "entryDate": to_iso(trade.entry_date),
        "exitDate": to_iso(trade.exit_date),
        "pnl": trade.pnl,
        "commission": trade.commission,
        "instrumentType": trade.instrument_type,
        "strategy": trade.strategy,
        "notes": trade.notes,
        "isOpen": trade.is_open,
    }


def metrics_to_dict(metrics: MetricsSummary) -> dict[str, Any]:
    """Serialize metrics; an infinite profit factor becomes null plus a flag."""
    infinite = math.isinf(metrics.profit_factor)
    return {
        "totalPnL": metrics.total_pnl,
        "winRate": metrics.win_rate,
        "avgWin": metrics.avg_win,
        "avgLoss": metrics.avg_loss,
        "totalTrades": metrics.total_trades,
        "winningTrades": metrics.winning_trades,
        "losingTrades": metrics.losing_trades,
        "profitFactor": None if infinite else metrics.profit_factor,
        "profitFactorInfinite": infinite,
    }


def equity_point_to_dict(point: EquityPoint) -> dict[str, Any]:
    return {
        "tradeNumber": point.trade_number,
        "date": to_iso(point.date),
        "symbol": point.symbol,
        "pnl": point.pnl,
        "cumulativePnL": point.cumulative_pnl,
    }


def row_error_to_dict(error: RowError) -> dict[str, Any]:
    return {"row": error.row, "error": error.error, "data": dict(error.data)}


def rejection_to_dict(error: AllRowsFailedError) -> dict[str, Any]:
    """Body of a 400 response for an import where no row survived."""
    return {
        "message": str(error),
        "errors": [row_error_to_dict(failure) for failure in error.failures],
        "totalErrors": error.total_failures,
        "skipped": error.skipped,
    }


def import_report_to_dict(report: ImportReport) -> dict[str, Any]:
    return {
        "message": f"Successfully imported {report.imported} trades",
        "imported": report.imported,
        "errors": report.failed,
        "skipped": report.skipped,
        "errorDetails": [row_error_to_dict(error) for error in report.error_details],
        "trades": [trade_to_dict(trade) for trade in report.trades],
    }


def _range(start_date: Optional[str], end_date: Optional[str]):
    return parse_range_bound(start_date), parse_range_bound(end_date, end=True)


# ==================== Routes ====================


def list_trades(
    ledger: TradeLedger,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> list[dict[str, Any]]:
    """GET /api/trades: all trades, or those in the range when both bounds are given.

    Raises:
        ValueError: If a bound is not a valid ISO-8601 date.
    """
    start, end = _range(start_date, end_date)
    if start is not None and end is not None:
        trades = ledger.get_trades_by_date_range(start, end)
    else:
        trades = ledger.get_all_trades()
    return [trade_to_dict(trade) for trade in trades]


def get_trade(ledger: TradeLedger, trade_id: int) -> Optional[dict[str, Any]]:
    """GET /api/trades/<id>: None when the trade does not exist."""
    trade = ledger.get_trade(trade_id)
    return trade_to_dict(trade) if trade else None


def create_trade(ledger: TradeLedger, payload: Mapping[str, Any]) -> dict[str, Any]:
    """POST /api/trades.

    Raises:
        TradeValidationError: If the payload is not a valid trade.
    """
    result = validate_trade_input(payload_to_values(payload))
    if not result.ok:
        raise TradeValidationError(result.errors)
    return trade_to_dict(ledger.create_trade(result.trade))


def update_trade(
    ledger: TradeLedger, trade_id: int, payload: Mapping[str, Any]
) -> Optional[dict[str, Any]]:
    """PUT /api/trades/<id>: None when the trade does not exist.

    Raises:
        TradeValidationError: If a supplied field is invalid.
    """
    values = payload_to_values(payload)
    values.pop("id", None)
    result = validate_trade_patch(values)
    if not result.ok:
        raise TradeValidationError(result.errors)
    trade = ledger.update_trade(trade_id, result.changes)
    return trade_to_dict(trade) if trade else None


def delete_trade(ledger: TradeLedger, trade_id: int) -> bool:
    """DELETE /api/trades/<id>: False when the trade does not exist."""
    return ledger.delete_trade(trade_id)


def get_metrics(
    ledger: TradeLedger,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> dict[str, Any]:
    """GET /api/metrics."""
    start, end = _range(start_date, end_date)
    return metrics_to_dict(ledger.get_trading_metrics(start, end))


def get_equity_curve(
    ledger: TradeLedger,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Cumulative P&L series for the performance chart."""
    start, end = _range(start_date, end_date)
    return [equity_point_to_dict(point) for point in ledger.get_equity_curve(start, end)]


def import_trades(
    ledger: TradeLedger,
    file_bytes: Union[bytes, str],
    broker: Optional[str] = "generic",
    filename: Optional[str] = None,
    max_bytes: int = MAX_IMPORT_BYTES,
    error_detail_limit: int = ERROR_DETAIL_LIMIT,
    rejection_sample_limit: int = REJECTION_SAMPLE_LIMIT,
) -> dict[str, Any]:
    """POST /api/trades/import.

    Raises:
        ImportRejectedError, EmptyImportError, AllRowsFailedError: See
        import_csv.
    """
    report = import_csv(
        ledger,
        file_bytes,
        broker=broker,
        filename=filename,
        max_bytes=max_bytes,
        error_detail_limit=error_detail_limit,
        rejection_sample_limit=rejection_sample_limit,
    )
    return import_report_to_dict(report)


def list_brokers() -> list[dict[str, str]]:
    """Broker profiles available to the import route."""
    return [
        {"value": profile.name, "label": profile.label, "description": profile.description}
        for profile in PROFILES.values()
    ]
