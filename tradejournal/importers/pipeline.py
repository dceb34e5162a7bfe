"""CSV import pipeline.

bytes -> CsvTable -> normalize -> validate -> ledger.create_trades -> report.
Per-row failures never abort the batch; they are collected and reported.
"""

import logging
from typing import Optional, Union

from tradejournal.errors import AllRowsFailedError, EmptyImportError, ImportRejectedError
from tradejournal.importers.csv_reader import CsvRecord, read_csv
from tradejournal.importers.normalizer import normalize
from tradejournal.importers.profiles import BrokerProfile, resolve_profile
from tradejournal.ledger import TradeLedger
from tradejournal.models import FieldError, ImportReport, RowError, TradeInput
from tradejournal.validation import validate_trade_input

logger = logging.getLogger(__name__)

MAX_IMPORT_BYTES = 5 * 1024 * 1024
ERROR_DETAIL_LIMIT = 5
REJECTION_SAMPLE_LIMIT = 10


def _message(errors: list[FieldError]) -> str:
    return "; ".join(error.message for error in errors)


def prepare_row(
    record: CsvRecord, profile: BrokerProfile
) -> Union[TradeInput, RowError]:
    """Normalize and validate one CSV record.

    Returns:
        The TradeInput, or a RowError describing why the row was rejected.
    """
    normalized = normalize(record.data, profile)
    errors = list(normalized.errors)

    values = dict(normalized.values)
    # An import never carries a manual P&L; open/closed follows the exit price.
    values.pop("pnl", None)
    values["is_open"] = values.get("exit_price") is None

    result = validate_trade_input(values)
    failed = {error.field for error in errors}
    errors.extend(error for error in result.errors if error.field not in failed)

    if errors:
        return RowError(row=record.row, error=_message(errors), data=record.data)
    return result.trade


def import_csv(
    ledger: TradeLedger,
    data: Union[bytes, str],
    broker: Optional[str] = "generic",
    filename: Optional[str] = None,
    max_bytes: int = MAX_IMPORT_BYTES,
    error_detail_limit: int = ERROR_DETAIL_LIMIT,
    rejection_sample_limit: int = REJECTION_SAMPLE_LIMIT,
) -> ImportReport:
    """Import a broker CSV export into the ledger.

    Args:
        ledger: Ledger receiving the trades.
        data: File contents; the first line is the header.
        broker: Broker profile selector; unknown or blank selectors fall
            back to the generic profile.
        filename: Original file name; must end in ``.csv`` when given.
        max_bytes: Upload size limit.
        error_detail_limit: Rejected rows reported in the result.
        rejection_sample_limit: Rejected rows carried by AllRowsFailedError.

    Returns:
        ImportReport with counts, a capped error sample and the new trades.

    Raises:
        ImportRejectedError: If the file is too large or not a CSV file.
        EmptyImportError: If the file has no data rows.
        AllRowsFailedError: If every data row was rejected.
    """
    profile = resolve_profile(broker)

    if filename is not None and not filename.lower().endswith(".csv"):
        raise ImportRejectedError("Only CSV files are allowed")
    size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
    if size > max_bytes:
        raise ImportRejectedError(
            f"File is too large ({size} bytes, limit {max_bytes} bytes)"
        )

    table = read_csv(data)
    if not table.records:
        if table.skipped:
            raise AllRowsFailedError([], total_failures=0, skipped=table.skipped)
        raise EmptyImportError("CSV file is empty")

    inputs: list[TradeInput] = []
    failures: list[RowError] = []
    for record in table.records:
        prepared = prepare_row(record, profile)
        if isinstance(prepared, RowError):
            failures.append(prepared)
        else:
            inputs.append(prepared)

    logger.info(
        "Parsed %d rows with profile %s: %d valid, %d rejected, %d skipped",
        len(table.records),
        profile.name,
        len(inputs),
        len(failures),
        table.skipped,
    )

    if not inputs:
        raise AllRowsFailedError(
            failures[:rejection_sample_limit],
            total_failures=len(failures),
            skipped=table.skipped,
        )

    trades = ledger.create_trades(inputs)
    return ImportReport(
        imported=len(trades),
        failed=len(failures),
        skipped=table.skipped,
        error_details=failures[:error_detail_limit],
        trades=trades,
    )
