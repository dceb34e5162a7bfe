"""Exception hierarchy for Trade Journal."""

from typing import Optional


class TradeJournalError(Exception):
    """Base class for all Trade Journal errors."""


class ConfigError(TradeJournalError):
    """Raised when the configuration file cannot be read."""


class NormalizationError(TradeJournalError, ValueError):
    """Raised when a raw CSV value cannot be coerced to its canonical type.

    Args:
        message: Human readable description.
        field: Canonical field name, when known.
        value: The offending raw value.
    """

    def __init__(
        self, message: str, field: Optional[str] = None, value: Optional[str] = None
    ):
        super().__init__(message)
        self.field = field
        self.value = value


class UnknownBrokerError(TradeJournalError, KeyError):
    """Raised when a broker profile name is not registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Unknown broker"


class TradeValidationError(TradeJournalError):
    """Raised at the boundary when a trade payload fails validation."""

    def __init__(self, errors: list):
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Validation error: {summary}")


class ImportRejectedError(TradeJournalError):
    """Raised when an upload is refused before any row is read."""


class EmptyImportError(ImportRejectedError):
    """Raised when a CSV file holds no data rows."""


class AllRowsFailedError(ImportRejectedError):
    """Raised when no row of an import survives normalization and validation.

    Args:
        failures: Bounded sample of row errors.
        total_failures: Number of rows that failed in total.
        skipped: Rows dropped for a column-count mismatch.
    """

    def __init__(self, failures: list, total_failures: int, skipped: int = 0):
        self.failures = list(failures)
        self.total_failures = total_failures
        self.skipped = skipped
        super().__init__("All trades failed validation")
