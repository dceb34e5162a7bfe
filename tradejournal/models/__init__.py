"""Data models for Trade Journal."""

from tradejournal.models.importing import (
    FieldError,
    ImportReport,
    NormalizedRow,
    PatchResult,
    RowError,
    ValidationResult,
)
from tradejournal.models.metrics import EquityPoint, MetricsSummary
from tradejournal.models.trade import (
    INSTRUMENT_TYPES,
    SIDES,
    InstrumentType,
    Side,
    Trade,
    TradeInput,
)

__all__ = [
    "EquityPoint",
    "FieldError",
    "ImportReport",
    "INSTRUMENT_TYPES",
    "InstrumentType",
    "MetricsSummary",
    "NormalizedRow",
    "PatchResult",
    "RowError",
    "SIDES",
    "Side",
    "Trade",
    "TradeInput",
    "ValidationResult",
]
