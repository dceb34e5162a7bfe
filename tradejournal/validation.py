"""Trade validation.

Turns a candidate mapping (from the normalizer or a boundary payload) into a
TradeInput, or into a list of field-level errors. Nothing here raises for bad
input; callers decide what to do with the errors.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional

from tradejournal.dates import coerce_datetime
from tradejournal.models import (
    INSTRUMENT_TYPES,
    SIDES,
    FieldError,
    PatchResult,
    TradeInput,
    ValidationResult,
)

PATCHABLE_FIELDS: tuple[str, ...] = (
    "symbol",
    "side",
    "quantity",
    "entry_price",
    "exit_price",
    "entry_date",
    "exit_date",
    "commission",
    "instrument_type",
    "strategy",
    "notes",
    "is_open",
    "pnl",
)

REQUIRED_FIELDS: tuple[str, ...] = ("symbol", "side", "quantity", "entry_price", "entry_date")

_LABELS = {
    "symbol": "Symbol",
    "side": "Side",
    "quantity": "Quantity",
    "entry_price": "Entry price",
    "exit_price": "Exit price",
    "entry_date": "Entry date",
    "exit_date": "Exit date",
    "commission": "Commission",
    "pnl": "P&L",
}


class _Invalid(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _number(field: str, value: Any) -> float:
    label = _LABELS.get(field, field)
    if isinstance(value, bool):
        raise _Invalid(f"{label} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise _Invalid(f"{label} must be a number") from None
    else:
        raise _Invalid(f"{label} must be a number")
    if not math.isfinite(number):
        raise _Invalid(f"{label} must be a finite number")
    return number


def _positive(field: str, value: Any) -> float:
    number = _number(field, value)
    if number <= 0:
        raise _Invalid(f"{_LABELS[field]} must be positive")
    return number


def _check_symbol(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _Invalid("Symbol is required")
    return value.strip().upper()


def _check_side(value: Any) -> str:
    side = str(value).strip().upper()
    if side not in SIDES:
        raise _Invalid("Side must be LONG or SHORT")
    return side


def _check_date(field: str, value: Any):
    parsed = coerce_datetime(value)
    if parsed is None:
        raise _Invalid(f"Invalid {_LABELS[field].lower()}: {value}")
    return parsed


def _check_commission(value: Any) -> float:
    number = _number("commission", value)
    if number < 0:
        raise _Invalid("Commission cannot be negative")
    return number


def _check_instrument(value: Any) -> str:
    instrument = str(value).strip().lower()
    if instrument not in INSTRUMENT_TYPES:
        raise _Invalid(
            f"Instrument type must be one of: {', '.join(INSTRUMENT_TYPES)}"
        )
    return instrument


def _check_text(value: Any) -> Optional[str]:
    text = str(value).strip()
    return text or None


def _check_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no"):
        return False
    raise _Invalid("isOpen must be true or false")


_CHECKS = {
    "symbol": _check_symbol,
    "side": _check_side,
    "quantity": lambda v: _positive("quantity", v),
    "entry_price": lambda v: _positive("entry_price", v),
    "exit_price": lambda v: _positive("exit_price", v),
    "entry_date": lambda v: _check_date("entry_date", v),
    "exit_date": lambda v: _check_date("exit_date", v),
    "commission": _check_commission,
    "instrument_type": _check_instrument,
    "strategy": _check_text,
    "notes": _check_text,
    "is_open": _check_bool,
    "pnl": lambda v: _number("pnl", v),
}


def _check_fields(values: Mapping[str, Any], fields) -> tuple[dict[str, Any], list[FieldError]]:
    cleaned: dict[str, Any] = {}
    errors: list[FieldError] = []
    for field in fields:
        if field not in values:
            continue
        value = values[field]
        if _is_blank(value):
            cleaned[field] = None
            continue
        try:
            cleaned[field] = _CHECKS[field](value)
        except _Invalid as exc:
            errors.append(FieldError(field=field, message=exc.message, value=value))
    return cleaned, errors


def validate_trade_input(values: Mapping[str, Any]) -> ValidationResult:
    """Validate a candidate trade.

    Args:
        values: Canonical field name -> value. Numbers may be numeric strings
            and dates ISO-8601 strings.

    Returns:
        ValidationResult holding either the TradeInput or the field errors.
    """
    cleaned, errors = _check_fields(values, PATCHABLE_FIELDS)
    failed = {error.field for error in errors}

    for field in REQUIRED_FIELDS:
        if cleaned.get(field) is None and field not in failed:
            errors.append(
                FieldError(field=field, message=f"{_LABELS[field]} is required", value=None)
            )

    if cleaned.get("commission") is None:
        cleaned["commission"] = 0.0
    if cleaned.get("instrument_type") is None:
        cleaned["instrument_type"] = "stock"
    if cleaned.get("is_open") is None:
        cleaned["is_open"] = cleaned.get("exit_price") is None and "exit_price" not in failed

    if cleaned.get("pnl") is not None and (
        cleaned["is_open"] or cleaned.get("exit_price") is None
    ):
        errors.append(
            FieldError(
                field="pnl",
                message="P&L can only be set on a closed trade with an exit price",
                value=values.get("pnl"),
            )
        )

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(trade=TradeInput(**cleaned))


def validate_trade_patch(values: Mapping[str, Any]) -> PatchResult:
    """Validate a partial update; only the supplied fields are checked.

    Required fields may not be cleared. ``id`` and unknown fields are errors.
    Reopening a trade (``is_open`` true without an exit price) also clears
    its exit price and exit date.
    """
    errors: list[FieldError] = [
        FieldError(field=field, message="Unknown or read-only field", value=values[field])
        for field in values
        if field not in PATCHABLE_FIELDS
    ]
    cleaned, field_errors = _check_fields(values, PATCHABLE_FIELDS)
    errors.extend(field_errors)

    for field in REQUIRED_FIELDS + ("commission", "instrument_type", "is_open"):
        if field in cleaned and cleaned[field] is None:
            errors.append(
                FieldError(field=field, message=f"{_LABELS.get(field, field)} cannot be empty")
            )

    if errors:
        return PatchResult(errors=errors)
    if cleaned.get("is_open") is True and "exit_price" not in cleaned:
        cleaned["exit_price"] = None
        cleaned["exit_date"] = None
    return PatchResult(changes=cleaned)
