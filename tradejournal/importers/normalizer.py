"""Broker row normalization.

Maps one CSV row onto canonical trade fields using a BrokerProfile. The
normalizer never raises: values that cannot be coerced are kept as raw strings
and reported as field errors for the caller to act on.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional

from tradejournal.dates import parse_timestamp
from tradejournal.errors import NormalizationError
from tradejournal.importers.profiles import (
    ASSET_CATEGORY_ALIASES,
    STANDARD_SIDE_TOKENS,
    BrokerProfile,
)
from tradejournal.models import FieldError, NormalizedRow

NUMERIC_FIELDS = frozenset({"quantity", "entry_price", "exit_price", "commission"})
DATE_FIELDS = frozenset({"entry_date", "exit_date"})


def _key(name: str) -> str:
    return "".join(name.split()).lower()


def parse_number(value: str) -> float:
    """Parse a broker number, ignoring currency symbols and thousands separators.

    Raises:
        NormalizationError: If the value is not a finite number.
    """
    cleaned = str(value).replace("$", "").replace(",", "").strip()
    try:
        number = float(cleaned)
    except ValueError:
        raise NormalizationError(f"Invalid number format: {value}", value=value) from None
    if not math.isfinite(number):
        raise NormalizationError(f"Invalid number format: {value}", value=value)
    return number


def parse_date(value: str):
    """Parse a broker timestamp to an aware UTC datetime.

    Raises:
        NormalizationError: If the value is not a recognisable date.
    """
    parsed = parse_timestamp(str(value))
    if parsed is None:
        raise NormalizationError(f"Invalid date format: {value}", value=value)
    return parsed


def normalize_side(token: str, tokens: Optional[Mapping[str, str]] = None) -> str:
    """Map a side token (BUY, s, Long, ...) to LONG or SHORT.

    Raises:
        NormalizationError: If the token is not recognised.
    """
    table = STANDARD_SIDE_TOKENS if tokens is None else tokens
    normalized = str(token).strip().upper()
    side = table.get(normalized)
    if side is None:
        raise NormalizationError(
            f"Invalid side value: {token}. Must be BUY/SELL or LONG/SHORT",
            field="side",
            value=token,
        )
    return side


def lookup(row: Mapping[str, str], aliases: tuple[str, ...]) -> Optional[str]:
    """Return the first non-empty cell matching one of aliases.

    Column names are compared ignoring case and whitespace. A column that is
    present but blank counts as absent, so the next alias is tried.
    """
    index = {_key(column): value for column, value in row.items() if column is not None}
    for alias in aliases:
        value = index.get(_key(alias))
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


def _instrument_type(value: str) -> str:
    lowered = value.strip().lower()
    return ASSET_CATEGORY_ALIASES.get(lowered, lowered)


def normalize(row: Mapping[str, str], profile: BrokerProfile) -> NormalizedRow:
    """Normalize one CSV row with a broker profile.

    Args:
        row: Column name -> cell text.
        profile: Broker profile describing the column layout.

    Returns:
        NormalizedRow with canonical values and any coercion failures.
        Absent columns are left out of ``values``.
    """
    values: dict[str, Any] = dict(profile.defaults)
    errors: list[FieldError] = []

    for field, aliases in profile.columns.items():
        raw = lookup(row, aliases)
        if raw is None:
            continue
        try:
            if field in NUMERIC_FIELDS:
                values[field] = parse_number(raw)
            elif field in DATE_FIELDS:
                values[field] = parse_date(raw)
            elif field == "side":
                values[field] = normalize_side(raw, profile.side_tokens)
            elif field == "symbol":
                values[field] = raw.upper()
            elif field == "instrument_type":
                values[field] = _instrument_type(raw)
            else:
                values[field] = raw
        except NormalizationError as exc:
            values[field] = raw
            errors.append(FieldError(field=field, message=str(exc), value=raw))

    values.update(profile.fixed)
    return NormalizedRow(values=values, errors=errors)
