"""CSV import: broker profiles, normalization and the import pipeline."""

from tradejournal.importers.normalizer import (
    normalize,
    normalize_side,
    parse_date,
    parse_number,
)
from tradejournal.importers.pipeline import import_csv
from tradejournal.importers.profiles import (
    PROFILES,
    BrokerProfile,
    get_profile,
    register_profile,
    resolve_profile,
)

__all__ = [
    "BrokerProfile",
    "PROFILES",
    "get_profile",
    "import_csv",
    "normalize",
    "normalize_side",
    "parse_date",
    "parse_number",
    "register_profile",
    "resolve_profile",
]
