"""Broker CSV profiles.

A profile is data only: for every canonical field it lists the source column
names to try, in priority order. Adding a broker means adding a profile here;
the normalizer never changes.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

from tradejournal.errors import UnknownBrokerError

logger = logging.getLogger(__name__)

STANDARD_SIDE_TOKENS: dict[str, str] = {
    "BUY": "LONG",
    "LONG": "LONG",
    "B": "LONG",
    "L": "LONG",
    "SELL": "SHORT",
    "SHORT": "SHORT",
    "S": "SHORT",
    "SH": "SHORT",
}

# Canonical field names, in the order they are reported.
CANONICAL_FIELDS: tuple[str, ...] = (
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
)


class BrokerProfile(BaseModel):
    """Describes how to read one broker's CSV export."""

    name: str = Field(..., min_length=1, description="Profile selector")
    label: str = Field(..., description="Display name")
    description: str = Field(default="", description="Expected export format")
    columns: dict[str, tuple[str, ...]] = Field(
        ..., description="Canonical field -> source column aliases, in priority order"
    )
    side_tokens: dict[str, str] = Field(
        default_factory=lambda: dict(STANDARD_SIDE_TOKENS),
        description="Uppercased side token -> LONG/SHORT",
    )
    defaults: dict[str, Any] = Field(
        default_factory=dict, description="Values used when a column is absent"
    )
    fixed: dict[str, Any] = Field(
        default_factory=dict, description="Values that always override the row"
    )

    model_config = {"frozen": True}


GENERIC_COLUMNS: dict[str, tuple[str, ...]] = {
    "symbol": ("Symbol",),
    "side": ("Side",),
    "quantity": ("Quantity",),
    "entry_price": ("EntryPrice", "Entry Price", "Price"),
    "exit_price": ("ExitPrice", "Exit Price"),
    "entry_date": ("EntryDate", "Entry Date", "Date"),
    "exit_date": ("ExitDate", "Exit Date"),
    "commission": ("Commission",),
    "instrument_type": ("InstrumentType", "Instrument Type"),
    "strategy": ("Strategy",),
    "notes": ("Notes",),
}

GENERIC = BrokerProfile(
    name="generic",
    label="Generic CSV",
    description=(
        "Required columns: Symbol, Side, Quantity, EntryPrice, "
        "ExitPrice (optional), EntryDate"
    ),
    columns=GENERIC_COLUMNS,
    defaults={"instrument_type": "stock"},
)

INTERACTIVE_BROKERS = BrokerProfile(
    name="interactive_brokers",
    label="Interactive Brokers",
    description="Standard IBKR Activity Statement CSV format",
    columns={
        "symbol": ("Symbol",),
        "side": ("Side", "Buy/Sell"),
        "quantity": ("Quantity",),
        "entry_price": ("Price", "T. Price", "TradePrice"),
        "exit_price": ("ExitPrice",),
        "entry_date": ("DateTime", "Date/Time", "TradeDate"),
        "exit_date": ("ExitDateTime",),
        "commission": ("Commission", "Comm/Fee", "IBCommission"),
        "instrument_type": ("AssetCategory", "AssetClass"),
    },
    side_tokens={**STANDARD_SIDE_TOKENS, "BOT": "LONG", "SLD": "SHORT"},
    defaults={"instrument_type": "stock"},
)

TRADESTATION = BrokerProfile(
    name="tradestation",
    label="TradeStation",
    description="TradeStation order export format",
    columns={
        "symbol": ("Symbol",),
        "side": ("BuySell", "Buy/Sell"),
        "quantity": ("Qty",),
        "entry_price": ("Price",),
        "exit_price": ("ExitPrice",),
        "entry_date": ("ExecTime",),
        "commission": ("Comm",),
    },
    fixed={"instrument_type": "stock"},
)

TASTYTRADE = BrokerProfile(
    name="tastytrade",
    label="TastyTrade",
    description="TastyTrade account statement (Generic columns)",
    columns=GENERIC_COLUMNS,
    defaults={"instrument_type": "stock"},
)

ROBINHOOD = BrokerProfile(
    name="robinhood",
    label="Robinhood",
    description="Robinhood order history export (Generic columns)",
    columns=GENERIC_COLUMNS,
    defaults={"instrument_type": "stock"},
)

PROFILES: dict[str, BrokerProfile] = {
    profile.name: profile
    for profile in (GENERIC, INTERACTIVE_BROKERS, TRADESTATION, TASTYTRADE, ROBINHOOD)
}

# IBKR asset categories mapped onto journal instrument types.
ASSET_CATEGORY_ALIASES: dict[str, str] = {
    "stocks": "stock",
    "stk": "stock",
    "equity and index options": "option",
    "options": "option",
    "opt": "option",
    "fut": "futures",
    "future": "futures",
    "cash": "forex",
    "fx": "forex",
    "crypto": "crypto",
    "cryptocurrency": "crypto",
}


def get_profile(name: str) -> BrokerProfile:
    """Look up a broker profile by selector.

    Args:
        name: Profile name (case-insensitive, e.g. 'generic').

    Returns:
        The registered profile.

    Raises:
        UnknownBrokerError: If no profile is registered under name.
    """
    key = (name or "").strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return PROFILES[key]
    except KeyError:
        raise UnknownBrokerError(
            f"Unknown broker '{name}'. Choose one of: {', '.join(sorted(PROFILES))}"
        ) from None


def register_profile(profile: BrokerProfile) -> None:
    """Register (or replace) a broker profile."""
    PROFILES[profile.name] = profile


def resolve_profile(name: Optional[str]) -> BrokerProfile:
    """Profile for an import selector.

    Unknown or blank selectors are read with the generic layout.
    """
    if name is None or not name.strip():
        return GENERIC
    try:
        return get_profile(name)
    except UnknownBrokerError:
        logger.warning("Unknown broker '%s', reading the file as generic CSV", name)
        return GENERIC
