"""Trade data models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Side = Literal["LONG", "SHORT"]
InstrumentType = Literal["stock", "option", "futures", "forex", "crypto"]

SIDES: tuple[str, ...] = ("LONG", "SHORT")
INSTRUMENT_TYPES: tuple[str, ...] = ("stock", "option", "futures", "forex", "crypto")


class TradeInput(BaseModel):
    """A validated trade ready to be stored by the ledger."""

    symbol: str = Field(..., min_length=1, description="Trading symbol (uppercase)")
    side: Side = Field(..., description="Position direction")
    quantity: float = Field(..., gt=0, description="Position size")
    entry_price: float = Field(..., gt=0, description="Entry price")
    exit_price: Optional[float] = Field(
        default=None, gt=0, description="Exit price (None while the position is open)"
    )
    entry_date: datetime = Field(..., description="Entry timestamp (UTC)")
    exit_date: Optional[datetime] = Field(default=None, description="Exit timestamp (UTC)")
    commission: float = Field(default=0.0, ge=0, description="Total commission paid")
    instrument_type: InstrumentType = Field(default="stock", description="Instrument type")
    strategy: Optional[str] = Field(default=None, description="Strategy label")
    notes: Optional[str] = Field(default=None, description="Free-form notes")
    is_open: bool = Field(default=False, description="Position has no realized exit")
    pnl: Optional[float] = Field(
        default=None, description="Manual realized P&L override"
    )

    model_config = {"frozen": True}


class Trade(TradeInput):
    """A trade stored in the journal."""

    id: int = Field(..., ge=1, description="Journal ID")
    pnl: Optional[float] = Field(
        default=None, description="Realized P&L (None while the position is open)"
    )

    @property
    def is_closed(self) -> bool:
        """True when the trade contributes to performance metrics."""
        return not self.is_open and self.pnl is not None
