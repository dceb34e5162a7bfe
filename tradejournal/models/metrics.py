"""Performance metric models."""

from datetime import datetime

from pydantic import BaseModel, Field


class MetricsSummary(BaseModel):
    """Aggregate performance over a set of closed trades."""

    total_pnl: float = Field(default=0.0, description="Sum of realized P&L")
    win_rate: float = Field(default=0.0, ge=0, le=100, description="Win rate percentage")
    avg_win: float = Field(default=0.0, ge=0, description="Average winning P&L")
    avg_loss: float = Field(default=0.0, ge=0, description="Average losing P&L magnitude")
    total_trades: int = Field(default=0, ge=0, description="Closed trade count")
    winning_trades: int = Field(default=0, ge=0, description="Trades with P&L > 0")
    losing_trades: int = Field(default=0, ge=0, description="Trades with P&L < 0")
    profit_factor: float = Field(
        default=0.0, ge=0, description="Gross wins / gross losses (may be infinite)"
    )

    model_config = {"frozen": True}


class EquityPoint(BaseModel):
    """One step of the cumulative P&L curve."""

    trade_number: int = Field(..., ge=1, description="Position in the curve")
    date: datetime = Field(..., description="Entry timestamp of the trade")
    symbol: str = Field(..., description="Trading symbol")
    pnl: float = Field(..., description="Realized P&L of the trade")
    cumulative_pnl: float = Field(..., description="Running P&L total")

    model_config = {"frozen": True}
