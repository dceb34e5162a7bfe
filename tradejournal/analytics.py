"""Performance analytics over journal trades.

Pure functions; they never touch storage and never fail on empty input.
"""

import math
from collections.abc import Iterable
from typing import Optional

from tradejournal.dates import to_utc
from tradejournal.models import EquityPoint, MetricsSummary, Trade


def calculate_pnl(
    side: str,
    quantity: float,
    entry_price: float,
    exit_price: float,
    commission: float = 0.0,
) -> float:
    """Realized P&L of a closed position, net of commission.

    A long position gains when price rises, a short position when it falls.
    """
    multiplier = 1 if side == "LONG" else -1
    return (exit_price - entry_price) * multiplier * quantity - (commission or 0.0)


def closed_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Trades that contribute to metrics: not open and with a realized P&L."""
    return [trade for trade in trades if trade.is_closed]


def compute_metrics(trades: Iterable[Trade]) -> MetricsSummary:
    """Compute performance statistics for the given trades.

    Open positions are ignored. Break-even trades (P&L of exactly 0) count
    toward the total but are neither wins nor losses.

    Args:
        trades: Trades to aggregate.

    Returns:
        MetricsSummary; all zeros when there is no closed trade. The profit
        factor is ``math.inf`` when there are wins but no losses.
    """
    closed = closed_trades(trades)
    if not closed:
        return MetricsSummary()

    pnls = [trade.pnl for trade in closed]
    wins = [pnl for pnl in pnls if pnl > 0]
    losses = [pnl for pnl in pnls if pnl < 0]

    total_trades = len(closed)
    total_wins = sum(wins)
    total_losses = abs(sum(losses))

    if total_losses > 0:
        profit_factor = total_wins / total_losses
    elif total_wins > 0:
        profit_factor = math.inf
    else:
        profit_factor = 0.0

    return MetricsSummary(
        total_pnl=sum(pnls),
        win_rate=len(wins) / total_trades * 100,
        avg_win=total_wins / len(wins) if wins else 0.0,
        avg_loss=total_losses / len(losses) if losses else 0.0,
        total_trades=total_trades,
        winning_trades=len(wins),
        losing_trades=len(losses),
        profit_factor=profit_factor,
    )


def equity_curve(trades: Iterable[Trade]) -> list[EquityPoint]:
    """Cumulative P&L of closed trades in entry-date order."""
    ordered = sorted(closed_trades(trades), key=lambda t: (to_utc(t.entry_date), t.id))
    points: list[EquityPoint] = []
    running = 0.0
    for number, trade in enumerate(ordered, start=1):
        running += trade.pnl
        points.append(
            EquityPoint(
                trade_number=number,
                date=trade.entry_date,
                symbol=trade.symbol,
                pnl=trade.pnl,
                cumulative_pnl=running,
            )
        )
    return points


def filter_trades(
    trades: Iterable[Trade],
    symbol: Optional[str] = None,
    side: Optional[str] = None,
    instrument_type: Optional[str] = None,
) -> list[Trade]:
    """Filter trades the way the trade history search does.

    Args:
        trades: Trades to filter (order is preserved).
        symbol: Case-insensitive substring of the symbol.
        side: LONG or SHORT.
        instrument_type: Exact instrument type.
    """
    result = []
    for trade in trades:
        if symbol and symbol.strip().lower() not in trade.symbol.lower():
            continue
        if side and trade.side != side.strip().upper():
            continue
        if instrument_type and trade.instrument_type != instrument_type.strip().lower():
            continue
        result.append(trade)
    return result
