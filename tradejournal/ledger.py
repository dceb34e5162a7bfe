"""Trade ledger: the single authority for P&L derivation and metrics."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from tradejournal import analytics
from tradejournal.dates import to_utc
from tradejournal.db.base import SequentialIdGenerator, TradeRepository
from tradejournal.db.memory import InMemoryTradeRepository
from tradejournal.models import EquityPoint, MetricsSummary, Trade, TradeInput

logger = logging.getLogger(__name__)

# Patching any of these re-derives the P&L of a closed trade unless the patch
# also carries an explicit P&L.
PNL_INPUT_FIELDS = frozenset(
    {"entry_price", "exit_price", "side", "quantity", "commission"}
)


def _sort_key(trade: Trade) -> tuple[datetime, int]:
    return (to_utc(trade.entry_date), trade.id)


class TradeLedger:
    """Owns the trade collection on top of a repository.

    Args:
        repository: Storage backend. Defaults to an in-memory repository.
        id_generator: ID source. Defaults to a counter starting after the
            repository's high-water mark.
    """

    def __init__(
        self,
        repository: Optional[TradeRepository] = None,
        id_generator: Optional[SequentialIdGenerator] = None,
    ):
        self.repository = repository if repository is not None else InMemoryTradeRepository()
        self.id_generator = id_generator or SequentialIdGenerator(
            self.repository.high_water_mark() + 1
        )

    # ==================== P&L ====================

    @staticmethod
    def derive_pnl(trade: TradeInput) -> Optional[float]:
        """P&L for a trade: None unless it is closed with an exit price.

        A supplied ``pnl`` is used verbatim for a closed trade.
        """
        if trade.is_open or trade.exit_price is None:
            return None
        if trade.pnl is not None:
            return trade.pnl
        return analytics.calculate_pnl(
            trade.side, trade.quantity, trade.entry_price, trade.exit_price, trade.commission
        )

    @staticmethod
    def _recalculate(values: Mapping[str, Any]) -> float:
        return analytics.calculate_pnl(
            values["side"],
            values["quantity"],
            values["entry_price"],
            values["exit_price"],
            values["commission"],
        )

    # ==================== Writes ====================

    def create_trade(self, trade_input: TradeInput) -> Trade:
        """Store a validated trade, assigning the next ID and its P&L."""
        trade = Trade(
            **trade_input.model_dump(exclude={"pnl"}),
            id=self.id_generator.next_id(),
            pnl=self.derive_pnl(trade_input),
        )
        self.repository.add(trade)
        logger.debug("Created trade %d (%s %s)", trade.id, trade.side, trade.symbol)
        return trade

    def create_trades(self, inputs: Iterable[TradeInput]) -> list[Trade]:
        """Create trades one by one, in input order.

        Not atomic: trades created before a failure stay in the journal.
        """
        created = [self.create_trade(trade_input) for trade_input in inputs]
        logger.info("Created %d trades", len(created))
        return created

    def update_trade(self, trade_id: int, changes: Mapping[str, Any]) -> Optional[Trade]:
        """Apply a validated partial update.

        P&L after the merge:
        - None if the trade is open or has no exit price (reopening clears it);
        - re-derived if the patch supplies an exit price;
        - the patched ``pnl`` if one was supplied;
        - re-derived if the patch touches the entry price, side, quantity or
          commission;
        - derived if the trade had no P&L yet (it was just closed);
        - unchanged otherwise.

        Args:
            trade_id: ID of the trade to update.
            changes: Field -> new value, as returned by validate_trade_patch.

        Returns:
            The updated trade, or None if the ID is unknown.
        """
        existing = self.repository.get(trade_id)
        if existing is None:
            return None

        fields = {key: value for key, value in changes.items() if key not in ("id", "pnl")}
        merged = existing.model_dump()
        merged.update(fields)

        if merged["is_open"] or merged["exit_price"] is None:
            pnl = None
        elif "exit_price" in fields:
            pnl = self._recalculate(merged)
        elif changes.get("pnl") is not None:
            pnl = changes["pnl"]
        elif PNL_INPUT_FIELDS & fields.keys() or existing.pnl is None:
            pnl = self._recalculate(merged)
        else:
            pnl = existing.pnl

        merged["pnl"] = pnl
        merged["id"] = existing.id
        updated = Trade(**merged)
        if not self.repository.replace(updated):
            return None
        logger.debug("Updated trade %d", trade_id)
        return updated

    def delete_trade(self, trade_id: int) -> bool:
        """Delete a trade; False if it did not exist."""
        removed = self.repository.remove(trade_id)
        if removed:
            logger.debug("Deleted trade %d", trade_id)
        return removed

    # ==================== Reads ====================

    def get_trade(self, trade_id: int) -> Optional[Trade]:
        """Get a trade by ID, or None."""
        return self.repository.get(trade_id)

    def get_all_trades(self) -> list[Trade]:
        """All trades, most recent entry first."""
        return sorted(self.repository.list_all(), key=_sort_key, reverse=True)

    def get_trades_by_date_range(self, start: datetime, end: datetime) -> list[Trade]:
        """Trades whose entry date lies in [start, end], most recent first."""
        trades = self.repository.list_between(to_utc(start), to_utc(end))
        return sorted(trades, key=_sort_key, reverse=True)

    def _select(self, start: Optional[datetime], end: Optional[datetime]) -> list[Trade]:
        if start is not None and end is not None:
            return self.get_trades_by_date_range(start, end)
        return self.get_all_trades()

    # ==================== Analytics ====================

    def get_trading_metrics(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> MetricsSummary:
        """Aggregate metrics over closed trades.

        The date filter applies only when both bounds are given.
        """
        return analytics.compute_metrics(self._select(start, end))

    def get_equity_curve(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[EquityPoint]:
        """Cumulative P&L of closed trades, oldest first."""
        return analytics.equity_curve(self._select(start, end))


SAMPLE_TRADES = [
    TradeInput(
        symbol="AAPL",
        side="LONG",
        quantity=100,
        entry_price=175.42,
        exit_price=178.91,
        entry_date=datetime(2024, 12, 15, 9, 30, tzinfo=timezone.utc),
        exit_date=datetime(2024, 12, 15, 15, 30, tzinfo=timezone.utc),
        commission=2.50,
        instrument_type="stock",
        strategy="Momentum",
        notes="Good breakout above resistance with strong volume",
    ),
    TradeInput(
        symbol="TSLA",
        side="SHORT",
        quantity=50,
        entry_price=248.76,
        exit_price=245.32,
        entry_date=datetime(2024, 12, 14, 10, 15, tzinfo=timezone.utc),
        exit_date=datetime(2024, 12, 14, 14, 45, tzinfo=timezone.utc),
        commission=1.50,
        instrument_type="stock",
        strategy="Reversal",
        notes="Failed to hold support level",
    ),
    TradeInput(
        symbol="SPY",
        side="LONG",
        quantity=5,
        entry_price=2.45,
        exit_price=1.89,
        entry_date=datetime(2024, 12, 13, 11, 0, tzinfo=timezone.utc),
        exit_date=datetime(2024, 12, 13, 16, 0, tzinfo=timezone.utc),
        commission=5.00,
        instrument_type="option",
        strategy="Breakout",
        notes="False breakout, cut losses quickly",
        pnl=-280.00,
    ),
]


def seed_sample_trades(ledger: TradeLedger) -> list[Trade]:
    """Add the demonstration trades to a ledger."""
    return ledger.create_trades(SAMPLE_TRADES)
