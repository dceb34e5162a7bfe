"""Trade storage for Trade Journal."""

from tradejournal.db.base import SequentialIdGenerator, TradeRepository
from tradejournal.db.memory import InMemoryTradeRepository
from tradejournal.db.store import SqliteTradeRepository

__all__ = [
    "InMemoryTradeRepository",
    "SequentialIdGenerator",
    "SqliteTradeRepository",
    "TradeRepository",
]
