"""Trade repository interface for Trade Journal."""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from tradejournal.models import Trade


class TradeRepository(ABC):
    """Abstract storage for trades.

    Repositories only store and retrieve records; P&L derivation and metrics
    live in the ledger. Implementations must keep ``high_water_mark`` at the
    largest ID ever stored, even after that trade is removed.
    """

    @abstractmethod
    def add(self, trade: Trade) -> None:
        """Store a new trade.

        Raises:
            ValueError: If a trade with the same ID already exists.
        """
        pass

    @abstractmethod
    def get(self, trade_id: int) -> Optional[Trade]:
        """Get a trade by ID, or None."""
        pass

    @abstractmethod
    def list_all(self) -> list[Trade]:
        """Get every stored trade (order unspecified)."""
        pass

    @abstractmethod
    def list_between(self, start: datetime, end: datetime) -> list[Trade]:
        """Get trades whose entry date lies in [start, end]."""
        pass

    @abstractmethod
    def replace(self, trade: Trade) -> bool:
        """Overwrite the stored trade with the same ID.

        Returns:
            True if a trade was replaced, False if the ID is unknown.
        """
        pass

    @abstractmethod
    def remove(self, trade_id: int) -> bool:
        """Delete a trade.

        Returns:
            True if a trade was removed, False if the ID is unknown.
        """
        pass

    @abstractmethod
    def high_water_mark(self) -> int:
        """Largest trade ID ever stored (0 for an empty repository)."""
        pass


class SequentialIdGenerator:
    """Thread-safe, strictly increasing ID counter.

    Args:
        start: First ID to hand out.
    """

    def __init__(self, start: int = 1):
        if start < 1:
            raise ValueError("start must be >= 1")
        self._next = start
        self._lock = threading.Lock()

    def next_id(self) -> int:
        """Return the next ID; no ID is ever returned twice."""
        with self._lock:
            issued = self._next
            self._next += 1
            return issued
