"""In-memory trade repository."""

import threading
from datetime import datetime
from typing import Optional

from tradejournal.dates import to_utc
from tradejournal.db.base import TradeRepository
from tradejournal.models import Trade


class InMemoryTradeRepository(TradeRepository):
    """Dictionary-backed repository; contents live as long as the process."""

    def __init__(self):
        self._trades: dict[int, Trade] = {}
        self._high_water_mark = 0
        self._lock = threading.RLock()

    def add(self, trade: Trade) -> None:
        with self._lock:
            if trade.id in self._trades:
                raise ValueError(f"Trade {trade.id} already exists")
            self._trades[trade.id] = trade
            self._high_water_mark = max(self._high_water_mark, trade.id)

    def get(self, trade_id: int) -> Optional[Trade]:
        with self._lock:
            return self._trades.get(trade_id)

    def list_all(self) -> list[Trade]:
        with self._lock:
            return list(self._trades.values())

    def list_between(self, start: datetime, end: datetime) -> list[Trade]:
        start, end = to_utc(start), to_utc(end)
        with self._lock:
            return [
                trade
                for trade in self._trades.values()
                if start <= to_utc(trade.entry_date) <= end
            ]

    def replace(self, trade: Trade) -> bool:
        with self._lock:
            if trade.id not in self._trades:
                return False
            self._trades[trade.id] = trade
            return True

    def remove(self, trade_id: int) -> bool:
        with self._lock:
            return self._trades.pop(trade_id, None) is not None

    def high_water_mark(self) -> int:
        with self._lock:
            return self._high_water_mark
