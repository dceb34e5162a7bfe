"""SQLite trade repository for Trade Journal."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from tradejournal.dates import to_utc
from tradejournal.db.base import TradeRepository
from tradejournal.models import Trade

TRADE_COLUMNS = (
    "id, symbol, side, quantity, entry_price, exit_price, entry_date, exit_date, "
    "pnl, commission, instrument_type, strategy, notes, is_open"
)


def _to_text(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return to_utc(value).isoformat(timespec="microseconds")


class SqliteTradeRepository(TradeRepository):
    """SQLite-based trade repository.

    Every call opens its own connection, so the store can be shared by a
    long-running process and short-lived CLI invocations alike.
    """

    REQUIRED_TABLES = [
        "trades",
        "journal_meta",
    ]

    def __init__(self, db_path: Path):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY,
                    symbol TEXT NOT NULL,
                    side TEXT NOT NULL CHECK (side IN ('LONG', 'SHORT')),
                    quantity REAL NOT NULL,
                    entry_price REAL NOT NULL,
                    exit_price REAL,
                    entry_date TEXT NOT NULL,
                    exit_date TEXT,
                    pnl REAL,
                    commission REAL NOT NULL DEFAULT 0,
                    instrument_type TEXT NOT NULL DEFAULT 'stock',
                    strategy TEXT,
                    notes TEXT,
                    is_open INTEGER NOT NULL DEFAULT 0
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_trades_entry_date ON trades(entry_date)"
            )

            # Highest ID ever issued; survives deletion of that trade.
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS journal_meta (
                    key TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
            """)
            cursor.execute(
                "INSERT OR IGNORE INTO journal_meta (key, value) VALUES ('high_water_mark', 0)"
            )

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def _row_to_trade(self, row: sqlite3.Row) -> Trade:
        """Convert DB row -> Trade."""
        return Trade(
            id=row["id"],
            symbol=row["symbol"],
            side=row["side"],
            quantity=row["quantity"],
            entry_price=row["entry_price"],
            exit_price=row["exit_price"],
            entry_date=datetime.fromisoformat(row["entry_date"]),
            exit_date=datetime.fromisoformat(row["exit_date"]) if row["exit_date"] else None,
            pnl=row["pnl"],
            commission=row["commission"],
            instrument_type=row["instrument_type"],
            strategy=row["strategy"],
            notes=row["notes"],
            is_open=bool(row["is_open"]),
        )

    def _params(self, trade: Trade) -> tuple:
        return (
            trade.symbol,
            trade.side,
            trade.quantity,
            trade.entry_price,
            trade.exit_price,
            _to_text(trade.entry_date),
            _to_text(trade.exit_date),
            trade.pnl,
            trade.commission,
            trade.instrument_type,
            trade.strategy,
            trade.notes,
            1 if trade.is_open else 0,
        )

    # ==================== Trades ====================

    def add(self, trade: Trade) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    f"""
                    INSERT INTO trades ({TRADE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (trade.id,) + self._params(trade),
                )
            except sqlite3.IntegrityError:
                raise ValueError(f"Trade {trade.id} already exists") from None
            cursor.execute(
                """
                UPDATE journal_meta SET value = MAX(value, ?)
                WHERE key = 'high_water_mark'
                """,
                (trade.id,),
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, trade_id: int) -> Optional[Trade]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {TRADE_COLUMNS} FROM trades WHERE id = ?",
                (trade_id,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_trade(row)
            return None
        finally:
            conn.close()

    def list_all(self) -> list[Trade]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {TRADE_COLUMNS} FROM trades ORDER BY entry_date")
            return [self._row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def list_between(self, start: datetime, end: datetime) -> list[Trade]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {TRADE_COLUMNS}
                FROM trades
                WHERE entry_date >= ? AND entry_date <= ?
                ORDER BY entry_date
                """,
                (_to_text(start), _to_text(end)),
            )
            return [self._row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def replace(self, trade: Trade) -> bool:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE trades SET
                    symbol = ?, side = ?, quantity = ?, entry_price = ?, exit_price = ?,
                    entry_date = ?, exit_date = ?, pnl = ?, commission = ?,
                    instrument_type = ?, strategy = ?, notes = ?, is_open = ?
                WHERE id = ?
                """,
                self._params(trade) + (trade.id,),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def remove(self, trade_id: int) -> bool:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def high_water_mark(self) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM journal_meta WHERE key = 'high_water_mark'")
            row = cursor.fetchone()
            return int(row["value"]) if row else 0
        finally:
            conn.close()
