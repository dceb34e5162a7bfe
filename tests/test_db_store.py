"""Property-based tests for the SQLite trade repository.

**Feature: trade-journal**
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.db.store import SqliteTradeRepository
from tradejournal.ledger import TradeLedger, seed_sample_trades
from tradejournal.models import Trade, TradeInput

UTC = timezone.utc


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield SqliteTradeRepository(db_path)


def make_trade(trade_id: int, **overrides) -> Trade:
    values = {
        "id": trade_id,
        "symbol": "AAPL",
        "side": "LONG",
        "quantity": 100,
        "entry_price": 175.42,
        "exit_price": 178.91,
        "entry_date": datetime(2024, 12, 15, 9, 30, tzinfo=UTC),
        "exit_date": datetime(2024, 12, 15, 15, 30, tzinfo=UTC),
        "pnl": 346.5,
        "commission": 2.5,
        "strategy": "Momentum",
        "notes": "Breakout",
    }
    values.update(overrides)
    return Trade(**values)


class TestDatabaseSchemaCompleteness:
    """
    **Feature: trade-journal, Property 10: Database Schema Completeness**

    *For any* fresh database, all required tables (trades, journal_meta)
    should exist.
    """

    def test_schema_completeness(self, temp_db: SqliteTradeRepository):
        tables = temp_db.get_tables()
        for table in SqliteTradeRepository.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    def test_reopening_existing_database(self, temp_db: SqliteTradeRepository):
        temp_db.add(make_trade(1))
        reopened = SqliteTradeRepository(temp_db.db_path)
        assert reopened.get(1) == make_trade(1)


class TestTradeRoundTrip:
    """
    **Feature: trade-journal, Property 11: Trade Persistence**

    *For any* stored trade, reading it back yields an equal trade.
    """

    @given(
        quantity=st.floats(min_value=0.001, max_value=1e6, allow_nan=False),
        pnl=st.one_of(st.none(), st.floats(min_value=-1e6, max_value=1e6, allow_nan=False)),
        is_open=st.booleans(),
        minutes=st.integers(min_value=0, max_value=10**6),
        notes=st.one_of(
            st.none(),
            st.text(alphabet=st.characters(blacklist_categories=("Cs", "Cc")), max_size=50),
        ),
    )
    @settings(max_examples=30)
    def test_fields_preserved(self, quantity, pnl, is_open, minutes, notes):
        with tempfile.TemporaryDirectory() as tmpdir:
            repo = SqliteTradeRepository(Path(tmpdir) / "test.db")
            trade = make_trade(
                1,
                quantity=quantity,
                pnl=pnl,
                is_open=is_open,
                notes=notes,
                entry_date=datetime(2024, 1, 1, tzinfo=UTC) + timedelta(minutes=minutes),
            )
            repo.add(trade)
            assert repo.get(1) == trade

    def test_open_trade_without_exit(self, temp_db: SqliteTradeRepository):
        trade = make_trade(1, exit_price=None, exit_date=None, pnl=None, is_open=True)
        temp_db.add(trade)
        assert temp_db.get(1) == trade

    def test_duplicate_id_rejected(self, temp_db: SqliteTradeRepository):
        temp_db.add(make_trade(1))
        with pytest.raises(ValueError):
            temp_db.add(make_trade(1))


class TestRepositoryOperations:
    def test_replace_and_remove(self, temp_db: SqliteTradeRepository):
        temp_db.add(make_trade(1))
        assert temp_db.replace(make_trade(1, notes="Updated")) is True
        assert temp_db.get(1).notes == "Updated"
        assert temp_db.replace(make_trade(2)) is False
        assert temp_db.remove(1) is True
        assert temp_db.remove(1) is False
        assert temp_db.get(1) is None

    def test_list_between_is_inclusive(self, temp_db: SqliteTradeRepository):
        base = datetime(2024, 12, 1, tzinfo=UTC)
        for day in range(5):
            temp_db.add(make_trade(day + 1, entry_date=base + timedelta(days=day)))
        selected = temp_db.list_between(base + timedelta(days=1), base + timedelta(days=3))
        assert sorted(trade.id for trade in selected) == [2, 3, 4]

    def test_list_between_converts_offsets(self, temp_db: SqliteTradeRepository):
        temp_db.add(make_trade(1, entry_date=datetime(2024, 12, 15, 9, 30, tzinfo=UTC)))
        new_york = timezone(timedelta(hours=-5))
        moment = datetime(2024, 12, 15, 4, 30, tzinfo=new_york)
        assert [t.id for t in temp_db.list_between(moment, moment)] == [1]

    def test_high_water_mark_survives_delete(self, temp_db: SqliteTradeRepository):
        temp_db.add(make_trade(1))
        temp_db.add(make_trade(2))
        temp_db.remove(2)
        assert temp_db.high_water_mark() == 2


class TestLedgerOnSqlite:
    def test_ids_continue_across_instances(self, temp_db: SqliteTradeRepository):
        ledger = TradeLedger(temp_db)
        trades = seed_sample_trades(ledger)
        ledger.delete_trade(trades[-1].id)

        reopened = TradeLedger(SqliteTradeRepository(temp_db.db_path))
        trade = reopened.create_trade(
            TradeInput(**make_trade(1).model_dump(exclude={"id", "pnl"}))
        )
        assert trade.id == 4

    def test_listing_order(self, temp_db: SqliteTradeRepository):
        ledger = TradeLedger(temp_db)
        seed_sample_trades(ledger)
        assert [t.symbol for t in ledger.get_all_trades()] == ["AAPL", "TSLA", "SPY"]
