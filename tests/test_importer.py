"""Tests for the CSV import pipeline.

**Feature: trade-journal**
"""

import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.errors import (
    AllRowsFailedError,
    EmptyImportError,
    ImportRejectedError,
)
from tradejournal.importers import PROFILES, BrokerProfile, import_csv, register_profile
from tradejournal.importers.csv_reader import read_csv
from tradejournal.ledger import TradeLedger

HEADER = "Symbol,Side,Quantity,EntryPrice,ExitPrice,EntryDate,Commission"
GOOD_ROW = "AAPL,LONG,100,175.42,178.91,2024-12-15,2.50"
BAD_ROW = "MSFT,HOLD,10,400,410,2024-12-15,1.00"


def csv_text(*rows: str) -> str:
    return "\n".join((HEADER,) + rows) + "\n"


@pytest.fixture
def ledger() -> TradeLedger:
    return TradeLedger()


@pytest.fixture
def journal_log(caplog):
    """Capture tradejournal records even when propagation is turned off."""
    logger = logging.getLogger("tradejournal")
    logger.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)


class TestCsvReader:
    def test_header_is_row_one(self):
        table = read_csv(csv_text(GOOD_ROW, GOOD_ROW))
        assert table.header[0] == "Symbol"
        assert [record.row for record in table.records] == [2, 3]

    def test_blank_lines_ignored(self):
        table = read_csv(HEADER + "\n\n" + GOOD_ROW + "\n\n")
        assert len(table.records) == 1
        assert table.skipped == 0

    def test_utf8_bom_stripped(self):
        table = read_csv(b"\xef\xbb\xbf" + csv_text(GOOD_ROW).encode("utf-8"))
        assert table.header[0] == "Symbol"

    def test_legacy_encoding(self):
        data = (HEADER + ",Notes\n" + GOOD_ROW + ",Caf\xe9\n").encode("cp1252")
        table = read_csv(data)
        assert table.records[0].data["Notes"] == "Caf\xe9"

    def test_quoted_cells(self):
        table = read_csv('Symbol,Notes\n"AAPL","Broke out, held"\n')
        assert table.records[0].data == {"Symbol": "AAPL", "Notes": "Broke out, held"}

    def test_escaped_quotes_kept(self):
        table = read_csv('Symbol,Notes\nAAPL,"He said ""hi"""\n')
        assert table.records[0].data["Notes"] == 'He said "hi"'


class TestPartialSuccess:
    """
    **Feature: trade-journal, Property 9: Partial Import**

    *For any* mix of valid and invalid rows, every valid row is imported,
    every invalid row is reported with its file row number, and the counts
    add up to the number of data rows.
    """

    @given(st.lists(st.booleans(), min_size=1, max_size=40).filter(any))
    @settings(max_examples=50)
    def test_counts_add_up(self, pattern: list[bool]):
        ledger = TradeLedger()
        rows = [GOOD_ROW if good else BAD_ROW for good in pattern]
        report = import_csv(ledger, csv_text(*rows))

        assert report.imported == sum(pattern)
        assert report.failed == len(pattern) - sum(pattern)
        assert report.imported + report.failed == len(pattern)
        assert len(report.error_details) == min(report.failed, 5)
        assert len(ledger.get_all_trades()) == report.imported

        bad_rows = [index + 2 for index, good in enumerate(pattern) if not good]
        assert [error.row for error in report.error_details] == bad_rows[:5]

    def test_mixed_file(self, ledger: TradeLedger):
        report = import_csv(ledger, csv_text(GOOD_ROW, BAD_ROW, GOOD_ROW))
        assert report.imported == 2
        assert report.failed == 1
        error = report.error_details[0]
        assert error.row == 3
        assert error.error.startswith("Invalid side value: HOLD")
        assert error.data["Symbol"] == "MSFT"

    def test_imported_pnl(self, ledger: TradeLedger):
        report = import_csv(ledger, csv_text(GOOD_ROW))
        trade = report.trades[0]
        assert trade.pnl == pytest.approx(346.50)
        assert trade.is_open is False
        assert trade.instrument_type == "stock"

    def test_row_without_exit_is_open(self, ledger: TradeLedger):
        report = import_csv(ledger, csv_text("TSLA,SELL,50,248.76,,2024-12-14,1.50"))
        trade = report.trades[0]
        assert trade.side == "SHORT"
        assert trade.is_open is True
        assert trade.pnl is None

    def test_multiple_errors_joined(self, ledger: TradeLedger):
        report = import_csv(ledger, csv_text(GOOD_ROW, "IBM,LONG,abc,10,,someday,0"))
        message = report.error_details[0].error
        assert "Invalid number format: abc" in message
        assert "Invalid date format: someday" in message
        assert "; " in message

    def test_mismatched_rows_skipped(self, ledger: TradeLedger):
        report = import_csv(ledger, csv_text(GOOD_ROW, "AAPL,LONG,100,175.42"))
        assert report.imported == 1
        assert report.skipped == 1
        assert report.failed == 0


class TestRejection:
    def test_empty_file(self, ledger: TradeLedger):
        with pytest.raises(EmptyImportError, match="CSV file is empty"):
            import_csv(ledger, b"")

    def test_header_only(self, ledger: TradeLedger):
        with pytest.raises(EmptyImportError):
            import_csv(ledger, HEADER + "\n")

    def test_all_rows_failed_caps_sample(self, ledger: TradeLedger):
        with pytest.raises(AllRowsFailedError) as exc_info:
            import_csv(ledger, csv_text(*[BAD_ROW] * 12))
        error = exc_info.value
        assert str(error) == "All trades failed validation"
        assert error.total_failures == 12
        assert len(error.failures) == 10
        assert ledger.get_all_trades() == []

    def test_only_mismatched_rows(self, ledger: TradeLedger):
        with pytest.raises(AllRowsFailedError) as exc_info:
            import_csv(ledger, csv_text("AAPL,LONG"))
        assert exc_info.value.skipped == 1
        assert exc_info.value.failures == []

    def test_too_large(self, ledger: TradeLedger):
        with pytest.raises(ImportRejectedError, match="too large"):
            import_csv(ledger, csv_text(GOOD_ROW), max_bytes=16)

    def test_not_a_csv_file(self, ledger: TradeLedger):
        with pytest.raises(ImportRejectedError, match="Only CSV files are allowed"):
            import_csv(ledger, csv_text(GOOD_ROW), filename="trades.xlsx")

    def test_csv_extension_case_insensitive(self, ledger: TradeLedger):
        report = import_csv(ledger, csv_text(GOOD_ROW), filename="TRADES.CSV")
        assert report.imported == 1

    def test_custom_detail_limit(self, ledger: TradeLedger):
        report = import_csv(
            ledger, csv_text(GOOD_ROW, *[BAD_ROW] * 4), error_detail_limit=2
        )
        assert report.failed == 4
        assert len(report.error_details) == 2


class TestBrokerImports:
    def test_interactive_brokers(self, ledger: TradeLedger):
        data = (
            "Symbol,Buy/Sell,Quantity,T. Price,Date/Time,Comm/Fee,AssetCategory\n"
            "SPY,BOT,100,\"$480.10\",2024-12-10 10:00:00,1.00,Stocks\n"
            "QQQ,SLD,20,410.5,20241211;103000,1.00,Stocks\n"
        )
        report = import_csv(ledger, data, broker="interactive_brokers")
        assert report.imported == 2
        sides = {trade.symbol: trade.side for trade in report.trades}
        assert sides == {"SPY": "LONG", "QQQ": "SHORT"}
        assert all(trade.is_open for trade in report.trades)

    def test_tradestation(self, ledger: TradeLedger):
        data = (
            "Symbol,BuySell,Qty,Price,ExitPrice,ExecTime,Comm\n"
            "NVDA,Buy,25,120.00,125.00,12/09/2024 09:45:00,1.00\n"
        )
        report = import_csv(ledger, data, broker="tradestation")
        trade = report.trades[0]
        assert trade.quantity == 25
        assert trade.pnl == pytest.approx(124.00)
        assert trade.instrument_type == "stock"

    def test_registered_profile(self, ledger: TradeLedger):
        profile = BrokerProfile(
            name="webull",
            label="Webull",
            columns={
                "symbol": ("Ticker",),
                "side": ("Action",),
                "quantity": ("Filled",),
                "entry_price": ("Avg Price",),
                "entry_date": ("Filled Time",),
            },
        )
        register_profile(profile)
        try:
            data = "Ticker,Action,Filled,Avg Price,Filled Time\nAMD,Buy,10,140.5,12/11/2024 09:45:00\n"
            report = import_csv(ledger, data, broker="Webull")
            assert report.trades[0].symbol == "AMD"
            assert report.trades[0].side == "LONG"
        finally:
            PROFILES.pop("webull", None)

    @pytest.mark.parametrize("broker", ["schwab", "", "   ", None])
    def test_unknown_selector_reads_generic_columns(self, ledger: TradeLedger, broker):
        report = import_csv(ledger, csv_text(GOOD_ROW), broker=broker)
        assert report.imported == 1
        assert report.trades[0].pnl == pytest.approx(346.50)

    def test_unknown_selector_is_logged(self, ledger: TradeLedger, journal_log):
        import_csv(ledger, csv_text(GOOD_ROW), broker="schwab")
        assert "Unknown broker 'schwab'" in journal_log.text
