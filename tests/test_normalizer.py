"""Property-based tests for broker row normalization.

**Feature: trade-journal**
"""

from datetime import datetime, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.errors import NormalizationError
from tradejournal.importers.csv_reader import read_csv
from tradejournal.importers.normalizer import (
    lookup,
    normalize,
    normalize_side,
    parse_date,
    parse_number,
)
from tradejournal.importers.profiles import (
    GENERIC,
    INTERACTIVE_BROKERS,
    PROFILES,
    TRADESTATION,
    BrokerProfile,
    get_profile,
)
from tradejournal.errors import UnknownBrokerError
from tradejournal.validation import validate_trade_input


class TestSideNormalization:
    """
    **Feature: trade-journal, Property 1: Side Token Normalization**

    *For any* recognised buy token the side is LONG, for any recognised
    sell token it is SHORT, regardless of case and surrounding whitespace.
    """

    @given(
        token=st.sampled_from(["BUY", "LONG", "B", "L"]),
        upper=st.booleans(),
        pad=st.sampled_from(["", " ", "  ", "\t"]),
    )
    @settings(max_examples=50)
    def test_buy_tokens_are_long(self, token: str, upper: bool, pad: str):
        raw = pad + (token if upper else token.lower()) + pad
        assert normalize_side(raw) == "LONG"

    @given(
        token=st.sampled_from(["SELL", "SHORT", "S", "SH"]),
        upper=st.booleans(),
    )
    @settings(max_examples=50)
    def test_sell_tokens_are_short(self, token: str, upper: bool):
        assert normalize_side(token if upper else token.lower()) == "SHORT"

    def test_lowercase_b_is_long(self):
        assert normalize_side("b") == "LONG"

    def test_unknown_token_raises(self):
        with pytest.raises(NormalizationError, match="Invalid side value: XYZ"):
            normalize_side("XYZ")

    def test_empty_token_raises(self):
        with pytest.raises(NormalizationError):
            normalize_side("   ")


class TestNumericCoercion:
    """Numbers drop currency symbols and separators; garbage is an error."""

    def test_strips_dollar_and_commas(self):
        assert parse_number("$1,234.50") == 1234.5

    def test_plain_negative(self):
        assert parse_number("-12.5") == -12.5

    @pytest.mark.parametrize("raw", ["abc", "", "12..5", "1.2.3"])
    def test_unparsable_raises(self, raw: str):
        with pytest.raises(NormalizationError, match="Invalid number format"):
            parse_number(raw)

    @pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "NaN"])
    def test_non_finite_raises(self, raw: str):
        with pytest.raises(NormalizationError):
            parse_number(raw)

    @given(value=st.floats(min_value=0.01, max_value=1e9, allow_nan=False, allow_infinity=False))
    @settings(max_examples=100)
    def test_formatted_currency_round_trips(self, value: float):
        text = f"${value:,.2f}"
        assert parse_number(text) == pytest.approx(round(value, 2))


class TestDateCoercion:
    def test_iso_date(self):
        assert parse_date("2024-12-15") == datetime(2024, 12, 15, tzinfo=timezone.utc)

    def test_iso_with_z(self):
        assert parse_date("2024-12-15T09:30:00Z") == datetime(
            2024, 12, 15, 9, 30, tzinfo=timezone.utc
        )

    def test_us_broker_layout(self):
        assert parse_date("12/15/2024 09:30:00") == datetime(
            2024, 12, 15, 9, 30, tzinfo=timezone.utc
        )

    def test_ibkr_layout(self):
        assert parse_date("20241215;093000") == datetime(
            2024, 12, 15, 9, 30, tzinfo=timezone.utc
        )

    def test_invalid_date_raises(self):
        with pytest.raises(NormalizationError, match="Invalid date format"):
            parse_date("yesterday")


class TestColumnLookup:
    def test_case_insensitive(self):
        assert lookup({"symbol": "aapl"}, ("Symbol",)) == "aapl"

    def test_alias_priority(self):
        row = {"Price": "10", "EntryPrice": "12"}
        assert lookup(row, ("EntryPrice", "Price")) == "12"

    def test_falls_back_to_later_alias(self):
        assert lookup({"price": "10"}, ("EntryPrice", "Price")) == "10"

    def test_empty_cell_is_absent(self):
        assert lookup({"ExitPrice": "  "}, ("ExitPrice",)) is None

    def test_blank_preferred_column_falls_through(self):
        row = {"EntryPrice": "", "Price": "10.5"}
        assert lookup(row, ("EntryPrice", "Price")) == "10.5"


class TestGenericProfile:
    """
    **Feature: trade-journal, Property 2: Generic CSV Normalization**
    """

    HEADER = "Symbol,Side,Quantity,EntryPrice,ExitPrice,EntryDate,Commission"

    def test_documented_row_normalizes_to_valid_trade(self):
        table = read_csv(f"{self.HEADER}\nAAPL,LONG,100,175.42,178.91,2024-12-15,2.50\n")
        normalized = normalize(table.records[0].data, GENERIC)

        assert normalized.ok
        result = validate_trade_input(normalized.values)
        assert result.ok
        trade = result.trade
        assert trade.symbol == "AAPL"
        assert trade.side == "LONG"
        assert trade.quantity == 100
        assert trade.entry_price == 175.42
        assert trade.exit_price == 178.91
        assert trade.commission == 2.50
        assert trade.entry_date == datetime(2024, 12, 15, tzinfo=timezone.utc)
        assert trade.instrument_type == "stock"
        assert trade.is_open is False

    def test_short_row_is_skipped_not_normalized(self):
        header = "Symbol,Side,Quantity,EntryPrice,ExitPrice,EntryDate"
        table = read_csv(f"{header}\nAAPL,LONG,100,175.42\n")
        assert table.records == []
        assert table.skipped == 1

    def test_symbol_uppercased(self):
        normalized = normalize({"symbol": "msft"}, GENERIC)
        assert normalized.values["symbol"] == "MSFT"

    def test_absent_exit_is_preserved(self):
        normalized = normalize(
            {"Symbol": "AAPL", "Side": "BUY", "Quantity": "1", "EntryPrice": "1",
             "EntryDate": "2024-01-02"},
            GENERIC,
        )
        assert "exit_price" not in normalized.values
        assert "exit_date" not in normalized.values

    def test_bad_values_are_reported_not_raised(self):
        normalized = normalize(
            {"Symbol": "AAPL", "Side": "XYZ", "Quantity": "lots", "EntryPrice": "$10",
             "EntryDate": "someday"},
            GENERIC,
        )
        fields = {error.field for error in normalized.errors}
        assert fields == {"side", "quantity", "entry_date"}
        assert normalized.values["quantity"] == "lots"
        assert normalized.values["entry_price"] == 10.0

    def test_instrument_type_lowercased(self):
        normalized = normalize({"InstrumentType": "Option"}, GENERIC)
        assert normalized.values["instrument_type"] == "option"

    @given(
        row=st.dictionaries(
            keys=st.sampled_from(
                ["Symbol", "Side", "Quantity", "EntryPrice", "ExitPrice", "EntryDate",
                 "Commission", "Notes", "Other"]
            ),
            values=st.text(max_size=20),
            max_size=9,
        ),
        profile_name=st.sampled_from(sorted(PROFILES)),
    )
    @settings(max_examples=200)
    def test_normalize_never_raises(self, row: dict, profile_name: str):
        """*For any* row and profile, normalize returns instead of raising."""
        result = normalize(row, PROFILES[profile_name])
        assert all(error.field in result.values for error in result.errors)


class TestBrokerProfiles:
    def test_interactive_brokers_row(self):
        row = {
            "Symbol": "NVDA",
            "Side": "SELL",
            "Quantity": "10",
            "Price": "$480.10",
            "DateTime": "2024-12-10 10:00:00",
            "Commission": "1.00",
            "AssetCategory": "Stocks",
        }
        normalized = normalize(row, INTERACTIVE_BROKERS)
        assert normalized.ok
        assert normalized.values["side"] == "SHORT"
        assert normalized.values["entry_price"] == 480.10
        assert normalized.values["instrument_type"] == "stock"

    def test_interactive_brokers_bot_token(self):
        normalized = normalize({"Side": "BOT"}, INTERACTIVE_BROKERS)
        assert normalized.values["side"] == "LONG"

    def test_interactive_brokers_option_category(self):
        normalized = normalize({"AssetCategory": "Equity and Index Options"}, INTERACTIVE_BROKERS)
        assert normalized.values["instrument_type"] == "option"

    def test_tradestation_abbreviated_columns(self):
        row = {
            "Symbol": "AMD",
            "BuySell": "Buy",
            "Qty": "25",
            "Price": "140.5",
            "ExecTime": "12/11/2024 09:45:00",
            "Comm": "0.75",
        }
        normalized = normalize(row, TRADESTATION)
        assert normalized.ok
        assert normalized.values["side"] == "LONG"
        assert normalized.values["quantity"] == 25
        assert normalized.values["commission"] == 0.75
        assert normalized.values["instrument_type"] == "stock"

    @pytest.mark.parametrize("name", ["tastytrade", "robinhood"])
    def test_fallback_profiles_accept_generic_columns(self, name: str):
        row = {"Symbol": "SPY", "Side": "S", "Quantity": "3", "EntryPrice": "500",
               "EntryDate": "2024-12-01"}
        normalized = normalize(row, get_profile(name))
        assert normalized.ok
        assert normalized.values["side"] == "SHORT"

    def test_profile_lookup_is_case_insensitive(self):
        assert get_profile("Interactive Brokers") is INTERACTIVE_BROKERS

    def test_unknown_profile_raises(self):
        with pytest.raises(UnknownBrokerError):
            get_profile("etrade")

    def test_new_profile_is_pure_data(self):
        profile = BrokerProfile(
            name="custom",
            label="Custom",
            columns={"symbol": ("Ticker",), "side": ("Dir",), "quantity": ("Units",)},
            side_tokens={"UP": "LONG", "DOWN": "SHORT"},
            fixed={"instrument_type": "crypto"},
        )
        normalized = normalize({"Ticker": "btc", "Dir": "down", "Units": "0.5"}, profile)
        assert normalized.values == {
            "symbol": "BTC",
            "side": "SHORT",
            "quantity": 0.5,
            "instrument_type": "crypto",
        }
