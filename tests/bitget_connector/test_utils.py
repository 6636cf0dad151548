"""
Utility Tests.

============================================================
PURPOSE
============================================================
Tests for request parameter helpers, timestamps, symbols,
ID comparison and number formatting.

============================================================
"""

import re
from datetime import datetime, timezone

import pytest

from bitget_connector.utils import (
    build_pagination_params,
    build_query_string,
    calculate_percentage_change,
    compare_ids,
    format_number,
    format_symbol,
    format_timestamp,
    generate_client_order_id,
    is_newer_id,
    parse_timestamp,
    remove_empty_properties,
    to_timestamp,
    validate_leverage,
    validate_symbol,
)


# ============================================================
# REQUEST PARAMETER TESTS
# ============================================================

class TestRemoveEmptyProperties:
    """Tests for remove_empty_properties."""

    def test_drops_none_and_empty_string(self):
        """Zero and False survive, None and "" do not."""
        cleaned = remove_empty_properties({"a": 0, "b": "", "c": False, "d": None})

        assert cleaned == {"a": 0, "c": False}

    def test_none_input(self):
        assert remove_empty_properties(None) == {}


class TestBuildQueryString:
    """Tests for build_query_string."""

    def test_keeps_insertion_order(self):
        query = build_query_string({"symbol": "BTCUSDT", "limit": 100})

        assert query == "symbol=BTCUSDT&limit=100"

    def test_skips_empty_values(self):
        query = build_query_string({"symbol": "BTCUSDT", "coin": None, "startTime": ""})

        assert query == "symbol=BTCUSDT"

    def test_list_values_repeat_key(self):
        query = build_query_string({"orderIds": ["1", "2"]})

        assert query == "orderIds=1&orderIds=2"

    def test_values_are_url_encoded(self):
        query = build_query_string({"note": "a b&c"})

        assert query == "note=a+b%26c"

    def test_booleans(self):
        assert build_query_string({"reduceOnly": True}) == "reduceOnly=true"

    def test_empty(self):
        assert build_query_string({}) == ""


class TestBuildPaginationParams:
    """Tests for build_pagination_params."""

    def test_only_given_values(self):
        params = build_pagination_params(limit=50, id_less_than="123")

        assert params == {"limit": "50", "idLessThan": "123"}

    def test_empty(self):
        assert build_pagination_params() == {}


# ============================================================
# TIMESTAMP TESTS
# ============================================================

class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_to_timestamp_numeric_string_passes_through(self):
        assert to_timestamp("1700000000000") == "1700000000000"

    def test_to_timestamp_iso(self):
        assert to_timestamp("2024-01-01T00:00:00Z") == "1704067200000"

    def test_to_timestamp_naive_iso_is_utc(self):
        assert to_timestamp("2024-01-01T00:00:00") == "1704067200000"

    def test_to_timestamp_empty(self):
        assert to_timestamp("") is None
        assert to_timestamp(None) is None

    def test_to_timestamp_unparseable_returned_as_given(self):
        assert to_timestamp("yesterday") == "yesterday"

    def test_to_timestamp_number(self):
        assert to_timestamp(1700000000000) == "1700000000000"

    def test_format_timestamp_datetime(self):
        dt = datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert format_timestamp(dt) == "1704067200000"

    def test_format_timestamp_invalid(self):
        with pytest.raises(ValueError, match="Invalid date"):
            format_timestamp("not a date")

    def test_parse_timestamp(self):
        parsed = parse_timestamp("1704067200000")

        assert parsed == datetime(2024, 1, 1, tzinfo=timezone.utc)


# ============================================================
# SYMBOL AND ID TESTS
# ============================================================

class TestSymbols:
    """Tests for symbol helpers."""

    def test_format_symbol(self):
        assert format_symbol("btc/usdt") == "BTCUSDT"
        assert format_symbol("eth-usdt") == "ETHUSDT"
        assert format_symbol("BTC_USDT") == "BTCUSDT"

    def test_validate_symbol(self):
        assert validate_symbol("BTCUSDT")
        assert not validate_symbol("btcusdt")
        assert not validate_symbol("BTC/USDT")


class TestClientOrderId:
    """Tests for generate_client_order_id."""

    def test_default_prefix(self):
        client_oid = generate_client_order_id()

        assert re.match(r"^bg_[0-9a-z]+_[0-9a-z]{8}$", client_oid)

    def test_custom_prefix(self):
        assert generate_client_order_id("futures").startswith("futures_")

    def test_unique(self):
        ids = {generate_client_order_id() for _ in range(50)}

        assert len(ids) == 50


class TestCompareIds:
    """Tests for ID ordering."""

    def test_numeric_ids_compare_numerically(self):
        """'999' < '1000' even though it is lexicographically larger."""
        assert compare_ids("999", "1000") == -1
        assert compare_ids("1002", "1001") == 1
        assert compare_ids("1001", "1001") == 0

    def test_mixed_ids_compare_as_strings(self):
        assert compare_ids("b", "a") == 1
        assert compare_ids("abc", "1000") == 1

    def test_is_newer_id(self):
        assert is_newer_id("1001", "1000")
        assert not is_newer_id("999", "1000")
        assert not is_newer_id("1000", "1000")

    def test_is_newer_id_without_cursor(self):
        assert is_newer_id("1", None)

    def test_missing_id_is_never_newer(self):
        assert not is_newer_id(None, "1000")
        assert not is_newer_id("", "1000")
        assert not is_newer_id(None, None)


# ============================================================
# NUMBER TESTS
# ============================================================

class TestNumbers:
    """Tests for number helpers."""

    def test_format_number_strips_trailing_zeros(self):
        assert format_number(1.5) == "1.5"
        assert format_number("0.12345678901") == "0.12345679"

    def test_format_number_keeps_integer_zeros(self):
        assert format_number(100) == "100"
        assert format_number(100, decimals=0) == "100"

    def test_percentage_change(self):
        assert calculate_percentage_change(100, 110) == pytest.approx(10.0)
        assert calculate_percentage_change(0, 10) == 0.0

    def test_validate_leverage(self):
        assert validate_leverage(1)
        assert validate_leverage(125)
        assert validate_leverage(20.0)
        assert not validate_leverage(0)
        assert not validate_leverage(126)
        assert not validate_leverage(2.5)
        assert not validate_leverage(True)
        assert not validate_leverage("10")

    def test_validate_leverage_custom_max(self):
        assert not validate_leverage(50, max_leverage=20)


# ============================================================
# RUN TESTS
# ============================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
