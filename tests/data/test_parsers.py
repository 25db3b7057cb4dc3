"""Tests for raw upstream field parsers"""

import math

import pytest

from pmdash_app.data.models import OutcomeQuote, PriceLevel
from pmdash_app.data.parsers import (
    ASK,
    BID,
    parse_float,
    parse_json_payload,
    parse_level,
    parse_optional_float,
    parse_outcomes,
    parse_side,
)
from pmdash_app.errors import MalformedDataError, ParseError


class TestJsonPayload:
    """Test JSON payload decoding"""

    def test_decodes_text_and_bytes(self):
        assert parse_json_payload('["a", 1]') == ["a", 1]
        assert parse_json_payload(b'{"k": 2}') == {"k": 2}

    def test_invalid_json_raises_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            parse_json_payload("not json")
        assert exc_info.value.expected_format == "json"

    def test_non_text_input_raises_parse_error(self):
        with pytest.raises(ParseError):
            parse_json_payload(42)


class TestFloatParsing:
    """Test numeric coercion"""

    @pytest.mark.parametrize("value,expected", [
        ("1.5", 1.5),
        (2, 2.0),
        (" 3.25 ", 3.25),
        ("0", 0.0),
    ])
    def test_parses_numeric_values(self, value, expected):
        assert parse_float(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", float("inf"), True, [1]])
    def test_unusable_values_default_to_zero(self, value):
        result = parse_float(value)
        assert result == 0.0
        assert math.isfinite(result)

    def test_int_too_large_for_float(self):
        assert parse_optional_float(10**400) is None
        assert parse_float(-(10**400)) == 0.0

    def test_custom_default(self):
        assert parse_float("bad", default=-1.0) == -1.0

    def test_optional_float_returns_none(self):
        assert parse_optional_float("nan") is None
        assert parse_optional_float(None) is None
        assert parse_optional_float("0.5") == 0.5


class TestOutcomeParsing:
    """Test pairing of outcome names with prices"""

    def test_string_encoded_arrays(self):
        record = {"outcomes": '["Yes", "No"]', "outcomePrices": '["0.62", "0.38"]'}

        outcomes = parse_outcomes(record)

        assert outcomes == [OutcomeQuote("Yes", 0.62), OutcomeQuote("No", 0.38)]

    def test_native_lists_accepted(self):
        record = {"outcomes": ["Up", "Down"], "outcomePrices": [0.1, 0.9]}

        outcomes = parse_outcomes(record)

        assert [o.name for o in outcomes] == ["Up", "Down"]
        assert [o.probability for o in outcomes] == [0.1, 0.9]

    def test_names_default_to_yes_no(self):
        outcomes = parse_outcomes({"outcomePrices": '["0.7", "0.3"]'})
        assert [o.name for o in outcomes] == ["Yes", "No"]

    def test_missing_prices_yield_no_outcomes(self):
        assert parse_outcomes({"outcomes": '["Yes", "No"]'}) == []
        assert parse_outcomes({}) == []

    def test_invalid_json_yields_no_outcomes(self):
        assert parse_outcomes({"outcomePrices": "[0.5,"}) == []
        assert parse_outcomes({"outcomePrices": '{"a": 1}'}) == []

    def test_length_mismatch_yields_no_outcomes(self):
        record = {"outcomes": '["A", "B", "C"]', "outcomePrices": '["0.5", "0.5"]'}
        assert parse_outcomes(record) == []

    def test_overflowing_price_becomes_zero(self):
        outcomes = parse_outcomes({"outcomePrices": [10**400], "outcomes": ["Yes"]})
        assert outcomes == [OutcomeQuote("Yes", 0.0)]

    def test_unparsable_price_becomes_zero(self):
        record = {"outcomes": '["Yes", "No"]', "outcomePrices": '["abc", "0.4"]'}

        outcomes = parse_outcomes(record)

        assert outcomes[0].probability == 0.0
        assert outcomes[1].probability == 0.4

    def test_non_mapping_record(self):
        assert parse_outcomes(None) == []
        assert parse_outcomes("market") == []


class TestLevelParsing:
    """Test order book level parsing"""

    def test_array_level(self):
        assert parse_level(["0.45", "100"]) == PriceLevel(price=0.45, size=100.0)

    def test_mapping_level_aliases(self):
        assert parse_level({"price": "0.45", "size": "10"}) == PriceLevel(0.45, 10.0)
        assert parse_level({"p": 0.3, "s": 5}) == PriceLevel(0.3, 5.0)
        assert parse_level({"price": 0.3, "amount": 7}) == PriceLevel(0.3, 7.0)

    def test_invalid_prices_rejected(self):
        assert parse_level(["0", "10"]) is None
        assert parse_level(["-0.1", "10"]) is None
        assert parse_level({"size": "10"}) is None
        assert parse_level([]) is None
        assert parse_level("0.5") is None

    def test_negative_or_missing_size_becomes_zero(self):
        assert parse_level(["0.5", "-3"]).size == 0.0
        assert parse_level(["0.5"]).size == 0.0


class TestSideParsing:
    """Test side designator normalization"""

    @pytest.mark.parametrize("value,expected", [
        ("bid", BID),
        ("BUY", BID),
        ("bids", BID),
        ("ask", ASK),
        ("SELL", ASK),
        (" asks ", ASK),
    ])
    def test_known_sides(self, value, expected):
        assert parse_side(value) == expected

    @pytest.mark.parametrize("value", [None, "", "hold", 1])
    def test_unknown_side_raises(self, value):
        with pytest.raises(MalformedDataError):
            parse_side(value)
