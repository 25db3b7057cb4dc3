"""
Gamma-specific data parsers for converting raw upstream fields to typed values.

Upstream market records carry JSON arrays encoded as strings (``outcomePrices``,
``outcomes``) and numbers encoded as strings. These parsers never raise on
malformed input: they substitute the documented default and log the recovery.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional

import orjson
import structlog

from ..errors import MalformedDataError, ParseError
from .models import OutcomeQuote, PriceLevel

logger = structlog.get_logger(__name__)

DEFAULT_OUTCOME_NAMES = ("Yes", "No")

BID = "bid"
ASK = "ask"

_SIDE_ALIASES = {
    "bid": BID,
    "bids": BID,
    "buy": BID,
    "ask": ASK,
    "asks": ASK,
    "sell": ASK,
}


def parse_json_payload(raw_data: Any) -> Any:
    """
    Parse a raw JSON string into Python values.

    Args:
        raw_data: Raw JSON text (str or bytes)

    Returns:
        Decoded value

    Raises:
        ParseError: If the input is not valid JSON
    """
    if not isinstance(raw_data, (str, bytes, bytearray)):
        raise ParseError(
            f"Expected JSON text, got {type(raw_data).__name__}",
            expected_format="json",
        )
    try:
        return orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}", raw_data=str(raw_data)[:100], expected_format="json")


def parse_optional_float(value: Any) -> Optional[float]:
    """Coerce a value to a finite float, or None when that is impossible."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def parse_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a value to a finite float.

    Absent, unparsable and non-finite values (NaN, Infinity) yield ``default``,
    so the result is always safe to use in arithmetic.
    """
    result = parse_optional_float(value)
    return default if result is None else result


def _decode_list(value: Any, default: tuple) -> list:
    """Decode a list field that may arrive as a JSON-encoded string."""
    if value is None or value == "":
        return list(default)
    if isinstance(value, (list, tuple)):
        return list(value)

    decoded = parse_json_payload(value)
    if not isinstance(decoded, list):
        raise ParseError(
            f"Expected a JSON array, got {type(decoded).__name__}",
            raw_data=str(value)[:100],
            expected_format="json array",
        )
    return decoded


def parse_outcomes(record: Any) -> list[OutcomeQuote]:
    """
    Pair outcome names with their prices.

    ``outcomePrices`` defaults to an empty array and ``outcomes`` to
    ``["Yes", "No"]`` when absent. Individual unparsable prices become 0.

    Args:
        record: Raw upstream market record

    Returns:
        Outcome quotes in upstream order; empty when either field cannot be
        decoded or the two arrays differ in length
    """
    if not isinstance(record, Mapping):
        return []

    try:
        prices = _decode_list(record.get("outcomePrices"), default=())
        names = _decode_list(record.get("outcomes"), default=DEFAULT_OUTCOME_NAMES)
    except ParseError as e:
        logger.debug("Outcome fields could not be decoded", market_id=record.get("id"), error=str(e))
        return []

    if len(names) != len(prices):
        logger.debug(
            "Outcome names and prices differ in length",
            market_id=record.get("id"),
            names=len(names),
            prices=len(prices),
        )
        return []

    return [
        OutcomeQuote(name=str(name), probability=parse_float(price))
        for name, price in zip(names, prices)
    ]


def parse_level(raw_level: Any) -> Optional[PriceLevel]:
    """
    Parse an order book level from the feed.

    Accepts ``[price, size]`` arrays and ``{"price"|"p", "size"|"s"|"amount"}``
    mappings. Negative or unparsable sizes become 0.

    Returns:
        PriceLevel, or None when the price is missing, unparsable or not positive
    """
    if isinstance(raw_level, (list, tuple)):
        if not raw_level:
            return None
        raw_price = raw_level[0]
        raw_size = raw_level[1] if len(raw_level) > 1 else None
    elif isinstance(raw_level, Mapping):
        raw_price = raw_level.get("price", raw_level.get("p"))
        raw_size = raw_level.get("size", raw_level.get("s", raw_level.get("amount")))
    else:
        return None

    price = parse_optional_float(raw_price)
    if price is None or price <= 0:
        return None

    return PriceLevel(price=price, size=max(parse_float(raw_size), 0.0))


def parse_side(value: Any) -> str:
    """
    Normalize a side designator to ``"bid"`` or ``"ask"``.

    Feed price changes use ``BUY`` for bids and ``SELL`` for asks.

    Raises:
        MalformedDataError: If the value is not a recognized side
    """
    side = _SIDE_ALIASES.get(str(value).strip().lower()) if value is not None else None
    if side is None:
        raise MalformedDataError(
            f"Unknown order book side: {value!r}",
            raw_data=str(value),
            expected_format="bid|ask|BUY|SELL",
        )
    return side
