"""
Market normalization for converting raw gamma records to canonical objects.

Every function here is a pure function of one record and never raises: a
record missing every field normalizes to an empty Market with zeroed numeric
fields, so one malformed upstream record cannot abort a batch fetch.

Default rules:
- ``volume24hr``, ``volumeNum`` and ``liquidityNum`` are parsed as floats;
  absent, unparsable, non-finite or negative values become 0.0
- ``probability`` is the first outcome's probability, None without outcomes
- text fields pass through when present, non-string scalars are stringified
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional

import structlog

from ..config.defaults import UpstreamParams
from .models import EventMarket, EventSummary, Market, MarketDetail, OutcomeQuote
from .parsers import parse_float, parse_outcomes

logger = structlog.get_logger(__name__)

DEFAULT_EVENT_URL_BASE = UpstreamParams.event_url_base

_EMPTY: Mapping[str, Any] = {}


def _as_record(record: Any) -> Mapping[str, Any]:
    if isinstance(record, Mapping):
        return record
    logger.debug("Non-mapping upstream record replaced by empty record", record_type=type(record).__name__)
    return _EMPTY


def _optional_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return value if isinstance(value, str) else str(value)


def _amount(value: Any) -> float:
    return max(parse_float(value), 0.0)


def build_market_url(slug: Optional[str], url_base: str = DEFAULT_EVENT_URL_BASE) -> str:
    """Public market page URL for a slug."""
    return f"{url_base.rstrip('/')}/{slug if slug is not None else ''}"


def first_probability(outcomes: tuple[OutcomeQuote, ...]) -> Optional[float]:
    """Probability of the first outcome, None when there are no outcomes."""
    return outcomes[0].probability if outcomes else None


def normalize_market(record: Any, url_base: str = DEFAULT_EVENT_URL_BASE) -> Market:
    """
    Normalize a raw gamma market record into a Market.

    Args:
        record: Raw upstream market record
        url_base: Prefix for the public market page URL

    Returns:
        Market with finite, non-negative numeric fields
    """
    record = _as_record(record)
    outcomes = tuple(parse_outcomes(record))
    slug = _optional_text(record.get("slug"))

    return Market(
        id=_optional_text(record.get("id")),
        question=_optional_text(record.get("question")),
        slug=slug,
        probability=first_probability(outcomes),
        outcomes=outcomes,
        volume24hr=_amount(record.get("volume24hr")),
        total_volume=_amount(record.get("volumeNum")),
        liquidity=_amount(record.get("liquidityNum")),
        end_date=_optional_text(record.get("endDate")),
        image=_optional_text(record.get("image")),
        url=build_market_url(slug, url_base),
    )


def normalize_market_detailed(record: Any, url_base: str = DEFAULT_EVENT_URL_BASE) -> MarketDetail:
    """
    Normalize a raw gamma market record into a MarketDetail.

    Numeric handling matches normalize_market; description and start date pass
    through. Probability is not computed here.
    """
    record = _as_record(record)
    slug = _optional_text(record.get("slug"))

    return MarketDetail(
        id=_optional_text(record.get("id")),
        question=_optional_text(record.get("question")),
        description=_optional_text(record.get("description")),
        slug=slug,
        outcomes=tuple(parse_outcomes(record)),
        volume24hr=_amount(record.get("volume24hr")),
        total_volume=_amount(record.get("volumeNum")),
        liquidity=_amount(record.get("liquidityNum")),
        start_date=_optional_text(record.get("startDate")),
        end_date=_optional_text(record.get("endDate")),
        image=_optional_text(record.get("image")),
        url=build_market_url(slug, url_base),
    )


def normalize_event(record: Any, url_base: str = DEFAULT_EVENT_URL_BASE) -> EventSummary:
    """Normalize a raw gamma event record with its nested markets."""
    record = _as_record(record)
    slug = _optional_text(record.get("slug"))
    raw_markets = record.get("markets")
    if not isinstance(raw_markets, list):
        raw_markets = []

    markets = []
    for raw_market in raw_markets:
        raw_market = _as_record(raw_market)
        markets.append(EventMarket(
            id=_optional_text(raw_market.get("id")),
            question=_optional_text(raw_market.get("question")),
            outcomes=tuple(parse_outcomes(raw_market)),
        ))

    return EventSummary(
        id=_optional_text(record.get("id")),
        title=_optional_text(record.get("title")),
        slug=slug,
        description=_optional_text(record.get("description")),
        markets=tuple(markets),
        image=_optional_text(record.get("image")),
        url=build_market_url(slug, url_base),
    )


def normalize_markets(records: Iterable[Any], url_base: str = DEFAULT_EVENT_URL_BASE) -> list[Market]:
    """Normalize a batch of raw market records, preserving upstream order."""
    return [normalize_market(record, url_base) for record in records]
