"""
Canonical data models for normalized market data.

This module defines immutable data structures that represent clean, display-ready
market and order book data after normalization from raw upstream formats. Every
model renders its stable camelCase wire form through ``to_dict``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..utils.time import format_timestamp


@dataclass(frozen=True)
class OutcomeQuote:
    """Named outcome with its implied probability."""
    name: str
    probability: float     # In [0, 1] for well-formed upstream data

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "probability": self.probability}


@dataclass(frozen=True)
class Market:
    """Normalized market for list views."""
    id: Optional[str]
    question: Optional[str]
    slug: Optional[str]
    probability: Optional[float]           # outcomes[0].probability, None if no outcomes
    outcomes: tuple[OutcomeQuote, ...]
    volume24hr: float                      # Always finite and >= 0
    total_volume: float
    liquidity: float
    end_date: Optional[str]
    image: Optional[str]
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "slug": self.slug,
            "probability": self.probability,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "volume24hr": self.volume24hr,
            "totalVolume": self.total_volume,
            "liquidity": self.liquidity,
            "endDate": self.end_date,
            "image": self.image,
            "url": self.url,
        }


@dataclass(frozen=True)
class MarketDetail:
    """Normalized market for the single-market view; callers derive probability from outcomes[0]."""
    id: Optional[str]
    question: Optional[str]
    description: Optional[str]
    slug: Optional[str]
    outcomes: tuple[OutcomeQuote, ...]
    volume24hr: float
    total_volume: float
    liquidity: float
    start_date: Optional[str]
    end_date: Optional[str]
    image: Optional[str]
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "description": self.description,
            "slug": self.slug,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "volume24hr": self.volume24hr,
            "totalVolume": self.total_volume,
            "liquidity": self.liquidity,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "image": self.image,
            "url": self.url,
        }


@dataclass(frozen=True)
class EventMarket:
    """Compact market entry nested in an event."""
    id: Optional[str]
    question: Optional[str]
    outcomes: tuple[OutcomeQuote, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


@dataclass(frozen=True)
class EventSummary:
    """Normalized event (group of related markets)."""
    id: Optional[str]
    title: Optional[str]
    slug: Optional[str]
    description: Optional[str]
    markets: tuple[EventMarket, ...]
    image: Optional[str]
    url: str

    @property
    def market_count(self) -> int:
        return len(self.markets)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "marketCount": self.market_count,
            "markets": [market.to_dict() for market in self.markets],
            "image": self.image,
            "url": self.url,
        }


@dataclass(frozen=True)
class MarketsPage:
    """Result of a ranked market list fetch."""
    markets: tuple[Market, ...]

    @property
    def count(self) -> int:
        return len(self.markets)

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "markets": [m.to_dict() for m in self.markets]}


@dataclass(frozen=True)
class EventsPage:
    """Result of an event list fetch."""
    events: tuple[EventSummary, ...]

    @property
    def count(self) -> int:
        return len(self.events)

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "events": [e.to_dict() for e in self.events]}


@dataclass(frozen=True)
class PriceLevel:
    """Single order book level with price and size."""
    price: float
    size: float

    def to_dict(self) -> dict[str, float]:
        return {"price": self.price, "size": self.size}


@dataclass(frozen=True)
class AssetMetadata:
    """Human-readable context for an order book asset (token id)."""
    event_id: Optional[str] = None
    event_title: Optional[str] = None
    outcome: Optional[str] = None
    outcome_index: Optional[int] = None


@dataclass(frozen=True)
class OrderBookSnapshot:
    """Immutable copy of one asset's order book."""
    asset_id: str
    bids: tuple[PriceLevel, ...] = ()           # Sorted by price descending
    asks: tuple[PriceLevel, ...] = ()           # Sorted by price ascending
    event_title: Optional[str] = None
    outcome: Optional[str] = None
    initialized: bool = False
    timestamp: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "bids": [level.to_dict() for level in self.bids],
            "asks": [level.to_dict() for level in self.asks],
            "eventTitle": self.event_title,
            "outcome": self.outcome,
            "initialized": self.initialized,
            "timestamp": format_timestamp(self.timestamp),
        }


@dataclass(frozen=True)
class OrderBookStats:
    """Statistics derived from exactly one OrderBookSnapshot."""
    bid_levels: int
    ask_levels: int
    bid_total: float
    ask_total: float
    best_bid: Optional[float]
    best_ask: Optional[float]
    spread: Optional[float]
    spread_percent: Optional[float]     # Fraction of mid price, 0.0198 == 1.98%
    mid_price: Optional[float]
    imbalance: float                    # In [-1, 1], positive = bid-heavy
    total_depth: float = 0.0
    momentum: float = 0.0               # Imbalance weighted by proximity to mid, in [-1, 1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "bidLevels": self.bid_levels,
            "askLevels": self.ask_levels,
            "bidTotal": self.bid_total,
            "askTotal": self.ask_total,
            "bestBid": self.best_bid,
            "bestAsk": self.best_ask,
            "spread": self.spread,
            "spreadPercent": self.spread_percent,
            "midPrice": self.mid_price,
            "imbalance": self.imbalance,
            "totalDepth": self.total_depth,
            "momentum": self.momentum,
        }


@dataclass(frozen=True)
class OrderBookView:
    """A snapshot paired with the stats computed from it."""
    snapshot: OrderBookSnapshot
    stats: OrderBookStats

    def to_dict(self) -> dict[str, Any]:
        result = self.snapshot.to_dict()
        result["stats"] = self.stats.to_dict()
        return result


@dataclass(frozen=True)
class LiquidityImpact:
    """Result of walking one side of the book to fill a market order."""
    trade_size: float
    filled_size: float
    levels_consumed: int
    avg_fill_price: float
    impact_percent: float      # Fraction, |last fill - first level| / first level
    slippage: float            # Fraction, |avg fill - first level| / first level

    def to_dict(self) -> dict[str, Any]:
        return {
            "tradeSize": self.trade_size,
            "filledSize": self.filled_size,
            "levelsConsumed": self.levels_consumed,
            "avgFillPrice": self.avg_fill_price,
            "impactPercent": self.impact_percent,
            "slippage": self.slippage,
        }


@dataclass(frozen=True)
class LargeOrder:
    """A resting level at or above a size threshold."""
    side: str
    price: float
    size: float
    percent_of_depth: float    # Fraction of that side's total size

    def to_dict(self) -> dict[str, Any]:
        return {
            "side": self.side,
            "price": self.price,
            "size": self.size,
            "percentOfDepth": self.percent_of_depth,
        }


@dataclass(frozen=True)
class WhaleTrade:
    """A trade that is large both in notional and relative to book depth."""
    asset_id: str
    price: float
    size: float
    side: str                  # Taker side: bid for a buy, ask for a sell
    notional: float
    depth_percent: float       # Fraction of the consumed side's depth
    book_depth: float
    spread: Optional[float]
    spread_percent: Optional[float]
    mid_price: Optional[float]
    imbalance: float
    timestamp: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "price": self.price,
            "size": self.size,
            "side": self.side,
            "notional": self.notional,
            "depthPercent": self.depth_percent,
            "bookDepth": self.book_depth,
            "spread": self.spread,
            "spreadPercent": self.spread_percent,
            "midPrice": self.mid_price,
            "imbalance": self.imbalance,
            "timestamp": format_timestamp(self.timestamp),
        }


@dataclass(frozen=True)
class OrderBookSummary:
    """Aggregate view over every known order book."""
    order_books: tuple[OrderBookView, ...] = field(default_factory=tuple)
    initialized_count: int = 0
    total_order_books: int = 0
    total_bid_levels: int = 0
    total_ask_levels: int = 0

    @property
    def count(self) -> int:
        return len(self.order_books)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "initializedCount": self.initialized_count,
            "totalOrderBooks": self.total_order_books,
            "totalBidLevels": self.total_bid_levels,
            "totalAskLevels": self.total_ask_levels,
            "orderBooks": [view.to_dict() for view in self.order_books],
        }
