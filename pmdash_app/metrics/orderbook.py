"""Order book statistics: spread, mid price, depth, imbalance and liquidity analytics"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Optional

from ..data.models import (
    LargeOrder,
    LiquidityImpact,
    OrderBookSnapshot,
    OrderBookStats,
    OrderBookView,
    PriceLevel,
    WhaleTrade,
)
from ..data.parsers import ASK, BID, parse_side


def side_total(levels: Sequence[PriceLevel]) -> float:
    """
    Sum resting size on one side of the book

    Args:
        levels: Price levels of one side

    Returns:
        Total size (0.0 for an empty side)
    """
    total = 0.0
    for level in levels:
        total += level.size
    return total


def best_price(levels: Sequence[PriceLevel]) -> Optional[float]:
    """Price of the first (best) level, None if the side is empty"""
    return levels[0].price if levels else None


def calculate_imbalance(bid_total: float, ask_total: float) -> float:
    """
    Calculate order flow imbalance

    imbalance = (bid_total - ask_total) / (bid_total + ask_total)

    Args:
        bid_total: Total bid size
        ask_total: Total ask size

    Returns:
        Imbalance in [-1, 1], positive when bid-heavy; 0.0 when both sides are empty
    """
    total = bid_total + ask_total
    if total == 0:
        return 0.0
    return (bid_total - ask_total) / total


def calculate_mid_price(best_bid: Optional[float], best_ask: Optional[float]) -> Optional[float]:
    """Mid of best bid and ask; falls back to whichever side exists"""
    if best_bid is not None and best_ask is not None:
        return (best_bid + best_ask) / 2.0
    if best_bid is not None:
        return best_bid
    return best_ask


def _weighted_depth(levels: Sequence[PriceLevel], mid_price: float) -> float:
    total = 0.0
    for level in levels:
        weight = 1.0 / (1.0 + abs(level.price - mid_price) / mid_price)
        total += level.size * weight
    return total


def calculate_momentum(
    bids: Sequence[PriceLevel],
    asks: Sequence[PriceLevel],
    mid_price: Optional[float],
) -> float:
    """
    Calculate imbalance weighted by each level's proximity to the mid price

    Each level contributes size / (1 + |price - mid| / mid), so size resting
    near the touch moves the result more than size deep in the book.

    Returns:
        Momentum in [-1, 1], positive when bid-heavy; 0.0 without a mid price
    """
    if not mid_price or (not bids and not asks):
        return 0.0

    weighted_bids = _weighted_depth(bids, mid_price)
    weighted_asks = _weighted_depth(asks, mid_price)
    total = weighted_bids + weighted_asks
    if total == 0:
        return 0.0
    return (weighted_bids - weighted_asks) / total


def compute_stats(snapshot: OrderBookSnapshot) -> OrderBookStats:
    """
    Compute order book statistics from a snapshot

    Pure function of the snapshot; never touches a live book. Spread needs
    both sides; spread percent additionally needs a non-zero mid price.

    Args:
        snapshot: Immutable order book snapshot

    Returns:
        OrderBookStats for exactly this snapshot
    """
    bid_total = side_total(snapshot.bids)
    ask_total = side_total(snapshot.asks)

    best_bid = best_price(snapshot.bids)
    best_ask = best_price(snapshot.asks)

    spread = None
    if best_bid is not None and best_ask is not None:
        spread = best_ask - best_bid

    mid_price = calculate_mid_price(best_bid, best_ask)

    spread_percent = None
    if spread is not None and mid_price:
        spread_percent = spread / mid_price

    return OrderBookStats(
        bid_levels=len(snapshot.bids),
        ask_levels=len(snapshot.asks),
        bid_total=bid_total,
        ask_total=ask_total,
        best_bid=best_bid,
        best_ask=best_ask,
        spread=spread,
        spread_percent=spread_percent,
        mid_price=mid_price,
        imbalance=calculate_imbalance(bid_total, ask_total),
        total_depth=bid_total + ask_total,
        momentum=calculate_momentum(snapshot.bids, snapshot.asks, mid_price),
    )


def calculate_liquidity_impact(snapshot: OrderBookSnapshot, trade_size: float, side: Any) -> LiquidityImpact:
    """
    Walk the book to estimate the cost of a market order

    A buy consumes asks from the lowest price up; a sell consumes bids from
    the highest price down. Both sides of a snapshot are already best-first.

    Args:
        snapshot: Immutable order book snapshot
        trade_size: Order size in shares, must be positive
        side: Taker side, ``buy``/``bid`` or ``sell``/``ask``

    Returns:
        LiquidityImpact; with nothing to trade against, impact and slippage are 1.0

    Raises:
        ValueError: If trade_size is not positive
        MalformedDataError: If side is not a recognized side
    """
    if not trade_size > 0:
        raise ValueError(f"trade_size must be positive, got {trade_size}")

    levels = snapshot.asks if parse_side(side) == BID else snapshot.bids
    levels = [level for level in levels if level.size > 0]

    if not levels:
        return LiquidityImpact(
            trade_size=trade_size,
            filled_size=0.0,
            levels_consumed=0,
            avg_fill_price=0.0,
            impact_percent=1.0,
            slippage=1.0,
        )

    start_price = levels[0].price
    remaining = trade_size
    total_cost = 0.0
    last_price = start_price
    consumed = 0

    for level in levels:
        if remaining <= 0:
            break
        fill = min(remaining, level.size)
        total_cost += fill * level.price
        remaining -= fill
        last_price = level.price
        consumed += 1

    filled = trade_size - max(remaining, 0.0)
    avg_fill_price = total_cost / filled if filled > 0 else 0.0

    return LiquidityImpact(
        trade_size=trade_size,
        filled_size=filled,
        levels_consumed=consumed,
        avg_fill_price=avg_fill_price,
        impact_percent=abs(last_price - start_price) / start_price,
        slippage=abs(avg_fill_price - start_price) / start_price,
    )


def detect_large_orders(snapshot: OrderBookSnapshot, threshold: float) -> list[LargeOrder]:
    """
    Find resting levels whose size is at least ``threshold``

    Returns:
        Large orders from both sides, largest first
    """
    orders = []
    for side, levels in ((BID, snapshot.bids), (ASK, snapshot.asks)):
        total = side_total(levels)
        for level in levels:
            if level.size > 0 and level.size >= threshold:
                orders.append(LargeOrder(
                    side=side,
                    price=level.price,
                    size=level.size,
                    percent_of_depth=level.size / total if total > 0 else 0.0,
                ))

    orders.sort(key=lambda order: order.size, reverse=True)
    return orders


def detect_whale_trade(
    view: OrderBookView,
    price: float,
    size: float,
    side: str,
    depth_threshold: float = 0.05,
    min_notional: float = 1000.0,
    timestamp: Optional[datetime] = None,
) -> Optional[WhaleTrade]:
    """
    Flag a trade that is large both in notional and against book depth

    A buy is measured against resting asks, a sell against resting bids.

    Args:
        view: Book snapshot and stats at the time of the trade
        price: Trade price
        size: Trade size in shares
        side: Normalized taker side, ``bid`` for a buy or ``ask`` for a sell
        depth_threshold: Minimum size as a fraction of the consumed side's depth
        min_notional: Minimum size * price
        timestamp: Trade time, if the feed supplied one

    Returns:
        WhaleTrade if both thresholds are met, otherwise None
    """
    notional = size * price
    if notional < min_notional:
        return None

    stats = view.stats
    depth = stats.ask_total if side == BID else stats.bid_total
    if depth == 0:
        return None

    depth_percent = size / depth
    if depth_percent < depth_threshold:
        return None

    return WhaleTrade(
        asset_id=view.snapshot.asset_id,
        price=price,
        size=size,
        side=side,
        notional=notional,
        depth_percent=depth_percent,
        book_depth=depth,
        spread=stats.spread,
        spread_percent=stats.spread_percent,
        mid_price=stats.mid_price,
        imbalance=stats.imbalance,
        timestamp=timestamp,
    )
