"""
Per-asset order book state.

This module holds the authoritative bid and ask levels for every asset fed by
the order book stream. Writes to one asset are serialized by that asset's
lock; reads return immutable snapshot copies taken under the same lock, so a
reader never observes a half-applied update.
"""

import bisect
import threading
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Union

from ..data.models import (
    AssetMetadata,
    OrderBookSnapshot,
    OrderBookSummary,
    OrderBookView,
    PriceLevel,
    WhaleTrade,
)
from ..data.parsers import ASK, BID, parse_float, parse_level, parse_optional_float, parse_side
from ..errors import MalformedDataError, NotFoundError
from ..logging.config import get_book_logger
from ..metrics.orderbook import compute_stats, detect_whale_trade
from ..utils.time import parse_feed_timestamp, utc_now

logger = get_book_logger(__name__)

ASSET_ID_FIELDS = ("asset_id", "assetId", "market", "token_id", "tokenId")


def extract_asset_id(data: Any) -> Optional[str]:
    """Extract the asset id from a feed message, trying each known field name."""
    if not isinstance(data, Mapping):
        return None
    for field_name in ASSET_ID_FIELDS:
        value = data.get(field_name)
        if value:
            return str(value)
    return None


class OrderBook:
    """Bid and ask levels for a single asset."""

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        self.initialized = False
        self.timestamp: Optional[datetime] = None
        self.lock = threading.Lock()
        # price -> size
        self._sizes: dict[str, dict[float, float]] = {BID: {}, ASK: {}}
        # Sort keys ascending: negated prices for bids, prices for asks
        self._keys: dict[str, list[float]] = {BID: [], ASK: []}

    @staticmethod
    def _sort_key(side: str, price: float) -> float:
        return -price if side == BID else price

    def set_level(self, side: str, price: float, size: float) -> None:
        """Insert, replace or (for size 0) remove one level. Caller holds the lock."""
        sizes = self._sizes[side]
        keys = self._keys[side]
        key = self._sort_key(side, price)

        if size == 0:
            if price in sizes:
                del sizes[price]
                del keys[bisect.bisect_left(keys, key)]
            return

        if price not in sizes:
            bisect.insort(keys, key)
        sizes[price] = size

    def reset(self) -> None:
        """Drop every level. Caller holds the lock."""
        for side in (BID, ASK):
            self._sizes[side].clear()
            self._keys[side].clear()

    def levels(self, side: str) -> tuple[PriceLevel, ...]:
        """Levels of one side, best price first. Caller holds the lock."""
        sizes = self._sizes[side]
        sign = -1.0 if side == BID else 1.0
        return tuple(PriceLevel(price=sign * key, size=sizes[sign * key]) for key in self._keys[side])


class OrderBookStore:
    """
    Asset-keyed arena of order books.

    Only the ingestion path (``apply_level``, ``load_snapshot`` and the feed
    message handlers) mutates books; consumers read through ``snapshot``,
    ``view``, ``depth`` and ``summary``.
    """

    def __init__(self):
        self.logger = logger
        self._books: dict[str, OrderBook] = {}
        self._metadata: dict[str, AssetMetadata] = {}
        self._lock = threading.Lock()

    # Registry

    def get_or_create_book(self, asset_id: str) -> OrderBook:
        """Get or create the order book for an asset."""
        with self._lock:
            book = self._books.get(asset_id)
            if book is None:
                book = OrderBook(asset_id)
                self._books[asset_id] = book
            return book

    def _get_book(self, asset_id: str) -> OrderBook:
        with self._lock:
            book = self._books.get(asset_id)
        if book is None:
            raise NotFoundError(f"Order book not found: {asset_id}", resource="order_book", key=asset_id)
        return book

    def has_book(self, asset_id: str) -> bool:
        with self._lock:
            return asset_id in self._books

    def remove_book(self, asset_id: str) -> bool:
        """Remove an asset's book; returns False if it did not exist."""
        with self._lock:
            return self._books.pop(asset_id, None) is not None

    def clear(self) -> None:
        """Drop every book, e.g. when the feed disconnects."""
        with self._lock:
            self._books.clear()

    def asset_ids(self) -> list[str]:
        with self._lock:
            return list(self._books)

    def register_asset(self, asset_id: str, metadata: Union[AssetMetadata, Mapping[str, Any]]) -> None:
        """Attach event title and outcome context to an asset id."""
        if not asset_id:
            return
        if isinstance(metadata, Mapping):
            raw_index = metadata.get("outcome_index", metadata.get("outcomeIndex"))
            outcome_index = parse_optional_float(raw_index)
            if raw_index is not None and outcome_index is None:
                self.logger.debug("Ignoring non-numeric outcome index", asset_id=asset_id, outcome_index=raw_index)
            metadata = AssetMetadata(
                event_id=metadata.get("event_id") or metadata.get("eventId"),
                event_title=metadata.get("event_title") or metadata.get("eventTitle"),
                outcome=metadata.get("outcome"),
                outcome_index=int(outcome_index) if outcome_index is not None else None,
            )
        with self._lock:
            self._metadata[asset_id] = metadata

    def get_metadata(self, asset_id: str) -> Optional[AssetMetadata]:
        with self._lock:
            return self._metadata.get(asset_id)

    # Writes

    def apply_level(self, asset_id: str, side: str, price: Any, size: Any) -> None:
        """
        Apply one level update.

        A size of 0 (or a negative size) removes the level at ``price``;
        otherwise the level is inserted or its size replaced. Applying the
        same update twice leaves the same state as applying it once.

        Args:
            asset_id: Asset identifier
            side: 'bid' / 'ask' (or feed 'BUY' / 'SELL')
            price: Level price; non-positive or unparsable prices are ignored
            size: New resting size

        Raises:
            MalformedDataError: If ``side`` is not a recognized side
        """
        side = parse_side(side)
        parsed_price = parse_optional_float(price)
        if parsed_price is None or parsed_price <= 0:
            self.logger.debug("Ignoring level with invalid price", asset_id=asset_id, price=price)
            return
        parsed_size = max(parse_float(size), 0.0)

        book = self.get_or_create_book(asset_id)
        with book.lock:
            book.set_level(side, parsed_price, parsed_size)
            book.timestamp = utc_now()

    def load_snapshot(self, asset_id: str, bids: Iterable[Any], asks: Iterable[Any],
                      timestamp: Any = None) -> None:
        """
        Replace an asset's book with a full feed snapshot and mark it initialized.

        Levels with unusable prices or zero size are dropped.
        """
        parsed = {
            BID: [level for level in map(parse_level, bids or []) if level and level.size > 0],
            ASK: [level for level in map(parse_level, asks or []) if level and level.size > 0],
        }

        book = self.get_or_create_book(asset_id)
        with book.lock:
            was_initialized = book.initialized
            book.reset()
            for side, levels in parsed.items():
                for level in levels:
                    book.set_level(side, level.price, level.size)
            book.timestamp = parse_feed_timestamp(timestamp) or utc_now()
            book.initialized = True

        if not was_initialized:
            self.logger.info(
                "Order book initialized",
                asset_id=asset_id,
                bid_levels=len(parsed[BID]),
                ask_levels=len(parsed[ASK]),
            )

    def handle_book_message(self, message: Any) -> Optional[str]:
        """
        Consume a feed book snapshot message.

        Returns:
            The asset id the snapshot was applied to, None if it was ignored
        """
        asset_id = extract_asset_id(message)
        if not asset_id:
            self.logger.warning("Book snapshot missing asset id")
            return None

        self.load_snapshot(
            asset_id,
            message.get("bids") or [],
            message.get("asks") or [],
            timestamp=message.get("timestamp"),
        )
        return asset_id

    def handle_price_change(self, data: Any) -> int:
        """
        Consume feed price change events.

        Accepts a single change, a list of changes, or a message carrying a
        ``changes`` / ``price_changes`` list under a shared asset id. Changes
        for books that have not received a snapshot yet are skipped.

        Returns:
            Number of changes applied
        """
        if isinstance(data, Mapping):
            nested = data.get("price_changes") or data.get("changes")
            if isinstance(nested, list):
                shared_asset_id = extract_asset_id(data)
                changes = [
                    {**change, "asset_id": extract_asset_id(change) or shared_asset_id}
                    for change in nested if isinstance(change, Mapping)
                ]
            else:
                changes = [data]
        elif isinstance(data, list):
            changes = data
        else:
            return 0

        applied = 0
        for change in changes:
            asset_id = extract_asset_id(change)
            if not asset_id:
                continue
            with self._lock:
                book = self._books.get(asset_id)
            if book is None or not book.initialized:
                continue
            try:
                self.apply_level(asset_id, change.get("side"), change.get("price"), change.get("size"))
            except MalformedDataError as e:
                self.logger.warning("Skipping price change", asset_id=asset_id, error=str(e))
                continue
            applied += 1

        return applied

    def analyze_trade(
        self,
        trade: Any,
        depth_threshold: float = 0.05,
        min_notional: float = 1000.0,
    ) -> Optional[WhaleTrade]:
        """
        Check a feed trade message against the current book for its asset.

        Trades that are incomplete, malformed, or for a book without a
        snapshot yet are not flagged.

        Returns:
            WhaleTrade if the trade clears both thresholds, otherwise None
        """
        asset_id = extract_asset_id(trade)
        if not asset_id:
            return None

        price = parse_optional_float(trade.get("price"))
        size = parse_optional_float(trade.get("size"))
        if price is None or size is None or price <= 0 or size <= 0:
            return None
        try:
            side = parse_side(trade.get("side"))
        except MalformedDataError as e:
            self.logger.debug("Ignoring trade with unknown side", asset_id=asset_id, error=str(e))
            return None

        with self._lock:
            book = self._books.get(asset_id)
        if book is None or not book.initialized:
            return None

        whale = detect_whale_trade(
            self.view(asset_id),
            price=price,
            size=size,
            side=side,
            depth_threshold=depth_threshold,
            min_notional=min_notional,
            timestamp=parse_feed_timestamp(trade.get("timestamp")) or utc_now(),
        )
        if whale is not None:
            self.logger.info(
                "Whale trade detected",
                asset_id=asset_id,
                side=side,
                notional=whale.notional,
                depth_percent=whale.depth_percent,
            )
        return whale

    # Reads

    def snapshot(self, asset_id: str) -> OrderBookSnapshot:
        """
        Immutable copy of an asset's current book.

        Raises:
            NotFoundError: If no book exists for the asset
        """
        book = self._get_book(asset_id)
        metadata = self.get_metadata(asset_id)

        with book.lock:
            bids = book.levels(BID)
            asks = book.levels(ASK)
            initialized = book.initialized
            timestamp = book.timestamp

        return OrderBookSnapshot(
            asset_id=asset_id,
            bids=bids,
            asks=asks,
            event_title=metadata.event_title if metadata else None,
            outcome=metadata.outcome if metadata else None,
            initialized=initialized,
            timestamp=timestamp,
        )

    def view(self, asset_id: str) -> OrderBookView:
        """Snapshot plus the stats computed from that same snapshot."""
        snap = self.snapshot(asset_id)
        return OrderBookView(snapshot=snap, stats=compute_stats(snap))

    def depth(self, asset_id: str, levels: int = 10) -> OrderBookSnapshot:
        """Snapshot truncated to the top ``levels`` of each side."""
        if levels < 0:
            raise ValueError(f"levels must be non-negative, got {levels}")
        snap = self.snapshot(asset_id)
        return replace(snap, bids=snap.bids[:levels], asks=snap.asks[:levels])

    def summary(self) -> OrderBookSummary:
        """Views of every initialized book plus aggregate level counts across all books."""
        views = []
        initialized_count = 0
        total_bid_levels = 0
        total_ask_levels = 0
        asset_ids = self.asset_ids()

        for asset_id in asset_ids:
            try:
                view = self.view(asset_id)
            except NotFoundError:
                # Removed between listing and reading
                continue
            total_bid_levels += view.stats.bid_levels
            total_ask_levels += view.stats.ask_levels
            if view.snapshot.initialized:
                initialized_count += 1
                views.append(view)

        return OrderBookSummary(
            order_books=tuple(views),
            initialized_count=initialized_count,
            total_order_books=len(asset_ids),
            total_bid_levels=total_bid_levels,
            total_ask_levels=total_ask_levels,
        )
