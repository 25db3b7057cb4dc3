"""
Main market data engine coordinator.

Wires configuration, the gamma client, the order book store and one refresh
scheduler per watched data series:

Upstream → Normalization → Ranking / Order Book Stats → Refresh Snapshot
"""

from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import (
    LargeOrder,
    LiquidityImpact,
    MarketDetail,
    MarketsPage,
    OrderBookSnapshot,
    OrderBookSummary,
    OrderBookView,
    WhaleTrade,
)
from .metrics.orderbook import calculate_liquidity_impact, detect_large_orders
from .metrics.ranking import RankBy
from .state.book import OrderBookStore
from .state.scheduler import RefreshScheduler
from .upstream.gamma import GammaClient

logger = structlog.get_logger(__name__)


class MarketDataEngine:
    """
    Coordinator for market list and order book refresh.

    Each ``watch_*`` call returns a started scheduler for its series. Calling
    it again with the same arguments returns the same scheduler.
    """

    def __init__(
        self,
        config: Optional[DefaultConfig] = None,
        config_dir: Optional[Union[str, Path]] = None,
        client: Optional[GammaClient] = None,
        store: Optional[OrderBookStore] = None,
    ) -> None:
        """Initialize the engine; ``config`` wins over loading from ``config_dir``."""
        self.logger = logger

        if config is None:
            loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
            merged = loader.merge_config()
            errors = ConfigValidator.validate_config(merged)
            if errors:
                messages = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
                raise ValueError(f"Invalid configuration: {'; '.join(messages)}")
            config = loader.load()

        self.config = config
        self.client = client or GammaClient(config.upstream, config.ranking)
        self.store = store or OrderBookStore()
        self.schedulers: dict[str, RefreshScheduler[Any]] = {}

        self.logger.info("Market data engine initialized", base_url=config.upstream.base_url)

    def _watch(self, key: str, fetch, interval_seconds: float) -> RefreshScheduler[Any]:
        scheduler = self.schedulers.get(key)
        if scheduler is not None and not scheduler.cancelled:
            return scheduler

        scheduler = RefreshScheduler(
            name=key,
            fetch=fetch,
            interval_seconds=interval_seconds,
            timeout_seconds=self.config.refresh.tick_timeout_seconds,
        )
        self.schedulers[key] = scheduler
        scheduler.start()
        return scheduler

    def watch_markets(
        self,
        sort_by: Union[RankBy, str, None] = None,
        limit: Optional[int] = None,
    ) -> RefreshScheduler[MarketsPage]:
        """Refresh a ranked market list on the markets cadence."""
        sort_key = RankBy(sort_by or self.config.ranking.default_sort)
        limit = self.config.ranking.default_limit if limit is None else limit
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        async def fetch() -> MarketsPage:
            return await self.client.fetch_markets(limit=limit, sort_by=sort_key)

        return self._watch(
            f"markets:{sort_key.value}:{limit}", fetch, self.config.refresh.markets_interval_seconds
        )

    def watch_market_detail(self, slug: str) -> RefreshScheduler[MarketDetail]:
        """Refresh a single market's detail on the markets cadence."""
        async def fetch() -> MarketDetail:
            return await self.client.fetch_market_detail(slug)

        return self._watch(f"market:{slug}", fetch, self.config.refresh.markets_interval_seconds)

    def watch_order_book(self, asset_id: str) -> RefreshScheduler[OrderBookView]:
        """Refresh one asset's order book view on the order book cadence."""
        async def fetch() -> OrderBookView:
            return self.store.view(asset_id)

        return self._watch(f"orderbook:{asset_id}", fetch, self.config.refresh.order_book_interval_seconds)

    def watch_order_book_summary(self) -> RefreshScheduler[OrderBookSummary]:
        """Refresh the all-assets order book summary on the order book cadence."""
        async def fetch() -> OrderBookSummary:
            return self.store.summary()

        return self._watch("orderbook:summary", fetch, self.config.refresh.order_book_interval_seconds)

    def order_book_depth(self, asset_id: str, levels: Optional[int] = None) -> OrderBookSnapshot:
        """Top levels of an asset's book, the configured depth when ``levels`` is None."""
        return self.store.depth(asset_id, self.config.orderbook.depth_levels if levels is None else levels)

    def liquidity_impact(self, asset_id: str, trade_size: float, side: str) -> LiquidityImpact:
        """Estimated fill of a market order against an asset's current book."""
        return calculate_liquidity_impact(self.store.snapshot(asset_id), trade_size, side)

    def large_orders(self, asset_id: str, threshold: float) -> list[LargeOrder]:
        return detect_large_orders(self.store.snapshot(asset_id), threshold)

    def analyze_trade(self, trade: Any) -> Optional[WhaleTrade]:
        """Flag a feed trade as a whale trade using the configured thresholds."""
        params = self.config.orderbook
        return self.store.analyze_trade(
            trade,
            depth_threshold=params.whale_depth_threshold,
            min_notional=params.whale_min_notional,
        )

    async def stop_all(self) -> None:
        """Stop every scheduler and close the upstream client."""
        for scheduler in self.schedulers.values():
            await scheduler.stop()
        self.schedulers.clear()
        await self.client.aclose()
        self.logger.info("Market data engine stopped")
