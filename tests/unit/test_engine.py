"""Unit tests for the market data engine coordinator."""

import asyncio
from dataclasses import replace
from pathlib import Path

import httpx
import orjson
import pytest

from pmdash_app.config.defaults import get_default_config
from pmdash_app.data.models import MarketsPage, OrderBookView
from pmdash_app.engine import MarketDataEngine
from pmdash_app.state.scheduler import ErrorKind
from pmdash_app.upstream.gamma import GammaClient


def make_engine(body=None, status_code=200):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(status_code, content=orjson.dumps(body if body is not None else []))
    )
    config = get_default_config()
    # Slow cadence so tests drive ticks explicitly
    config = replace(config, refresh=replace(
        config.refresh, markets_interval_seconds=60.0, order_book_interval_seconds=60.0
    ))
    return MarketDataEngine(config=config, client=GammaClient(config.upstream, config.ranking, transport=transport))


class TestEngineConstruction:
    """Test engine initialization"""

    def test_loads_default_config(self, tmp_path: Path) -> None:
        engine = MarketDataEngine(config_dir=tmp_path)
        assert engine.config == get_default_config()
        asyncio.run(engine.client.aclose())

    def test_invalid_config_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text("ranking:\n  default_sort: liquidity\n")

        with pytest.raises(ValueError, match="default_sort"):
            MarketDataEngine(config_dir=tmp_path)


class TestWatchMarkets:
    """Test market list series"""

    def test_watch_markets_publishes_ranked_page(self) -> None:
        body = [
            {"id": "1", "outcomePrices": '["0.2", "0.8"]', "volume24hr": 10},
            {"id": "2", "outcomePrices": '["0.7", "0.3"]', "volume24hr": 5},
        ]

        async def run():
            engine = make_engine(body)
            scheduler = engine.watch_markets(sort_by="probability", limit=5)
            state = await scheduler.tick()
            same = engine.watch_markets(sort_by="probability", limit=5)
            await engine.stop_all()
            return scheduler, same, state

        scheduler, same, state = asyncio.run(run())

        assert same is scheduler
        assert scheduler.name == "markets:probability:5"
        assert isinstance(state.last_snapshot, MarketsPage)
        assert [m.id for m in state.last_snapshot.markets] == ["2", "1"]

    def test_negative_limit_rejected_before_scheduling(self) -> None:
        engine = make_engine()

        with pytest.raises(ValueError, match="non-negative"):
            engine.watch_markets(limit=-1)

        assert engine.schedulers == {}
        asyncio.run(engine.client.aclose())

    def test_watch_market_detail_not_found(self) -> None:
        async def run():
            engine = make_engine([])
            scheduler = engine.watch_market_detail("missing")
            state = await scheduler.tick()
            await engine.stop_all()
            return state

        state = asyncio.run(run())

        assert state.last_error == ErrorKind.NOT_FOUND
        assert state.last_snapshot is None

    def test_upstream_failure_recorded(self) -> None:
        async def run():
            engine = make_engine({"error": "down"}, status_code=500)
            state = await engine.watch_markets().tick()
            await engine.stop_all()
            return state

        state = asyncio.run(run())

        assert state.last_error == ErrorKind.UPSTREAM_UNAVAILABLE


class TestWatchOrderBooks:
    """Test order book series"""

    def test_watch_order_book(self, sample_order_book) -> None:
        async def run():
            engine = make_engine()
            engine.store.handle_book_message(sample_order_book)
            scheduler = engine.watch_order_book("token-yes")
            state = await scheduler.tick()
            await engine.stop_all()
            return engine, state

        engine, state = asyncio.run(run())

        assert isinstance(state.last_snapshot, OrderBookView)
        assert state.last_snapshot.stats.best_bid == 0.50
        assert engine.schedulers == {}

    def test_watch_unknown_order_book(self) -> None:
        async def run():
            engine = make_engine()
            state = await engine.watch_order_book("nope").tick()
            await engine.stop_all()
            return state

        assert asyncio.run(run()).last_error == ErrorKind.NOT_FOUND

    def test_watch_summary(self, sample_order_book) -> None:
        async def run():
            engine = make_engine()
            engine.store.handle_book_message(sample_order_book)
            state = await engine.watch_order_book_summary().tick()
            await engine.stop_all()
            return state

        summary = asyncio.run(run()).last_snapshot

        assert summary.initialized_count == 1
        assert summary.total_bid_levels == 3

    def test_order_book_depth_uses_configured_levels(self, sample_order_book) -> None:
        engine = make_engine()
        engine.store.handle_book_message(sample_order_book)

        assert len(engine.order_book_depth("token-yes").bids) == 3
        assert len(engine.order_book_depth("token-yes", levels=1).asks) == 1
        asyncio.run(engine.client.aclose())


class TestOrderBookAnalytics:
    """Test analytics entry points over the engine's store"""

    def test_analyze_trade_uses_configured_thresholds(self, sample_order_book) -> None:
        engine = make_engine()
        engine.store.handle_book_message(sample_order_book)
        trade = {"asset_id": "token-yes", "price": "0.50", "size": "2500", "side": "SELL"}

        whale = engine.analyze_trade(trade)
        engine.config = replace(engine.config, orderbook=replace(engine.config.orderbook, whale_min_notional=10000.0))
        skipped = engine.analyze_trade(trade)

        assert whale.book_depth == 450.0
        assert skipped is None
        asyncio.run(engine.client.aclose())

    def test_liquidity_impact_and_large_orders(self, sample_order_book) -> None:
        engine = make_engine()
        engine.store.handle_book_message(sample_order_book)

        impact = engine.liquidity_impact("token-yes", 100.0, "buy")
        large = engine.large_orders("token-yes", threshold=150.0)

        assert impact.levels_consumed == 2
        assert impact.avg_fill_price == pytest.approx((80 * 0.51 + 20 * 0.53) / 100)
        assert [(o.price, o.size) for o in large] == [(0.50, 200.0), (0.47, 150.0)]
        asyncio.run(engine.client.aclose())
