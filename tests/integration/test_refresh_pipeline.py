"""
End-to-end tests: upstream payloads through normalization, ranking, order book
stats and periodic refresh.
"""

import asyncio
from dataclasses import replace

import httpx
import orjson

from pmdash_app.config.defaults import get_default_config
from pmdash_app.engine import MarketDataEngine
from pmdash_app.state.scheduler import ErrorKind
from pmdash_app.upstream.gamma import GammaClient


class FlakyUpstream:
    """Mock upstream that fails on scripted request numbers or while down."""

    def __init__(self, body, failing_requests=()):
        self.body = body
        self.failing_requests = set(failing_requests)
        self.requests = 0
        self.down = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        if self.down or self.requests in self.failing_requests:
            return httpx.Response(503, content=b"unavailable")
        return httpx.Response(200, content=orjson.dumps(self.body))


def build_engine(upstream: FlakyUpstream, interval: float = 0.01) -> MarketDataEngine:
    config = get_default_config()
    config = replace(config, refresh=replace(
        config.refresh,
        markets_interval_seconds=interval,
        order_book_interval_seconds=interval,
        tick_timeout_seconds=1.0,
    ))
    client = GammaClient(config.upstream, config.ranking, transport=httpx.MockTransport(upstream))
    return MarketDataEngine(config=config, client=client)


class TestMarketRefreshPipeline:
    """Test the periodic market list series."""

    def test_recovers_after_upstream_failure(self, sample_raw_market):
        upstream = FlakyUpstream([sample_raw_market, {"id": "blank"}], failing_requests={1})

        async def run():
            engine = build_engine(upstream)
            scheduler = engine.watch_markets(sort_by="volume", limit=10)
            for _ in range(200):
                await asyncio.sleep(0.01)
                if scheduler.state.has_snapshot:
                    break
            state = scheduler.state
            await engine.stop_all()
            return state

        state = asyncio.run(run())

        assert upstream.requests >= 2
        assert state.has_snapshot
        assert state.last_error is None
        assert [m.id for m in state.last_snapshot.markets] == ["516710", "blank"]
        payload = state.last_snapshot.to_dict()
        assert payload["count"] == 2
        assert payload["markets"][0]["url"] == "https://polymarket.com/event/fed-cut-december"

    def test_failure_marks_snapshot_stale(self, sample_raw_market):
        upstream = FlakyUpstream([sample_raw_market])

        async def run():
            engine = build_engine(upstream, interval=60.0)
            scheduler = engine.watch_markets()
            await scheduler.tick()
            upstream.down = True
            await scheduler.tick()
            state = scheduler.state
            await engine.stop_all()
            return state

        state = asyncio.run(run())

        assert state.last_snapshot is not None
        assert state.last_error == ErrorKind.UPSTREAM_UNAVAILABLE


class TestOrderBookRefreshPipeline:
    """Test order book feed handling feeding a refreshed view."""

    def test_view_tracks_feed_updates(self, sample_order_book):
        async def run():
            engine = build_engine(FlakyUpstream([]), interval=60.0)
            engine.store.register_asset("token-yes", {"event_title": "Fed decision", "outcome": "Yes"})
            engine.store.handle_book_message(sample_order_book)
            scheduler = engine.watch_order_book("token-yes")
            first = await scheduler.tick()

            engine.store.handle_price_change({"asset_id": "token-yes", "side": "SELL", "price": "0.51", "size": "0"})
            second = await scheduler.tick()

            await engine.stop_all()
            return first.last_snapshot, second.last_snapshot

        first, second = asyncio.run(run())

        assert first.stats.best_ask == 0.51
        assert second.stats.best_ask == 0.53
        assert second.snapshot.event_title == "Fed decision"
        assert second.to_dict()["stats"]["askLevels"] == 2
        assert first.snapshot.asks[0].price == 0.51
