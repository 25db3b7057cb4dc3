#!/usr/bin/env python3
"""
Basic Usage Example - PMDash market data engine

This script demonstrates the engine with simulated upstream and feed data.
It shows how to:
- Initialize the engine against a stand-in gamma API
- Watch a ranked market list
- Feed order book snapshots and price changes
- Read refreshed order book stats and liquidity analytics

Run: python examples/basic_usage.py
"""

import asyncio
import json
from typing import Any, Dict, List

import httpx
import orjson

from pmdash_app.config.defaults import get_default_config
from pmdash_app.engine import MarketDataEngine
from pmdash_app.logging import configure_logging
from pmdash_app.upstream.gamma import GammaClient


def create_sample_markets() -> List[Dict[str, Any]]:
    """Create gamma-format market records."""
    return [
        {
            "id": "1",
            "question": "Will it rain in London tomorrow?",
            "slug": "rain-london",
            "outcomes": '["Yes", "No"]',
            "outcomePrices": '["0.71", "0.29"]',
            "volume24hr": "15000",
            "volumeNum": "220000",
            "liquidityNum": "9000",
        },
        {
            "id": "2",
            "question": "Will the home team win?",
            "slug": "home-team",
            "outcomes": '["Yes", "No"]',
            "outcomePrices": '["0.44", "0.56"]',
            "volume24hr": "98000",
        },
        {
            "id": "3",
            "question": "Unpriced market",
            "slug": "unpriced",
            "volume24hr": "500",
        },
    ]


def create_book_message(asset_id: str) -> Dict[str, Any]:
    """Create a feed book snapshot message."""
    return {
        "event_type": "book",
        "asset_id": asset_id,
        "bids": [{"price": "0.70", "size": "120"}, {"price": "0.69", "size": "300"}],
        "asks": [{"price": "0.72", "size": "80"}, {"price": "0.74", "size": "150"}],
    }


async def main() -> None:
    markets = create_sample_markets()
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=orjson.dumps(markets)))
    config = get_default_config()
    configure_logging(level=config.logging.level, format_json=config.logging.format_json)
    engine = MarketDataEngine(
        config=config,
        client=GammaClient(config.upstream, config.ranking, transport=transport),
    )

    print("📈 Ranked markets")
    for sort_by in ("probability", "volume"):
        state = await engine.watch_markets(sort_by=sort_by, limit=5).tick()
        print(f"  by {sort_by}: {[m.question for m in state.last_snapshot.markets]}")

    print("\n📚 Order book")
    engine.store.register_asset("rain-yes", {"event_title": "London weather", "outcome": "Yes"})
    engine.store.handle_book_message(create_book_message("rain-yes"))
    scheduler = engine.watch_order_book("rain-yes")

    state = await scheduler.tick()
    print(json.dumps(state.last_snapshot.to_dict()["stats"], indent=2))

    engine.store.handle_price_change({"asset_id": "rain-yes", "side": "BUY", "price": "0.71", "size": "50"})
    state = await scheduler.tick()
    print(f"  after price change: best bid {state.last_snapshot.stats.best_bid}, "
          f"spread {state.last_snapshot.stats.spread:.2f}")

    impact = engine.liquidity_impact("rain-yes", 150, "buy")
    print(f"  buying 150: {impact.levels_consumed} levels, avg fill {impact.avg_fill_price:.4f}, "
          f"slippage {impact.slippage:.2%}")

    whale = engine.analyze_trade({"asset_id": "rain-yes", "side": "BUY", "price": "0.72", "size": "2000"})
    if whale is not None:
        print(f"  🐋 whale buy: notional {whale.notional:.0f}, {whale.depth_percent:.0%} of ask depth")

    summary = (await engine.watch_order_book_summary().tick()).last_snapshot
    print(f"\n🧾 Summary: {summary.initialized_count}/{summary.total_order_books} books initialized")

    await engine.stop_all()


if __name__ == "__main__":
    asyncio.run(main())
