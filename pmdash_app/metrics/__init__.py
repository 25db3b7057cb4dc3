"""Derived statistics: order book analytics and market ranking"""

from .orderbook import (
    calculate_imbalance,
    calculate_liquidity_impact,
    calculate_momentum,
    compute_stats,
    detect_large_orders,
    detect_whale_trade,
    side_total,
)
from .ranking import RankBy, rank_markets

__all__ = [
    "compute_stats",
    "calculate_imbalance",
    "calculate_momentum",
    "calculate_liquidity_impact",
    "detect_large_orders",
    "detect_whale_trade",
    "side_total",
    "RankBy",
    "rank_markets",
]
