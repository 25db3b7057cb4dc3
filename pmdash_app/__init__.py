"""
PMDash App - Prediction Market Normalization and Order Book Analytics

Turns raw, loosely-typed prediction-market payloads (gamma market records,
order book feed messages) into immutable, display-ready snapshots: outcome
probabilities, ranked market lists, spreads, mid-prices, depth totals and
order-flow imbalance, refreshed on a fixed cadence.
"""

__version__ = "0.1.0"
__author__ = "PMDash Team"
