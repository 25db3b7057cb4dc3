"""Pytest configuration and shared fixtures."""

import pytest
from typing import Dict, Any
from datetime import datetime, timezone


@pytest.fixture
def sample_raw_market() -> Dict[str, Any]:
    """Sample raw gamma market record for testing."""
    return {
        "id": "516710",
        "question": "Will the Fed cut rates in December?",
        "slug": "fed-cut-december",
        "description": "Resolves Yes if the FOMC lowers the target range.",
        "outcomes": '["Yes", "No"]',
        "outcomePrices": '["0.62", "0.38"]',
        "volume24hr": "125000.5",
        "volumeNum": 2500000,
        "liquidityNum": "48000",
        "startDate": "2024-09-01T00:00:00Z",
        "endDate": "2024-12-18T00:00:00Z",
        "image": "https://example.com/fed.png",
    }


@pytest.fixture
def sample_raw_event(sample_raw_market) -> Dict[str, Any]:
    """Sample raw gamma event record with one nested market."""
    return {
        "id": "9001",
        "title": "Fed decision in December",
        "slug": "fed-decision-december",
        "description": "FOMC December meeting",
        "image": "https://example.com/event.png",
        "markets": [sample_raw_market],
    }


@pytest.fixture
def sample_order_book() -> Dict[str, Any]:
    """Sample feed book snapshot message for testing."""
    return {
        "event_type": "book",
        "asset_id": "token-yes",
        "timestamp": str(int(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc).timestamp() * 1000)),
        "bids": [
            {"price": "0.48", "size": "100"},
            {"price": "0.50", "size": "200"},
            {"price": "0.47", "size": "150"},
        ],
        "asks": [
            {"price": "0.53", "size": "120"},
            {"price": "0.51", "size": "80"},
            {"price": "0.55", "size": "90"},
        ],
    }
