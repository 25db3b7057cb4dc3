"""Tests for market ranking"""

import pytest

from pmdash_app.data.models import Market, OutcomeQuote
from pmdash_app.metrics.ranking import RankBy, rank_markets


def make_market(market_id, probability=None, volume=0.0):
    outcomes = ()
    if probability is not None:
        outcomes = (OutcomeQuote("Yes", probability), OutcomeQuote("No", 1 - probability))
    return Market(
        id=market_id,
        question=f"Question {market_id}",
        slug=market_id,
        probability=probability,
        outcomes=outcomes,
        volume24hr=volume,
        total_volume=volume,
        liquidity=0.0,
        end_date=None,
        image=None,
        url=f"https://polymarket.com/event/{market_id}",
    )


@pytest.fixture
def markets():
    return [
        make_market("a", probability=0.30, volume=500.0),
        make_market("b", probability=None, volume=900.0),
        make_market("c", probability=0.80, volume=100.0),
        make_market("d", probability=0.30, volume=500.0),
        make_market("e", probability=0.55, volume=0.0),
    ]


class TestRankByProbability:
    """Test probability ranking"""

    def test_sorted_descending(self, markets):
        ranked = rank_markets(markets, RankBy.PROBABILITY)
        assert [m.id for m in ranked] == ["c", "e", "a", "d"]

    def test_markets_without_probability_excluded(self, markets):
        ranked = rank_markets(markets, "probability")
        assert all(m.probability is not None for m in ranked)
        assert "b" not in [m.id for m in ranked]

    def test_limit_applies_after_filter(self, markets):
        ranked = rank_markets(markets, "probability", limit=2)
        assert [m.id for m in ranked] == ["c", "e"]

    def test_ties_keep_upstream_order(self, markets):
        ranked = rank_markets(list(reversed(markets)), "probability")
        assert [m.id for m in ranked] == ["c", "e", "d", "a"]


class TestRankByVolume:
    """Test volume ranking"""

    def test_sorted_descending_keeps_all(self, markets):
        ranked = rank_markets(markets, RankBy.VOLUME)
        assert [m.id for m in ranked] == ["b", "a", "d", "c", "e"]

    def test_limit(self, markets):
        assert [m.id for m in rank_markets(markets, "volume", limit=1)] == ["b"]


class TestRankingEdgeCases:
    """Test limits and invalid inputs"""

    def test_zero_limit(self, markets):
        assert rank_markets(markets, "volume", limit=0) == []

    def test_limit_larger_than_input(self, markets):
        assert len(rank_markets(markets, "volume", limit=100)) == 5

    def test_empty_input(self):
        assert rank_markets([], "probability", limit=10) == []

    def test_input_not_mutated(self, markets):
        original = list(markets)
        rank_markets(markets, "volume")
        assert markets == original

    def test_unknown_key(self, markets):
        with pytest.raises(ValueError):
            rank_markets(markets, "liquidity")

    def test_negative_limit(self, markets):
        with pytest.raises(ValueError):
            rank_markets(markets, "volume", limit=-1)
