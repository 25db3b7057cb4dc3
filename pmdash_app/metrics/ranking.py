"""Market list ranking by probability or 24h volume"""

from collections.abc import Iterable
from enum import Enum
from typing import Optional, Union

from ..data.models import Market


class RankBy(str, Enum):
    """Selectable ranking keys."""
    PROBABILITY = "probability"
    VOLUME = "volume"


def rank_markets(
    markets: Iterable[Market],
    by: Union[RankBy, str] = RankBy.PROBABILITY,
    limit: Optional[int] = None,
) -> list[Market]:
    """
    Rank markets for display

    Volume mode keeps every market and sorts by volume24hr descending.
    Probability mode first drops markets without a probability, then sorts the
    rest by probability descending; a market with no outcomes never appears in
    probability-ranked output. Both sorts are stable, so ties keep upstream order.

    Args:
        markets: Normalized markets in upstream order
        by: Ranking key ('probability' or 'volume')
        limit: Maximum number of markets to return, None for all

    Returns:
        Ranked, truncated list of markets

    Raises:
        ValueError: For an unknown ranking key or a negative limit
    """
    key = RankBy(by)
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    if key is RankBy.VOLUME:
        ranked = sorted(markets, key=lambda m: m.volume24hr, reverse=True)
    else:
        rankable = [m for m in markets if m.probability is not None]
        ranked = sorted(rankable, key=lambda m: m.probability, reverse=True)

    if limit is None:
        return ranked
    return ranked[:limit]
