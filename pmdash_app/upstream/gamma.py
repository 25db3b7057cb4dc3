"""
Async client for the public gamma market API.

Fetches raw market and event records and hands them to the normalizer and
ranking engine. Transport failures, timeouts, non-success statuses and
undecodable bodies are raised as UpstreamUnavailableError; a lookup that
matches nothing is raised as NotFoundError.
"""

from typing import Any, Optional, Union

import httpx
import structlog

from ..config.defaults import RankingParams, UpstreamParams
from ..data.models import EventsPage, MarketDetail, MarketsPage
from ..data.normalizer import normalize_event, normalize_market_detailed, normalize_markets
from ..data.parsers import parse_json_payload
from ..errors import NotFoundError, ParseError, UpstreamUnavailableError
from ..metrics.ranking import RankBy, rank_markets

logger = structlog.get_logger(__name__)


def _extract_records(payload: Any) -> list[dict[str, Any]]:
    """Pull the record list out of a response body; anything unexpected yields []."""
    if isinstance(payload, dict):
        payload = next(
            (value for value in (payload.get("markets"), payload.get("events"), payload.get("data"))
             if isinstance(value, list)),
            [],
        )
    if not isinstance(payload, list):
        return []
    return payload


class GammaClient:
    """Thin async wrapper around the gamma markets and events endpoints."""

    def __init__(
        self,
        params: Optional[UpstreamParams] = None,
        ranking: Optional[RankingParams] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            params: Upstream connection parameters (defaults when None)
            ranking: Default limit and sort key for market lists
            transport: Optional httpx transport, e.g. a MockTransport in tests
        """
        self.params = params or UpstreamParams()
        self.ranking = ranking or RankingParams()
        self.logger = logger.bind(base_url=self.params.base_url)
        self.client = httpx.AsyncClient(
            base_url=self.params.base_url,
            timeout=self.params.timeout_seconds,
            transport=transport,
        )

    async def _get_records(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        self.logger.debug("Gamma GET", path=path, params=params)
        try:
            response = await self.client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(f"Gamma API request timed out: {e}", url=path)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Gamma API request failed: {e}", url=path)

        if not response.is_success:
            raise UpstreamUnavailableError(
                f"Gamma API error: {response.status_code}",
                url=str(response.url),
                status_code=response.status_code,
            )

        try:
            payload = parse_json_payload(response.content)
        except ParseError as e:
            raise UpstreamUnavailableError(f"Gamma API returned an undecodable body: {e}", url=str(response.url))

        return _extract_records(payload)

    async def fetch_raw_markets(self) -> list[dict[str, Any]]:
        """Active, open markets ordered upstream by 24h volume."""
        return await self._get_records(self.params.markets_path, {
            "active": "true",
            "closed": "false",
            "limit": self.params.fetch_limit,
            "order": "volume24hr",
            "ascending": "false",
        })

    async def fetch_markets(
        self,
        limit: Optional[int] = None,
        sort_by: Union[RankBy, str, None] = None,
    ) -> MarketsPage:
        """
        Fetch, normalize and rank markets.

        Args:
            limit: Maximum markets returned (configured default when None)
            sort_by: 'probability' or 'volume' (configured default when None)

        Returns:
            MarketsPage with count and ranked markets
        """
        limit = self.ranking.default_limit if limit is None else limit
        sort_by = self.ranking.default_sort if sort_by is None else sort_by

        raw_markets = await self.fetch_raw_markets()
        markets = normalize_markets(raw_markets, self.params.event_url_base)
        ranked = rank_markets(markets, sort_by, limit)

        self.logger.debug("Markets fetched", raw_count=len(raw_markets), returned=len(ranked), sort_by=str(sort_by))
        return MarketsPage(markets=tuple(ranked))

    async def fetch_market_detail(self, slug: str) -> MarketDetail:
        """
        Fetch a single market by slug.

        Raises:
            NotFoundError: If no market has this slug
            UpstreamUnavailableError: If the request fails
        """
        records = await self._get_records(self.params.markets_path, {"slug": slug})
        if not records:
            raise NotFoundError(f"Market not found: {slug}", resource="market", key=slug)
        return normalize_market_detailed(records[0], self.params.event_url_base)

    async def fetch_events(self, limit: int = 10) -> EventsPage:
        """Fetch active, open events ordered by 24h volume."""
        records = await self._get_records(self.params.events_path, {
            "active": "true",
            "closed": "false",
            "limit": limit,
            "order": "volume24hr",
            "ascending": "false",
        })
        return EventsPage(events=tuple(normalize_event(r, self.params.event_url_base) for r in records))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "GammaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
