"""Default configuration parameters for the market data pipeline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UpstreamParams:
    """Gamma API connection parameters."""
    base_url: str = "https://gamma-api.polymarket.com"
    markets_path: str = "/markets"
    events_path: str = "/events"
    event_url_base: str = "https://polymarket.com/event"  # Public market page prefix
    fetch_limit: int = 100                                # Records requested per market list fetch
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class RefreshParams:
    """Refresh scheduler cadence."""
    order_book_interval_seconds: float = 2.0
    markets_interval_seconds: float = 30.0
    tick_timeout_seconds: float = 10.0     # A fetch exceeding this fails the tick


@dataclass(frozen=True)
class RankingParams:
    """Market list ranking parameters."""
    default_limit: int = 20
    default_sort: str = "probability"      # 'probability' or 'volume'


@dataclass(frozen=True)
class OrderBookParams:
    """Order book view parameters."""
    depth_levels: int = 10
    whale_depth_threshold: float = 0.05     # Trade size as a fraction of the consumed side
    whale_min_notional: float = 1000.0      # size * price


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    upstream: UpstreamParams
    refresh: RefreshParams
    ranking: RankingParams
    orderbook: OrderBookParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        upstream=UpstreamParams(),
        refresh=RefreshParams(),
        ranking=RankingParams(),
        orderbook=OrderBookParams(),
        logging=LoggingParams(),
    )
