"""Market data API integration (CoinGecko)."""

from marketsnap.api.client import CoinGeckoClient
from marketsnap.api.errors import (
    EmptyResponseError,
    MarketDataAPIError,
    MarketDataClientError,
    RetryExhaustedError,
)
from marketsnap.api.models import CoinMarket, ExchangeSummary, RawTicker, TickersResponse
from marketsnap.api.retry import fetch_with_retry


__all__ = [
    "CoinGeckoClient",
    "CoinMarket",
    "EmptyResponseError",
    "ExchangeSummary",
    "MarketDataAPIError",
    "MarketDataClientError",
    "RawTicker",
    "RetryExhaustedError",
    "TickersResponse",
    "fetch_with_retry",
]
