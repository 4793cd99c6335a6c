"""
Async CoinGecko REST API client.

Features:
- Single aiohttp session with connection reuse
- Fast JSON parsing with orjson
- Bounded retry with linear backoff on every request
- Optional pro API key header
"""

import logging
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlencode

import aiohttp
import orjson

from marketsnap.api.errors import EmptyResponseError, MarketDataAPIError, MarketDataClientError
from marketsnap.api.models import CoinMarket, ExchangeSummary, TickersResponse
from marketsnap.api.retry import fetch_with_retry
from marketsnap.config.constants import (
    API_KEY_HEADER,
    COINGECKO_API_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PRICE_CHANGE_WINDOWS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_VS_CURRENCY,
    ENDPOINT_COIN_TICKERS,
    ENDPOINT_COINS_MARKETS,
    ENDPOINT_EXCHANGE_TICKERS,
    ENDPOINT_EXCHANGES,
    USER_AGENT,
)
from marketsnap.telemetry.metrics import RunMetrics


logger = logging.getLogger(__name__)


class CoinGeckoClient:
    """
    Async client for the public CoinGecko API.

    Every request goes through ``fetch_with_retry`` so transient network
    failures are retried before surfacing to the caller.
    """

    def __init__(
        self,
        base_url: str = COINGECKO_API_URL,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        metrics: RunMetrics | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API base URL without trailing slash.
            api_key: Optional pro API key.
            timeout: Total timeout per request in seconds.
            max_retries: Attempts per request.
            retry_backoff: Base delay between attempts in seconds.
            metrics: Optional run metrics to record requests and retries.
            session: Pre-built session; the client will not close it.
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._metrics = metrics
        self._session = session
        self._owns_session = session is None

    @property
    def headers(self) -> dict[str, str]:
        """Default request headers."""
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._api_key:
            headers[API_KEY_HEADER] = self._api_key
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
            self._owns_session = True

        return self._session

    async def close(self) -> None:
        """Close the client session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def build_url(self, endpoint: str, params: dict[str, Any] | None = None) -> str:
        """Build an absolute request URL with an encoded query string."""
        url = f"{self._base_url}{endpoint}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    async def _get_json(self, url: str) -> Any:
        """Perform a single GET attempt and parse the body."""
        session = await self._get_session()
        if self._metrics is not None:
            self._metrics.record_request()

        try:
            async with session.get(url) as response:
                return await self._handle_response(response)
        except aiohttp.ClientError as e:
            raise MarketDataClientError(f"Network error: {e}") from e
        except TimeoutError as e:
            raise MarketDataClientError(f"Request timed out: {url}") from e

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        """Parse and validate response."""
        text = await response.text()

        if response.status >= 400:
            raise MarketDataAPIError(
                f"API error {response.status}: {text[:200]}",
                code=response.status,
            )

        if not text.strip():
            raise EmptyResponseError(f"Empty body from {response.url}")

        try:
            return orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise MarketDataClientError(f"Invalid JSON response: {e}") from e

    def _on_retry(self, url: str, attempt: int, error: BaseException) -> None:
        if self._metrics is not None:
            self._metrics.record_retry()

    async def _request(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a GET request with retries.

        Raises:
            RetryExhaustedError: When every attempt failed.
        """
        url = self.build_url(endpoint, params)
        data = await fetch_with_retry(
            self._get_json,
            url,
            retries=self._max_retries,
            backoff=self._retry_backoff,
            on_retry=self._on_retry,
        )
        logger.debug(f"Received {len(orjson.dumps(data))} bytes from {endpoint}")
        return data

    # =========================================================================
    # Public Endpoints
    # =========================================================================

    async def get_coins_markets(
        self,
        ids: Iterable[str],
        vs_currency: str = DEFAULT_VS_CURRENCY,
        price_change_percentage: str = DEFAULT_PRICE_CHANGE_WINDOWS,
        per_page: int = 100,
    ) -> list[CoinMarket]:
        """
        Get market data for the given coin ids.

        Raises:
            EmptyResponseError: If the body is not a list.
        """
        params = {
            "vs_currency": vs_currency,
            "ids": ",".join(ids),
            "order": "market_cap_desc",
            "per_page": per_page,
            "page": 1,
            "sparkline": "false",
            "price_change_percentage": price_change_percentage,
        }
        data = await self._request(ENDPOINT_COINS_MARKETS, params)
        if not isinstance(data, list):
            raise EmptyResponseError("Market data is not a list")
        return [CoinMarket.model_validate(item) for item in data]

    async def get_exchanges(self) -> list[ExchangeSummary]:
        """
        Get the exchange directory.

        Raises:
            EmptyResponseError: If the body is not a list.
        """
        data = await self._request(ENDPOINT_EXCHANGES)
        if not isinstance(data, list):
            raise EmptyResponseError("Exchange data is not a list")
        return [ExchangeSummary.model_validate(item) for item in data]

    async def get_exchange_tickers(
        self,
        exchange_id: str,
        coin_ids: Iterable[str] | None = None,
    ) -> TickersResponse:
        """Get tickers listed on one exchange, optionally filtered by coin."""
        params: dict[str, Any] = {
            "include_exchange_logo": "false",
            "page": 1,
            "depth": "false",
            "order": "volume_desc",
        }
        if coin_ids:
            params["coin_ids"] = ",".join(coin_ids)

        endpoint = ENDPOINT_EXCHANGE_TICKERS.format(exchange_id=exchange_id)
        data = await self._request(endpoint, params)
        if not isinstance(data, dict):
            raise EmptyResponseError(f"Ticker data for {exchange_id} is not an object")
        return TickersResponse.model_validate(data)

    async def get_coin_tickers(self, coin_id: str) -> TickersResponse:
        """Get tickers for one coin across all exchanges."""
        endpoint = ENDPOINT_COIN_TICKERS.format(coin_id=coin_id)
        data = await self._request(endpoint)
        if not isinstance(data, dict):
            raise EmptyResponseError(f"Ticker data for {coin_id} is not an object")
        return TickersResponse.model_validate(data)

    async def __aenter__(self) -> "CoinGeckoClient":
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()
