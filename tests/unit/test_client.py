"""
Unit tests for CoinGeckoClient.

Network I/O is replaced by patching the single-attempt fetch, so these
tests cover URL building, response handling and model parsing.
"""

from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest

from marketsnap.api.client import CoinGeckoClient
from marketsnap.api.errors import (
    EmptyResponseError,
    MarketDataAPIError,
    MarketDataClientError,
    RetryExhaustedError,
)
from marketsnap.telemetry.metrics import RunMetrics
from tests.mocks import raw_ticker


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text
        self.url = "https://api.example.com/test"

    async def text(self) -> str:
        return self._text


@pytest.fixture
def client() -> CoinGeckoClient:
    return CoinGeckoClient(base_url="https://api.example.com/v3/", retry_backoff=0.0)


class TestRequestBuilding:
    """Tests for URLs and headers."""

    def test_build_url(self, client: CoinGeckoClient) -> None:
        """Test base URL is joined without a double slash and params encoded."""
        url = client.build_url("/coins/markets", {"ids": "bitcoin,ethereum", "page": 1})

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
            "https://api.example.com/v3/coins/markets"
        )
        assert parse_qs(parts.query) == {"ids": ["bitcoin,ethereum"], "page": ["1"]}

    def test_build_url_without_params(self, client: CoinGeckoClient) -> None:
        assert client.build_url("/exchanges") == "https://api.example.com/v3/exchanges"

    def test_headers_without_key(self, client: CoinGeckoClient) -> None:
        """Test no key header is sent when no key is configured."""
        headers = client.headers

        assert headers["Accept"] == "application/json"
        assert "x-cg-pro-api-key" not in headers

    def test_headers_with_key(self) -> None:
        client = CoinGeckoClient(api_key="secret")

        assert client.headers["x-cg-pro-api-key"] == "secret"


class TestResponseHandling:
    """Tests for _handle_response."""

    @pytest.mark.asyncio
    async def test_parses_json(self, client: CoinGeckoClient) -> None:
        result = await client._handle_response(FakeResponse(200, '[{"id": "bitcoin"}]'))  # type: ignore[arg-type]

        assert result == [{"id": "bitcoin"}]

    @pytest.mark.asyncio
    async def test_http_error(self, client: CoinGeckoClient) -> None:
        """Test HTTP errors carry the status code."""
        with pytest.raises(MarketDataAPIError) as exc_info:
            await client._handle_response(FakeResponse(429, "rate limited"))  # type: ignore[arg-type]

        assert exc_info.value.code == 429

    @pytest.mark.asyncio
    async def test_blank_body(self, client: CoinGeckoClient) -> None:
        with pytest.raises(EmptyResponseError):
            await client._handle_response(FakeResponse(200, "  "))  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_invalid_json(self, client: CoinGeckoClient) -> None:
        with pytest.raises(MarketDataClientError):
            await client._handle_response(FakeResponse(200, "<html>"))  # type: ignore[arg-type]


class TestEndpoints:
    """Tests for endpoint methods with a patched transport."""

    @staticmethod
    def _patch(client: CoinGeckoClient, answers: list[Any]) -> list[str]:
        urls: list[str] = []

        async def fake_get_json(url: str) -> Any:
            urls.append(url)
            answer = answers.pop(0)
            if isinstance(answer, Exception):
                raise answer
            return answer

        client._get_json = fake_get_json  # type: ignore[method-assign]
        return urls

    @pytest.mark.asyncio
    async def test_get_coins_markets(
        self, client: CoinGeckoClient, market_payload: list[dict[str, Any]]
    ) -> None:
        """Test market entries are parsed and unknown fields kept."""
        urls = self._patch(client, [market_payload])

        coins = await client.get_coins_markets(["bitcoin", "ethereum", "solana"])

        assert [c.id for c in coins] == ["bitcoin", "ethereum", "solana"]
        assert coins[0].model_dump()["ath"] == 69000.0
        query = parse_qs(urlsplit(urls[0]).query)
        assert query["ids"] == ["bitcoin,ethereum,solana"]
        assert query["vs_currency"] == ["usd"]

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(
        self, client: CoinGeckoClient, market_payload: list[dict[str, Any]]
    ) -> None:
        """Test transient failures are retried transparently."""
        metrics = RunMetrics()
        client._metrics = metrics
        urls = self._patch(
            client,
            [MarketDataAPIError("API error 502", code=502), [], market_payload],
        )

        coins = await client.get_coins_markets(["bitcoin"])

        assert len(coins) == 3
        assert len(urls) == 3
        assert metrics.retries == 2

    @pytest.mark.asyncio
    async def test_retry_exhausted(self, client: CoinGeckoClient) -> None:
        """Test the default three attempts before giving up."""
        urls = self._patch(client, [MarketDataClientError("down")] * 3)

        with pytest.raises(RetryExhaustedError):
            await client.get_exchanges()

        assert len(urls) == 3

    @pytest.mark.asyncio
    async def test_non_list_markets(self, client: CoinGeckoClient) -> None:
        self._patch(client, [{"error": "bad"}])

        with pytest.raises(EmptyResponseError):
            await client.get_coins_markets(["bitcoin"])

    @pytest.mark.asyncio
    async def test_get_coin_tickers(self, client: CoinGeckoClient) -> None:
        """Test tickers convert to internal tickers keyed by market identifier."""
        urls = self._patch(
            client,
            [{"name": "Bitcoin", "tickers": [raw_ticker("Binance", 42000.0)]}],
        )

        response = await client.get_coin_tickers("bitcoin")
        ticker = response.tickers[0].to_ticker()

        assert urls[0].endswith("/coins/bitcoin/tickers")
        assert ticker.exchange_id == "binance"
        assert ticker.exchange_name == "Binance"
        assert ticker.last_price == 42000.0

    @pytest.mark.asyncio
    async def test_get_exchange_tickers(self, client: CoinGeckoClient) -> None:
        """Test the coin filter is passed through."""
        urls = self._patch(client, [{"name": "Kraken", "tickers": [raw_ticker("Kraken", 1.0)]}])

        response = await client.get_exchange_tickers("kraken", ["bitcoin", "ethereum"])

        parts = urlsplit(urls[0])
        assert parts.path.endswith("/exchanges/kraken/tickers")
        assert parse_qs(parts.query)["coin_ids"] == ["bitcoin,ethereum"]
        assert response.raw_tickers()[0]["market"]["name"] == "Kraken"

    @pytest.mark.asyncio
    async def test_close_without_session(self, client: CoinGeckoClient) -> None:
        await client.close()
