"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from marketsnap.api.models import CoinMarket
from marketsnap.config.settings import Settings
from marketsnap.core.types import Ticker
from marketsnap.storage.snapshot import SnapshotWriter
from tests.mocks.api import MockCoinGeckoClient, SleepRecorder, raw_ticker


FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings writing to a temp dir with all delays disabled."""
    monkeypatch.delenv("COINGECKO_API_KEY", raising=False)
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        data_dir=tmp_path / "data",
        coins=["bitcoin", "ethereum", "solana"],
        exchanges=["binance", "kraken", "gdax"],
        request_delay=0.0,
        batch_delay=0.0,
        retry_backoff=0.0,
        market_batch_size=2,
        arbitrage_coin_count=3,
        pair_exchange_count=3,
    )


@pytest.fixture
def writer(settings: Settings) -> SnapshotWriter:
    """Snapshot writer on the temp data dir."""
    return SnapshotWriter(settings.data_dir)


# =============================================================================
# Market Data Fixtures
# =============================================================================


@pytest.fixture
def market_payload() -> list[dict[str, Any]]:
    """Raw /coins/markets entries."""
    return [
        {
            "id": "bitcoin",
            "symbol": "btc",
            "name": "Bitcoin",
            "image": "https://example.com/btc.png",
            "current_price": 42000.0,
            "market_cap": 820_000_000_000.0,
            "market_cap_rank": 1,
            "total_volume": 20_000_000_000.0,
            "price_change_percentage_24h": 6.5,
            "ath": 69000.0,
        },
        {
            "id": "ethereum",
            "symbol": "eth",
            "name": "Ethereum",
            "image": "https://example.com/eth.png",
            "current_price": 2300.0,
            "market_cap": 280_000_000_000.0,
            "market_cap_rank": 2,
            "total_volume": 9_000_000_000.0,
            "price_change_percentage_24h": -7.25,
        },
        {
            "id": "solana",
            "symbol": "sol",
            "name": "Solana",
            "image": "https://example.com/sol.png",
            "current_price": 0.5,
            "market_cap": 100_000_000_000.0,
            "market_cap_rank": 5,
            "total_volume": 2_000_000_000.0,
            "price_change_percentage_24h": 1.0,
        },
    ]


@pytest.fixture
def markets(market_payload: list[dict[str, Any]]) -> list[CoinMarket]:
    """Parsed market entries."""
    return [CoinMarket.model_validate(item) for item in market_payload]


@pytest.fixture
def exchange_payload() -> list[dict[str, Any]]:
    """Raw /exchanges entries, one untracked."""
    return [
        {"id": "binance", "name": "Binance", "trust_score": 10, "trust_score_rank": 1},
        {"id": "some_dex", "name": "Some DEX", "trust_score": 3, "trust_score_rank": 400},
        {"id": "kraken", "name": "Kraken", "trust_score": 10, "trust_score_rank": 2},
    ]


@pytest.fixture
def btc_tickers() -> list[Ticker]:
    """BTC/USDT tickers on three exchanges."""
    return [
        Ticker("binance", "BTC", "USDT", 100.0, exchange_name="Binance"),
        Ticker("kraken", "BTC", "USD", 100.5, exchange_name="Kraken"),
        Ticker("gdax", "BTC", "USD", 101.0, exchange_name="Coinbase"),
    ]


@pytest.fixture
def mock_client(
    market_payload: list[dict[str, Any]],
    exchange_payload: list[dict[str, Any]],
) -> MockCoinGeckoClient:
    """Mock client with a price gap on bitcoin and ethereum."""
    return MockCoinGeckoClient(
        markets=market_payload,
        exchanges=exchange_payload,
        coin_tickers={
            "bitcoin": [
                raw_ticker("Binance", 42000.0),
                raw_ticker("Kraken", 42210.0, target="USD"),
                raw_ticker("Bitstamp", 42000.0, target="EUR"),
            ],
            "ethereum": [
                raw_ticker("Binance", 2300.0, base="ETH", coin_id="ethereum"),
                raw_ticker("Kraken", 2301.0, base="ETH", coin_id="ethereum"),
                raw_ticker("OKX", 2310.0, base="ETH", coin_id="ethereum"),
            ],
            "solana": [raw_ticker("Binance", 0.5, base="SOL", coin_id="solana")],
        },
        exchange_tickers={
            "binance": [raw_ticker("Binance", 42000.0)],
            "kraken": [raw_ticker("Kraken", 42210.0)],
            "gdax": [raw_ticker("Coinbase", 42050.0, target="USD")],
        },
    )


# =============================================================================
# Async Utilities
# =============================================================================


@pytest.fixture
def no_sleep() -> SleepRecorder:
    """Sleep stub that returns immediately."""
    return SleepRecorder()


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed clock value."""
    return FIXED_NOW
