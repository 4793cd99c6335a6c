"""
Market data constants and configuration values.

This module contains all hardcoded values used throughout the refresh
pipeline and the dashboard. Values are organized by category for easy
maintenance and auditing.
"""

from typing import Final


# =============================================================================
# CoinGecko API Endpoints
# =============================================================================

COINGECKO_API_URL: Final[str] = "https://api.coingecko.com/api/v3"

ENDPOINT_COINS_MARKETS: Final[str] = "/coins/markets"
ENDPOINT_EXCHANGES: Final[str] = "/exchanges"
ENDPOINT_EXCHANGE_TICKERS: Final[str] = "/exchanges/{exchange_id}/tickers"
ENDPOINT_COIN_TICKERS: Final[str] = "/coins/{coin_id}/tickers"

API_KEY_HEADER: Final[str] = "x-cg-pro-api-key"
USER_AGENT: Final[str] = "HodorCrypto/1.0"

DEFAULT_VS_CURRENCY: Final[str] = "usd"
DEFAULT_PRICE_CHANGE_WINDOWS: Final[str] = "1h,24h,7d"


# =============================================================================
# Tracked Assets
# =============================================================================

# Top 30 coins by market cap, in display order
MAIN_COINS: Final[tuple[str, ...]] = (
    "bitcoin",
    "ethereum",
    "binancecoin",
    "ripple",
    "cardano",
    "solana",
    "polkadot",
    "dogecoin",
    "avalanche-2",
    "tron",
    "chainlink",
    "litecoin",
    "uniswap",
    "polygon",
    "stellar",
    "bitcoin-cash",
    "monero",
    "cosmos",
    "ethereum-classic",
    "filecoin",
    "near",
    "algorand",
    "vechain",
    "hedera-hashgraph",
    "internet-computer",
    "eos",
    "theta-token",
    "axie-infinity",
    "decentraland",
    "the-sandbox",
)

# Top 30 exchanges, in display order
MAIN_EXCHANGES: Final[tuple[str, ...]] = (
    "binance",
    "gdax",
    "okex",
    "huobi",
    "kucoin",
    "gate",
    "kraken",
    "bitfinex",
    "gemini",
    "bybit_spot",
    "bitstamp",
    "bittrex",
    "bithumb",
    "upbit",
    "mexc",
    "bitget",
    "crypto_com",
    "phemex",
    "coinex",
    "poloniex",
    "wazirx",
    "lbank",
    "bitmart",
    "whitebit",
    "digifinex",
    "bkex",
    "latoken",
    "hotbit",
    "xt",
    "p2pb2b",
)

# Quote currencies accepted for cross-exchange comparison
USD_TARGETS: Final[frozenset[str]] = frozenset({"USD", "USDT"})


# =============================================================================
# Request Pacing
# =============================================================================

# The free API tier allows roughly 10-30 calls per minute
DEFAULT_REQUEST_TIMEOUT: Final[float] = 15.0  # seconds
DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_RETRY_BACKOFF: Final[float] = 2.0  # seconds, multiplied by attempt
DEFAULT_REQUEST_DELAY: Final[float] = 1.0  # seconds between ticker calls
DEFAULT_BATCH_DELAY: Final[float] = 6.0  # seconds between market batches
DEFAULT_MARKET_BATCH_SIZE: Final[int] = 15


# =============================================================================
# Arbitrage Scanning
# =============================================================================

# Minimum price difference to report (0.1%)
DEFAULT_ARBITRAGE_THRESHOLD_PCT: Final[float] = 0.1

# Candidates kept in the aggregate snapshot
DEFAULT_ARBITRAGE_TOP_N: Final[int] = 10

# Candidates shown per coin on the website
DEFAULT_DISPLAY_TOP_N: Final[int] = 3

# Tickers compared per coin (pairwise, so keep small)
DEFAULT_TICKERS_PER_COIN: Final[int] = 5

# Coins scanned for arbitrage each run
DEFAULT_ARBITRAGE_COIN_COUNT: Final[int] = 5

# Exchanges whose pairs are fetched each run
DEFAULT_PAIR_EXCHANGE_COUNT: Final[int] = 10

ARBITRAGE_DATA_SOURCE: Final[str] = "CoinGecko_Real_API"


# =============================================================================
# Snapshot Files
# =============================================================================

DEFAULT_DATA_DIR: Final[str] = "data"

SNAPSHOT_MARKETS: Final[str] = "coins-market.json"
SNAPSHOT_EXCHANGES: Final[str] = "exchanges.json"
SNAPSHOT_EXCHANGE_PAIRS: Final[str] = "exchange-pairs.json"
SNAPSHOT_ARBITRAGE: Final[str] = "arbitrage-opportunities.json"
SNAPSHOT_NEWS: Final[str] = "news.json"
SNAPSHOT_ANNOUNCEMENTS: Final[str] = "announcements.json"
SNAPSHOT_MARKET_SUMMARY: Final[str] = "market-summary.json"
SNAPSHOT_LAST_UPDATED: Final[str] = "last-updated.json"
SNAPSHOT_ERROR_REPORT: Final[str] = "error-report.json"
SNAPSHOT_PRICE_ALERTS: Final[str] = "price-alerts.json"

# Timezone used for the human-readable update marker
DISPLAY_TIMEZONE: Final[str] = "Asia/Shanghai"


# =============================================================================
# Dashboard
# =============================================================================

# Snapshot considered stale after two hours
STALE_AFTER_SECONDS: Final[float] = 2 * 60 * 60

# Minimum gap between two firings of the same price alert
ALERT_COOLDOWN_MS: Final[int] = 60 * 60 * 1000

DEFAULT_POLL_INTERVAL: Final[float] = 30.0  # seconds
DEFAULT_SEARCH_LIMIT: Final[int] = 5
DEFAULT_TICKER_LIMIT: Final[int] = 10

# Live market ids requested by the dashboard poller
LIVE_COINS: Final[tuple[str, ...]] = (
    "bitcoin",
    "ethereum",
    "binancecoin",
    "ripple",
    "cardano",
    "solana",
    "polkadot",
    "chainlink",
    "litecoin",
    "polygon",
)


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = (
    "%(asctime)s.%(msecs)03dZ | %(component)-7s | %(levelname)-8s | %(name)s | %(message)s"
)
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%S"

# Rotating log file: 5 MB per file, three old files kept
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT: Final[int] = 3

# Third-party loggers held at WARNING
NOISY_LOGGERS: Final[tuple[str, ...]] = ("aiohttp", "asyncio", "uvicorn.access")

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
