"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marketsnap.config.constants import (
    COINGECKO_API_URL,
    DEFAULT_ARBITRAGE_COIN_COUNT,
    DEFAULT_ARBITRAGE_THRESHOLD_PCT,
    DEFAULT_ARBITRAGE_TOP_N,
    DEFAULT_BATCH_DELAY,
    DEFAULT_DATA_DIR,
    DEFAULT_DISPLAY_TOP_N,
    DEFAULT_MARKET_BATCH_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAIR_EXCHANGE_COUNT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_DELAY,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_TICKERS_PER_COIN,
    MAIN_COINS,
    MAIN_EXCHANGES,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via ``MARKETSNAP_*`` environment
    variables. The API key is also read from ``COINGECKO_API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKETSNAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # =========================================================================
    # API Access
    # =========================================================================

    coingecko_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("MARKETSNAP_COINGECKO_API_KEY", "COINGECKO_API_KEY"),
        description="Optional CoinGecko pro API key",
    )

    api_base_url: str = Field(
        default=COINGECKO_API_URL,
        description="Market data API base URL",
    )

    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0.0,
        le=120.0,
        description="Per-request timeout in seconds",
    )

    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=1,
        le=10,
        description="Attempts per request before giving up",
    )

    retry_backoff: float = Field(
        default=DEFAULT_RETRY_BACKOFF,
        ge=0.0,
        le=60.0,
        description="Base delay between attempts, multiplied by attempt number",
    )

    # =========================================================================
    # Tracked Assets
    # =========================================================================

    coins: list[str] = Field(
        default_factory=lambda: list(MAIN_COINS),
        min_length=1,
        description="Coin ids fetched each run, in display order",
    )

    exchanges: list[str] = Field(
        default_factory=lambda: list(MAIN_EXCHANGES),
        min_length=1,
        description="Exchange ids kept in the exchange snapshot",
    )

    # =========================================================================
    # Request Pacing
    # =========================================================================

    request_delay: float = Field(
        default=DEFAULT_REQUEST_DELAY,
        ge=0.0,
        description="Fixed delay between per-coin and per-exchange calls",
    )

    batch_delay: float = Field(
        default=DEFAULT_BATCH_DELAY,
        ge=0.0,
        description="Fixed delay between market batches",
    )

    market_batch_size: int = Field(
        default=DEFAULT_MARKET_BATCH_SIZE,
        ge=1,
        le=250,
        description="Coin ids per /coins/markets request",
    )

    # =========================================================================
    # Arbitrage Scanning
    # =========================================================================

    arbitrage_threshold_pct: float = Field(
        default=DEFAULT_ARBITRAGE_THRESHOLD_PCT,
        ge=0.0,
        le=100.0,
        description="Minimum price difference in percent (0.1 = 0.1%)",
    )

    arbitrage_top_n: int = Field(
        default=DEFAULT_ARBITRAGE_TOP_N,
        ge=1,
        le=100,
        description="Candidates kept in the aggregate snapshot",
    )

    display_top_n: int = Field(
        default=DEFAULT_DISPLAY_TOP_N,
        ge=1,
        le=20,
        description="Candidates shown per coin",
    )

    tickers_per_coin: int = Field(
        default=DEFAULT_TICKERS_PER_COIN,
        ge=2,
        le=50,
        description="Tickers compared pairwise per coin",
    )

    arbitrage_coin_count: int = Field(
        default=DEFAULT_ARBITRAGE_COIN_COUNT,
        ge=1,
        le=30,
        description="Number of tracked coins scanned for arbitrage",
    )

    pair_exchange_count: int = Field(
        default=DEFAULT_PAIR_EXCHANGE_COUNT,
        ge=1,
        le=30,
        description="Number of tracked exchanges whose pairs are fetched",
    )

    # =========================================================================
    # Output
    # =========================================================================

    data_dir: Path = Field(
        default=Path(DEFAULT_DATA_DIR),
        description="Directory the JSON snapshots are written to",
    )

    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        gt=0.0,
        description="Dashboard live market polling interval in seconds",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are appended with a leading slash."""
        return v.rstrip("/")

    @field_validator("coingecko_api_key", mode="after")
    @classmethod
    def empty_key_is_none(cls, v: SecretStr | None) -> SecretStr | None:
        """Treat an empty key as no key."""
        if v is not None and not v.get_secret_value().strip():
            return None
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def api_key(self) -> str | None:
        """Plain API key, if configured."""
        return self.coingecko_api_key.get_secret_value() if self.coingecko_api_key else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
