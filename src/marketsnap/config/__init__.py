"""Configuration module for the market snapshot service."""

from marketsnap.config.constants import (
    COINGECKO_API_URL,
    DEFAULT_ARBITRAGE_THRESHOLD_PCT,
    DEFAULT_ARBITRAGE_TOP_N,
    MAIN_COINS,
    MAIN_EXCHANGES,
)
from marketsnap.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "COINGECKO_API_URL",
    "DEFAULT_ARBITRAGE_THRESHOLD_PCT",
    "DEFAULT_ARBITRAGE_TOP_N",
    "MAIN_COINS",
    "MAIN_EXCHANGES",
]
