"""Mock implementations for testing."""

from tests.mocks.api import MockCoinGeckoClient, SleepRecorder, raw_ticker


__all__ = [
    "MockCoinGeckoClient",
    "SleepRecorder",
    "raw_ticker",
]
