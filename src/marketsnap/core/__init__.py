"""Core module containing the refresh engine and type definitions."""

from marketsnap.core.types import (
    AlertDirection,
    ArbitrageCandidate,
    MarketSentiment,
    PriceAlert,
    Ticker,
)


__all__ = [
    "AlertDirection",
    "ArbitrageCandidate",
    "MarketSentiment",
    "PriceAlert",
    "Ticker",
]
