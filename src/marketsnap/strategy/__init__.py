"""Strategy module for price difference scanning and market analysis."""

from marketsnap.strategy.analysis import MarketSummary, overall_sentiment, summarize_market
from marketsnap.strategy.scanner import (
    PriceDifferenceScanner,
    candidates_from_exchange_pairs,
    find_price_differences,
    top_for_coin,
)


__all__ = [
    "MarketSummary",
    "PriceDifferenceScanner",
    "candidates_from_exchange_pairs",
    "find_price_differences",
    "overall_sentiment",
    "summarize_market",
    "top_for_coin",
]
