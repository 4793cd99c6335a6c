"""
Market-wide analysis over a markets snapshot.

Derives the overall sentiment and headline statistics shown on the
home page.
"""

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

from marketsnap.api.models import CoinMarket
from marketsnap.core.types import MarketSentiment
from marketsnap.utils.format import safe_divide


def overall_sentiment(markets: Sequence[CoinMarket]) -> MarketSentiment:
    """
    Classify the market by the share of coins up over 24h.

    Ratio thresholds: > 0.7 very bullish, > 0.6 bullish, > 0.4 neutral,
    > 0.3 bearish, anything lower very bearish.
    """
    if not markets:
        return MarketSentiment.NEUTRAL

    positive = sum(1 for coin in markets if coin.change_24h > 0)
    ratio = positive / len(markets)

    if ratio > 0.7:
        return MarketSentiment.VERY_BULLISH
    if ratio > 0.6:
        return MarketSentiment.BULLISH
    if ratio > 0.4:
        return MarketSentiment.NEUTRAL
    if ratio > 0.3:
        return MarketSentiment.BEARISH
    return MarketSentiment.VERY_BEARISH


def top_gainer(markets: Sequence[CoinMarket]) -> CoinMarket | None:
    """Coin with the highest 24h change; first one wins ties."""
    best: CoinMarket | None = None
    for coin in markets:
        if best is None or coin.change_24h > best.change_24h:
            best = coin
    return best


def top_loser(markets: Sequence[CoinMarket]) -> CoinMarket | None:
    """Coin with the lowest 24h change; first one wins ties."""
    worst: CoinMarket | None = None
    for coin in markets:
        if worst is None or coin.change_24h < worst.change_24h:
            worst = coin
    return worst


@dataclass
class MarketSummary:
    """Headline numbers for the market overview."""

    total_market_cap: float
    btc_dominance_pct: float
    advancing: int
    declining: int
    sentiment: MarketSentiment
    top_gainer: str | None
    top_gainer_change: float
    top_loser: str | None
    top_loser_change: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict."""
        data = asdict(self)
        data["sentiment"] = self.sentiment.value
        return data


def summarize_market(markets: Sequence[CoinMarket]) -> MarketSummary:
    """Compute totals, BTC dominance, breadth and extremes."""
    total_cap = sum(coin.market_cap or 0.0 for coin in markets)
    btc_cap = next((coin.market_cap or 0.0 for coin in markets if coin.id == "bitcoin"), 0.0)
    gainer = top_gainer(markets)
    loser = top_loser(markets)

    return MarketSummary(
        total_market_cap=total_cap,
        btc_dominance_pct=safe_divide(btc_cap, total_cap) * 100,
        advancing=sum(1 for coin in markets if coin.change_24h > 0),
        declining=sum(1 for coin in markets if coin.change_24h < 0),
        sentiment=overall_sentiment(markets),
        top_gainer=gainer.id if gainer else None,
        top_gainer_change=gainer.change_24h if gainer else 0.0,
        top_loser=loser.id if loser else None,
        top_loser_change=loser.change_24h if loser else 0.0,
    )
