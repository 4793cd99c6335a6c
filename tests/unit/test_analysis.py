"""
Unit tests for market analysis and generated news.
"""

from datetime import datetime

import pytest

from marketsnap.api.models import CoinMarket
from marketsnap.content.news import build_announcements, build_market_news
from marketsnap.core.types import MarketSentiment
from marketsnap.strategy.analysis import (
    overall_sentiment,
    summarize_market,
    top_gainer,
    top_loser,
)


def _coins(*changes: float | None) -> list[CoinMarket]:
    return [
        CoinMarket(id=f"coin{i}", symbol=f"c{i}", name=f"Coin {i}", price_change_percentage_24h=c)
        for i, c in enumerate(changes)
    ]


class TestSentiment:
    """Tests for overall_sentiment."""

    @pytest.mark.parametrize(
        "changes, expected",
        [
            ((1, 1, 1, 1, 1, 1, 1, 1, -1, -1), MarketSentiment.VERY_BULLISH),
            ((1, 1, 1, 1, 1, 1, 1, -1, -1, -1), MarketSentiment.BULLISH),
            ((1, 1, 1, 1, 1, -1, -1, -1, -1, -1), MarketSentiment.NEUTRAL),
            ((1, 1, 1, 1, -1, -1, -1, -1, -1, -1), MarketSentiment.BEARISH),
            ((1, 1, 1, -1, -1, -1, -1, -1, -1, -1), MarketSentiment.VERY_BEARISH),
        ],
    )
    def test_ratio_bands(self, changes: tuple[float, ...], expected: MarketSentiment) -> None:
        assert overall_sentiment(_coins(*changes)) == expected

    def test_boundaries_are_exclusive(self) -> None:
        """Test a ratio of exactly 0.7 is only bullish."""
        assert overall_sentiment(_coins(1, 1, 1, 1, 1, 1, 1, 0, 0, 0)) == MarketSentiment.BULLISH

    def test_empty(self) -> None:
        assert overall_sentiment([]) == MarketSentiment.NEUTRAL

    def test_missing_change_counts_as_flat(self) -> None:
        assert overall_sentiment(_coins(None, None)) == MarketSentiment.VERY_BEARISH


class TestExtremes:
    """Tests for top gainer and loser."""

    def test_gainer_and_loser(self, markets: list[CoinMarket]) -> None:
        assert top_gainer(markets).id == "bitcoin"  # type: ignore[union-attr]
        assert top_loser(markets).id == "ethereum"  # type: ignore[union-attr]

    def test_ties_keep_first(self) -> None:
        coins = _coins(2.0, 2.0)

        assert top_gainer(coins).id == "coin0"  # type: ignore[union-attr]
        assert top_loser(coins).id == "coin0"  # type: ignore[union-attr]

    def test_empty(self) -> None:
        assert top_gainer([]) is None
        assert top_loser([]) is None


class TestSummary:
    """Tests for summarize_market."""

    def test_summary(self, markets: list[CoinMarket]) -> None:
        summary = summarize_market(markets)

        assert summary.total_market_cap == pytest.approx(1.2e12)
        assert summary.btc_dominance_pct == pytest.approx(820 / 1200 * 100)
        assert summary.advancing == 2
        assert summary.declining == 1
        assert summary.top_gainer == "bitcoin"
        assert summary.top_loser_change == -7.25
        assert summary.sentiment == MarketSentiment.BULLISH
        assert summary.to_dict()["sentiment"] == "bullish"

    def test_empty(self) -> None:
        summary = summarize_market([])

        assert summary.total_market_cap == 0
        assert summary.btc_dominance_pct == 0
        assert summary.top_gainer is None


class TestNews:
    """Tests for generated news items."""

    def test_gainer_loser_and_overview(
        self, markets: list[CoinMarket], fixed_now: datetime
    ) -> None:
        news = build_market_news(markets, fixed_now)
        stamp = int(fixed_now.timestamp() * 1000)

        assert [item["id"] for item in news] == [
            f"real_news_{stamp}_1",
            f"real_news_{stamp}_2",
            f"real_news_{stamp}_3",
        ]
        assert news[0]["title"] == "比特币领涨市场，24小时涨幅达6.50%"
        assert news[1]["title"] == "以太坊遭遇回调，24小时跌幅7.25%"
        assert news[2]["title"] == "加密货币市场总市值达1.20万亿美元"
        assert "12000亿美元" in news[2]["summary"]
        assert all(item["date"] == "2024-01-01" for item in news)
        assert all(item["data_source"] == "Real_Market_Data" for item in news)

    def test_quiet_market_overview_only(self, fixed_now: datetime) -> None:
        """Test moves within 5% produce only the overview."""
        news = build_market_news(_coins(4.9, -5.0, 1.0), fixed_now)

        assert len(news) == 1
        assert news[0]["category"] == "market_overview"

    def test_empty(self, fixed_now: datetime) -> None:
        assert build_market_news([], fixed_now) == []

    def test_announcements(self, fixed_now: datetime) -> None:
        announcements = build_announcements(fixed_now)

        assert [a["date"] for a in announcements] == ["2024-01-01", "2023-12-30", "2023-12-28"]
        assert [a["id"] for a in announcements] == [1, 2, 3]
