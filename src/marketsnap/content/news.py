"""
News and announcement snapshots.

News items are generated from the current market snapshot; the site
announcements are fixed texts dated relative to the run.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from marketsnap.api.models import CoinMarket
from marketsnap.market.labels import coin_label
from marketsnap.strategy.analysis import summarize_market, top_gainer, top_loser
from marketsnap.utils.format import safe_divide
from marketsnap.utils.time import date_days_ago


# 24h move (in percent) that makes a coin newsworthy
NEWS_MOVE_THRESHOLD = 5.0

NEWS_DATA_SOURCE = "Real_Market_Data"


def _news_item(
    item_id: str,
    title: str,
    summary: str,
    source: str,
    date: str,
    category: str,
) -> dict[str, Any]:
    return {
        "id": item_id,
        "title": title,
        "summary": summary,
        "source": source,
        "date": date,
        "category": category,
        "data_source": NEWS_DATA_SOURCE,
    }


def build_market_news(markets: Sequence[CoinMarket], now: datetime) -> list[dict[str, Any]]:
    """
    Generate news items from market data.

    Emits the top gainer when it rose more than 5%, the top loser when it
    fell more than 5%, and always a market-cap overview.
    """
    if not markets:
        return []

    stamp = int(now.timestamp() * 1000)
    today = date_days_ago(now, 0)
    news: list[dict[str, Any]] = []

    gainer = top_gainer(markets)
    if gainer is not None and gainer.change_24h > NEWS_MOVE_THRESHOLD:
        name = coin_label(gainer.id)
        news.append(
            _news_item(
                f"real_news_{stamp}_1",
                f"{name}领涨市场，24小时涨幅达{gainer.change_24h:.2f}%",
                f"根据最新市场数据，{name}({gainer.symbol.upper()})在过去24小时内表现强劲，"
                f"当前价格为${gainer.current_price or 0:.2f}。",
                "实时市场数据",
                today,
                "market_analysis",
            )
        )

    loser = top_loser(markets)
    if loser is not None and loser.change_24h < -NEWS_MOVE_THRESHOLD:
        name = coin_label(loser.id)
        news.append(
            _news_item(
                f"real_news_{stamp}_2",
                f"{name}遭遇回调，24小时跌幅{abs(loser.change_24h):.2f}%",
                f"市场数据显示，{name}({loser.symbol.upper()})近期承压，"
                f"当前价格为${loser.current_price or 0:.2f}。",
                "实时市场数据",
                today,
                "market_analysis",
            )
        )

    summary = summarize_market(markets)
    total_cap = summary.total_market_cap
    news.append(
        _news_item(
            f"real_news_{stamp}_3",
            f"加密货币市场总市值达{safe_divide(total_cap, 1e12):.2f}万亿美元",
            f"根据最新统计，当前加密货币市场总市值为{safe_divide(total_cap, 1e8):.0f}亿美元，"
            f"比特币市值占比{summary.btc_dominance_pct:.1f}%。",
            "市场数据统计",
            today,
            "market_overview",
        )
    )

    return news


def build_announcements(now: datetime) -> list[dict[str, Any]]:
    """Site announcements, newest first."""
    return [
        {
            "id": 1,
            "title": "网站功能更新公告",
            "content": "我们已经更新了网站的市场数据功能，现在支持更多交易所的实时价格对比。",
            "date": date_days_ago(now, 0),
            "tags": ["功能更新", "重要通知"],
        },
        {
            "id": 2,
            "title": "新增交易所数据支持",
            "content": "我们已新增对多家交易所的数据支持，用户现可查看这些交易所的实时价格和交易信息。",
            "date": date_days_ago(now, 2),
            "tags": ["功能更新", "交易所"],
        },
        {
            "id": 3,
            "title": "加密货币安全防护指南已发布",
            "content": "我们发布了最新的《加密货币安全防护指南》，详细介绍如何保护您的数字资产安全。",
            "date": date_days_ago(now, 4),
            "tags": ["安全指南", "教程"],
        },
    ]
