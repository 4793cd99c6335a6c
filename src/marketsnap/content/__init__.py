"""Generated news and site announcements."""

from marketsnap.content.news import build_announcements, build_market_news


__all__ = [
    "build_announcements",
    "build_market_news",
]
