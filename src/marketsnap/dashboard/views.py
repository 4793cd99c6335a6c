"""View helpers shaping snapshot data for the website widgets."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from marketsnap.config.constants import DEFAULT_SEARCH_LIMIT, DEFAULT_TICKER_LIMIT, STALE_AFTER_SECONDS
from marketsnap.utils.format import change_class, format_change, format_market_cap, format_price
from marketsnap.utils.time import age_seconds, utc_now


def search_coins(
    markets: Sequence[dict[str, Any]],
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[dict[str, Any]]:
    """
    Match coins by name, symbol or Chinese name.

    Name and symbol match case-insensitively; the Chinese name is a plain
    substring match. Blank queries match nothing.
    """
    needle = query.strip().lower()
    if not needle:
        return []

    results = []
    for coin in markets:
        name = str(coin.get("name", "")).lower()
        symbol = str(coin.get("symbol", "")).lower()
        chinese = str(coin.get("chinese_name") or "")
        if needle in name or needle in symbol or query.strip() in chinese:
            results.append(coin)
            if len(results) >= limit:
                break
    return results


def _number(value: Any) -> float | None:
    """Numeric snapshot field, or None when missing or not a number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def ticker_items(
    markets: Sequence[dict[str, Any]],
    limit: int = DEFAULT_TICKER_LIMIT,
) -> list[dict[str, Any]]:
    """Price ticker entries for the scrolling banner."""
    items = []
    for coin in markets[:limit]:
        change = _number(coin.get("price_change_percentage_24h"))
        items.append(
            {
                "id": coin.get("id"),
                "symbol": str(coin.get("symbol", "")).upper(),
                "price": format_price(_number(coin.get("current_price"))),
                "change": format_change(change),
                "change_class": change_class(change),
                "market_cap": format_market_cap(_number(coin.get("market_cap"))),
            }
        )
    return items


def freshness(
    last_updated: dict[str, Any] | None,
    now: datetime | None = None,
    max_age_s: float = STALE_AFTER_SECONDS,
) -> dict[str, Any]:
    """
    Describe how old the snapshots are.

    A missing or unparsable marker counts as stale.
    """
    now = now or utc_now()
    timestamp = last_updated.get("timestamp") if isinstance(last_updated, dict) else None
    if not isinstance(timestamp, str) or not timestamp:
        return {"timestamp": None, "age_seconds": None, "stale": True}

    try:
        age = age_seconds(timestamp, now)
    except ValueError:
        return {"timestamp": timestamp, "age_seconds": None, "stale": True}

    return {"timestamp": timestamp, "age_seconds": age, "stale": age > max_age_s}


def is_stale(
    last_updated: dict[str, Any] | None,
    now: datetime | None = None,
    max_age_s: float = STALE_AFTER_SECONDS,
) -> bool:
    """Check whether snapshots are older than ``max_age_s``."""
    return bool(freshness(last_updated, now, max_age_s)["stale"])
