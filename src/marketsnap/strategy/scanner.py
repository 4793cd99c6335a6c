"""
Cross-exchange price difference scanning.

Compares the last traded price of one coin across a handful of
exchanges and reports every pair whose relative gap exceeds a minimum
percentage, measured against the cheaper side.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import Any

from marketsnap.config.constants import (
    ARBITRAGE_DATA_SOURCE,
    DEFAULT_ARBITRAGE_THRESHOLD_PCT,
    DEFAULT_ARBITRAGE_TOP_N,
    DEFAULT_DISPLAY_TOP_N,
    DEFAULT_REQUEST_DELAY,
    DEFAULT_TICKERS_PER_COIN,
    USD_TARGETS,
)
from marketsnap.core.types import ArbitrageCandidate, Ticker
from marketsnap.market.labels import coin_label, exchange_label
from marketsnap.utils.time import to_iso, utc_now


logger = logging.getLogger(__name__)


TickerFetcher = Callable[[str], Awaitable[Sequence[Ticker]]]


def price_difference_pct(price_a: float, price_b: float) -> float:
    """
    Relative gap between two positive prices, in percent of the lower one.

    Example:
        >>> price_difference_pct(100.0, 100.5)
        0.5
    """
    return abs(price_b - price_a) / min(price_a, price_b) * 100


def select_tickers(
    tickers: Iterable[Ticker],
    limit: int = DEFAULT_TICKERS_PER_COIN,
) -> list[Ticker]:
    """
    Keep the first ``limit`` USD/USDT-quoted tickers with a positive price.

    Order of the input is preserved.
    """
    selected: list[Ticker] = []
    for ticker in tickers:
        if ticker.target_symbol.upper() not in USD_TARGETS or not ticker.is_valid:
            continue
        selected.append(ticker)
        if len(selected) >= limit:
            break
    return selected


def sort_candidates(
    candidates: Iterable[ArbitrageCandidate],
    top_n: int | None = None,
) -> list[ArbitrageCandidate]:
    """Sort by percentage, highest first, and optionally truncate."""
    ordered = sorted(candidates, key=lambda c: c.price_diff_percentage, reverse=True)
    return ordered if top_n is None else ordered[:top_n]


def find_price_differences(
    coin_id: str,
    tickers: Sequence[Ticker],
    threshold_pct: float = DEFAULT_ARBITRAGE_THRESHOLD_PCT,
    top_n: int | None = None,
    timestamp: str | None = None,
    data_source: str = ARBITRAGE_DATA_SOURCE,
) -> list[ArbitrageCandidate]:
    """
    Pairwise scan of one coin's tickers.

    Tickers with a missing or non-positive price are ignored. Every
    unordered pair (i, j), i < j, of the remaining tickers is compared and
    kept when its difference is strictly above ``threshold_pct``.

    Args:
        coin_id: Coin the tickers belong to.
        tickers: Tickers from different exchanges, in priority order.
        threshold_pct: Minimum difference in percent (0.1 = 0.1%).
        top_n: Maximum candidates returned, None for all.
        timestamp: ISO timestamp stamped on candidates, defaults to now.
        data_source: Provenance tag stored on each candidate.

    Returns:
        Candidates sorted by percentage, highest first.
    """
    valid = [t for t in tickers if t.is_valid]
    if len(valid) < 2:
        return []

    stamp = timestamp or to_iso(utc_now())
    label = coin_label(coin_id)
    candidates: list[ArbitrageCandidate] = []

    for first, second in combinations(valid, 2):
        price_a = float(first.last_price)  # type: ignore[arg-type]
        price_b = float(second.last_price)  # type: ignore[arg-type]

        pct = price_difference_pct(price_a, price_b)
        if pct <= threshold_pct:
            continue

        buy, sell = (first, second) if price_a < price_b else (second, first)
        candidates.append(
            ArbitrageCandidate(
                coin_id=coin_id,
                coin_label=label,
                buy_exchange=buy.display_exchange,
                buy_price=min(price_a, price_b),
                sell_exchange=sell.display_exchange,
                sell_price=max(price_a, price_b),
                price_diff=abs(price_b - price_a),
                price_diff_percentage=pct,
                timestamp=stamp,
                data_source=data_source,
            )
        )

    return sort_candidates(candidates, top_n)


def top_for_coin(
    candidates: Iterable[ArbitrageCandidate],
    coin_id: str,
    limit: int = DEFAULT_DISPLAY_TOP_N,
) -> list[ArbitrageCandidate]:
    """Best candidates for a single coin, for per-coin display."""
    return sort_candidates((c for c in candidates if c.coin_id == coin_id), limit)


def tickers_from_exchange_pairs(
    exchange_pairs: Mapping[str, Sequence[Mapping[str, Any]]],
    coin_id: str,
) -> list[Ticker]:
    """
    Collect one USD/USDT ticker per exchange for a coin.

    Pairs are matched on the API's ``coin_id`` field, or on the base
    symbol when the field is absent.
    """
    tickers: list[Ticker] = []
    for exchange_id, pairs in exchange_pairs.items():
        for pair in pairs:
            base = str(pair.get("base", ""))
            target = str(pair.get("target", "")).upper()
            matches = pair.get("coin_id") == coin_id or base.lower() == coin_id.lower()
            if not matches or target not in USD_TARGETS:
                continue

            last = pair.get("last")
            tickers.append(
                Ticker(
                    exchange_id=exchange_id,
                    exchange_name=exchange_label(exchange_id),
                    base_symbol=base.upper(),
                    target_symbol=target,
                    last_price=float(last) if last is not None else None,
                    volume=float(pair.get("volume") or 0.0),
                )
            )
            break
    return tickers


def candidates_from_exchange_pairs(
    exchange_pairs: Mapping[str, Sequence[Mapping[str, Any]]],
    coin_ids: Iterable[str],
    threshold_pct: float = DEFAULT_ARBITRAGE_THRESHOLD_PCT,
    top_n: int | None = DEFAULT_ARBITRAGE_TOP_N,
) -> list[ArbitrageCandidate]:
    """Scan an exchange-pairs snapshot instead of live per-coin tickers."""
    timestamp = to_iso(utc_now())
    candidates: list[ArbitrageCandidate] = []
    for coin_id in coin_ids:
        tickers = tickers_from_exchange_pairs(exchange_pairs, coin_id)
        candidates.extend(
            find_price_differences(coin_id, tickers, threshold_pct, timestamp=timestamp)
        )
    return sort_candidates(candidates, top_n)


@dataclass
class ScanStats:
    """Statistics for one scan."""

    coins_scanned: int = 0
    coins_failed: int = 0
    coins_skipped: int = 0
    candidates_found: int = 0


class PriceDifferenceScanner:
    """
    Scans several coins one after another.

    Features:
    - Sequential fetching with a fixed delay between coins
    - A failure for one coin is logged and skipped
    - Aggregate result sorted and truncated to the top N
    """

    def __init__(
        self,
        threshold_pct: float = DEFAULT_ARBITRAGE_THRESHOLD_PCT,
        top_n: int = DEFAULT_ARBITRAGE_TOP_N,
        tickers_per_coin: int = DEFAULT_TICKERS_PER_COIN,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            threshold_pct: Minimum difference in percent.
            top_n: Candidates kept across all coins.
            tickers_per_coin: Tickers compared per coin.
            request_delay: Pause after each coin, in seconds.
            sleep: Awaitable sleep, injectable for tests.
        """
        self._threshold_pct = threshold_pct
        self._top_n = top_n
        self._tickers_per_coin = tickers_per_coin
        self._request_delay = request_delay
        self._sleep = sleep
        self._stats = ScanStats()

    @property
    def stats(self) -> ScanStats:
        """Get statistics of the last scan."""
        return self._stats

    async def scan(
        self,
        coin_ids: Iterable[str],
        fetch_tickers: TickerFetcher,
    ) -> list[ArbitrageCandidate]:
        """
        Fetch and scan each coin in turn.

        Args:
            coin_ids: Coins to scan, in order.
            fetch_tickers: Returns all tickers of a coin.

        Returns:
            Top candidates across all coins, highest percentage first.
        """
        self._stats = ScanStats()
        timestamp = to_iso(utc_now())
        candidates: list[ArbitrageCandidate] = []

        for coin_id in coin_ids:
            logger.info(f"Scanning {coin_id} for price differences")
            try:
                tickers = select_tickers(await fetch_tickers(coin_id), self._tickers_per_coin)
            except Exception as e:
                self._stats.coins_failed += 1
                logger.warning(f"Skipping {coin_id}: {e}")
                await self._sleep(self._request_delay)
                continue

            self._stats.coins_scanned += 1
            if len(tickers) < 2:
                self._stats.coins_skipped += 1
                logger.debug(f"{coin_id}: only {len(tickers)} usable tickers")
            else:
                found = find_price_differences(
                    coin_id, tickers, self._threshold_pct, timestamp=timestamp
                )
                candidates.extend(found)
                logger.info(f"{coin_id}: {len(found)} candidates")

            await self._sleep(self._request_delay)

        self._stats.candidates_found = len(candidates)
        return sort_candidates(candidates, self._top_n)
