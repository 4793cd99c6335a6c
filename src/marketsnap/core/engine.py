"""
Refresh engine orchestrator.

Runs one full data refresh: fetch markets, exchanges and tickers, derive
price differences, news and summary, and write every snapshot.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from marketsnap.api.client import CoinGeckoClient
from marketsnap.api.models import CoinMarket
from marketsnap.config.constants import (
    SNAPSHOT_ANNOUNCEMENTS,
    SNAPSHOT_ARBITRAGE,
    SNAPSHOT_EXCHANGE_PAIRS,
    SNAPSHOT_EXCHANGES,
    SNAPSHOT_MARKET_SUMMARY,
    SNAPSHOT_MARKETS,
    SNAPSHOT_NEWS,
)
from marketsnap.config.settings import Settings
from marketsnap.content.news import build_announcements, build_market_news
from marketsnap.core.types import ArbitrageCandidate, Ticker
from marketsnap.market.labels import coin_label, exchange_label
from marketsnap.storage.snapshot import SnapshotWriter
from marketsnap.strategy.analysis import summarize_market
from marketsnap.strategy.scanner import PriceDifferenceScanner, candidates_from_exchange_pairs
from marketsnap.telemetry.metrics import RunMetrics
from marketsnap.utils.time import to_iso, utc_now


logger = logging.getLogger(__name__)


class RefreshError(Exception):
    """Unrecoverable failure of a refresh run."""

    pass


@dataclass
class RefreshResult:
    """Everything produced by one refresh run."""

    markets: list[dict[str, Any]] = field(default_factory=list)
    exchanges: list[dict[str, Any]] = field(default_factory=list)
    exchange_pairs: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    arbitrage: list[ArbitrageCandidate] = field(default_factory=list)
    news: list[dict[str, Any]] = field(default_factory=list)
    announcements: list[dict[str, Any]] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)
    last_updated: dict[str, Any] = field(default_factory=dict)


def _batches(items: Sequence[str], size: int) -> list[list[str]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class RefreshEngine:
    """
    Sequential refresh pipeline.

    Manages one run of:
    - Market data in batches
    - Exchange directory and per-exchange pairs
    - Cross-exchange price differences
    - Derived news, announcements and summary
    - Snapshot writing and the last-updated marker
    """

    def __init__(
        self,
        settings: Settings,
        client: CoinGeckoClient | None = None,
        writer: SnapshotWriter | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Application settings.
            client: API client; created in setup() when omitted.
            writer: Snapshot writer; defaults to settings.data_dir.
            sleep: Awaitable sleep used for pacing, injectable for tests.
            clock: Returns the current time, injectable for tests.
        """
        self._settings = settings
        self._client = client
        self._owns_client = client is None
        self._writer = writer or SnapshotWriter(settings.data_dir)
        self._sleep = sleep
        self._clock = clock
        self._metrics = RunMetrics()

    @property
    def metrics(self) -> RunMetrics:
        """Metrics of the current run."""
        return self._metrics

    @property
    def writer(self) -> SnapshotWriter:
        """Snapshot writer in use."""
        return self._writer

    async def setup(self) -> None:
        """Create the API client if none was injected."""
        if self._client is None:
            self._client = CoinGeckoClient(
                base_url=self._settings.api_base_url,
                api_key=self._settings.api_key,
                timeout=self._settings.request_timeout,
                max_retries=self._settings.max_retries,
                retry_backoff=self._settings.retry_backoff,
                metrics=self._metrics,
            )
        logger.info(f"Writing snapshots to {self._writer.data_dir.resolve()}")

    async def shutdown(self) -> None:
        """Release the API client if this engine created it."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> CoinGeckoClient:
        if self._client is None:
            raise RuntimeError("Engine not set up")
        return self._client

    # =========================================================================
    # Run
    # =========================================================================

    async def run(self) -> RefreshResult:
        """
        Run every refresh step in order.

        Raises:
            RefreshError: When no market data could be fetched at all.
        """
        logger.info(f"Starting data refresh at {to_iso(self._clock())}")
        result = RefreshResult()

        with self._metrics.time_step("markets"):
            coins = await self.refresh_markets()
        result.markets = [self._enrich_coin(coin) for coin in coins]
        self._writer.write(SNAPSHOT_MARKETS, result.markets)
        self._metrics.record_items("markets", len(result.markets))

        with self._metrics.time_step("exchanges"):
            result.exchanges = await self.refresh_exchanges()
        self._writer.write(SNAPSHOT_EXCHANGES, result.exchanges)
        self._metrics.record_items("exchanges", len(result.exchanges))

        with self._metrics.time_step("exchange_pairs"):
            result.exchange_pairs = await self.refresh_exchange_pairs()
        self._writer.write(SNAPSHOT_EXCHANGE_PAIRS, result.exchange_pairs)
        self._metrics.record_items("exchange_pairs", len(result.exchange_pairs))

        with self._metrics.time_step("arbitrage"):
            result.arbitrage = await self.refresh_arbitrage(result.exchange_pairs)
        self._writer.write(SNAPSHOT_ARBITRAGE, result.arbitrage)
        self._metrics.record_items("arbitrage", len(result.arbitrage))

        now = self._clock()
        result.news = build_market_news(coins, now)
        self._writer.write(SNAPSHOT_NEWS, result.news)

        result.announcements = build_announcements(now)
        self._writer.write(SNAPSHOT_ANNOUNCEMENTS, result.announcements)

        result.summary = summarize_market(coins).to_dict()
        self._writer.write(SNAPSHOT_MARKET_SUMMARY, result.summary)

        result.last_updated = self._writer.write_last_updated(
            counts={
                "coins": len(result.markets),
                "exchanges": len(result.exchanges),
                "arbitrage_opportunities": len(result.arbitrage),
                "news": len(result.news),
            },
            metrics=self._metrics.to_dict(),
            now=now,
        )

        logger.info(
            f"Refresh complete: {len(result.markets)} coins, "
            f"{len(result.exchanges)} exchanges, "
            f"{len(result.arbitrage)} price differences, "
            f"{len(result.news)} news items"
        )
        return result

    # =========================================================================
    # Steps
    # =========================================================================

    async def refresh_markets(self) -> list[CoinMarket]:
        """
        Fetch market data for all tracked coins, batch by batch.

        A failed batch is skipped; losing every batch is fatal.
        """
        batches = _batches(self._settings.coins, self._settings.market_batch_size)
        coins: list[CoinMarket] = []

        for index, batch in enumerate(batches):
            logger.info(f"Fetching market batch {index + 1}/{len(batches)}")
            try:
                coins.extend(await self.client.get_coins_markets(batch))
            except Exception as e:
                self._metrics.record_failure("markets")
                logger.error(f"Market batch {index + 1} failed: {e}")

            if index < len(batches) - 1:
                await self._sleep(self._settings.batch_delay)

        if not coins:
            raise RefreshError("Market data is empty")

        logger.info(f"Fetched market data for {len(coins)} coins")
        return coins

    def _enrich_coin(self, coin: CoinMarket) -> dict[str, Any]:
        data = coin.model_dump(mode="json")
        data["chinese_name"] = coin_label(coin.id)
        data["last_updated_real"] = to_iso(self._clock())
        return data

    async def refresh_exchanges(self) -> list[dict[str, Any]]:
        """Fetch the exchange directory, keeping tracked exchanges only."""
        tracked = set(self._settings.exchanges)
        try:
            exchanges = await self.client.get_exchanges()
        except Exception as e:
            self._metrics.record_failure("exchanges")
            logger.error(f"Exchange data failed: {e}")
            return []

        stamp = to_iso(self._clock())
        result = []
        for exchange in exchanges:
            if exchange.id not in tracked:
                continue
            data = exchange.model_dump(mode="json")
            data["chinese_name"] = exchange_label(exchange.id)
            data["last_updated_real"] = stamp
            result.append(data)

        logger.info(f"Fetched {len(result)} tracked exchanges")
        await self._sleep(self._settings.request_delay)
        return result

    async def refresh_exchange_pairs(self) -> dict[str, list[dict[str, Any]]]:
        """Fetch pairs of the leading coins on the leading exchanges."""
        exchange_ids = self._settings.exchanges[: self._settings.pair_exchange_count]
        coin_ids = self._settings.coins[: self._settings.arbitrage_coin_count]
        pairs: dict[str, list[dict[str, Any]]] = {}

        for index, exchange_id in enumerate(exchange_ids):
            try:
                response = await self.client.get_exchange_tickers(exchange_id, coin_ids)
                pairs[exchange_id] = response.raw_tickers()
                logger.info(f"Fetched {len(pairs[exchange_id])} pairs from {exchange_id}")
            except Exception as e:
                self._metrics.record_failure("exchange_pairs")
                logger.error(f"Pairs for {exchange_id} failed: {e}")
                pairs[exchange_id] = []

            if index < len(exchange_ids) - 1:
                await self._sleep(self._settings.batch_delay)

        return pairs

    async def _fetch_coin_tickers(self, coin_id: str) -> list[Ticker]:
        response = await self.client.get_coin_tickers(coin_id)
        return [raw.to_ticker() for raw in response.tickers]

    async def refresh_arbitrage(
        self,
        exchange_pairs: dict[str, list[dict[str, Any]]],
    ) -> list[ArbitrageCandidate]:
        """
        Scan the leading coins for cross-exchange price differences.

        Falls back to the exchange-pairs snapshot when the live scan
        yields nothing.
        """
        coin_ids = self._settings.coins[: self._settings.arbitrage_coin_count]
        scanner = PriceDifferenceScanner(
            threshold_pct=self._settings.arbitrage_threshold_pct,
            top_n=self._settings.arbitrage_top_n,
            tickers_per_coin=self._settings.tickers_per_coin,
            request_delay=self._settings.request_delay,
            sleep=self._sleep,
        )

        candidates = await scanner.scan(coin_ids, self._fetch_coin_tickers)
        if scanner.stats.coins_failed:
            self._metrics.record_failure("arbitrage")

        if not candidates and exchange_pairs:
            logger.info("No live price differences, scanning exchange pairs")
            candidates = candidates_from_exchange_pairs(
                exchange_pairs,
                coin_ids,
                threshold_pct=self._settings.arbitrage_threshold_pct,
                top_n=self._settings.arbitrage_top_n,
            )

        logger.info(f"Found {len(candidates)} price differences")
        return candidates
