"""
Live market polling for the dashboard.

Polls the API at a fixed interval and falls back to the markets snapshot
when the API is unavailable. Every poll is numbered; a response is only
applied if no later poll has been applied already, so a slow request can
never overwrite fresher data.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine, Sequence
from dataclasses import dataclass, field
from typing import Any

from marketsnap.api.client import CoinGeckoClient
from marketsnap.config.constants import (
    DEFAULT_POLL_INTERVAL,
    LIVE_COINS,
    SNAPSHOT_LAST_UPDATED,
    SNAPSHOT_MARKETS,
)
from marketsnap.dashboard.views import is_stale
from marketsnap.market.labels import coin_label
from marketsnap.storage.snapshot import SnapshotWriter


logger = logging.getLogger(__name__)

UpdateCallback = Callable[[list[dict[str, Any]], str], Coroutine[Any, Any, None]]


@dataclass
class PollerState:
    """Current state of the poller."""

    running: bool = False
    source: str = "none"  # "live", "snapshot" or "none"
    applied_seq: int = 0
    polls: int = 0
    stale_dropped: int = 0
    snapshot_stale: bool = False
    markets: list[dict[str, Any]] = field(default_factory=list)


class MarketPoller:
    """
    Fixed-interval market poller with snapshot fallback.
    """

    def __init__(
        self,
        client: CoinGeckoClient,
        writer: SnapshotWriter,
        coin_ids: Sequence[str] = LIVE_COINS,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._client = client
        self._writer = writer
        self._coin_ids = list(coin_ids)
        self._interval = interval

        self._state = PollerState()
        self._next_seq = 0
        self._task: asyncio.Task[None] | None = None
        self._callbacks: list[UpdateCallback] = []

    @property
    def state(self) -> PollerState:
        """Get poller state."""
        return self._state

    @property
    def markets(self) -> list[dict[str, Any]]:
        """Most recently applied market list."""
        return self._state.markets

    def add_callback(self, callback: UpdateCallback) -> None:
        """Add callback invoked after each applied update."""
        self._callbacks.append(callback)

    def issue_seq(self) -> int:
        """Reserve the sequence number for a new poll."""
        self._next_seq += 1
        return self._next_seq

    def apply(self, seq: int, markets: list[dict[str, Any]], source: str) -> bool:
        """
        Apply a poll result unless a newer one is already in place.

        Returns:
            True if the result was applied.
        """
        if seq <= self._state.applied_seq:
            self._state.stale_dropped += 1
            logger.debug(f"Dropping stale poll {seq} (applied {self._state.applied_seq})")
            return False

        self._state.applied_seq = seq
        self._state.markets = markets
        self._state.source = source
        return True

    async def _fetch(self) -> tuple[list[dict[str, Any]], str]:
        """Fetch live markets, or read the snapshot when that fails."""
        try:
            coins = await self._client.get_coins_markets(
                self._coin_ids, price_change_percentage="24h"
            )
            markets = []
            for coin in coins:
                data = coin.model_dump(mode="json")
                data["chinese_name"] = coin_label(coin.id)
                markets.append(data)
            self._state.snapshot_stale = False
            return markets, "live"
        except Exception as e:
            logger.warning(f"Live market fetch failed, using snapshot: {e}")
            markets = self._writer.read(SNAPSHOT_MARKETS, default=[])
            self._state.snapshot_stale = is_stale(self._writer.read(SNAPSHOT_LAST_UPDATED))
            if self._state.snapshot_stale:
                logger.warning("Market snapshot is stale; last refresh is over two hours old")
            return markets, "snapshot"

    async def poll_once(self) -> bool:
        """Run one poll and apply its result if still current."""
        seq = self.issue_seq()
        self._state.polls += 1
        markets, source = await self._fetch()

        applied = self.apply(seq, markets, source)
        if applied:
            for callback in self._callbacks:
                try:
                    await callback(markets, source)
                except Exception as e:
                    logger.debug(f"Callback error: {e}")
        return applied

    async def start(self) -> None:
        """Start polling in the background."""
        if self._state.running:
            return

        self._state.running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Market poller started ({self._interval:.0f}s interval)")

    async def stop(self) -> None:
        """Stop polling."""
        self._state.running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Market poller stopped")

    async def _run(self) -> None:
        while self._state.running:
            await self.poll_once()
            await asyncio.sleep(self._interval)
