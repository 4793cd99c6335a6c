"""
FastAPI server for the website's data.

Serves the snapshot files statically under /data and a handful of JSON
endpoints the page widgets use: markets, ticker, search, price
differences, freshness and price alerts.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from marketsnap.api.client import CoinGeckoClient
from marketsnap.config.constants import (
    SNAPSHOT_ARBITRAGE,
    SNAPSHOT_LAST_UPDATED,
    SNAPSHOT_MARKET_SUMMARY,
    SNAPSHOT_MARKETS,
    SNAPSHOT_PRICE_ALERTS,
)
from marketsnap.config.settings import Settings, get_settings
from marketsnap.core.types import AlertDirection, ArbitrageCandidate, PriceAlert
from marketsnap.dashboard.alerts import PriceAlertStore
from marketsnap.dashboard.poller import MarketPoller
from marketsnap.dashboard.views import freshness, search_coins, ticker_items
from marketsnap.storage.snapshot import SnapshotWriter
from marketsnap.strategy.scanner import sort_candidates, top_for_coin


logger = logging.getLogger(__name__)


class AlertRequest(BaseModel):
    """Body of POST /api/alerts."""

    coin_id: str = Field(min_length=1)
    direction: AlertDirection
    price: float = Field(gt=0)


def _rows(data: Any, name: str) -> list[dict[str, Any]]:
    """Keep a snapshot only if it is a list of objects."""
    if isinstance(data, list) and all(isinstance(row, dict) for row in data):
        return data
    if data is not None:
        logger.warning(f"Ignoring {name}: expected a list of objects, got {type(data).__name__}")
    return []


def _markets(request: Request) -> list[dict[str, Any]]:
    """Live markets when the poller has data, else the snapshot."""
    poller: MarketPoller | None = request.app.state.poller
    if poller is not None and poller.markets:
        return _rows(poller.markets, "live markets")
    writer: SnapshotWriter = request.app.state.writer
    return _rows(writer.read(SNAPSHOT_MARKETS), SNAPSHOT_MARKETS)


async def get_markets(request: Request) -> dict[str, Any]:
    poller: MarketPoller | None = request.app.state.poller
    source = poller.state.source if poller is not None and poller.markets else "snapshot"
    return {"source": source, "markets": _markets(request)}


async def get_ticker(request: Request, limit: int = Query(10, ge=1, le=50)) -> dict[str, Any]:
    return {"items": ticker_items(_markets(request), limit)}


async def get_search(
    request: Request,
    q: str = Query("", max_length=64),
    limit: int = Query(5, ge=1, le=20),
) -> dict[str, Any]:
    return {"query": q, "results": search_coins(_markets(request), q, limit)}


async def get_arbitrage(
    request: Request,
    coin: str | None = None,
    limit: int | None = Query(None, ge=1, le=100),
) -> dict[str, Any]:
    writer: SnapshotWriter = request.app.state.writer
    settings: Settings = request.app.state.settings

    candidates: list[ArbitrageCandidate] = []
    for item in _rows(writer.read(SNAPSHOT_ARBITRAGE), SNAPSHOT_ARBITRAGE):
        try:
            candidates.append(ArbitrageCandidate.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed entry in {SNAPSHOT_ARBITRAGE}: {e!r}")

    if coin:
        selected = top_for_coin(candidates, coin, limit or settings.display_top_n)
    else:
        selected = sort_candidates(candidates, limit)
    return {"opportunities": [c.to_dict() for c in selected]}


async def get_summary(request: Request) -> dict[str, Any]:
    writer: SnapshotWriter = request.app.state.writer
    summary = writer.read(SNAPSHOT_MARKET_SUMMARY)
    if not isinstance(summary, dict):
        raise HTTPException(status_code=404, detail="Market summary not available")
    return summary  # type: ignore[no-any-return]


async def get_freshness(request: Request) -> dict[str, Any]:
    writer: SnapshotWriter = request.app.state.writer
    return freshness(writer.read(SNAPSHOT_LAST_UPDATED))


async def list_alerts(request: Request) -> dict[str, Any]:
    store: PriceAlertStore = request.app.state.alerts
    return {"alerts": [a.to_dict() for a in store.load()]}


async def create_alert(request: Request, body: AlertRequest) -> dict[str, Any]:
    store: PriceAlertStore = request.app.state.alerts
    alert = PriceAlert(coin_id=body.coin_id, direction=body.direction, price=body.price)
    alerts = store.add(alert)
    return {"alert": alert.to_dict(), "count": len(alerts)}


async def delete_alerts(
    request: Request,
    coin_id: str,
    direction: AlertDirection | None = None,
) -> dict[str, Any]:
    store: PriceAlertStore = request.app.state.alerts
    return {"removed": store.remove(coin_id, direction)}


async def check_alerts(request: Request) -> dict[str, Any]:
    store: PriceAlertStore = request.app.state.alerts
    triggered = store.check(_markets(request))
    return {"triggered": [t.to_dict() for t in triggered]}


def create_app(settings: Settings | None = None, live: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use, defaults to get_settings().
        live: Start the live market poller on startup.
    """
    settings = settings or get_settings()
    writer = SnapshotWriter(settings.data_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
        client: CoinGeckoClient | None = None
        if live:
            client = CoinGeckoClient(
                base_url=settings.api_base_url,
                api_key=settings.api_key,
                timeout=settings.request_timeout,
                max_retries=1,
            )
            app.state.poller = MarketPoller(client, writer, interval=settings.poll_interval)
            await app.state.poller.start()
        yield
        if app.state.poller is not None:
            await app.state.poller.stop()
            app.state.poller = None
        if client is not None:
            await client.close()

    app = FastAPI(title="Market Snapshot", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.writer = writer
    app.state.alerts = PriceAlertStore(writer.path_for(SNAPSHOT_PRICE_ALERTS))
    app.state.poller = None

    app.get("/api/markets")(get_markets)
    app.get("/api/ticker")(get_ticker)
    app.get("/api/search")(get_search)
    app.get("/api/arbitrage")(get_arbitrage)
    app.get("/api/summary")(get_summary)
    app.get("/api/freshness")(get_freshness)
    app.get("/api/alerts")(list_alerts)
    app.post("/api/alerts")(create_alert)
    app.delete("/api/alerts/{coin_id}")(delete_alerts)
    app.post("/api/alerts/check")(check_alerts)
    app.mount(
        "/data",
        StaticFiles(directory=settings.data_dir, check_dir=False),
        name="data",
    )
    return app


def main() -> None:
    import uvicorn

    from marketsnap.telemetry.logger import setup_logging

    settings = get_settings()
    async_logger = setup_logging(
        level=settings.log_level, log_file=settings.log_file, component="serve"
    )
    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║              MARKET SNAPSHOT - DATA SERVER                    ║
╚═══════════════════════════════════════════════════════════════╝

Serving snapshots from: {settings.data_dir}
Endpoint: http://localhost:8000
Press Ctrl+C to stop.
    """
    )
    try:
        uvicorn.run(
            "marketsnap.dashboard.server:create_app",
            factory=True,
            host="0.0.0.0",
            port=8000,
            reload=False,
            log_level="warning",
        )
    finally:
        async_logger.stop()


if __name__ == "__main__":
    main()
