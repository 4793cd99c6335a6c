"""
Pydantic models for CoinGecko API responses.

These models provide type-safe parsing of the fields the pipeline
relies on. Unknown fields are kept so snapshots carry the full payload.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from marketsnap.core.types import Ticker


class CoinMarket(BaseModel):
    """Entry of the /coins/markets response."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    symbol: str
    name: str
    image: str | None = None
    current_price: float | None = None
    market_cap: float | None = None
    market_cap_rank: int | None = None
    total_volume: float | None = None
    price_change_percentage_24h: float | None = None

    @property
    def change_24h(self) -> float:
        """24h change in percent, treating missing as zero."""
        return self.price_change_percentage_24h or 0.0


class ExchangeSummary(BaseModel):
    """Entry of the /exchanges response."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str
    year_established: int | None = None
    country: str | None = None
    url: str | None = None
    image: str | None = None
    trust_score: int | None = None
    trust_score_rank: int | None = None
    trade_volume_24h_btc: float | None = None


class TickerMarket(BaseModel):
    """Market (exchange) reference inside a ticker."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    identifier: str = ""


class RawTicker(BaseModel):
    """Single ticker as returned by the tickers endpoints."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    base: str
    target: str
    market: TickerMarket = Field(default_factory=TickerMarket)
    last: float | None = None
    volume: float | None = None
    coin_id: str | None = None
    target_coin_id: str | None = None

    def to_ticker(self, exchange_id: str | None = None) -> Ticker:
        """Convert to the internal ticker type."""
        return Ticker(
            exchange_id=exchange_id or self.market.identifier or self.market.name,
            exchange_name=self.market.name,
            base_symbol=self.base.upper(),
            target_symbol=self.target.upper(),
            last_price=self.last,
            volume=self.volume or 0.0,
        )


class TickersResponse(BaseModel):
    """Response of /coins/{id}/tickers and /exchanges/{id}/tickers."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    tickers: list[RawTicker] = Field(default_factory=list)

    def raw_tickers(self) -> list[dict[str, Any]]:
        """Tickers as plain dicts, including unknown fields."""
        return [t.model_dump(mode="json") for t in self.tickers]
