"""
Type definitions for the market snapshot service.

This module contains the dataclasses and enums shared by the refresh
pipeline and the dashboard. Using slots=True for memory efficiency and
faster attribute access.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


# =============================================================================
# Enums
# =============================================================================


class MarketSentiment(str, Enum):
    """Overall market mood derived from 24h price changes."""

    VERY_BULLISH = "very_bullish"
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"
    VERY_BEARISH = "very_bearish"


class AlertDirection(str, Enum):
    """Price alert trigger side."""

    ABOVE = "above"
    BELOW = "below"


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Ticker:
    """
    One exchange's last quoted price for a trading pair.

    Frozen for immutability and hashability.
    """

    exchange_id: str
    base_symbol: str
    target_symbol: str
    last_price: float | None
    volume: float = 0.0
    exchange_name: str = ""

    @property
    def is_valid(self) -> bool:
        """Check that the ticker carries a usable positive price."""
        return self.last_price is not None and self.last_price > 0

    @property
    def display_exchange(self) -> str:
        """Exchange name for display, falling back to the id."""
        return self.exchange_name or self.exchange_id


@dataclass(slots=True, frozen=True)
class ArbitrageCandidate:
    """
    Same-asset price discrepancy between two exchanges.

    Buy side is always the cheaper exchange.
    """

    coin_id: str
    buy_exchange: str
    buy_price: float
    sell_exchange: str
    sell_price: float
    price_diff: float
    price_diff_percentage: float
    timestamp: str
    coin_label: str = ""
    data_source: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArbitrageCandidate":
        """Rebuild a candidate from a snapshot entry."""
        return cls(
            coin_id=data["coin_id"],
            buy_exchange=data["buy_exchange"],
            buy_price=float(data["buy_price"]),
            sell_exchange=data["sell_exchange"],
            sell_price=float(data["sell_price"]),
            price_diff=float(data["price_diff"]),
            price_diff_percentage=float(data["price_diff_percentage"]),
            timestamp=data["timestamp"],
            coin_label=data.get("coin_label", ""),
            data_source=data.get("data_source", ""),
        )


@dataclass(slots=True)
class PriceAlert:
    """User-defined price alert with a trigger timestamp for debouncing."""

    coin_id: str
    direction: AlertDirection
    price: float
    last_triggered: int = 0  # epoch milliseconds, 0 = never

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict."""
        return {
            "coin_id": self.coin_id,
            "direction": self.direction.value,
            "price": self.price,
            "last_triggered": self.last_triggered,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceAlert":
        """Rebuild an alert from its stored form."""
        return cls(
            coin_id=data["coin_id"],
            direction=AlertDirection(data["direction"]),
            price=float(data["price"]),
            last_triggered=int(data.get("last_triggered", 0)),
        )
