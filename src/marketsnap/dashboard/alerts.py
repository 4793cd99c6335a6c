"""
Price alerts with a one-hour debounce.

Alerts live in a small JSON file next to the snapshots. An alert fires
when the price crosses its level and then stays quiet for an hour.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson

from marketsnap.config.constants import ALERT_COOLDOWN_MS
from marketsnap.core.types import AlertDirection, PriceAlert
from marketsnap.market.labels import coin_label
from marketsnap.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


def should_trigger(
    alert: PriceAlert,
    price: float | None,
    now_ms: int,
    cooldown_ms: int = ALERT_COOLDOWN_MS,
) -> bool:
    """
    Decide whether an alert fires, stamping it when it does.

    An alert never fires within ``cooldown_ms`` of its last firing.
    ``above`` fires at ``price >= level``, ``below`` at ``price <= level``.
    """
    if price is None:
        return False
    if alert.last_triggered and now_ms - alert.last_triggered < cooldown_ms:
        return False

    if alert.direction == AlertDirection.ABOVE:
        hit = price >= alert.price
    else:
        hit = price <= alert.price

    if hit:
        alert.last_triggered = now_ms
    return hit


@dataclass
class TriggeredAlert:
    """An alert that fired, with the message shown to the user."""

    alert: PriceAlert
    current_price: float
    message: str
    level: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict."""
        return {
            "alert": self.alert.to_dict(),
            "current_price": self.current_price,
            "message": self.message,
            "level": self.level,
        }


def _alert_message(alert: PriceAlert, coin: dict[str, Any]) -> str:
    name = coin.get("chinese_name") or coin.get("name") or coin_label(alert.coin_id)
    verb = "突破" if alert.direction == AlertDirection.ABOVE else "跌破"
    return f"{name} 价格{verb} ${alert.price:g}"


class PriceAlertStore:
    """
    JSON-file backed list of price alerts.

    Reads the whole file on each operation and rewrites it after changes.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[PriceAlert]:
        """Load all alerts; a missing or corrupt file yields none."""
        if not self._path.exists():
            return []
        try:
            raw = orjson.loads(self._path.read_bytes())
            return [PriceAlert.from_dict(item) for item in raw]
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable alert file {self._path}: {e}")
            return []

    def save(self, alerts: Iterable[PriceAlert]) -> None:
        """Overwrite the alert file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [alert.to_dict() for alert in alerts]
        self._path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))

    def add(self, alert: PriceAlert) -> list[PriceAlert]:
        """Append an alert and persist."""
        alerts = self.load()
        alerts.append(alert)
        self.save(alerts)
        return alerts

    def remove(self, coin_id: str, direction: AlertDirection | None = None) -> int:
        """Delete alerts for a coin, optionally one direction only."""
        alerts = self.load()
        kept = [
            a
            for a in alerts
            if not (a.coin_id == coin_id and (direction is None or a.direction == direction))
        ]
        self.save(kept)
        return len(alerts) - len(kept)

    def check(
        self,
        markets: Iterable[dict[str, Any]],
        now_ms: int | None = None,
    ) -> list[TriggeredAlert]:
        """
        Evaluate every alert against current market prices.

        Fired alerts are stamped and the file is rewritten.
        """
        now_ms = get_timestamp_ms() if now_ms is None else now_ms
        by_id = {coin.get("id"): coin for coin in markets}
        alerts = self.load()
        triggered: list[TriggeredAlert] = []

        for alert in alerts:
            coin = by_id.get(alert.coin_id)
            if coin is None:
                continue
            price = coin.get("current_price")
            if isinstance(price, bool) or not isinstance(price, (int, float)):
                continue
            if should_trigger(alert, price, now_ms):
                triggered.append(
                    TriggeredAlert(
                        alert=alert,
                        current_price=float(price),  # type: ignore[arg-type]
                        message=_alert_message(alert, coin),
                        level="success" if alert.direction == AlertDirection.ABOVE else "warning",
                    )
                )

        if triggered:
            self.save(alerts)
            logger.info(f"{len(triggered)} price alerts fired")
        return triggered
