"""
Unit tests for price alerts and their debounce.
"""

from pathlib import Path

import pytest

from marketsnap.core.types import AlertDirection, PriceAlert
from marketsnap.dashboard.alerts import PriceAlertStore, should_trigger


HOUR_MS = 60 * 60 * 1000
T0 = 1_700_000_000_000


class TestShouldTrigger:
    """Tests for the trigger rule."""

    def test_above(self) -> None:
        alert = PriceAlert("bitcoin", AlertDirection.ABOVE, 50000.0)

        assert not should_trigger(alert, 49999.0, T0)
        assert should_trigger(alert, 50000.0, T0)
        assert alert.last_triggered == T0

    def test_below(self) -> None:
        alert = PriceAlert("bitcoin", AlertDirection.BELOW, 40000.0)

        assert not should_trigger(alert, 40000.01, T0)
        assert should_trigger(alert, 39000.0, T0)

    def test_missing_price(self) -> None:
        alert = PriceAlert("bitcoin", AlertDirection.ABOVE, 1.0)

        assert not should_trigger(alert, None, T0)
        assert alert.last_triggered == 0

    def test_debounce_within_hour(self) -> None:
        """Test an alert fires at most once per hour."""
        alert = PriceAlert("bitcoin", AlertDirection.ABOVE, 50000.0)

        assert should_trigger(alert, 51000.0, T0)
        assert not should_trigger(alert, 52000.0, T0 + 10 * 60 * 1000)
        assert not should_trigger(alert, 52000.0, T0 + HOUR_MS - 1)
        assert should_trigger(alert, 52000.0, T0 + HOUR_MS)
        assert alert.last_triggered == T0 + HOUR_MS

    def test_never_triggered_fires_immediately(self) -> None:
        """Test a fresh alert is not held back by the cooldown."""
        alert = PriceAlert("bitcoin", AlertDirection.ABOVE, 1.0)

        assert should_trigger(alert, 2.0, 1000)

    def test_no_stamp_without_hit(self) -> None:
        alert = PriceAlert("bitcoin", AlertDirection.ABOVE, 50000.0)

        should_trigger(alert, 1.0, T0)

        assert alert.last_triggered == 0


class TestPriceAlertStore:
    """Tests for the JSON-file alert store."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> PriceAlertStore:
        return PriceAlertStore(tmp_path / "price-alerts.json")

    def test_empty(self, store: PriceAlertStore) -> None:
        assert store.load() == []

    def test_add_and_remove(self, store: PriceAlertStore) -> None:
        store.add(PriceAlert("bitcoin", AlertDirection.ABOVE, 50000.0))
        store.add(PriceAlert("bitcoin", AlertDirection.BELOW, 40000.0))
        store.add(PriceAlert("ethereum", AlertDirection.ABOVE, 3000.0))

        assert store.remove("bitcoin", AlertDirection.BELOW) == 1
        assert [(a.coin_id, a.direction) for a in store.load()] == [
            ("bitcoin", AlertDirection.ABOVE),
            ("ethereum", AlertDirection.ABOVE),
        ]
        assert store.remove("bitcoin") == 1
        assert len(store.load()) == 1

    def test_corrupt_file(self, store: PriceAlertStore) -> None:
        store.path.write_text("[{]")

        assert store.load() == []

    def test_check_persists_stamp(self, store: PriceAlertStore) -> None:
        """Test a fired alert stays quiet on the next check."""
        store.add(PriceAlert("bitcoin", AlertDirection.ABOVE, 50000.0))
        store.add(PriceAlert("ethereum", AlertDirection.BELOW, 2000.0))
        markets = [
            {"id": "bitcoin", "name": "Bitcoin", "chinese_name": "比特币", "current_price": 51000.0},
            {"id": "ethereum", "name": "Ethereum", "current_price": 2300.0},
        ]

        triggered = store.check(markets, now_ms=T0)

        assert len(triggered) == 1
        assert triggered[0].message == "比特币 价格突破 $50000"
        assert triggered[0].level == "success"
        assert triggered[0].current_price == 51000.0
        assert store.load()[0].last_triggered == T0

        assert store.check(markets, now_ms=T0 + 1000) == []
        assert len(store.check(markets, now_ms=T0 + HOUR_MS)) == 1

    def test_check_below_message(self, store: PriceAlertStore) -> None:
        store.add(PriceAlert("ethereum", AlertDirection.BELOW, 2500.5))

        triggered = store.check([{"id": "ethereum", "name": "Ethereum", "current_price": 2300.0}], T0)

        assert triggered[0].message == "Ethereum 价格跌破 $2500.5"
        assert triggered[0].level == "warning"

    def test_check_unknown_coin(self, store: PriceAlertStore) -> None:
        store.add(PriceAlert("dogecoin", AlertDirection.ABOVE, 0.1))

        assert store.check([{"id": "bitcoin", "current_price": 1.0}], T0) == []
