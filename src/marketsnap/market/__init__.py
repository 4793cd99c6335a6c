"""Market reference data: localized coin and exchange names."""

from marketsnap.market.labels import COIN_NAMES_ZH, EXCHANGE_NAMES_ZH, coin_label, exchange_label


__all__ = [
    "COIN_NAMES_ZH",
    "EXCHANGE_NAMES_ZH",
    "coin_label",
    "exchange_label",
]
