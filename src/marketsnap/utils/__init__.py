"""Utility functions for the market snapshot service."""

from marketsnap.utils.format import (
    change_class,
    format_change,
    format_market_cap,
    format_price,
    safe_divide,
)
from marketsnap.utils.time import (
    age_seconds,
    format_local,
    get_timestamp_ms,
    parse_iso,
    to_iso,
    utc_now,
)


__all__ = [
    "age_seconds",
    "change_class",
    "format_change",
    "format_local",
    "format_market_cap",
    "format_price",
    "get_timestamp_ms",
    "parse_iso",
    "safe_divide",
    "to_iso",
    "utc_now",
]
