"""
Display formatting helpers.

Numbers are rendered the way the website shows them: dollar prices
with thousands separators, signed percentages and compact market caps.
"""

import math


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers.

    Args:
        numerator: Dividend.
        denominator: Divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default.
    """
    if denominator == 0:
        return default
    return numerator / denominator


def format_price(price: float | None) -> str:
    """
    Format a USD price.

    Examples:
        >>> format_price(97500.5)
        '$97,500.50'
        >>> format_price(2.456)
        '$2.46'
        >>> format_price(0.5)
        '$0.5000'
    """
    if not price:
        return "$0.00"
    if price >= 1000:
        return f"${price:,.2f}"
    if price >= 1:
        return f"${price:.2f}"
    return f"${_to_precision(price, 4)}"


def _to_precision(value: float, digits: int) -> str:
    """Round to significant digits, keeping trailing zeros."""
    exponent = math.floor(math.log10(abs(value)))
    decimals = max(0, digits - 1 - exponent)
    return f"{value:.{decimals}f}"


def format_change(change: float | None) -> str:
    """
    Format a percentage change with an explicit sign.

    Examples:
        >>> format_change(3.14159)
        '+3.14%'
        >>> format_change(-2.5)
        '-2.50%'
    """
    if not change:
        return "0.00%"
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


def change_class(change: float | None) -> str:
    """CSS class for a price change: ``up``, ``down`` or empty."""
    if not change:
        return ""
    return "up" if change >= 0 else "down"


def format_market_cap(value: float | None) -> str:
    """
    Format a market cap compactly.

    Examples:
        >>> format_market_cap(1.92e12)
        '1.92T'
        >>> format_market_cap(4.5e8)
        '450.00M'
    """
    if not value:
        return "0"
    if value >= 1e12:
        return f"{value / 1e12:.2f}T"
    if value >= 1e9:
        return f"{value / 1e9:.2f}B"
    if value >= 1e6:
        return f"{value / 1e6:.2f}M"
    return f"{value:,.0f}"
