"""
Crypto market snapshot service.

Refreshes market, exchange and price-difference data from the CoinGecko
API into JSON snapshots, and serves them to the website.
"""

__version__ = "1.0.0"
