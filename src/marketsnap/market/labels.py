"""
Localized display names for tracked coins and exchanges.

The website is Chinese-language; snapshots carry a ``chinese_name`` next
to the API's own English name.
"""

from typing import Final


COIN_NAMES_ZH: Final[dict[str, str]] = {
    "bitcoin": "比特币",
    "ethereum": "以太坊",
    "binancecoin": "币安币",
    "ripple": "瑞波币",
    "cardano": "卡尔达诺",
    "solana": "索拉纳",
    "polkadot": "波卡",
    "dogecoin": "狗狗币",
    "avalanche-2": "雪崩",
    "tron": "波场",
    "chainlink": "链接",
    "litecoin": "莱特币",
    "uniswap": "Uniswap",
    "polygon": "Polygon",
    "stellar": "恒星币",
    "bitcoin-cash": "比特币现金",
    "monero": "门罗币",
    "cosmos": "Cosmos",
    "ethereum-classic": "以太坊经典",
    "filecoin": "文件币",
    "near": "NEAR协议",
    "algorand": "算法币",
    "vechain": "唯链",
    "hedera-hashgraph": "Hedera",
    "internet-computer": "Internet Computer",
    "eos": "EOS",
    "theta-token": "Theta",
    "axie-infinity": "Axie Infinity",
    "decentraland": "Decentraland",
    "the-sandbox": "The Sandbox",
}

EXCHANGE_NAMES_ZH: Final[dict[str, str]] = {
    "binance": "币安",
    "gdax": "Coinbase交易所",
    "okex": "欧易",
    "huobi": "火币",
    "kucoin": "库币",
    "gate": "Gate.io",
    "kraken": "Kraken",
    "bitfinex": "Bitfinex",
    "gemini": "Gemini",
    "bybit_spot": "Bybit",
    "bitstamp": "Bitstamp",
    "bittrex": "Bittrex",
    "bithumb": "Bithumb",
    "upbit": "Upbit",
    "mexc": "MEXC",
    "bitget": "Bitget",
    "crypto_com": "Crypto.com",
    "phemex": "Phemex",
    "coinex": "CoinEx",
    "poloniex": "Poloniex",
    "wazirx": "WazirX",
    "lbank": "LBank",
    "bitmart": "BitMart",
    "whitebit": "WhiteBIT",
    "digifinex": "DigiFinex",
    "bkex": "BKEX",
    "latoken": "LATOKEN",
    "hotbit": "Hotbit",
    "xt": "XT.COM",
    "p2pb2b": "P2B",
}


def coin_label(coin_id: str) -> str:
    """Chinese name of a coin, or its upper-cased id when unknown."""
    return COIN_NAMES_ZH.get(coin_id, coin_id.upper())


def exchange_label(exchange_id: str) -> str:
    """Chinese name of an exchange, or its id when unknown."""
    return EXCHANGE_NAMES_ZH.get(exchange_id, exchange_id)
