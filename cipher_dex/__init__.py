"""
cipher-dex: demo confidential decentralized exchange backend

A constant-product AMM simulator served over HTTP:
- API: FastAPI REST server (swaps, liquidity, balances, analytics)
- Storage: in-memory or relational (peewee) backend chosen at startup
- Price oracle: CoinGecko with Binance fallback
"""

__version__ = "0.1.0"
