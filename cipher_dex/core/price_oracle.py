"""
Price oracle.

Polls external price feeds for USD prices of the volatile tokens and
serves them from an in-process cache. CoinGecko is the primary feed and
Binance the fallback; when both fail the last known prices are kept.
"""

import threading
from decimal import Decimal
from typing import Dict, Optional

import httpx

from cipher_dex.core import amm
from cipher_dex.core.entities import utc_now
from cipher_dex.core.logger import log

# Served until the first successful refresh
FALLBACK_PRICES = {
    'ETH': 3500.0,
    'USDC': 1.0,
    'DAI': 1.0,
    'WBTC': 95000.0,
}

STABLECOINS = ('USDC', 'DAI')


class PriceFeedError(Exception):
    """A price feed returned an error or an unusable payload."""


class PriceOracle:
    """USD price cache refreshed from CoinGecko with Binance fallback."""

    def __init__(
        self,
        coingecko_url: str = "https://api.coingecko.com/api/v3",
        binance_url: str = "https://api.binance.com/api/v3",
        refresh_interval: float = 30,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize oracle with fallback prices.

        Args:
            coingecko_url: CoinGecko API base URL
            binance_url: Binance API base URL
            refresh_interval: Seconds between background refreshes
            timeout: HTTP timeout in seconds
            client: Optional pre-configured httpx client (tests inject a mock transport)
        """
        self.coingecko_url = coingecko_url.rstrip('/')
        self.binance_url = binance_url.rstrip('/')
        self.refresh_interval = refresh_interval
        self.client = client or httpx.Client(timeout=timeout)

        self._prices: Dict[str, float] = dict(FALLBACK_PRICES)
        self._last_updated = utc_now()
        self._lock = threading.Lock()

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config: dict) -> "PriceOracle":
        oracle_config = config.get('price_oracle', {})
        return cls(
            coingecko_url=oracle_config.get('coingecko_url', 'https://api.coingecko.com/api/v3'),
            binance_url=oracle_config.get('binance_url', 'https://api.binance.com/api/v3'),
            refresh_interval=oracle_config.get('refresh_interval_seconds', 30),
            timeout=oracle_config.get('timeout', 10.0),
        )

    def start(self):
        """Refresh once, then keep refreshing in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            log.warning("Price oracle already running; start() ignored")
            return

        log.info("Initializing price oracle...")
        self.refresh()

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="price-oracle", daemon=True)
        self._thread.start()
        log.info(f"Price oracle started (interval={self.refresh_interval}s)")

    def stop(self):
        """Stop the refresh thread and release the HTTP client."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
            log.info("Price oracle stopped")
        self.client.close()

    def _run_loop(self):
        while not self._stop_event.wait(self.refresh_interval):
            try:
                self.refresh()
            except Exception as e:
                log.error(f"Price refresh tick failed: {e}", exc_info=True)

    def refresh(self) -> bool:
        """
        Fetch latest prices, primary feed first.

        Returns:
            True if either feed succeeded, False if stale prices are kept
        """
        try:
            updates = self._fetch_coingecko()
            source = "CoinGecko"
        except (httpx.HTTPError, PriceFeedError) as e:
            log.error(f"Failed to update prices from CoinGecko: {e}")
            try:
                updates = self._fetch_binance()
                source = "Binance (fallback)"
            except (httpx.HTTPError, PriceFeedError) as fallback_error:
                log.error(f"Fallback to Binance also failed: {fallback_error}")
                return False

        with self._lock:
            self._prices.update(updates)
            for token in STABLECOINS:
                self._prices[token] = 1.0
            self._last_updated = utc_now()
            eth, wbtc = self._prices['ETH'], self._prices['WBTC']

        log.info(f"Prices updated from {source}: ETH=${eth:,.2f}, WBTC=${wbtc:,.2f}")
        return True

    def _fetch_coingecko(self) -> Dict[str, float]:
        response = self.client.get(
            f"{self.coingecko_url}/simple/price",
            params={'ids': 'ethereum,bitcoin', 'vs_currencies': 'usd'}
        )
        if response.status_code != 200:
            raise PriceFeedError(f"CoinGecko API error: {response.status_code}")

        try:
            data = response.json()
            # Missing entries keep the cached value
            eth = (data.get('ethereum') or {}).get('usd')
            btc = (data.get('bitcoin') or {}).get('usd')
            updates = {}
            if eth:
                updates['ETH'] = float(eth)
            if btc:
                updates['WBTC'] = float(btc)
        except (AttributeError, TypeError, ValueError) as e:
            raise PriceFeedError(f"Unexpected CoinGecko payload: {e}")
        return updates

    def _fetch_binance(self) -> Dict[str, float]:
        return {
            'ETH': self._fetch_binance_ticker('ETHUSDT'),
            'WBTC': self._fetch_binance_ticker('BTCUSDT'),
        }

    def _fetch_binance_ticker(self, symbol: str) -> float:
        response = self.client.get(f"{self.binance_url}/ticker/price", params={'symbol': symbol})
        if response.status_code != 200:
            raise PriceFeedError(f"Binance API error for {symbol}: {response.status_code}")
        try:
            return float(response.json()['price'])
        except (KeyError, AttributeError, TypeError, ValueError) as e:
            raise PriceFeedError(f"Unexpected Binance payload for {symbol}: {e}")

    def get_price(self, token: str) -> float:
        """USD price of a token, 0 if unknown."""
        with self._lock:
            return self._prices.get(token, 0.0)

    def get_all_prices(self) -> dict:
        with self._lock:
            return {
                'prices': dict(self._prices),
                'lastUpdated': self._last_updated,
            }

    def get_exchange_rate(self, token_in: str, token_out: str) -> float:
        """How much token_out one token_in buys at oracle prices."""
        price_in = self.get_price(token_in)
        price_out = self.get_price(token_out)
        if price_out == 0:
            return 0.0
        return price_in / price_out

    def calculate_swap_output(self, token_in: str, token_out: str, amount_in: float, fee: int = 30) -> float:
        fee_multiplier = (10000 - fee) / 10000
        return amount_in * self.get_exchange_rate(token_in, token_out) * fee_multiplier

    def calculate_price_impact(self, amount_in: float, reserve_in: float, reserve_out: float) -> float:
        """Price impact in percent under the constant-product curve."""
        impact = amm.price_impact(
            Decimal(str(amount_in)),
            Decimal(str(reserve_in)),
            Decimal(str(reserve_out))
        )
        return float(impact)
