"""Read-side aggregation over pools and transactions."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from cipher_dex.core.entities import TX_TYPE_SWAP, utc_now
from cipher_dex.core.price_oracle import PriceOracle
from cipher_dex.core.storage import Storage

VOLUME_WINDOW = timedelta(hours=24)


class AnalyticsService:
    """USD-denominated exchange statistics."""

    def __init__(self, storage: Storage, oracle: PriceOracle):
        self.storage = storage
        self.oracle = oracle

    def get_analytics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Aggregate volume, liquidity and activity counts.

        Volume counts swap transactions of the trailing 24 hours valued at
        the current oracle price of the sold token.

        Args:
            now: Reference time (UTC); defaults to the current time

        Returns:
            Dictionary in the API's camelCase shape
        """
        now = now or utc_now()
        cutoff = now - VOLUME_WINDOW

        transactions = self.storage.get_all_transactions()
        pools = self.storage.get_all_pools()

        recent_swaps = [
            tx for tx in transactions
            if tx.type == TX_TYPE_SWAP and tx.timestamp > cutoff
        ]

        total_volume_24h = 0.0
        for tx in recent_swaps:
            total_volume_24h += float(tx.amount) * self.oracle.get_price(tx.from_token)

        total_liquidity = 0.0
        for pool in pools:
            total_liquidity += float(pool.reserve_a) * self.oracle.get_price(pool.token_a)
            total_liquidity += float(pool.reserve_b) * self.oracle.get_price(pool.token_b)

        avg_trade_size = total_volume_24h / len(recent_swaps) if recent_swaps else 0

        return {
            "totalVolume24h": total_volume_24h,
            "totalLiquidity": total_liquidity,
            "activePools": len(pools),
            "avgTradeSize": avg_trade_size,
            "totalTransactions": len(transactions),
            "transactions24h": len(recent_swaps),
        }
