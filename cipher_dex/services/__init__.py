"""
Services layer for the cipher-dex exchange.

Business operations shared by the HTTP API and scripts. Every service
receives the storage backend chosen at startup explicitly.
"""

from cipher_dex.services.analytics_service import AnalyticsService
from cipher_dex.services.ledger_service import LedgerService
from cipher_dex.services.liquidity_service import LiquidityService
from cipher_dex.services.order_service import OrderService
from cipher_dex.services.swap_service import SwapService

__all__ = [
    'AnalyticsService',
    'LedgerService',
    'LiquidityService',
    'OrderService',
    'SwapService',
]
