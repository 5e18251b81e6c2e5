"""
Limit order service.

Orders are only recorded, listed and cancelled; there is no matching
engine, so nothing moves an order to ``executed`` automatically.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from cipher_dex.core import amm
from cipher_dex.core.entities import (
    LimitOrder,
    ORDER_STATUS_ACTIVE,
    ORDER_STATUS_CANCELLED,
)
from cipher_dex.core.errors import NotFoundError, ValidationError
from cipher_dex.core.storage import Storage
from cipher_dex.services.swap_service import require_positive

logger = logging.getLogger(__name__)


class OrderService:
    """Service for limit order bookkeeping."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def create_limit_order(
        self,
        wallet_address: str,
        token_in: str,
        token_out: str,
        amount_in: Decimal,
        limit_price: Decimal
    ) -> LimitOrder:
        """
        Create an active limit order.

        Raises:
            ValidationError: If amount_in or limit_price is not positive
        """
        amount_in = require_positive("amountIn", amount_in)
        limit_price = require_positive("limitPrice", limit_price)

        order = self.storage.create_limit_order(
            wallet_address=wallet_address,
            token_in=token_in,
            token_out=token_out,
            amount_in=amm.format_amount(amount_in),
            limit_price=amm.format_amount(limit_price),
            status=ORDER_STATUS_ACTIVE
        )
        logger.info(f"Limit order {order.id} created: {amount_in} {token_in} -> {token_out} @ {limit_price}")
        return order

    def get_orders(self, wallet_address: str) -> List[LimitOrder]:
        """Limit orders of a wallet, newest first."""
        if not wallet_address:
            raise ValidationError("Wallet address required")
        return self.storage.get_limit_orders_by_wallet(wallet_address)

    def cancel_order(self, order_id: str, wallet_address: Optional[str] = None) -> LimitOrder:
        """
        Cancel an active order.

        Args:
            order_id: Order to cancel
            wallet_address: If given, the order must belong to this wallet

        Raises:
            NotFoundError: If the order does not exist (or belongs to another wallet)
            ValidationError: If the order is no longer active
        """
        order = self.storage.get_limit_order(order_id)
        if order is None or (wallet_address and order.wallet_address != wallet_address):
            raise NotFoundError("Limit order not found")

        if order.status != ORDER_STATUS_ACTIVE:
            raise ValidationError(f"Only active orders can be cancelled (status: {order.status})")

        cancelled = self.storage.update_limit_order_status(order_id, ORDER_STATUS_CANCELLED)
        logger.info(f"Limit order {order_id} cancelled")
        return cancelled
