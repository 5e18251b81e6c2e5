"""
Swap service.

Executes market swaps against constant-product pools and records limit
swap requests. Reserve updates for a pool and balance updates for a
wallet are serialized through the shared keyed lock, so concurrent swaps
on the same pool cannot apply updates computed from stale reserves.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from cipher_dex.core import amm
from cipher_dex.core.confidential import MockConfidentialService
from cipher_dex.core.entities import (
    ORDER_STATUS_ACTIVE,
    TX_STATUS_COMPLETED,
    TX_STATUS_PENDING,
    TX_TYPE_SWAP,
)
from cipher_dex.core.errors import NotFoundError, SlippageExceededError, ValidationError
from cipher_dex.core.keyed_lock import KeyedLock
from cipher_dex.core.storage import Storage
from cipher_dex.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def pool_key(pool_id: str) -> tuple:
    return ('pool', pool_id)


def require_positive(name: str, value: Optional[Decimal]) -> Decimal:
    if value is None:
        raise ValidationError("Missing required fields")
    if value <= 0:
        raise ValidationError(f"{name} must be greater than 0")
    return value


class SwapService:
    """Service for market and limit swaps."""

    def __init__(
        self,
        storage: Storage,
        ledger: LedgerService,
        confidential: MockConfidentialService,
        locks: KeyedLock
    ):
        self.storage = storage
        self.ledger = ledger
        self.confidential = confidential
        self.locks = locks

    def quote(self, token_in: str, token_out: str, amount_in: Decimal) -> Dict[str, Any]:
        """
        Expected curve output for a swap, without touching any state.

        Raises:
            ValidationError: If amount_in is not positive or the output would empty the reserve
            NotFoundError: If no pool exists for the pair
        """
        amount_in = require_positive("amountIn", amount_in)
        pool = self.storage.get_pool(token_in, token_out)
        if pool is None:
            raise NotFoundError("Pool not found")

        reserve_in, reserve_out, _ = amm.resolve_reserves(pool, token_in)
        fee = amm.effective_fee(pool.fee)
        amount_out = amm.get_amount_out(amount_in, reserve_in, reserve_out, fee)
        if amount_out <= 0 or amount_out >= reserve_out:
            raise ValidationError("Insufficient liquidity")

        return {
            "pool_id": pool.id,
            "amount_in": amount_in,
            "amount_out": amount_out,
            "fee": fee,
            "fee_amount": amount_in - amm.amount_after_fee(amount_in, fee),
            "price_impact": amm.price_impact(amount_in, reserve_in, reserve_out),
        }

    def swap(
        self,
        wallet_address: str,
        token_in: str,
        token_out: str,
        amount_in: Decimal,
        min_amount_out: Optional[Decimal] = None
    ) -> Dict[str, Any]:
        """
        Execute a market swap.

        Args:
            wallet_address: Trading wallet
            token_in: Token sold
            token_out: Token bought
            amount_in: Amount of token_in sold (before fee)
            min_amount_out: Optional slippage floor for the output

        Returns:
            Dictionary with tx_hash, amount_out and the recorded transaction

        Raises:
            ValidationError: If amount_in is not positive or the output would empty the reserve
            NotFoundError: If no pool exists for the pair
            SlippageExceededError: If the output is below min_amount_out (nothing is changed)
        """
        amount_in = require_positive("amountIn", amount_in)

        pool = self.storage.get_pool(token_in, token_out)
        if pool is None:
            raise NotFoundError("Pool not found")

        with self.locks.hold(pool_key(pool.id)):
            # Re-read under the lock so the reserves are current
            pool = self.storage.get_pool_by_id(pool.id)
            if pool is None:
                raise NotFoundError("Pool not found")

            reserve_in, reserve_out, token_in_is_a = amm.resolve_reserves(pool, token_in)
            amount_out = amm.get_amount_out(amount_in, reserve_in, reserve_out, pool.fee)
            if amount_out <= 0 or amount_out >= reserve_out:
                raise ValidationError("Insufficient liquidity")

            if min_amount_out and amount_out < min_amount_out:
                logger.info(
                    f"Swap rejected for wallet {wallet_address}: output {amount_out} "
                    f"below minimum {min_amount_out}"
                )
                raise SlippageExceededError("Insufficient output amount")

            new_reserve_in = amm.format_amount(reserve_in + amount_in)
            new_reserve_out = amm.format_amount(reserve_out - amount_out)
            if token_in_is_a:
                self.storage.update_pool_reserves(pool.id, new_reserve_in, new_reserve_out)
            else:
                self.storage.update_pool_reserves(pool.id, new_reserve_out, new_reserve_in)

            self.ledger.adjust_balances(wallet_address, {
                token_in: -amount_in,
                token_out: amount_out,
            })

        tx_hash = self.confidential.generate_tx_hash()
        transaction = self.storage.create_transaction(
            wallet_address=wallet_address,
            type=TX_TYPE_SWAP,
            from_token=token_in,
            to_token=token_out,
            amount=amm.format_amount(amount_in),
            status=TX_STATUS_COMPLETED,
            tx_hash=tx_hash,
            encrypted=True
        )

        logger.info(
            f"Swap executed: wallet={wallet_address}, {amount_in} {token_in} -> "
            f"{amount_out:.6f} {token_out}, tx={tx_hash}"
        )

        return {
            "tx_hash": tx_hash,
            "amount_out": amount_out,
            "transaction": transaction,
        }

    def place_limit_swap(
        self,
        wallet_address: str,
        token_in: str,
        token_out: str,
        amount_in: Decimal,
        limit_price: Optional[Decimal]
    ) -> Dict[str, Any]:
        """
        Record a limit swap: an active order plus a pending transaction.

        Pool reserves and balances are not touched; no matching engine runs
        against the order.

        Raises:
            ValidationError: If limit_price is missing or amounts are not positive
        """
        if not limit_price:
            raise ValidationError("Limit price required for limit orders")
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

        tx_hash = self.confidential.generate_tx_hash()
        transaction = self.storage.create_transaction(
            wallet_address=wallet_address,
            type=TX_TYPE_SWAP,
            from_token=token_in,
            to_token=token_out,
            amount=amm.format_amount(amount_in),
            status=TX_STATUS_PENDING,
            tx_hash=tx_hash,
            encrypted=True
        )

        logger.info(f"Limit order {order.id} created for wallet {wallet_address}")

        return {
            "order": order,
            "tx_hash": tx_hash,
            "transaction": transaction,
        }
