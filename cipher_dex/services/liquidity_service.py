"""
Liquidity service.

Creates pools and adds liquidity to existing ones. Added amounts go
straight into the reserves without enforcing the current reserve ratio.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from cipher_dex.core import amm
from cipher_dex.core.confidential import MockConfidentialService
from cipher_dex.core.entities import TX_STATUS_COMPLETED, TX_TYPE_LIQUIDITY
from cipher_dex.core.errors import ConflictError, NotFoundError, ValidationError
from cipher_dex.core.keyed_lock import KeyedLock
from cipher_dex.core.storage import Storage
from cipher_dex.services.ledger_service import LedgerService
from cipher_dex.services.swap_service import pool_key, require_positive

logger = logging.getLogger(__name__)


def pair_key(token_a: str, token_b: str) -> tuple:
    return ('pair',) + tuple(sorted((token_a, token_b)))


class LiquidityService:
    """Service for pool creation and liquidity provision."""

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

    def create_pool(
        self,
        wallet_address: str,
        token_a: str,
        token_b: str,
        amount_a: Decimal,
        amount_b: Decimal,
        fee: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Create a pool seeded with the wallet's tokens.

        Args:
            wallet_address: Liquidity provider wallet
            token_a: First token symbol
            token_b: Second token symbol
            amount_a: Initial reserve of token_a
            amount_b: Initial reserve of token_b
            fee: Fee in basis points (0 or None means 30)

        Returns:
            Dictionary with tx_hash, the new pool and the recorded transaction

        Raises:
            ValidationError: If amounts are not positive or the tokens are identical
            ConflictError: If a pool for the pair exists in either order
        """
        amount_a = require_positive("amountA", amount_a)
        amount_b = require_positive("amountB", amount_b)
        if token_a == token_b:
            raise ValidationError("tokenA and tokenB must be different")
        if fee is not None and not 0 <= fee < 10000:
            raise ValidationError("fee must be between 0 and 9999 basis points")

        with self.locks.hold(pair_key(token_a, token_b)):
            if self.storage.get_pool(token_a, token_b) is not None:
                raise ConflictError("Pool already exists")

            pool = self.storage.create_pool(
                token_a=token_a,
                token_b=token_b,
                reserve_a=amm.format_amount(amount_a),
                reserve_b=amm.format_amount(amount_b),
                fee=amm.effective_fee(fee),
                total_liquidity=amm.format_amount(amm.initial_liquidity(amount_a, amount_b))
            )

        self.ledger.adjust_balances(wallet_address, {
            token_a: -amount_a,
            token_b: -amount_b,
        })

        transaction = self._record(wallet_address, token_a, token_b, amount_a)
        logger.info(
            f"Pool {token_a}/{token_b} created by {wallet_address} "
            f"(fee={pool.fee}bps, liquidity={pool.total_liquidity})"
        )

        return {
            "tx_hash": transaction.tx_hash,
            "pool": pool,
            "transaction": transaction,
        }

    def add_liquidity(
        self,
        wallet_address: str,
        token_a: str,
        token_b: str,
        amount_a: Decimal,
        amount_b: Decimal
    ) -> Dict[str, Any]:
        """
        Add tokens to an existing pool's reserves.

        Raises:
            ValidationError: If amounts are not positive
            NotFoundError: If no pool exists for the pair
        """
        amount_a = require_positive("amountA", amount_a)
        amount_b = require_positive("amountB", amount_b)

        pool = self.storage.get_pool(token_a, token_b)
        if pool is None:
            raise NotFoundError("Pool not found")

        with self.locks.hold(pool_key(pool.id)):
            pool = self.storage.get_pool_by_id(pool.id)
            if pool is None:
                raise NotFoundError("Pool not found")

            # Map the caller's token order onto the stored sides
            if pool.token_a == token_a:
                new_reserve_a = Decimal(pool.reserve_a) + amount_a
                new_reserve_b = Decimal(pool.reserve_b) + amount_b
            else:
                new_reserve_a = Decimal(pool.reserve_a) + amount_b
                new_reserve_b = Decimal(pool.reserve_b) + amount_a

            self.storage.update_pool_reserves(
                pool.id,
                amm.format_amount(new_reserve_a),
                amm.format_amount(new_reserve_b)
            )

            self.ledger.adjust_balances(wallet_address, {
                token_a: -amount_a,
                token_b: -amount_b,
            })

        transaction = self._record(wallet_address, token_a, token_b, amount_a)
        logger.info(f"Liquidity added to {token_a}/{token_b} by {wallet_address}")

        return {
            "tx_hash": transaction.tx_hash,
            "transaction": transaction,
        }

    def _record(self, wallet_address: str, token_a: str, token_b: str, amount_a: Decimal):
        return self.storage.create_transaction(
            wallet_address=wallet_address,
            type=TX_TYPE_LIQUIDITY,
            from_token=token_a,
            to_token=token_b,
            amount=amm.format_amount(amount_a),
            status=TX_STATUS_COMPLETED,
            tx_hash=self.confidential.generate_tx_hash(),
            encrypted=True
        )
