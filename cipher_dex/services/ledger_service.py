"""
Wallet ledger service.

Reads and adjusts per-wallet encrypted balances and exposes the
transaction history. Balance arithmetic always goes through the mock
confidentiality service: stored values are decrypted, adjusted and
re-encrypted.
"""

import logging
import random
from decimal import Decimal
from typing import Dict, List

from cipher_dex.core.confidential import MockConfidentialService
from cipher_dex.core.entities import Balance, Transaction
from cipher_dex.core.errors import ValidationError
from cipher_dex.core.keyed_lock import KeyedLock
from cipher_dex.core.storage import Storage

logger = logging.getLogger(__name__)

# Seed amounts are drawn on a micro-unit grid
SEED_SCALE = 10 ** 6


def balance_key(wallet_address: str, token: str) -> tuple:
    return ('balance', wallet_address, token)


class LedgerService:
    """Service for wallet balances and transaction history."""

    def __init__(
        self,
        storage: Storage,
        confidential: MockConfidentialService,
        locks: KeyedLock,
        seed_min: float = 10,
        seed_max: float = 110
    ):
        """
        Initialize ledger service.

        Args:
            storage: Active storage backend
            confidential: Mock confidentiality service for balance encoding
            locks: Shared keyed lock serializing balance updates
            seed_min: Lower bound (inclusive) of a lazily seeded balance
            seed_max: Upper bound (exclusive) of a lazily seeded balance
        """
        self.storage = storage
        self.confidential = confidential
        self.locks = locks
        self.seed_min = seed_min
        self.seed_max = seed_max

    def get_or_seed_balance(self, wallet_address: str, token: str) -> Balance:
        """
        Return the stored balance, seeding a random one on first access.

        Args:
            wallet_address: Wallet address
            token: Token symbol

        Returns:
            Balance record holding the encrypted value

        Raises:
            ValidationError: If wallet address or token is empty
        """
        if not wallet_address:
            raise ValidationError("Wallet address required")
        if not token:
            raise ValidationError("Token required")

        with self.locks.hold(balance_key(wallet_address, token)):
            balance = self.storage.get_balance(wallet_address, token)
            if balance is not None:
                return balance

            amount = self._random_seed_amount()
            logger.info(f"Seeding {token} balance for wallet {wallet_address}")
            return self.storage.upsert_balance(
                wallet_address, token, self.confidential.encrypt(amount)
            )

    def get_wallet_balances(self, wallet_address: str) -> List[Balance]:
        if not wallet_address:
            raise ValidationError("Wallet address required")
        return self.storage.get_balances_by_wallet(wallet_address)

    def get_amount(self, wallet_address: str, token: str) -> Decimal:
        """Decrypted balance, 0 when the wallet has no record for the token."""
        balance = self.storage.get_balance(wallet_address, token)
        if balance is None:
            return Decimal(0)
        return self.confidential.decrypt(balance.encrypted_value)

    def adjust_balances(self, wallet_address: str, deltas: Dict[str, Decimal]) -> Dict[str, Decimal]:
        """
        Apply signed deltas to several token balances of one wallet.

        Each resulting balance is floored at zero. All affected (wallet,
        token) locks are held for the whole read-modify-write.

        Args:
            wallet_address: Wallet address
            deltas: Token symbol -> signed amount to add

        Returns:
            Token symbol -> new plaintext balance
        """
        keys = [balance_key(wallet_address, token) for token in deltas]
        new_amounts = {}

        with self.locks.hold(*keys):
            for token, delta in deltas.items():
                current = self.get_amount(wallet_address, token)
                new_amount = max(Decimal(0), current + delta)
                self.storage.upsert_balance(
                    wallet_address, token, self.confidential.encrypt(new_amount)
                )
                new_amounts[token] = new_amount

        logger.debug(f"Adjusted balances for wallet {wallet_address}: {sorted(deltas)}")
        return new_amounts

    def get_transactions(self, wallet_address: str) -> List[Transaction]:
        """Transaction history of a wallet, newest first."""
        if not wallet_address:
            raise ValidationError("Wallet address required")
        return self.storage.get_transactions_by_wallet(wallet_address)

    def _random_seed_amount(self) -> Decimal:
        low = int(Decimal(str(self.seed_min)) * SEED_SCALE)
        high = int(Decimal(str(self.seed_max)) * SEED_SCALE)
        return Decimal(random.randrange(low, high)) / SEED_SCALE
