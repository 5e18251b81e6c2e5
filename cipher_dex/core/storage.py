"""Storage abstract base class for pools, balances, transactions and limit orders."""

from abc import ABC, abstractmethod
from typing import List, Optional

from cipher_dex.core.entities import (
    Balance,
    LimitOrder,
    ORDER_STATUS_ACTIVE,
    ORDER_STATUSES,
    Pool,
    Transaction,
    TX_STATUS_PENDING,
    TX_STATUSES,
)
from cipher_dex.core.errors import ValidationError


class Storage(ABC):
    """
    Persistence interface shared by the in-memory and relational backends.

    Callers must not depend on which implementation is active. Records are
    returned as detached copies; mutating one does not change the store.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the backend and seed the default pools if none exist."""
        pass

    # Pools

    @abstractmethod
    def create_pool(
        self,
        token_a: str,
        token_b: str,
        reserve_a: str = "0",
        reserve_b: str = "0",
        fee: int = 30,
        total_liquidity: str = "0"
    ) -> Pool:
        """Insert a new pool and return it."""
        pass

    @abstractmethod
    def get_pool(self, token_a: str, token_b: str) -> Optional[Pool]:
        """
        Find the pool for a token pair.

        Args:
            token_a: One token of the pair
            token_b: The other token of the pair

        Returns:
            Pool regardless of argument order, or None
        """
        pass

    @abstractmethod
    def get_pool_by_id(self, pool_id: str) -> Optional[Pool]:
        pass

    @abstractmethod
    def get_all_pools(self) -> List[Pool]:
        pass

    @abstractmethod
    def update_pool_reserves(self, pool_id: str, reserve_a: str, reserve_b: str) -> Pool:
        """
        Overwrite both reserves of a pool.

        Raises:
            NotFoundError: If the pool id is unknown
        """
        pass

    # Balances

    @abstractmethod
    def get_balance(self, wallet_address: str, token: str) -> Optional[Balance]:
        pass

    @abstractmethod
    def get_balances_by_wallet(self, wallet_address: str) -> List[Balance]:
        pass

    @abstractmethod
    def upsert_balance(self, wallet_address: str, token: str, encrypted_value: str) -> Balance:
        """Update the (wallet, token) record in place, or insert it."""
        pass

    # Transactions

    @abstractmethod
    def create_transaction(
        self,
        wallet_address: str,
        type: str,
        from_token: str,
        to_token: str,
        amount: str,
        status: str = TX_STATUS_PENDING,
        tx_hash: Optional[str] = None,
        encrypted: bool = True
    ) -> Transaction:
        pass

    @abstractmethod
    def get_transactions_by_wallet(self, wallet_address: str) -> List[Transaction]:
        """Transactions of one wallet, newest first."""
        pass

    @abstractmethod
    def get_all_transactions(self) -> List[Transaction]:
        """All transactions, newest first."""
        pass

    @abstractmethod
    def update_transaction_status(
        self,
        transaction_id: str,
        status: str,
        tx_hash: Optional[str] = None
    ) -> Transaction:
        """
        Change a transaction's status, and its hash when one is given.

        Raises:
            NotFoundError: If the transaction id is unknown
        """
        pass

    # Limit orders

    @abstractmethod
    def create_limit_order(
        self,
        wallet_address: str,
        token_in: str,
        token_out: str,
        amount_in: str,
        limit_price: str,
        status: str = ORDER_STATUS_ACTIVE
    ) -> LimitOrder:
        pass

    @abstractmethod
    def get_limit_order(self, order_id: str) -> Optional[LimitOrder]:
        pass

    @abstractmethod
    def get_limit_orders_by_wallet(self, wallet_address: str) -> List[LimitOrder]:
        """Limit orders of one wallet, newest first."""
        pass

    @abstractmethod
    def update_limit_order_status(self, order_id: str, status: str) -> LimitOrder:
        """
        Change a limit order's status; ``executed`` also stamps executed_at.

        Raises:
            NotFoundError: If the order id is unknown
        """
        pass

    @staticmethod
    def _check_transaction_status(status: str):
        if status not in TX_STATUSES:
            raise ValidationError(f"Invalid transaction status: {status}")

    @staticmethod
    def _check_order_status(status: str):
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid limit order status: {status}")
