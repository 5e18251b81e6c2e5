"""In-memory storage implementation."""

import uuid
from dataclasses import replace
from threading import Lock
from typing import Dict, List, Optional, Tuple

from cipher_dex.core.entities import (
    Balance,
    DEFAULT_FEE_BPS,
    DEFAULT_POOLS,
    LimitOrder,
    ORDER_STATUS_ACTIVE,
    ORDER_STATUS_EXECUTED,
    Pool,
    Transaction,
    TX_STATUS_PENDING,
    utc_now,
)
from cipher_dex.core.errors import NotFoundError
from cipher_dex.core.logger import log
from cipher_dex.core.storage import Storage


class InMemoryStorage(Storage):
    """Map-based storage for development and testing; reset on restart."""

    def __init__(self):
        self.pools: Dict[str, Pool] = {}
        self.balances: Dict[Tuple[str, str], Balance] = {}
        self.transactions: List[Transaction] = []
        self.limit_orders: List[LimitOrder] = []
        self._lock = Lock()
        self._initialized = False

    def initialize(self) -> None:
        if self._initialized:
            return

        log.info("Initializing in-memory storage...")
        if not self.pools:
            for pool_data in DEFAULT_POOLS:
                self.create_pool(**pool_data)

        self._initialized = True
        log.info(f"In-memory storage initialized with {len(self.pools)} pool(s)")

    def create_pool(
        self,
        token_a: str,
        token_b: str,
        reserve_a: str = "0",
        reserve_b: str = "0",
        fee: int = DEFAULT_FEE_BPS,
        total_liquidity: str = "0"
    ) -> Pool:
        pool = Pool(
            id=str(uuid.uuid4()),
            token_a=token_a,
            token_b=token_b,
            reserve_a=reserve_a or "0",
            reserve_b=reserve_b or "0",
            fee=fee or DEFAULT_FEE_BPS,
            total_liquidity=total_liquidity or "0",
        )
        with self._lock:
            self.pools[pool.id] = pool
        return replace(pool)

    def get_pool(self, token_a: str, token_b: str) -> Optional[Pool]:
        with self._lock:
            for pool in self.pools.values():
                if pool.matches(token_a, token_b):
                    return replace(pool)
        return None

    def get_pool_by_id(self, pool_id: str) -> Optional[Pool]:
        with self._lock:
            pool = self.pools.get(pool_id)
            return replace(pool) if pool else None

    def get_all_pools(self) -> List[Pool]:
        with self._lock:
            return [replace(pool) for pool in self.pools.values()]

    def update_pool_reserves(self, pool_id: str, reserve_a: str, reserve_b: str) -> Pool:
        with self._lock:
            pool = self.pools.get(pool_id)
            if pool is None:
                raise NotFoundError(f"Pool with id {pool_id} not found")

            updated = replace(pool, reserve_a=reserve_a, reserve_b=reserve_b)
            self.pools[pool_id] = updated
            return replace(updated)

    def get_balance(self, wallet_address: str, token: str) -> Optional[Balance]:
        with self._lock:
            balance = self.balances.get((wallet_address, token))
            return replace(balance) if balance else None

    def get_balances_by_wallet(self, wallet_address: str) -> List[Balance]:
        with self._lock:
            matching = [
                replace(balance)
                for (wallet, _), balance in self.balances.items()
                if wallet == wallet_address
            ]
        return sorted(matching, key=lambda balance: balance.token)

    def upsert_balance(self, wallet_address: str, token: str, encrypted_value: str) -> Balance:
        key = (wallet_address, token)
        with self._lock:
            existing = self.balances.get(key)
            balance = Balance(
                id=existing.id if existing else str(uuid.uuid4()),
                wallet_address=wallet_address,
                token=token,
                encrypted_value=encrypted_value,
                last_updated=utc_now(),
            )
            self.balances[key] = balance
            return replace(balance)

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
        self._check_transaction_status(status)
        transaction = Transaction(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            type=type,
            from_token=from_token,
            to_token=to_token,
            amount=amount,
            status=status,
            tx_hash=tx_hash,
            encrypted=encrypted,
        )
        with self._lock:
            self.transactions.append(transaction)
        return replace(transaction)

    def get_transactions_by_wallet(self, wallet_address: str) -> List[Transaction]:
        with self._lock:
            matching = [tx for tx in self.transactions if tx.wallet_address == wallet_address]
        return self._newest_first(matching, lambda tx: tx.timestamp)

    def get_all_transactions(self) -> List[Transaction]:
        with self._lock:
            snapshot = list(self.transactions)
        return self._newest_first(snapshot, lambda tx: tx.timestamp)

    def update_transaction_status(
        self,
        transaction_id: str,
        status: str,
        tx_hash: Optional[str] = None
    ) -> Transaction:
        self._check_transaction_status(status)
        with self._lock:
            for index, tx in enumerate(self.transactions):
                if tx.id == transaction_id:
                    updated = replace(tx, status=status, tx_hash=tx_hash or tx.tx_hash)
                    self.transactions[index] = updated
                    return replace(updated)

        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    def create_limit_order(
        self,
        wallet_address: str,
        token_in: str,
        token_out: str,
        amount_in: str,
        limit_price: str,
        status: str = ORDER_STATUS_ACTIVE
    ) -> LimitOrder:
        self._check_order_status(status)
        order = LimitOrder(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            limit_price=limit_price,
            status=status,
        )
        with self._lock:
            self.limit_orders.append(order)
        return replace(order)

    def get_limit_order(self, order_id: str) -> Optional[LimitOrder]:
        with self._lock:
            for order in self.limit_orders:
                if order.id == order_id:
                    return replace(order)
        return None

    def get_limit_orders_by_wallet(self, wallet_address: str) -> List[LimitOrder]:
        with self._lock:
            matching = [o for o in self.limit_orders if o.wallet_address == wallet_address]
        return self._newest_first(matching, lambda order: order.created_at)

    def update_limit_order_status(self, order_id: str, status: str) -> LimitOrder:
        self._check_order_status(status)
        with self._lock:
            for index, order in enumerate(self.limit_orders):
                if order.id == order_id:
                    executed_at = utc_now() if status == ORDER_STATUS_EXECUTED else order.executed_at
                    updated = replace(order, status=status, executed_at=executed_at)
                    self.limit_orders[index] = updated
                    return replace(updated)

        raise NotFoundError(f"Limit order with id {order_id} not found")

    @staticmethod
    def _newest_first(records, key):
        # Reverse insertion order first so ties keep the latest record on top
        return [replace(r) for r in sorted(reversed(records), key=key, reverse=True)]
