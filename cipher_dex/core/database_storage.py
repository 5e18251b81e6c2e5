"""Relational storage backend built on peewee."""

import uuid
from decimal import Decimal
from typing import List, Optional

from peewee import Database

from cipher_dex.core.amm import format_amount
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
from cipher_dex.core.models import (
    ALL_MODELS,
    BalanceRecord,
    LimitOrderRecord,
    PoolRecord,
    TransactionRecord,
    db,
)
from cipher_dex.core.storage import Storage


class DatabaseStorage(Storage):
    """Storage over four tables: pools, balances, transactions, limit_orders."""

    def __init__(self, database: Database):
        """
        Bind the models to a concrete database.

        Args:
            database: Peewee Database instance (PostgreSQL or SQLite)
        """
        self.database = database
        db.initialize(database)
        self._initialized = False

    def initialize(self) -> None:
        """
        Connect, create tables and seed default pools.

        Raises:
            peewee.PeeweeException: If the database is unreachable
        """
        if self._initialized:
            return

        log.info("Initializing database storage...")
        db.connect(reuse_if_open=True)
        db.create_tables(ALL_MODELS, safe=True)

        if PoolRecord.select().count() == 0:
            with db.atomic():
                for pool_data in DEFAULT_POOLS:
                    self.create_pool(**pool_data)
            log.info(f"Seeded {len(DEFAULT_POOLS)} default pool(s)")

        self._initialized = True
        log.info("Database storage initialized")

    def close(self) -> None:
        if not db.is_closed():
            db.close()

    # Pools

    def create_pool(
        self,
        token_a: str,
        token_b: str,
        reserve_a: str = "0",
        reserve_b: str = "0",
        fee: int = DEFAULT_FEE_BPS,
        total_liquidity: str = "0"
    ) -> Pool:
        record = PoolRecord.create(
            id=str(uuid.uuid4()),
            token_a=token_a,
            token_b=token_b,
            reserve_a=Decimal(reserve_a or "0"),
            reserve_b=Decimal(reserve_b or "0"),
            fee=fee or DEFAULT_FEE_BPS,
            total_liquidity=Decimal(total_liquidity or "0"),
        )
        return self._to_pool(PoolRecord.get_by_id(record.id))

    def get_pool(self, token_a: str, token_b: str) -> Optional[Pool]:
        record = (
            PoolRecord.select()
            .where(
                ((PoolRecord.token_a == token_a) & (PoolRecord.token_b == token_b))
                | ((PoolRecord.token_a == token_b) & (PoolRecord.token_b == token_a))
            )
            .first()
        )
        return self._to_pool(record) if record else None

    def get_pool_by_id(self, pool_id: str) -> Optional[Pool]:
        record = PoolRecord.get_or_none(PoolRecord.id == pool_id)
        return self._to_pool(record) if record else None

    def get_all_pools(self) -> List[Pool]:
        return [self._to_pool(r) for r in PoolRecord.select().order_by(PoolRecord.created_at)]

    def update_pool_reserves(self, pool_id: str, reserve_a: str, reserve_b: str) -> Pool:
        updated = (
            PoolRecord.update(reserve_a=Decimal(reserve_a), reserve_b=Decimal(reserve_b))
            .where(PoolRecord.id == pool_id)
            .execute()
        )
        if not updated:
            raise NotFoundError(f"Pool with id {pool_id} not found")
        return self._to_pool(PoolRecord.get_by_id(pool_id))

    # Balances

    def get_balance(self, wallet_address: str, token: str) -> Optional[Balance]:
        record = BalanceRecord.get_or_none(
            (BalanceRecord.wallet_address == wallet_address) & (BalanceRecord.token == token)
        )
        return self._to_balance(record) if record else None

    def get_balances_by_wallet(self, wallet_address: str) -> List[Balance]:
        query = (
            BalanceRecord.select()
            .where(BalanceRecord.wallet_address == wallet_address)
            .order_by(BalanceRecord.token)
        )
        return [self._to_balance(r) for r in query]

    def upsert_balance(self, wallet_address: str, token: str, encrypted_value: str) -> Balance:
        now = utc_now()

        # INSERT ... ON CONFLICT UPDATE keeps the original row id
        BalanceRecord.insert(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            token=token,
            encrypted_value=encrypted_value,
            last_updated=now
        ).on_conflict(
            conflict_target=[BalanceRecord.wallet_address, BalanceRecord.token],
            update={
                BalanceRecord.encrypted_value: encrypted_value,
                BalanceRecord.last_updated: now
            }
        ).execute()

        return self.get_balance(wallet_address, token)

    # Transactions

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
        record = TransactionRecord.create(
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
        return self._to_transaction(record)

    def get_transactions_by_wallet(self, wallet_address: str) -> List[Transaction]:
        query = (
            TransactionRecord.select()
            .where(TransactionRecord.wallet_address == wallet_address)
            .order_by(TransactionRecord.timestamp.desc())
        )
        return [self._to_transaction(r) for r in query]

    def get_all_transactions(self) -> List[Transaction]:
        query = TransactionRecord.select().order_by(TransactionRecord.timestamp.desc())
        return [self._to_transaction(r) for r in query]

    def update_transaction_status(
        self,
        transaction_id: str,
        status: str,
        tx_hash: Optional[str] = None
    ) -> Transaction:
        self._check_transaction_status(status)
        fields = {TransactionRecord.status: status}
        if tx_hash:
            fields[TransactionRecord.tx_hash] = tx_hash

        updated = TransactionRecord.update(fields).where(TransactionRecord.id == transaction_id).execute()
        if not updated:
            raise NotFoundError(f"Transaction with id {transaction_id} not found")
        return self._to_transaction(TransactionRecord.get_by_id(transaction_id))

    # Limit orders

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
        record = LimitOrderRecord.create(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            token_in=token_in,
            token_out=token_out,
            amount_in=Decimal(amount_in),
            limit_price=Decimal(limit_price),
            status=status,
        )
        return self._to_limit_order(LimitOrderRecord.get_by_id(record.id))

    def get_limit_order(self, order_id: str) -> Optional[LimitOrder]:
        record = LimitOrderRecord.get_or_none(LimitOrderRecord.id == order_id)
        return self._to_limit_order(record) if record else None

    def get_limit_orders_by_wallet(self, wallet_address: str) -> List[LimitOrder]:
        query = (
            LimitOrderRecord.select()
            .where(LimitOrderRecord.wallet_address == wallet_address)
            .order_by(LimitOrderRecord.created_at.desc())
        )
        return [self._to_limit_order(r) for r in query]

    def update_limit_order_status(self, order_id: str, status: str) -> LimitOrder:
        self._check_order_status(status)
        fields = {LimitOrderRecord.status: status}
        if status == ORDER_STATUS_EXECUTED:
            fields[LimitOrderRecord.executed_at] = utc_now()

        updated = LimitOrderRecord.update(fields).where(LimitOrderRecord.id == order_id).execute()
        if not updated:
            raise NotFoundError(f"Limit order with id {order_id} not found")
        return self._to_limit_order(LimitOrderRecord.get_by_id(order_id))

    # Row -> record conversion

    @staticmethod
    def _to_pool(record: PoolRecord) -> Pool:
        return Pool(
            id=record.id,
            token_a=record.token_a,
            token_b=record.token_b,
            reserve_a=format_amount(record.reserve_a),
            reserve_b=format_amount(record.reserve_b),
            fee=record.fee,
            total_liquidity=format_amount(record.total_liquidity),
            created_at=record.created_at,
        )

    @staticmethod
    def _to_balance(record: BalanceRecord) -> Balance:
        return Balance(
            id=record.id,
            wallet_address=record.wallet_address,
            token=record.token,
            encrypted_value=record.encrypted_value,
            last_updated=record.last_updated,
        )

    @staticmethod
    def _to_transaction(record: TransactionRecord) -> Transaction:
        return Transaction(
            id=record.id,
            wallet_address=record.wallet_address,
            type=record.type,
            from_token=record.from_token,
            to_token=record.to_token,
            amount=record.amount,
            status=record.status,
            tx_hash=record.tx_hash,
            timestamp=record.timestamp,
            encrypted=record.encrypted,
        )

    @staticmethod
    def _to_limit_order(record: LimitOrderRecord) -> LimitOrder:
        return LimitOrder(
            id=record.id,
            wallet_address=record.wallet_address,
            token_in=record.token_in,
            token_out=record.token_out,
            amount_in=format_amount(record.amount_in),
            limit_price=format_amount(record.limit_price),
            status=record.status,
            created_at=record.created_at,
            executed_at=record.executed_at,
        )
