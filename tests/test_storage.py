"""Tests shared by the in-memory and relational storage backends."""

import sys
import unittest
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

from peewee import SqliteDatabase

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cipher_dex.core.database_storage import DatabaseStorage
from cipher_dex.core.entities import DEFAULT_POOLS, utc_now
from cipher_dex.core.errors import NotFoundError, ValidationError
from cipher_dex.core.in_memory_storage import InMemoryStorage
from cipher_dex.core.models import BalanceRecord, LimitOrderRecord, TransactionRecord

WALLET = "0xabc1230000000000000000000000000000000000"
OTHER_WALLET = "0xdef4560000000000000000000000000000000000"


class StorageContractMixin:
    """Behaviour every Storage implementation must provide."""

    def build_storage(self):
        raise NotImplementedError

    def backdate_transaction(self, transaction_id, timestamp):
        raise NotImplementedError

    def backdate_order(self, order_id, created_at):
        raise NotImplementedError

    def setUp(self):
        self.storage = self.build_storage()
        self.storage.initialize()

    def test_seeds_default_pools_once(self):
        pools = self.storage.get_all_pools()
        self.assertEqual(len(pools), len(DEFAULT_POOLS))
        self.assertEqual(
            {(p.token_a, p.token_b) for p in pools},
            {("ETH", "USDC"), ("ETH", "DAI"), ("USDC", "DAI")},
        )

        self.storage.initialize()
        self.assertEqual(len(self.storage.get_all_pools()), len(DEFAULT_POOLS))

        eth_usdc = self.storage.get_pool("ETH", "USDC")
        self.assertEqual(Decimal(eth_usdc.reserve_a), Decimal("100"))
        self.assertEqual(Decimal(eth_usdc.reserve_b), Decimal("200000"))
        self.assertEqual(eth_usdc.fee, 30)
        self.assertEqual(self.storage.get_pool("USDC", "DAI").fee, 10)

    def test_get_pool_ignores_argument_order(self):
        forward = self.storage.get_pool("ETH", "DAI")
        backward = self.storage.get_pool("DAI", "ETH")

        self.assertIsNotNone(forward)
        self.assertEqual(forward.id, backward.id)
        self.assertIsNone(self.storage.get_pool("ETH", "WBTC"))
        self.assertEqual(self.storage.get_pool_by_id(forward.id).id, forward.id)
        self.assertIsNone(self.storage.get_pool_by_id("missing"))

    def test_update_pool_reserves(self):
        pool = self.storage.get_pool("ETH", "USDC")
        updated = self.storage.update_pool_reserves(pool.id, "101", "198025.5")

        self.assertEqual(Decimal(updated.reserve_a), Decimal("101"))
        self.assertEqual(Decimal(updated.reserve_b), Decimal("198025.5"))
        self.assertEqual(Decimal(self.storage.get_pool_by_id(pool.id).reserve_b), Decimal("198025.5"))

    def test_update_unknown_pool_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.storage.update_pool_reserves("no-such-pool", "1", "1")

    def test_returned_records_are_detached(self):
        pool = self.storage.get_pool("ETH", "USDC")
        pool.reserve_a = "999"
        self.assertEqual(Decimal(self.storage.get_pool("ETH", "USDC").reserve_a), Decimal("100"))

    def test_upsert_balance_is_idempotent(self):
        first = self.storage.upsert_balance(WALLET, "ETH", "0xaaaa")
        for _ in range(3):
            again = self.storage.upsert_balance(WALLET, "ETH", "0xaaaa")

        self.assertEqual(again.id, first.id)
        self.assertEqual(again.encrypted_value, "0xaaaa")
        self.assertEqual(len(self.storage.get_balances_by_wallet(WALLET)), 1)

    def test_upsert_balance_updates_in_place(self):
        first = self.storage.upsert_balance(WALLET, "ETH", "0xaaaa")
        second = self.storage.upsert_balance(WALLET, "ETH", "0xbbbb")
        self.storage.upsert_balance(WALLET, "USDC", "0xcccc")
        self.storage.upsert_balance(OTHER_WALLET, "ETH", "0xdddd")

        self.assertEqual(second.id, first.id)
        self.assertEqual(self.storage.get_balance(WALLET, "ETH").encrypted_value, "0xbbbb")
        self.assertEqual(
            [b.token for b in self.storage.get_balances_by_wallet(WALLET)],
            ["ETH", "USDC"],
        )
        self.assertIsNone(self.storage.get_balance(WALLET, "DAI"))

    def test_transactions_newest_first(self):
        older = self.storage.create_transaction(
            wallet_address=WALLET, type="swap", from_token="ETH", to_token="USDC",
            amount="1", status="completed", tx_hash="0x01"
        )
        newer = self.storage.create_transaction(
            wallet_address=WALLET, type="liquidity", from_token="ETH", to_token="DAI",
            amount="2", status="completed", tx_hash="0x02"
        )
        self.storage.create_transaction(
            wallet_address=OTHER_WALLET, type="swap", from_token="DAI", to_token="USDC",
            amount="3"
        )
        self.backdate_transaction(older.id, utc_now() - timedelta(minutes=5))

        history = self.storage.get_transactions_by_wallet(WALLET)
        self.assertEqual([tx.id for tx in history], [newer.id, older.id])
        self.assertTrue(history[0].encrypted)
        self.assertEqual(len(self.storage.get_all_transactions()), 3)
        self.assertEqual(self.storage.get_all_transactions()[-1].id, older.id)

    def test_transaction_defaults_to_pending(self):
        tx = self.storage.create_transaction(
            wallet_address=WALLET, type="swap", from_token="ETH", to_token="USDC", amount="1"
        )
        self.assertEqual(tx.status, "pending")
        self.assertIsNone(tx.tx_hash)

    def test_timestamps_are_naive_utc(self):
        self.storage.create_transaction(
            wallet_address=WALLET, type="swap", from_token="ETH", to_token="USDC", amount="1"
        )
        stored = self.storage.get_transactions_by_wallet(WALLET)[0]

        self.assertIsNone(stored.timestamp.tzinfo)
        self.assertLess(abs(utc_now() - stored.timestamp), timedelta(minutes=1))

    def test_update_transaction_status(self):
        tx = self.storage.create_transaction(
            wallet_address=WALLET, type="swap", from_token="ETH", to_token="USDC", amount="1"
        )
        updated = self.storage.update_transaction_status(tx.id, "completed", tx_hash="0xfeed")

        self.assertEqual(updated.status, "completed")
        self.assertEqual(updated.tx_hash, "0xfeed")

        with self.assertRaises(NotFoundError):
            self.storage.update_transaction_status("missing", "failed")
        with self.assertRaises(ValidationError):
            self.storage.update_transaction_status(tx.id, "bogus")

    def test_limit_orders(self):
        first = self.storage.create_limit_order(WALLET, "ETH", "USDC", "1.5", "2100")
        second = self.storage.create_limit_order(WALLET, "DAI", "ETH", "500", "0.0004")
        self.backdate_order(first.id, utc_now() - timedelta(minutes=5))

        self.assertEqual(first.status, "active")
        self.assertIsNone(first.executed_at)
        self.assertEqual(
            [o.id for o in self.storage.get_limit_orders_by_wallet(WALLET)],
            [second.id, first.id],
        )
        self.assertEqual(self.storage.get_limit_orders_by_wallet(OTHER_WALLET), [])

        executed = self.storage.update_limit_order_status(first.id, "executed")
        self.assertEqual(executed.status, "executed")
        self.assertIsNotNone(executed.executed_at)

        cancelled = self.storage.update_limit_order_status(second.id, "cancelled")
        self.assertIsNone(cancelled.executed_at)
        self.assertEqual(self.storage.get_limit_order(second.id).status, "cancelled")
        self.assertIsNone(self.storage.get_limit_order("missing"))

        with self.assertRaises(NotFoundError):
            self.storage.update_limit_order_status("missing", "cancelled")


class InMemoryStorageTests(StorageContractMixin, unittest.TestCase):
    def build_storage(self):
        return InMemoryStorage()

    def backdate_transaction(self, transaction_id, timestamp):
        for tx in self.storage.transactions:
            if tx.id == transaction_id:
                tx.timestamp = timestamp

    def backdate_order(self, order_id, created_at):
        for order in self.storage.limit_orders:
            if order.id == order_id:
                order.created_at = created_at

    def test_ties_keep_latest_first(self):
        stamp = datetime(2024, 1, 1, 12, 0, 0)
        a = self.storage.create_transaction(WALLET, "swap", "ETH", "USDC", "1")
        b = self.storage.create_transaction(WALLET, "swap", "ETH", "USDC", "2")
        self.backdate_transaction(a.id, stamp)
        self.backdate_transaction(b.id, stamp)

        self.assertEqual([tx.id for tx in self.storage.get_transactions_by_wallet(WALLET)], [b.id, a.id])


class DatabaseStorageTests(StorageContractMixin, unittest.TestCase):
    def build_storage(self):
        self.database = SqliteDatabase(":memory:")
        return DatabaseStorage(self.database)

    def tearDown(self):
        self.storage.close()

    def backdate_transaction(self, transaction_id, timestamp):
        TransactionRecord.update(timestamp=timestamp).where(TransactionRecord.id == transaction_id).execute()

    def backdate_order(self, order_id, created_at):
        LimitOrderRecord.update(created_at=created_at).where(LimitOrderRecord.id == order_id).execute()

    def test_creates_all_tables(self):
        self.assertEqual(
            set(self.database.get_tables()),
            {"pools", "balances", "transactions", "limit_orders"},
        )

    def test_one_row_per_wallet_token(self):
        self.storage.upsert_balance(WALLET, "ETH", "0x01")
        self.storage.upsert_balance(WALLET, "ETH", "0x02")

        self.assertEqual(BalanceRecord.select().where(BalanceRecord.wallet_address == WALLET).count(), 1)


if __name__ == "__main__":
    unittest.main()
