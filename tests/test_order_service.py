"""Tests for limit order bookkeeping."""

import sys
import unittest
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cipher_dex.core.errors import NotFoundError, ValidationError
from cipher_dex.core.in_memory_storage import InMemoryStorage
from cipher_dex.services.order_service import OrderService

WALLET = "0xabc"


class OrderServiceTests(unittest.TestCase):
    def setUp(self):
        self.storage = InMemoryStorage()
        self.service = OrderService(self.storage)

    def test_create_and_list(self):
        order = self.service.create_limit_order(WALLET, "ETH", "USDC", Decimal("1.50"), Decimal("2100"))

        self.assertEqual(order.status, "active")
        self.assertEqual(order.amount_in, "1.5")
        self.assertEqual(order.limit_price, "2100")
        self.assertEqual([o.id for o in self.service.get_orders(WALLET)], [order.id])
        self.assertEqual(self.service.get_orders("0xother"), [])

    def test_create_validation(self):
        with self.assertRaises(ValidationError):
            self.service.create_limit_order(WALLET, "ETH", "USDC", Decimal("0"), Decimal("2100"))
        with self.assertRaises(ValidationError):
            self.service.create_limit_order(WALLET, "ETH", "USDC", Decimal("1"), None)
        with self.assertRaises(ValidationError):
            self.service.get_orders("")

    def test_cancel(self):
        order = self.service.create_limit_order(WALLET, "ETH", "USDC", Decimal("1"), Decimal("2100"))

        cancelled = self.service.cancel_order(order.id, wallet_address=WALLET)

        self.assertEqual(cancelled.status, "cancelled")
        self.assertEqual(self.storage.get_limit_order(order.id).status, "cancelled")

        with self.assertRaises(ValidationError):
            self.service.cancel_order(order.id)

    def test_cancel_unknown_or_foreign_order(self):
        order = self.service.create_limit_order(WALLET, "ETH", "USDC", Decimal("1"), Decimal("2100"))

        with self.assertRaises(NotFoundError):
            self.service.cancel_order("missing")
        with self.assertRaises(NotFoundError):
            self.service.cancel_order(order.id, wallet_address="0xother")

        self.assertEqual(self.storage.get_limit_order(order.id).status, "active")


if __name__ == "__main__":
    unittest.main()
