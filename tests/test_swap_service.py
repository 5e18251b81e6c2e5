"""Tests for market and limit swaps."""

import sys
import threading
import unittest
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cipher_dex.core.confidential import MockConfidentialService
from cipher_dex.core.errors import NotFoundError, SlippageExceededError, ValidationError
from cipher_dex.core.in_memory_storage import InMemoryStorage
from cipher_dex.core.keyed_lock import KeyedLock
from cipher_dex.services.ledger_service import LedgerService
from cipher_dex.services.swap_service import SwapService

WALLET = "0xabc"


class SwapServiceTests(unittest.TestCase):
    def setUp(self):
        self.storage = InMemoryStorage()
        self.storage.initialize()
        self.confidential = MockConfidentialService("test-secret")
        locks = KeyedLock()
        self.ledger = LedgerService(self.storage, self.confidential, locks)
        self.service = SwapService(self.storage, self.ledger, self.confidential, locks)

    def reserves(self, token_a, token_b):
        pool = self.storage.get_pool(token_a, token_b)
        return Decimal(pool.reserve_a), Decimal(pool.reserve_b)

    def test_eth_to_usdc_swap(self):
        self.ledger.adjust_balances(WALLET, {"ETH": Decimal("3")})

        result = self.service.swap(WALLET, "ETH", "USDC", Decimal("1"))

        self.assertAlmostEqual(float(result["amount_out"]), 1974.31607, places=4)
        reserve_a, reserve_b = self.reserves("ETH", "USDC")
        self.assertEqual(reserve_a, Decimal("101"))
        self.assertAlmostEqual(float(reserve_b), 198025.68393, places=4)

        self.assertEqual(self.ledger.get_amount(WALLET, "ETH"), Decimal("2"))
        self.assertEqual(self.ledger.get_amount(WALLET, "USDC"), result["amount_out"])

        tx = result["transaction"]
        self.assertEqual((tx.type, tx.status, tx.from_token, tx.to_token), ("swap", "completed", "ETH", "USDC"))
        self.assertEqual(tx.amount, "1")
        self.assertEqual(tx.tx_hash, result["tx_hash"])
        self.assertEqual(len(result["tx_hash"]), 66)

    def test_swap_against_stored_side_b(self):
        result = self.service.swap(WALLET, "USDC", "ETH", Decimal("2000"))

        reserve_eth, reserve_usdc = self.reserves("ETH", "USDC")
        self.assertEqual(reserve_usdc, Decimal("202000"))
        self.assertEqual(reserve_eth, Decimal("100") - result["amount_out"])
        self.assertLess(result["amount_out"], Decimal("1"))

    def test_debit_floors_at_zero(self):
        self.service.swap(WALLET, "ETH", "DAI", Decimal("1"))
        self.assertEqual(self.ledger.get_amount(WALLET, "ETH"), Decimal(0))

    def test_slippage_rejection_changes_nothing(self):
        before = self.reserves("ETH", "USDC")

        with self.assertRaises(SlippageExceededError) as ctx:
            self.service.swap(WALLET, "ETH", "USDC", Decimal("1"), min_amount_out=Decimal("2000"))

        self.assertEqual(ctx.exception.message, "Insufficient output amount")
        self.assertEqual(self.reserves("ETH", "USDC"), before)
        self.assertEqual(self.storage.get_all_transactions(), [])
        self.assertEqual(self.storage.get_balances_by_wallet(WALLET), [])

    def test_huge_swap_leaves_reserve_non_zero(self):
        result = self.service.swap(WALLET, "ETH", "USDC", Decimal("1e30"))

        reserve_eth, reserve_usdc = self.reserves("ETH", "USDC")
        self.assertLess(result["amount_out"], Decimal("200000"))
        self.assertGreater(reserve_usdc, 0)

        # The drained-looking pool still prices the reverse direction
        back = self.service.swap(WALLET, "USDC", "ETH", Decimal("1"))
        self.assertGreater(back["amount_out"], 0)
        self.assertGreater(self.reserves("ETH", "USDC")[0], 0)

    def test_output_equal_to_reserve_is_rejected(self):
        before = self.reserves("ETH", "USDC")

        with self.assertRaises(ValidationError) as ctx:
            self.service.swap(WALLET, "ETH", "USDC", Decimal("1e90"))
        self.assertEqual(ctx.exception.message, "Insufficient liquidity")

        with self.assertRaises(ValidationError):
            self.service.quote("ETH", "USDC", Decimal("1e90"))

        self.assertEqual(self.reserves("ETH", "USDC"), before)
        self.assertEqual(self.storage.get_all_transactions(), [])
        self.assertEqual(self.storage.get_balances_by_wallet(WALLET), [])

    def test_min_amount_out_met(self):
        result = self.service.swap(WALLET, "ETH", "USDC", Decimal("1"), min_amount_out=Decimal("1900"))
        self.assertGreater(result["amount_out"], Decimal("1900"))

    def test_unknown_pool(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.service.swap(WALLET, "ETH", "WBTC", Decimal("1"))
        self.assertEqual(ctx.exception.message, "Pool not found")

    def test_invalid_amounts(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.swap(WALLET, "ETH", "USDC", None)
        self.assertEqual(ctx.exception.message, "Missing required fields")

        for amount in (Decimal("0"), Decimal("-1")):
            with self.assertRaises(ValidationError):
                self.service.swap(WALLET, "ETH", "USDC", amount)

    def test_quote_does_not_mutate(self):
        before = self.reserves("ETH", "USDC")
        quote = self.service.quote("USDC", "ETH", Decimal("2000"))

        self.assertEqual(self.reserves("ETH", "USDC"), before)
        self.assertEqual(quote["fee"], 30)
        self.assertEqual(quote["fee_amount"], Decimal("6"))
        self.assertGreater(quote["price_impact"], 0)

        result = self.service.swap(WALLET, "USDC", "ETH", Decimal("2000"))
        self.assertEqual(result["amount_out"], quote["amount_out"])

    def test_limit_swap_records_order_only(self):
        before = self.reserves("ETH", "USDC")

        result = self.service.place_limit_swap(WALLET, "ETH", "USDC", Decimal("1"), Decimal("2100"))

        self.assertEqual(self.reserves("ETH", "USDC"), before)
        self.assertEqual(self.storage.get_balances_by_wallet(WALLET), [])
        self.assertEqual(result["order"].status, "active")
        self.assertEqual(result["order"].limit_price, "2100")
        self.assertEqual(result["transaction"].status, "pending")
        self.assertEqual(result["transaction"].tx_hash, result["tx_hash"])

    def test_limit_swap_requires_price(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.place_limit_swap(WALLET, "ETH", "USDC", Decimal("1"), None)
        self.assertEqual(ctx.exception.message, "Limit price required for limit orders")

    def test_concurrent_swaps_serialize_on_pool(self):
        def trade(wallet):
            for _ in range(5):
                self.service.swap(wallet, "ETH", "USDC", Decimal("0.5"))

        threads = [threading.Thread(target=trade, args=(f"0xwallet{i}",)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        reserve_eth, reserve_usdc = self.reserves("ETH", "USDC")
        self.assertEqual(reserve_eth, Decimal("110"))
        self.assertEqual(len(self.storage.get_all_transactions()), 20)

        paid_out = sum(
            self.ledger.get_amount(f"0xwallet{i}", "USDC") for i in range(4)
        )
        self.assertAlmostEqual(float(reserve_usdc + paid_out), 200000.0, places=6)


if __name__ == "__main__":
    unittest.main()
