"""Tests for constant-product curve math."""

import sys
import unittest
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cipher_dex.core import amm
from cipher_dex.core.entities import Pool


class CurveMathTests(unittest.TestCase):
    def test_eth_usdc_swap_output(self):
        amount_out = amm.get_amount_out(Decimal("1"), Decimal("100"), Decimal("200000"), 30)

        # 0.997 * 200000 / 100.997
        self.assertEqual(amm.amount_after_fee(Decimal("1"), 30), Decimal("0.997"))
        self.assertAlmostEqual(float(amount_out), 1974.31607, places=4)
        self.assertAlmostEqual(float(Decimal("200000") - amount_out), 198025.68393, places=4)

    def test_output_never_drains_reserve(self):
        for amount_in in ("0.0001", "1", "1000", "1000000000"):
            amount_out = amm.get_amount_out(Decimal(amount_in), Decimal("50"), Decimal("100000"), 30)
            self.assertGreater(amount_out, 0)
            self.assertLess(amount_out, Decimal("100000"))

    def test_huge_input_stays_below_reserve(self):
        for amount_in in ("1e30", "1e45", "1e60"):
            with self.subTest(amount_in=amount_in):
                amount_out = amm.get_amount_out(Decimal(amount_in), Decimal("100"), Decimal("200000"), 30)
                self.assertGreater(amount_out, 0)
                self.assertLess(amount_out, Decimal("200000"))
                self.assertGreater(Decimal("200000") - amount_out, 0)

    def test_output_is_truncated_not_rounded_up(self):
        # 1 * 2 / 3 at default precision would round the last digit up
        amount_out = amm.get_amount_out(Decimal("2"), Decimal("2"), Decimal("2"), 5000)
        self.assertEqual(amount_out, Decimal("0.6666666666666666666666666666"))

    def test_zero_fee_falls_back_to_default(self):
        self.assertEqual(amm.effective_fee(0), 30)
        self.assertEqual(amm.effective_fee(None), 30)
        self.assertEqual(amm.effective_fee(10), 10)
        self.assertEqual(
            amm.get_amount_out(Decimal("1"), Decimal("100"), Decimal("200000"), 0),
            amm.get_amount_out(Decimal("1"), Decimal("100"), Decimal("200000"), 30),
        )

    def test_initial_liquidity_is_geometric_mean(self):
        liquidity = amm.initial_liquidity(Decimal("10"), Decimal("20000"))
        self.assertAlmostEqual(float(liquidity), 447.2136, places=4)

    def test_price_impact(self):
        self.assertEqual(amm.price_impact(Decimal("0"), Decimal("100"), Decimal("100")), 0)
        self.assertEqual(amm.price_impact(Decimal("1"), Decimal("0"), Decimal("100")), 0)

        # execution price 100/101 of spot -> ~0.990% impact
        impact = amm.price_impact(Decimal("1"), Decimal("100"), Decimal("200000"))
        self.assertAlmostEqual(float(impact), 0.990099, places=5)

    def test_resolve_reserves_follows_stored_side(self):
        pool = Pool(id="p1", token_a="ETH", token_b="USDC", reserve_a="100", reserve_b="200000")

        self.assertEqual(
            amm.resolve_reserves(pool, "ETH"),
            (Decimal("100"), Decimal("200000"), True),
        )
        self.assertEqual(
            amm.resolve_reserves(pool, "USDC"),
            (Decimal("200000"), Decimal("100"), False),
        )

    def test_format_amount(self):
        self.assertEqual(amm.format_amount(Decimal("101.000")), "101")
        self.assertEqual(amm.format_amount(Decimal("1E+2")), "100")
        self.assertEqual(amm.format_amount("0.50"), "0.5")
        self.assertEqual(amm.format_amount(None), "0")
        self.assertEqual(amm.format_amount(Decimal("-0")), "0")


if __name__ == "__main__":
    unittest.main()
