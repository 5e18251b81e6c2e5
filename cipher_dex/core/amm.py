"""Constant-product (x * y = k) curve math on Decimal amounts."""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Tuple

from cipher_dex.core.entities import DEFAULT_FEE_BPS, Pool

BPS_DENOMINATOR = Decimal(10000)
ZERO = Decimal(0)

# Working precision for the curve; wide enough that huge inputs do not round
# the output up to the whole reserve
CURVE_PRECISION = 78


def effective_fee(fee_bps) -> int:
    """Pool fee in basis points; zero or missing means the 0.3% default."""
    return int(fee_bps) if fee_bps else DEFAULT_FEE_BPS


def amount_after_fee(amount_in: Decimal, fee_bps: int) -> Decimal:
    return amount_in * (BPS_DENOMINATOR - effective_fee(fee_bps)) / BPS_DENOMINATOR


def get_amount_out(amount_in: Decimal, reserve_in: Decimal, reserve_out: Decimal, fee_bps: int) -> Decimal:
    """
    Output of a swap with the fee taken from the input side.

    amount_out = in_with_fee * reserve_out / (reserve_in + in_with_fee)

    Computed at CURVE_PRECISION and truncated (never rounded up) back to
    the ambient precision, so for amount_in > 0 and reserve_in > 0 the
    result stays strictly below reserve_out unless amount_in is beyond
    the working precision. Callers still check the result against the
    reserve.
    """
    with localcontext() as ctx:
        ctx.prec = CURVE_PRECISION
        in_with_fee = amount_after_fee(amount_in, fee_bps)
        denominator = reserve_in + in_with_fee
        if denominator <= 0:
            return ZERO
        amount_out = in_with_fee * reserve_out / denominator

    with localcontext() as ctx:
        ctx.rounding = ROUND_DOWN
        return +amount_out


def initial_liquidity(amount_a: Decimal, amount_b: Decimal) -> Decimal:
    """Geometric mean of the seeding amounts."""
    return (amount_a * amount_b).sqrt()


def price_impact(amount_in: Decimal, reserve_in: Decimal, reserve_out: Decimal) -> Decimal:
    """
    Relative deviation (percent) of execution price from spot price.

    Uses the fee-less curve; zero when either reserve or the input is zero.
    """
    if reserve_in <= 0 or reserve_out <= 0 or amount_in <= 0:
        return ZERO

    spot_price = reserve_out / reserve_in
    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_in * reserve_out / new_reserve_in
    execution_price = (reserve_out - new_reserve_out) / amount_in

    return abs((execution_price - spot_price) / spot_price * 100)


def resolve_reserves(pool: Pool, token_in: str) -> Tuple[Decimal, Decimal, bool]:
    """
    Map the pool's stored sides onto the trade direction.

    Returns:
        (reserve_in, reserve_out, token_in_is_a)
    """
    reserve_a = Decimal(pool.reserve_a)
    reserve_b = Decimal(pool.reserve_b)
    if pool.token_a == token_in:
        return reserve_a, reserve_b, True
    return reserve_b, reserve_a, False


def format_amount(value) -> str:
    """Render an amount as a plain decimal string (no exponent, no trailing zeros)."""
    if value is None:
        return "0"
    text = format(Decimal(str(value)).normalize(), 'f')
    return text if text != "-0" else "0"
