"""Plain records shared by both storage backends."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

SUPPORTED_TOKENS = ('ETH', 'USDC', 'DAI', 'WBTC')

DEFAULT_FEE_BPS = 30

TX_TYPE_SWAP = 'swap'
TX_TYPE_LIQUIDITY = 'liquidity'

TX_STATUS_PENDING = 'pending'
TX_STATUS_COMPLETED = 'completed'
TX_STATUS_FAILED = 'failed'
TX_STATUSES = (TX_STATUS_PENDING, TX_STATUS_COMPLETED, TX_STATUS_FAILED)

ORDER_STATUS_ACTIVE = 'active'
ORDER_STATUS_EXECUTED = 'executed'
ORDER_STATUS_CANCELLED = 'cancelled'
ORDER_STATUSES = (ORDER_STATUS_ACTIVE, ORDER_STATUS_EXECUTED, ORDER_STATUS_CANCELLED)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form both backends store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Seeded into an empty store on first initialization
DEFAULT_POOLS = (
    {'token_a': 'ETH', 'token_b': 'USDC', 'reserve_a': '100.0', 'reserve_b': '200000.0',
     'fee': 30, 'total_liquidity': '14142.135'},
    {'token_a': 'ETH', 'token_b': 'DAI', 'reserve_a': '50.0', 'reserve_b': '100000.0',
     'fee': 30, 'total_liquidity': '7071.067'},
    {'token_a': 'USDC', 'token_b': 'DAI', 'reserve_a': '10000.0', 'reserve_b': '10000.0',
     'fee': 10, 'total_liquidity': '10000.0'},
)


@dataclass
class Pool:
    """Liquidity pool for an unordered token pair."""
    id: str
    token_a: str
    token_b: str
    reserve_a: str = "0"
    reserve_b: str = "0"
    fee: int = DEFAULT_FEE_BPS
    total_liquidity: str = "0"
    created_at: datetime = field(default_factory=utc_now)

    def matches(self, token_x: str, token_y: str) -> bool:
        """True if the pool holds the pair in either order."""
        return (
            (self.token_a == token_x and self.token_b == token_y)
            or (self.token_a == token_y and self.token_b == token_x)
        )


@dataclass
class Balance:
    """Encrypted balance of one token for one wallet."""
    id: str
    wallet_address: str
    token: str
    encrypted_value: str
    last_updated: datetime = field(default_factory=utc_now)


@dataclass
class Transaction:
    """Append-only record of a swap or liquidity operation."""
    id: str
    wallet_address: str
    type: str
    from_token: str
    to_token: str
    amount: str
    status: str = TX_STATUS_PENDING
    tx_hash: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)
    encrypted: bool = True


@dataclass
class LimitOrder:
    """Limit order request; never matched automatically."""
    id: str
    wallet_address: str
    token_in: str
    token_out: str
    amount_in: str
    limit_price: str
    status: str = ORDER_STATUS_ACTIVE
    created_at: datetime = field(default_factory=utc_now)
    executed_at: Optional[datetime] = None
