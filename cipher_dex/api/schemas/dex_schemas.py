"""
Pydantic schemas for exchange API requests and responses.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(v: Any) -> Any:
    """Treat empty strings as absent and keep float inputs exact."""
    if isinstance(v, str) and not v.strip():
        return None
    if isinstance(v, float):
        return str(v)
    return v


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SwapRequest(CamelModel):
    """Request schema for a market or limit swap."""

    wallet_address: str = Field(..., min_length=1, description="Trading wallet address")
    token_in: str = Field(..., min_length=1, description="Token sold")
    token_out: str = Field(..., min_length=1, description="Token bought")
    amount_in: Optional[Decimal] = Field(..., description="Amount of tokenIn to sell")
    min_amount_out: Optional[Decimal] = Field(None, description="Slippage floor for the output")
    order_type: str = Field("market", description="Order type (market or limit)")
    limit_price: Optional[Decimal] = Field(None, description="Limit price (limit orders only)")

    @field_validator("amount_in", "min_amount_out", "limit_price", mode="before")
    @classmethod
    def normalize_amounts(cls, v):
        return _blank_to_none(v)

    @field_validator("order_type", mode="before")
    @classmethod
    def validate_order_type(cls, v):
        v = v or "market"
        if v not in ["market", "limit"]:
            raise ValueError("Order type must be market or limit")
        return v


class CreatePoolRequest(CamelModel):
    """Request schema for pool creation."""

    wallet_address: str = Field(..., min_length=1)
    token_a: str = Field(..., min_length=1)
    token_b: str = Field(..., min_length=1)
    amount_a: Optional[Decimal] = Field(..., description="Initial reserve of tokenA")
    amount_b: Optional[Decimal] = Field(..., description="Initial reserve of tokenB")
    fee: Optional[int] = Field(None, description="Fee in basis points (default 30)")

    @field_validator("amount_a", "amount_b", "fee", mode="before")
    @classmethod
    def normalize_amounts(cls, v):
        return _blank_to_none(v)


class AddLiquidityRequest(CamelModel):
    """Request schema for adding liquidity to an existing pool."""

    wallet_address: str = Field(..., min_length=1)
    token_a: str = Field(..., min_length=1)
    token_b: str = Field(..., min_length=1)
    amount_a: Optional[Decimal] = Field(...)
    amount_b: Optional[Decimal] = Field(...)

    @field_validator("amount_a", "amount_b", mode="before")
    @classmethod
    def normalize_amounts(cls, v):
        return _blank_to_none(v)


class LimitOrderRequest(CamelModel):
    """Request schema for a standalone limit order."""

    wallet_address: str = Field(..., min_length=1)
    token_in: str = Field(..., min_length=1)
    token_out: str = Field(..., min_length=1)
    amount_in: Optional[Decimal] = Field(...)
    limit_price: Optional[Decimal] = Field(...)

    @field_validator("amount_in", "limit_price", mode="before")
    @classmethod
    def normalize_amounts(cls, v):
        return _blank_to_none(v)


class PoolSchema(CamelModel):
    id: str
    token_a: str
    token_b: str
    reserve_a: str
    reserve_b: str
    fee: int
    total_liquidity: str
    created_at: datetime


class BalanceSchema(CamelModel):
    id: str
    wallet_address: str
    token: str
    encrypted_value: str
    last_updated: datetime


class TransactionSchema(CamelModel):
    id: str
    wallet_address: str
    type: str
    from_token: str
    to_token: str
    amount: str
    status: str
    tx_hash: Optional[str] = None
    timestamp: datetime
    encrypted: bool


class LimitOrderSchema(CamelModel):
    id: str
    wallet_address: str
    token_in: str
    token_out: str
    amount_in: str
    limit_price: str
    status: str
    created_at: datetime
    executed_at: Optional[datetime] = None


def dump(schema: type, record: Any) -> dict:
    """Serialize a storage record with the given schema into camelCase JSON data."""
    return schema.model_validate(record).model_dump(by_alias=True, mode="json")
