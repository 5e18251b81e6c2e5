"""Pydantic schemas for API requests and responses."""

from cipher_dex.api.schemas.dex_schemas import (
    SwapRequest,
    CreatePoolRequest,
    AddLiquidityRequest,
    LimitOrderRequest,
    PoolSchema,
    BalanceSchema,
    TransactionSchema,
    LimitOrderSchema,
    dump,
)

__all__ = [
    'SwapRequest',
    'CreatePoolRequest',
    'AddLiquidityRequest',
    'LimitOrderRequest',
    'PoolSchema',
    'BalanceSchema',
    'TransactionSchema',
    'LimitOrderSchema',
    'dump',
]
