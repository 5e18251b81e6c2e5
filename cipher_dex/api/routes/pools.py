"""
Pool and liquidity endpoints.
"""

from typing import Any, Dict, List
import logging

from fastapi import APIRouter, Depends, HTTPException

from cipher_dex.core.errors import DexError
from cipher_dex.core.storage import Storage
from cipher_dex.services.liquidity_service import LiquidityService
from cipher_dex.api.dependencies import get_liquidity_service, get_storage
from cipher_dex.api.schemas.dex_schemas import (
    AddLiquidityRequest,
    CreatePoolRequest,
    PoolSchema,
    TransactionSchema,
    dump,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pools"])


@router.post("/pool/create")
def create_pool(
    request: CreatePoolRequest,
    liquidity_service: LiquidityService = Depends(get_liquidity_service)
) -> Dict[str, Any]:
    """
    Create a new pool seeded with the wallet's tokens.

    - **fee**: fee in basis points, 30 when omitted or 0
    """
    try:
        result = liquidity_service.create_pool(
            wallet_address=request.wallet_address,
            token_a=request.token_a,
            token_b=request.token_b,
            amount_a=request.amount_a,
            amount_b=request.amount_b,
            fee=request.fee
        )
        return {
            "success": True,
            "txHash": result["tx_hash"],
            "pool": dump(PoolSchema, result["pool"]),
            "transaction": dump(TransactionSchema, result["transaction"]),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Create pool error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create pool")


@router.post("/liquidity/add")
def add_liquidity(
    request: AddLiquidityRequest,
    liquidity_service: LiquidityService = Depends(get_liquidity_service)
) -> Dict[str, Any]:
    """Add tokens to an existing pool's reserves."""
    try:
        result = liquidity_service.add_liquidity(
            wallet_address=request.wallet_address,
            token_a=request.token_a,
            token_b=request.token_b,
            amount_a=request.amount_a,
            amount_b=request.amount_b
        )
        return {
            "success": True,
            "txHash": result["tx_hash"],
            "transaction": dump(TransactionSchema, result["transaction"]),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Add liquidity error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to add liquidity")


@router.get("/pools")
def get_pools(storage: Storage = Depends(get_storage)) -> List[Dict[str, Any]]:
    """All pools, oldest first."""
    try:
        return [dump(PoolSchema, pool) for pool in storage.get_all_pools()]
    except Exception as e:
        logger.error(f"Get pools error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get pools")
