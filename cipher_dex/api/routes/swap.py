"""
Swap endpoint.
"""

from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException

from cipher_dex.core.errors import DexError
from cipher_dex.services.swap_service import SwapService
from cipher_dex.api.dependencies import get_swap_service
from cipher_dex.api.schemas.dex_schemas import SwapRequest, TransactionSchema, dump

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["swap"])


@router.post("/swap")
def swap(
    request: SwapRequest,
    swap_service: SwapService = Depends(get_swap_service)
) -> Dict[str, Any]:
    """
    Execute a market swap or record a limit swap.

    - **orderType**: market (default) runs against the pool immediately;
      limit records an active order and a pending transaction
    - **minAmountOut**: optional slippage floor for market swaps
    - **limitPrice**: required for limit swaps
    """
    try:
        if request.order_type == "limit":
            result = swap_service.place_limit_swap(
                wallet_address=request.wallet_address,
                token_in=request.token_in,
                token_out=request.token_out,
                amount_in=request.amount_in,
                limit_price=request.limit_price
            )
            return {
                "success": True,
                "message": "Limit order created",
                "orderId": result["order"].id,
                "txHash": result["tx_hash"],
                "transaction": dump(TransactionSchema, result["transaction"]),
            }

        result = swap_service.swap(
            wallet_address=request.wallet_address,
            token_in=request.token_in,
            token_out=request.token_out,
            amount_in=request.amount_in,
            min_amount_out=request.min_amount_out
        )
        return {
            "success": True,
            "txHash": result["tx_hash"],
            "amountOut": f"{result['amount_out']:.6f}",
            "transaction": dump(TransactionSchema, result["transaction"]),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Swap error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Swap failed")
