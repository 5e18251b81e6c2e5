"""
Limit order endpoints.
"""

from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from cipher_dex.core.errors import DexError
from cipher_dex.services.order_service import OrderService
from cipher_dex.api.dependencies import get_order_service
from cipher_dex.api.schemas.dex_schemas import LimitOrderRequest, LimitOrderSchema, dump

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])


@router.post("/order/limit")
def create_limit_order(
    request: LimitOrderRequest,
    order_service: OrderService = Depends(get_order_service)
) -> Dict[str, Any]:
    """
    Record an active limit order.

    Orders are bookkeeping only; nothing executes them against a pool.
    """
    try:
        order = order_service.create_limit_order(
            wallet_address=request.wallet_address,
            token_in=request.token_in,
            token_out=request.token_out,
            amount_in=request.amount_in,
            limit_price=request.limit_price
        )
        return {
            "success": True,
            "orderId": order.id,
            "order": dump(LimitOrderSchema, order),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Create limit order error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create limit order")


@router.get("/orders")
def get_orders(
    address: Optional[str] = Query(None, description="Wallet address"),
    order_service: OrderService = Depends(get_order_service)
) -> List[Dict[str, Any]]:
    """Limit orders of a wallet, newest first."""
    try:
        return [dump(LimitOrderSchema, order) for order in order_service.get_orders(address)]
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Get orders error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get orders")


@router.post("/order/{order_id}/cancel")
def cancel_order(
    order_id: str,
    address: Optional[str] = Query(None, description="Owning wallet; checked when given"),
    order_service: OrderService = Depends(get_order_service)
) -> Dict[str, Any]:
    """Cancel an active limit order."""
    try:
        order = order_service.cancel_order(order_id, wallet_address=address)
        return {
            "success": True,
            "order": dump(LimitOrderSchema, order),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Cancel order error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to cancel order")
