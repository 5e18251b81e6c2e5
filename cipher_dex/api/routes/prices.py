"""
Price oracle endpoints.
"""

from decimal import Decimal
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from cipher_dex.core.amm import format_amount
from cipher_dex.core.errors import DexError, ValidationError
from cipher_dex.core.price_oracle import PriceOracle
from cipher_dex.services.swap_service import SwapService
from cipher_dex.api.dependencies import get_price_oracle, get_swap_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["prices"])


@router.get("/prices")
def get_prices(oracle: PriceOracle = Depends(get_price_oracle)) -> Dict[str, Any]:
    """Cached USD prices for all supported tokens."""
    try:
        return {"success": True, **oracle.get_all_prices()}
    except Exception as e:
        logger.error(f"Get prices error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get prices")


@router.get("/exchange-rate")
def get_exchange_rate(
    token_in: Optional[str] = Query(None, alias="tokenIn"),
    token_out: Optional[str] = Query(None, alias="tokenOut"),
    oracle: PriceOracle = Depends(get_price_oracle)
) -> Dict[str, Any]:
    """
    Oracle exchange rate between two tokens.

    - **tokenIn**: Token sold
    - **tokenOut**: Token bought
    """
    try:
        if not token_in or not token_out:
            raise ValidationError("Missing tokenIn or tokenOut")

        return {
            "success": True,
            "tokenIn": token_in,
            "tokenOut": token_out,
            "rate": oracle.get_exchange_rate(token_in, token_out),
            "priceIn": oracle.get_price(token_in),
            "priceOut": oracle.get_price(token_out),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Get exchange rate error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get exchange rate")


@router.get("/quote")
def get_quote(
    token_in: Optional[str] = Query(None, alias="tokenIn"),
    token_out: Optional[str] = Query(None, alias="tokenOut"),
    amount_in: Optional[Decimal] = Query(None, alias="amountIn"),
    swap_service: SwapService = Depends(get_swap_service)
) -> Dict[str, Any]:
    """
    Expected pool output for a swap without executing it.

    - **tokenIn**: Token sold
    - **tokenOut**: Token bought
    - **amountIn**: Amount of tokenIn to sell
    """
    try:
        if not token_in or not token_out or amount_in is None:
            raise ValidationError("Missing required fields")

        quote = swap_service.quote(token_in, token_out, amount_in)
        return {
            "success": True,
            "poolId": quote["pool_id"],
            "tokenIn": token_in,
            "tokenOut": token_out,
            "amountIn": format_amount(quote["amount_in"]),
            "amountOut": f"{quote['amount_out']:.6f}",
            "fee": quote["fee"],
            "feeAmount": format_amount(quote["fee_amount"]),
            "priceImpact": float(quote["price_impact"]),
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Quote error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get quote")
