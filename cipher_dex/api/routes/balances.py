"""
Wallet balance and transaction history endpoints.
"""

from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from cipher_dex.core.errors import DexError
from cipher_dex.services.ledger_service import LedgerService
from cipher_dex.api.dependencies import get_ledger_service
from cipher_dex.api.schemas.dex_schemas import BalanceSchema, TransactionSchema, dump

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["balances"])


@router.get("/balance/{token}")
def get_balance(
    token: str,
    address: Optional[str] = Query(None, description="Wallet address"),
    ledger: LedgerService = Depends(get_ledger_service)
) -> Dict[str, Any]:
    """
    Encrypted balance of one token.

    The first query for a (wallet, token) pair seeds a random demo balance;
    later queries return the stored value unchanged.
    """
    try:
        balance = ledger.get_or_seed_balance(address, token)
        return {
            "success": True,
            "encryptedBalance": balance.encrypted_value,
            "token": token,
        }
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Get balance error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get balance")


@router.get("/balances")
def get_balances(
    address: Optional[str] = Query(None, description="Wallet address"),
    ledger: LedgerService = Depends(get_ledger_service)
) -> List[Dict[str, Any]]:
    """All stored balances of a wallet (encrypted). Nothing is seeded here."""
    try:
        return [dump(BalanceSchema, b) for b in ledger.get_wallet_balances(address)]
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Get balances error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get balances")


@router.get("/transactions")
def get_transactions(
    address: Optional[str] = Query(None, description="Wallet address"),
    ledger: LedgerService = Depends(get_ledger_service)
) -> List[Dict[str, Any]]:
    """Transaction history of a wallet, newest first."""
    try:
        return [dump(TransactionSchema, tx) for tx in ledger.get_transactions(address)]
    except DexError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Get transactions error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get transactions")
