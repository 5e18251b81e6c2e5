"""
Exchange analytics endpoint.
"""

from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException

from cipher_dex.services.analytics_service import AnalyticsService
from cipher_dex.api.dependencies import get_analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analytics"])


@router.get("/analytics")
def get_analytics(
    analytics_service: AnalyticsService = Depends(get_analytics_service)
) -> Dict[str, Any]:
    """24h volume, liquidity and activity counters valued in USD."""
    try:
        return {"success": True, "data": analytics_service.get_analytics()}
    except Exception as e:
        logger.error(f"Get analytics error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get analytics")
