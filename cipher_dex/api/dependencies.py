"""
FastAPI dependency injection.

Builds the storage backend, price oracle and services once at startup and
hands them to the routes. The storage backend is chosen here and passed
explicitly into every service that needs it.
"""

from typing import Optional
import logging

from cipher_dex.core.config_loader import load_config, validate_config
from cipher_dex.core.confidential import MockConfidentialService
from cipher_dex.core.database_storage import DatabaseStorage
from cipher_dex.core.keyed_lock import KeyedLock
from cipher_dex.core.logger import configure_from_config
from cipher_dex.core.price_oracle import PriceOracle
from cipher_dex.core.storage import Storage
from cipher_dex.core.storage_factory import create_storage
from cipher_dex.services.analytics_service import AnalyticsService
from cipher_dex.services.ledger_service import LedgerService
from cipher_dex.services.liquidity_service import LiquidityService
from cipher_dex.services.order_service import OrderService
from cipher_dex.services.swap_service import SwapService

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
_config: Optional[dict] = None
_storage: Optional[Storage] = None
_oracle: Optional[PriceOracle] = None
_ledger_service: Optional[LedgerService] = None
_swap_service: Optional[SwapService] = None
_liquidity_service: Optional[LiquidityService] = None
_order_service: Optional[OrderService] = None
_analytics_service: Optional[AnalyticsService] = None


def initialize_services(
    config: Optional[dict] = None,
    storage: Optional[Storage] = None,
    oracle: Optional[PriceOracle] = None
):
    """
    Initialize all services on application startup.

    This should be called once when the FastAPI app starts. Tests pass a
    ready storage and oracle to skip the database and network.

    Args:
        config: Configuration dictionary (loaded from config/config.yaml if None)
        storage: Pre-built storage backend (built from config if None)
        oracle: Pre-built price oracle (built and started from config if None)
    """
    global _config, _storage, _oracle
    global _ledger_service, _swap_service, _liquidity_service, _order_service, _analytics_service

    _config = validate_config(config) if config is not None else load_config()
    if config is None:
        configure_from_config(_config)
    logger.info("Configuration loaded")

    _storage = storage if storage is not None else create_storage(_config)
    logger.info(f"Storage initialized: {type(_storage).__name__}")

    if oracle is not None:
        _oracle = oracle
    else:
        _oracle = PriceOracle.from_config(_config)
        if _config['price_oracle'].get('enabled', True):
            _oracle.start()
        else:
            logger.info("Price oracle refresh disabled; serving fallback prices")

    confidential = MockConfidentialService(_config['confidential']['secret'])
    locks = KeyedLock()
    balances_config = _config['balances']

    _ledger_service = LedgerService(
        _storage,
        confidential,
        locks,
        seed_min=balances_config['seed_min'],
        seed_max=balances_config['seed_max']
    )
    _swap_service = SwapService(_storage, _ledger_service, confidential, locks)
    _liquidity_service = LiquidityService(_storage, _ledger_service, confidential, locks)
    _order_service = OrderService(_storage)
    _analytics_service = AnalyticsService(_storage, _oracle)

    logger.info("All services initialized successfully")


def shutdown_services():
    """Stop the price oracle and release the database connection."""
    global _oracle, _storage

    if _oracle is not None:
        _oracle.stop()
        _oracle = None

    if isinstance(_storage, DatabaseStorage):
        _storage.close()
    _storage = None
    logger.info("Services shut down")


def is_initialized() -> bool:
    return _storage is not None


def get_config() -> dict:
    """Get application configuration."""
    if _config is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _config


def get_storage() -> Storage:
    """Get the active storage backend."""
    if _storage is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _storage


def get_price_oracle() -> PriceOracle:
    """Get price oracle instance."""
    if _oracle is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _oracle


def get_ledger_service() -> LedgerService:
    """Get ledger service instance."""
    if _ledger_service is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _ledger_service


def get_swap_service() -> SwapService:
    """Get swap service instance."""
    if _swap_service is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _swap_service


def get_liquidity_service() -> LiquidityService:
    """Get liquidity service instance."""
    if _liquidity_service is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _liquidity_service


def get_order_service() -> OrderService:
    """Get limit order service instance."""
    if _order_service is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _order_service


def get_analytics_service() -> AnalyticsService:
    """Get analytics service instance."""
    if _analytics_service is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _analytics_service
