"""
Database initialization script.

Creates the pools, balances, transactions and limit_orders tables and seeds
the default pools. Run this once before starting the API against a new
database.

Usage:
    python -m cipher_dex.scripts.init_db
    python -m cipher_dex.scripts.init_db sqlite:///cipher_dex.db
"""

import os
import sys
import logging

from cipher_dex.core.config_loader import load_config
from cipher_dex.core.database_storage import DatabaseStorage
from cipher_dex.core.storage_factory import create_database


logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger(__name__)


def resolve_database_url(argv=None) -> str:
    """Command-line URL first, then DATABASE_URL, then config/config.yaml."""
    argv = sys.argv[1:] if argv is None else argv
    if argv:
        return argv[0]

    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        return db_url

    config = load_config()
    return config['storage']['database']['url']


def main(argv=None):
    """Initialize database and create all tables."""
    try:
        db_url = resolve_database_url(argv)
        logger.info(f"Connecting to {db_url.split('://')[0]} database...")

        database = create_database(db_url)
        storage = DatabaseStorage(database)

        logger.info("Creating database tables...")
        storage.initialize()
        logger.info("All database tables created successfully")

        tables = database.get_tables()
        logger.info(f"Tables in database: {tables}")
        logger.info(f"Pools: {[f'{p.token_a}/{p.token_b}' for p in storage.get_all_pools()]}")

        storage.close()

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
