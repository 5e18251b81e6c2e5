"""Configuration loading utilities."""

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

from cipher_dex.core.logger import resolve_level

logger = logging.getLogger(__name__)

DEFAULT_SECRET = "cipher-dex-dev-secret"


def load_config(path: str = "config/config.yaml") -> dict:
    """
    Load YAML configuration file from specified path and return as dictionary.

    Environment variables from a project-level ``.env`` file are loaded
    first so that ``DATABASE_URL`` and ``CIPHER_DEX_SECRET`` can override
    the file.

    Args:
        path: Configuration file path (default: config/config.yaml)

    Returns:
        Validated configuration dictionary

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        ValueError: If configuration file is empty or invalid
    """
    # core -> cipher_dex -> project_root
    root_dir = Path(__file__).parent.parent.parent
    env_path = root_dir / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded .env file: {env_path}")
    else:
        logger.info(".env file not found, will use system environment variables")

    config_path = Path(path)

    # If path is not absolute, try to find from project root
    if not config_path.is_absolute():
        config_path = root_dir / path

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file does not exist: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if not config:
        raise ValueError(f"Configuration file is empty or has invalid format: {path}")

    return validate_config(config)


def validate_config(config: dict) -> dict:
    """
    Validate every known section and fill in defaults.

    Args:
        config: Raw configuration dictionary (modified in place)

    Returns:
        The same dictionary, validated

    Raises:
        ValueError: Configuration validation failed
    """
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a dictionary")

    config['storage'] = _validate_storage(config.get('storage') or {})
    config['price_oracle'] = _validate_price_oracle(config.get('price_oracle') or {})
    config['confidential'] = _validate_confidential(config.get('confidential') or {})
    config['balances'] = _validate_balances(config.get('balances') or {})
    config['logging'] = _validate_logging(config.get('logging') or {})
    config.setdefault('api', {})
    config['api'].setdefault('host', '0.0.0.0')
    config['api'].setdefault('port', 5000)

    return config


def _validate_storage(storage: dict) -> dict:
    """
    Validate storage configuration.

    ``DATABASE_URL`` in the environment takes precedence over the file and
    switches the storage type to ``database``.
    """
    database = storage.setdefault('database', {})

    env_url = os.environ.get('DATABASE_URL')
    if env_url:
        database['url'] = env_url
        storage['type'] = 'database'

    storage_type = storage.setdefault('type', 'memory')
    if storage_type not in ['memory', 'database']:
        raise ValueError(
            f"storage.type must be 'memory' or 'database', current value: {storage_type}"
        )

    if storage_type == 'database' and not database.get('url'):
        raise ValueError("storage.type is 'database' but no storage.database.url or DATABASE_URL is set")

    storage.setdefault('fallback_to_memory', True)
    return storage


def _validate_price_oracle(oracle: dict) -> dict:
    """Validate price oracle configuration."""
    oracle.setdefault('enabled', True)
    oracle.setdefault('refresh_interval_seconds', 30)
    oracle.setdefault('timeout', 10.0)
    oracle.setdefault('coingecko_url', 'https://api.coingecko.com/api/v3')
    oracle.setdefault('binance_url', 'https://api.binance.com/api/v3')

    interval = oracle['refresh_interval_seconds']
    if not isinstance(interval, (int, float)) or interval <= 0:
        raise ValueError(
            f"price_oracle.refresh_interval_seconds must be a positive number, current value: {interval}"
        )

    timeout = oracle['timeout']
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"price_oracle.timeout must be a positive number, current value: {timeout}")

    return oracle


def _validate_confidential(confidential: dict) -> dict:
    """Validate mock confidentiality configuration."""
    env_secret = os.environ.get('CIPHER_DEX_SECRET')
    if env_secret:
        confidential['secret'] = env_secret

    secret = confidential.setdefault('secret', DEFAULT_SECRET)
    if not isinstance(secret, str) or not secret:
        raise ValueError("confidential.secret must be a non-empty string")

    if secret == DEFAULT_SECRET:
        logger.warning("Using the default confidential secret; set CIPHER_DEX_SECRET outside development")

    return confidential


def _validate_balances(balances: dict) -> dict:
    """Validate lazy balance seeding range."""
    seed_min = balances.setdefault('seed_min', 10)
    seed_max = balances.setdefault('seed_max', 110)

    if seed_min < 0 or seed_max <= seed_min:
        raise ValueError(
            f"balances.seed_min/seed_max must satisfy 0 <= seed_min < seed_max, "
            f"current values: {seed_min}, {seed_max}"
        )

    return balances


def _validate_logging(log_config: dict) -> dict:
    """Validate the logging level name."""
    log_config.setdefault('level', 'INFO')
    try:
        resolve_level(log_config['level'])
    except ValueError:
        raise ValueError(
            f"logging.level must be a standard level name, current value: {log_config['level']}"
        ) from None
    return log_config
