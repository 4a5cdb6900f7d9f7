"""Configuration management for the ATM dashboard."""

import os
import logging
from typing import Dict, Any
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ('table', 'json')


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def load_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables and return structured config.

    Returns:
        Dict containing configuration sections for data, filters, server and app settings.
    """
    # Load environment variables from .env file
    env_path = Path(__file__).parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded configuration from {env_path}")
    else:
        logger.warning("No .env file found, using environment variables only")

    config = {
        'data': {
            # Local path or http(s) URL of the ATM CSV
            'source': os.getenv('ATM_CSV_SOURCE', 'atm.csv').strip(),
            'encoding': os.getenv('ATM_CSV_ENCODING', 'utf-8-sig'),
            'timeout': int(os.getenv('ATM_FETCH_TIMEOUT', 30)),
        },
        'filters': {
            'city': os.getenv('DEFAULT_CITY', 'all'),
            'bank': os.getenv('DEFAULT_BANK', 'all'),
        },
        'server': {
            'enabled': _env_flag('DASHBOARD_SERVE', 'false'),
            'host': os.getenv('DASHBOARD_HOST', '127.0.0.1'),
            'port': int(os.getenv('DASHBOARD_PORT', 8080)),
        },
        'app': {
            'debug': _env_flag('DEBUG', 'false'),
            'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
            'console_output_format': os.getenv('CONSOLE_OUTPUT_FORMAT', 'table').lower(),
            'use_colors': _env_flag('CONSOLE_COLORS', 'true'),
        }
    }

    _validate_config(config)

    return config


def _validate_config(config: Dict[str, Any]) -> None:
    """
    Validate that required configuration values are present.

    Args:
        config: Configuration dictionary to validate.

    Raises:
        ValueError: If required configuration is missing or invalid.
    """
    if not config['data']['source']:
        raise ValueError("ATM_CSV_SOURCE missing; cannot load the dataset.")
    if config['app']['console_output_format'] not in OUTPUT_FORMATS:
        raise ValueError(f"CONSOLE_OUTPUT_FORMAT must be one of {OUTPUT_FORMATS}")
    if not 1 <= config['server']['port'] <= 65535:
        raise ValueError("DASHBOARD_PORT must be between 1 and 65535")
    if not isinstance(logging.getLevelName(config['app']['log_level']), int):
        raise ValueError(f"LOG_LEVEL '{config['app']['log_level']}' is not a logging level")
    logger.info("Configuration validation completed")


def get_filter_defaults(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Get the initial city/bank selection.

    Args:
        config: Main configuration dictionary.

    Returns:
        Dict with 'city' and 'bank' keys.
    """
    filters = config.get('filters', {})
    return {'city': filters.get('city', 'all'), 'bank': filters.get('bank', 'all')}


def get_log_level(config: Dict[str, Any]) -> str:
    """Root log level; DEBUG=true overrides LOG_LEVEL."""
    app = config['app']
    return 'DEBUG' if app.get('debug') else app.get('log_level', 'INFO')
