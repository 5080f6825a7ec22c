"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── state_config.py          # Shared state keys, metadata cache behaviour
    ├── gateway_config.py        # DuckDB query gateway
    └── defaults.py              # Default values

Usage:
    # Singleton pattern (preferred)
    from config import get_config
    config = get_config()
    key = config.state.variable_cache_key

    # Debug output
    from config import debug_config
    info = debug_config()
"""

from typing import Optional

from .defaults import StateDefaults, CatalogDefaults, GatewayDefaults, AppDefaults, parse_bool
from .state_config import StateConfig
from .gateway_config import GatewayConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get configuration as a plain dict for debugging.

    Returns:
        Dictionary with configuration values, or an 'error' entry if loading failed
    """
    try:
        config = get_config()
        return {
            'environment': config.environment,
            'state': config.state.debug_dict(),
            'gateway': config.gateway.debug_dict(),
        }
    except Exception as e:
        return {'error': f"Failed to load configuration: {e}"}


__all__ = [
    'AppConfig',
    'StateConfig',
    'GatewayConfig',
    'StateDefaults',
    'CatalogDefaults',
    'GatewayDefaults',
    'AppDefaults',
    'parse_bool',
    'get_config',
    'reset_config',
    'debug_config',
]
