"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── installer_config.py      # Prefix, cellar, host facts
    ├── harness_config.py        # Smoke-test cluster settings
    ├── env_validation.py        # Regex validation of env vars
    └── defaults.py              # Default constants

Usage:
    from config import get_config
    config = get_config()
    prefix = config.installer.prefix

    from config import debug_config
    info = debug_config()
"""

from typing import Optional

from exceptions import ConfigurationError

from .installer_config import InstallerConfig, detect_host_platform
from .harness_config import HarnessConfig
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

    Raises:
        ConfigurationError: An environment variable has an invalid value
    """
    global _config_instance
    if _config_instance is None:
        try:
            _config_instance = AppConfig.from_environment()
        except ValueError as e:
            # pydantic.ValidationError is a ValueError too
            raise ConfigurationError(f"Invalid configuration: {e}") from e
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get configuration for debugging.

    Returns:
        Dictionary with configuration values, or an 'error' entry when the
        environment does not validate
    """
    try:
        config = get_config()
        return {
            'installer': config.installer.debug_dict(),
            'harness': config.harness.model_dump(),
            'log_level': config.log_level,
            'debug_mode': config.debug_mode,
        }
    except ConfigurationError as e:
        return {'error': f'Configuration validation failed: {e}'}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',
    'InstallerConfig',
    'HarnessConfig',
    'detect_host_platform',
]
