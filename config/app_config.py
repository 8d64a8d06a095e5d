"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - InstallerConfig (prefix, cellar, host facts)
    - HarnessConfig (smoke-test cluster)

Exports:
    AppConfig: Main configuration class

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field, field_validator

from .installer_config import InstallerConfig
from .harness_config import HarnessConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Usage:
        config = get_config()
        prefix = config.installer.prefix
        database = config.harness.database
    """

    installer: InstallerConfig = Field(
        default_factory=InstallerConfig,
        description="Package manager layout and host facts"
    )

    harness: HarnessConfig = Field(
        default_factory=HarnessConfig,
        description="Smoke-test cluster settings"
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Keep intermediate state (test paths) and log verbosely"
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level {value!r}")
        return value

    @classmethod
    def from_environment(cls):
        """Load all configs from environment."""
        return cls(
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE).lower()).lower() == "true",
            installer=InstallerConfig.from_environment(),
            harness=HarnessConfig.from_environment(),
        )
