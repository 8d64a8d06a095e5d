"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - InstallerDefaults: Global prefix, cellar and tap identity
    - HarnessDefaults: Smoke-test cluster settings
    - AppDefaults: Logging and debug switches

Usage:
    from config.defaults import InstallerDefaults

    prefix: str = Field(default=InstallerDefaults.PREFIX, ...)
"""

import os


# =============================================================================
# INSTALLER DEFAULTS
# =============================================================================

class InstallerDefaults:
    """
    Package manager layout defaults.

    The prefix is the global root every keg is linked into. On Apple Silicon
    it is /opt/homebrew; the cellar lives directly below it.
    """

    PREFIX = "/opt/homebrew"
    CELLAR_DIRNAME = "Cellar"
    OPT_DIRNAME = "opt"
    CACHE_DIR = os.path.join("~", "Library", "Caches", "Homebrew")

    # Shows up in the engine's version string: "PostgreSQL 16.3 (MercuryTechnologies)"
    TAP_USER = "MercuryTechnologies"

    # Xcode 15 linker picks up LLVM's libunwind from this build onwards
    CLANG_LIBUNWIND_BUILD = 1500

    SUPPORTED_PLATFORMS = ("macos", "linux")


# =============================================================================
# SMOKE-TEST HARNESS DEFAULTS
# =============================================================================

class HarnessDefaults:
    """Ephemeral cluster settings used by post-install smoke tests."""

    HOST = "localhost"
    DATABASE = "postgres"
    CLUSTER_DIRNAME = "test"
    LOG_FILENAME = "log"
    TESTPATH_PREFIX = "formula-test-"
    KEEP_TESTPATH = False
    VERIFY_EXTENSION = True


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Process-wide switches."""

    LOG_LEVEL = "INFO"
    DEBUG_MODE = False
