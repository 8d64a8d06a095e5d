"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a package manager, a compiler toolchain or a running database.
"""

import os
import sys
import hashlib

import pytest

# Add project root to sys.path so 'core', 'formulae', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so config loads predictably.

    Host facts are pinned; individual tests build their own InstallerConfig
    whenever the platform or prefix matters.
    """
    defaults = {
        "HOMEBREW_PREFIX": "/opt/homebrew",
        "HOMEBREW_TAP_USER": "MercuryTechnologies",
        "HOMEBREW_HOST_PLATFORM": "macos",
        "FORMULA_KEEP_TESTPATH": "false",
        "FORMULA_VERIFY_EXTENSION": "true",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test re-reads the environment on its first get_config()."""
    from config import reset_config

    reset_config()
    yield
    reset_config()


@pytest.fixture
def valid_sha256():
    """Generate a valid 64-char SHA256 hex string."""
    return hashlib.sha256(b"test-fixture-seed").hexdigest()


@pytest.fixture
def make_sha256():
    """Factory fixture: generate deterministic SHA256 from any string or bytes."""
    def _make(seed) -> str:
        if isinstance(seed, str):
            seed = seed.encode()
        return hashlib.sha256(seed).hexdigest()
    return _make


@pytest.fixture
def installer_config(tmp_path):
    """Randomized macOS InstallerConfig with its prefix below tmp_path."""
    from tests.factories.model_factories import make_installer_config

    return make_installer_config(tmp_path)


@pytest.fixture
def context(tmp_path):
    """InstallerContext for a macOS host with the prefix below tmp_path."""
    from tests.factories.model_factories import make_context

    return make_context(tmp_path)


@pytest.fixture
def runner():
    """RecordingRunner; nothing is executed."""
    from tests.factories.fakes import RecordingRunner

    return RecordingRunner()


@pytest.fixture
def harness_config():
    """Harness settings with the pg_extension query switched off."""
    from tests.factories.model_factories import make_harness_config

    return make_harness_config()
