"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest

from config.env_validation import ENV_VAR_RULES


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = list(ENV_VAR_RULES) + [
        "FORMULA_TEST_HOST", "FORMULA_TEST_DATABASE",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
