"""
Environment variable validation tests.

Tests regex patterns for the HOMEBREW_* and FORMULA_* validators.
"""

import re

import pytest

from config.env_validation import (
    ENV_VAR_RULES,
    log_validation_results,
    validate_environment,
    validate_single_var,
    EnvVarRule,
)


class TestPrefixValidation:
    """HOMEBREW_PREFIX must be an absolute path."""

    rule = ENV_VAR_RULES["HOMEBREW_PREFIX"]

    @pytest.mark.parametrize("value", ["/opt/homebrew", "/usr/local", "/home/linuxbrew/.linuxbrew", "/"])
    def test_absolute_paths_accepted(self, monkeypatch, value):
        monkeypatch.setenv("HOMEBREW_PREFIX", value)
        assert validate_single_var("HOMEBREW_PREFIX", self.rule) is None

    @pytest.mark.parametrize("value", ["opt/homebrew", "~/brew", "/opt/home brew"])
    def test_invalid_paths_rejected(self, monkeypatch, value):
        monkeypatch.setenv("HOMEBREW_PREFIX", value)
        result = validate_single_var("HOMEBREW_PREFIX", self.rule)
        assert result is not None
        assert result.severity == "error"

    def test_unset_warns_with_default(self, clean_env):
        result = validate_single_var("HOMEBREW_PREFIX", self.rule)
        assert result.severity == "warning"
        assert result.expected_pattern == "Default: /opt/homebrew"

    def test_unset_without_warnings(self, clean_env):
        assert validate_single_var("HOMEBREW_PREFIX", self.rule, include_warnings=False) is None


class TestTapUserValidation:
    rule = ENV_VAR_RULES["HOMEBREW_TAP_USER"]

    @pytest.mark.parametrize("value", ["MercuryTechnologies", "homebrew", "a-b-c"])
    def test_github_names_accepted(self, monkeypatch, value):
        monkeypatch.setenv("HOMEBREW_TAP_USER", value)
        assert validate_single_var("HOMEBREW_TAP_USER", self.rule) is None

    @pytest.mark.parametrize("value", ["-leading", "has space", "under_score"])
    def test_invalid_names_rejected(self, monkeypatch, value):
        monkeypatch.setenv("HOMEBREW_TAP_USER", value)
        assert validate_single_var("HOMEBREW_TAP_USER", self.rule) is not None


class TestHostFactValidation:
    @pytest.mark.parametrize("value", ["macos", "linux", "Linux"])
    def test_platform_accepted(self, monkeypatch, value):
        monkeypatch.setenv("HOMEBREW_HOST_PLATFORM", value)
        assert validate_single_var("HOMEBREW_HOST_PLATFORM", ENV_VAR_RULES["HOMEBREW_HOST_PLATFORM"]) is None

    def test_platform_rejected(self, monkeypatch):
        monkeypatch.setenv("HOMEBREW_HOST_PLATFORM", "windows")
        assert validate_single_var("HOMEBREW_HOST_PLATFORM", ENV_VAR_RULES["HOMEBREW_HOST_PLATFORM"]) is not None

    @pytest.mark.parametrize("value,ok", [("1500", True), ("1403", True), ("0", False), ("15.0", False)])
    def test_clang_build_version(self, monkeypatch, value, ok):
        monkeypatch.setenv("HOMEBREW_CLANG_BUILD_VERSION", value)
        result = validate_single_var("HOMEBREW_CLANG_BUILD_VERSION", ENV_VAR_RULES["HOMEBREW_CLANG_BUILD_VERSION"])
        assert (result is None) is ok

    @pytest.mark.parametrize("var", ["FORMULA_KEEP_TESTPATH", "FORMULA_VERIFY_EXTENSION", "DEBUG_MODE"])
    def test_booleans(self, monkeypatch, var):
        monkeypatch.setenv(var, "TRUE")
        assert validate_single_var(var, ENV_VAR_RULES[var]) is None
        monkeypatch.setenv(var, "maybe")
        assert validate_single_var(var, ENV_VAR_RULES[var]) is not None

    @pytest.mark.parametrize("value", ["true", "on", "1"])
    def test_github_actions_any_value_accepted(self, monkeypatch, value):
        monkeypatch.setenv("HOMEBREW_GITHUB_ACTIONS", value)
        assert validate_single_var("HOMEBREW_GITHUB_ACTIONS", ENV_VAR_RULES["HOMEBREW_GITHUB_ACTIONS"]) is None


class TestValidateEnvironment:
    def test_required_rule(self, monkeypatch):
        rules = {
            "FORMULA_REQUIRED": EnvVarRule(
                pattern=re.compile(r"^x$"),
                pattern_description="x",
                required=True,
                fix_suggestion="Set it",
                example="x",
            )
        }
        monkeypatch.delenv("FORMULA_REQUIRED", raising=False)
        results = validate_environment(rules)
        assert [r.message for r in results] == ["Required environment variable not set"]

    def test_clean_environment_has_only_warnings(self, clean_env):
        results = validate_environment()
        assert results
        assert {r.severity for r in results} == {"warning"}

    def test_errors_only(self, clean_env):
        assert validate_environment(include_warnings=False) == []

    def test_log_validation_results(self, clean_env, monkeypatch):
        assert log_validation_results() is True
        monkeypatch.setenv("HOMEBREW_PREFIX", "relative")
        assert log_validation_results() is False

    def test_to_dict_truncates_long_values(self, monkeypatch):
        monkeypatch.setenv("HOMEBREW_PREFIX", "relative/" + "x" * 40)
        result = validate_single_var("HOMEBREW_PREFIX", ENV_VAR_RULES["HOMEBREW_PREFIX"])
        assert result.to_dict()["current_value"].endswith("chars)")
