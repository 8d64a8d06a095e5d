# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
# STATUS: Configuration - Pre-build validation with regex patterns
# PURPOSE: Reject malformed HOMEBREW_* / FORMULA_* values before any fetch
# ============================================================================
"""
Environment Variable Validation Module.

The Installer exports its layout and host facts as HOMEBREW_* variables;
the smoke tests read a few FORMULA_* switches. A relative prefix or a typo in
the clang build number would otherwise surface much later as a confusing
configure failure, so each variable is checked against a regex up front.

Usage:
    from config.env_validation import validate_environment

    for problem in validate_environment(include_warnings=False):
        print(f"{problem.var_name}: {problem.message}")

Exports:
    ENV_VAR_RULES: Rule per variable name
    EnvVarRule: Rule dataclass
    EnvVarProblem: One failed (or defaulted) variable
    validate_environment: Check every rule
    validate_single_var: Check one variable
    log_validation_results: Log problems, return overall result
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any

from util_logger import ComponentType, LoggerFactory

_DISPLAY_LIMIT = 30


@dataclass
class EnvVarProblem:
    """A variable that failed its rule, or (severity "warning") fell back to a default."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    @property
    def display_value(self) -> Optional[str]:
        # Paths can be long; keep table cells readable
        value = self.current_value
        if value is not None and len(value) > _DISPLAY_LIMIT:
            return f"{value[:20]}...({len(value)} chars)"
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self.display_value,
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }


@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex the value must match
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        allow_empty: Allow empty string (default False)
        default_value: Value the config layer falls back to when unset
        warn_on_default: Emit a warning when the default is used
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    allow_empty: bool = False
    default_value: Optional[str] = None
    warn_on_default: bool = True


def _optional(pattern: Pattern, description: str, fix: str, example: str,
              default: Optional[str] = None, warn: bool = False) -> EnvVarRule:
    return EnvVarRule(
        pattern=pattern,
        pattern_description=description,
        required=False,
        fix_suggestion=fix,
        example=example,
        default_value=default,
        warn_on_default=warn,
    )


_ABSOLUTE_PATH = re.compile(r"^(/[A-Za-z0-9._@+-]+)+/?$|^/$")
_HOME_OR_ABSOLUTE_PATH = re.compile(r"^(~|/)[A-Za-z0-9._@+/ -]*$")
_GITHUB_USER = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_PLATFORM = re.compile(r"^(macos|linux)$", re.IGNORECASE)
_NON_BLANK = re.compile(r"^\s*\S")
_LOG_LEVEL = re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE)

_BOOL_DESCRIPTION = "Boolean value (true/false)"


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # Layout: every keg, opt and shared path is derived from these
    "HOMEBREW_PREFIX": _optional(
        _ABSOLUTE_PATH, "Absolute path of the global prefix",
        "Use the prefix `brew --prefix` prints", "/opt/homebrew",
        default="/opt/homebrew", warn=True,
    ),
    "HOMEBREW_CELLAR": _optional(
        _ABSOLUTE_PATH, "Absolute path of the cellar",
        "Use the cellar `brew --cellar` prints", "/opt/homebrew/Cellar",
    ),
    "HOMEBREW_CACHE": _optional(
        _HOME_OR_ABSOLUTE_PATH, "Absolute or ~-relative path of the download cache",
        "Use the cache `brew --cache` prints", "~/Library/Caches/Homebrew",
    ),

    # Identity
    "HOMEBREW_TAP_USER": _optional(
        _GITHUB_USER, "GitHub user or organisation name",
        "Set to the owner of the tap the formulae live in", "MercuryTechnologies",
        default="MercuryTechnologies", warn=True,
    ),

    # Host facts
    "HOMEBREW_HOST_PLATFORM": _optional(
        _PLATFORM, "Host platform (macos, linux)",
        "Leave unset to detect, or set to 'macos' / 'linux'", "macos",
    ),
    "HOMEBREW_CLANG_BUILD_VERSION": _optional(
        _POSITIVE_INT, "Positive integer (Apple clang build number)",
        "Use the number from `clang --version`, e.g. 1500 for Xcode 15", "1500",
    ),
    "HOMEBREW_SDKROOT": _optional(
        _ABSOLUTE_PATH, "Absolute path of the macOS SDK",
        "Use the path `xcrun --show-sdk-path` prints",
        "/Library/Developer/CommandLineTools/SDKs/MacOSX.sdk",
    ),
    "HOMEBREW_GITHUB_ACTIONS": _optional(
        _NON_BLANK, "Any non-blank value (presence marks a CI run)",
        "Set only on CI runners; unset it for local builds", "true",
    ),

    # Smoke tests
    "FORMULA_KEEP_TESTPATH": _optional(
        _BOOLEAN, _BOOL_DESCRIPTION,
        "Set to 'true' to keep smoke-test directories for inspection", "false", default="false",
    ),
    "FORMULA_VERIFY_EXTENSION": _optional(
        _BOOLEAN, _BOOL_DESCRIPTION,
        "Set to 'false' to skip the pg_extension query after CREATE EXTENSION", "true", default="true",
    ),

    # Logging
    "LOG_LEVEL": _optional(
        _LOG_LEVEL, "Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        "Set to DEBUG for verbose logging, INFO for normal operation", "INFO",
        default="INFO", warn=True,
    ),
    "DEBUG_MODE": _optional(
        _BOOLEAN, _BOOL_DESCRIPTION,
        "Set to 'true' to log every component at DEBUG", "false", default="false",
    ),
}


def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[EnvVarProblem]:
    """
    Check one environment variable against its rule.

    Returns an error for a missing required variable or a value that does
    not match, a warning for an unset variable that falls back to a default
    (when `include_warnings` and the rule asks for it), otherwise None.
    """
    value = os.environ.get(var_name)
    unset = value is None or (value == "" and not rule.allow_empty)

    if unset and rule.required:
        return EnvVarProblem(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
        )

    if unset:
        if include_warnings and rule.warn_on_default and rule.default_value is not None:
            return EnvVarProblem(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if rule.pattern.match(value):
        return None

    return EnvVarProblem(
        var_name=var_name,
        message="Invalid format",
        current_value=value,
        expected_pattern=rule.pattern_description,
        fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
    )


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[EnvVarProblem]:
    """Apply every rule (ENV_VAR_RULES by default); empty list means clean."""
    rules = ENV_VAR_RULES if rules is None else rules
    problems = (validate_single_var(name, rule, include_warnings) for name, rule in rules.items())
    return [p for p in problems if p is not None]


def log_validation_results(logger=None) -> bool:
    """
    Log every problem and return True when there are no errors.

    Warnings (defaults in use) are logged but do not fail validation.
    """
    logger = logger or LoggerFactory.create_logger(ComponentType.CLI, "EnvValidation")
    problems = validate_environment(include_warnings=True)
    errors = [p for p in problems if p.is_error]
    defaulted = [p for p in problems if not p.is_error]

    for error in errors:
        logger.error(
            f"{error.var_name}: {error.message}",
            extra={'custom_dimensions': error.to_dict()},
        )

    if defaulted:
        logger.warning(
            f"{len(defaulted)} optional variables using defaults: "
            + ", ".join(p.var_name for p in defaulted)
        )

    if errors:
        logger.error(f"Environment validation failed: {len(errors)} errors")
        return False
    logger.info("Environment validation passed")
    return True


__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "EnvVarProblem",
    "validate_environment",
    "validate_single_var",
    "log_validation_results",
]
