"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected build-time issues)

Every business failure propagates to the Installer as-is. Nothing in this
repository retries a fetch, a build step or a smoke-test assertion.

Exports:
    ContractViolationError, BusinessLogicError, FetchError,
    ChecksumMismatchError, BuildError, SmokeTestFailure, DatabaseError,
    ResourceNotFoundError, ConfigurationError
"""

from typing import Optional, Sequence


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - Install-phase layout requested without a sandbox root
    - Formula class missing required metadata

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected build-time failures.

    Subclasses represent specific categories of failures.
    """
    pass


class FetchError(BusinessLogicError):
    """
    Upstream source could not be downloaded.

    Examples:
        - Download server unavailable
        - HTTP 404 for the release tarball
        - Network timeout
    """
    pass


class ChecksumMismatchError(FetchError):
    """
    Downloaded source does not match the recipe's SHA-256.

    Fatal before any build step runs.
    """

    def __init__(self, path: str, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"SHA256 mismatch for {path}\n"
            f"Expected: {expected}\n"
            f"  Actual: {actual}"
        )


class BuildError(BusinessLogicError):
    """
    An external command exited non-zero.

    Raised for every failing `system` call: configure, make, make install,
    pg_ctl, psql, shp2pgsql. The command's output is kept verbatim.
    """

    def __init__(self, args: Sequence[str], returncode: int,
                 stdout: str = "", stderr: str = ""):
        self.args_list = [str(a) for a in args]
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Failed executing: {' '.join(self.args_list)} (exit status {returncode})"
        )

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return "".join(part for part in (self.stdout, self.stderr) if part)


class SmokeTestFailure(BusinessLogicError):
    """
    A post-install smoke-test assertion did not hold.

    Carries the literal expected and actual values.
    """

    def __init__(self, check: str, expected: str, actual: str,
                 message: Optional[str] = None):
        self.check = check
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"{check}: expected {expected!r}, got {actual!r}"
        )


class DatabaseError(BusinessLogicError):
    """
    Database operation failures during extension verification.

    Examples:
        - Connection refused on the ephemeral port
        - Query against pg_extension failed
    """
    pass


class ResourceNotFoundError(BusinessLogicError):
    """
    Requested resource does not exist.

    Examples:
        - Formula name not in the registry
        - Source archive missing from the cache
    """
    pass


class ConfigurationError(BusinessLogicError):
    """
    System configuration error.

    Examples:
        - HOMEBREW_PREFIX is not an absolute path
        - HOMEBREW_HOST_PLATFORM names an unknown platform
        - HOMEBREW_CLANG_BUILD_VERSION is not an integer
    """
    pass
