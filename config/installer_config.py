"""
Installer (package manager) Configuration.

Provides configuration for:
    - Global prefix and cellar (logical shared root vs physical sandbox roots)
    - Source cache location
    - Tap identity embedded in the engine's version string
    - Host facts the recipes branch on (platform, clang build, SDK root)
    - CI switch that skips cluster initialisation

Exports:
    InstallerConfig: Pydantic installer configuration model
    detect_host_platform: Map sys.platform to "macos" / "linux"
"""

import os
import sys
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from config.defaults import InstallerDefaults


def detect_host_platform() -> str:
    """Return "macos" on Darwin, "linux" everywhere else."""
    return "macos" if sys.platform == "darwin" else "linux"


def _env_set(name: str) -> bool:
    # Any non-blank value counts, as with the Installer's own HOMEBREW_* switches
    return bool(os.environ.get(name, "").strip())


# ============================================================================
# INSTALLER CONFIGURATION
# ============================================================================

class InstallerConfig(BaseModel):
    """
    Package manager layout and host configuration.

    The prefix is the logical shared root; kegs below the cellar are the
    physical sandbox roots the Installer lets a build write to.
    """

    prefix: str = Field(
        default=InstallerDefaults.PREFIX,
        description="Global prefix every keg is linked into (HOMEBREW_PREFIX)",
        examples=["/opt/homebrew", "/usr/local", "/home/linuxbrew/.linuxbrew"]
    )

    cellar: Optional[str] = Field(
        default=None,
        description="Root of all kegs; defaults to {prefix}/Cellar (HOMEBREW_CELLAR)"
    )

    cache_dir: str = Field(
        default=InstallerDefaults.CACHE_DIR,
        description="Download cache for source archives (HOMEBREW_CACHE)"
    )

    tap_user: str = Field(
        default=InstallerDefaults.TAP_USER,
        description="Tap owner, embedded via --with-extra-version"
    )

    github_actions: bool = Field(
        default=False,
        description="""Running under CI (HOMEBREW_GITHUB_ACTIONS set to any value).

        Post-install skips `initdb` and the engine's smoke test skips its
        throwaway cluster, since clusters clash when several engine majors
        are tested on the same runner.
        """
    )

    host_platform: str = Field(
        default_factory=detect_host_platform,
        description="Host operating system: 'macos' or 'linux'"
    )

    clang_build_version: Optional[int] = Field(
        default=None,
        ge=0,
        description="Apple clang build number (e.g. 1500 for Xcode 15)"
    )

    sdk_path: Optional[str] = Field(
        default=None,
        description="macOS SDK root; passed to the engine as PG_SYSROOT when set"
    )

    @field_validator("prefix", "cellar")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.startswith("/"):
            raise ValueError(f"must be an absolute path, got {value!r}")
        return value.rstrip("/") or "/"

    @field_validator("host_platform")
    @classmethod
    def _known_platform(cls, value: str) -> str:
        value = value.lower()
        if value not in InstallerDefaults.SUPPORTED_PLATFORMS:
            raise ValueError(
                f"host_platform must be one of {InstallerDefaults.SUPPORTED_PLATFORMS}, got {value!r}"
            )
        return value

    @model_validator(mode="after")
    def _default_cellar(self) -> "InstallerConfig":
        if self.cellar is None:
            self.cellar = f"{self.prefix}/{InstallerDefaults.CELLAR_DIRNAME}"
        return self

    @property
    def is_macos(self) -> bool:
        return self.host_platform == "macos"

    @property
    def is_linux(self) -> bool:
        return self.host_platform == "linux"

    def debug_dict(self) -> dict:
        """Plain dict for debug output."""
        return self.model_dump()

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        clang = os.environ.get("HOMEBREW_CLANG_BUILD_VERSION")
        return cls(
            prefix=os.environ.get("HOMEBREW_PREFIX", InstallerDefaults.PREFIX),
            cellar=os.environ.get("HOMEBREW_CELLAR") or None,
            cache_dir=os.path.expanduser(os.environ.get("HOMEBREW_CACHE", InstallerDefaults.CACHE_DIR)),
            tap_user=os.environ.get("HOMEBREW_TAP_USER", InstallerDefaults.TAP_USER),
            github_actions=_env_set("HOMEBREW_GITHUB_ACTIONS"),
            host_platform=os.environ.get("HOMEBREW_HOST_PLATFORM") or detect_host_platform(),
            clang_build_version=int(clang) if clang else None,
            sdk_path=os.environ.get("HOMEBREW_SDKROOT") or None,
        )
