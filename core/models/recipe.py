"""
Recipe metadata models.

Everything a formula declares besides its build steps: where the source
comes from, how newer upstream releases are discovered, what it depends on,
when it stops being supported, and how the host's service supervisor should
run it.

Exports:
    SourceArchive: Release tarball URL and pinned SHA-256
    HeadSource: Development branch checkout and its extra build deps
    Livecheck: Upstream index page and version regex
    Dependency: Named dependency with scope and platform condition
    CompilerRestriction: Compiler versions a recipe cannot be built with
    Deprecation: End-of-support date
    ServiceDescriptor: Supervisor contract (argv, env, logs, restart policy)
"""

import plistlib
import re
import datetime
from typing import Dict, List, Optional, Pattern

from pydantic import BaseModel, Field, field_validator

from .enums import DependencyScope, HostPlatform
from .version import Version

_SHA256 = re.compile(r"^[0-9a-f]{64}$")


class SourceArchive(BaseModel):
    """Release tarball and its pinned checksum."""

    url: str = Field(..., description="Download URL of the release archive")
    sha256: str = Field(..., description="Lowercase hex SHA-256 of the archive")

    @field_validator("sha256")
    @classmethod
    def _valid_sha256(cls, value: str) -> str:
        value = value.lower()
        if not _SHA256.match(value):
            raise ValueError("sha256 must be 64 hex characters")
        return value

    @property
    def filename(self) -> str:
        return self.url.rstrip("/").rsplit("/", 1)[-1]


class Dependency(BaseModel):
    """
    Another formula this recipe needs.

    `uses_from_macos` marks libraries macOS ships itself: the dependency only
    applies on Linux.
    """

    name: str
    scope: DependencyScope = DependencyScope.BUILD_AND_RUN
    platform: HostPlatform = HostPlatform.ANY
    uses_from_macos: bool = False
    comment: Optional[str] = None

    @property
    def is_build_only(self) -> bool:
        return self.scope == DependencyScope.BUILD

    def applies_to(self, platform) -> bool:
        platform = HostPlatform(platform)
        if self.uses_from_macos:
            return platform == HostPlatform.LINUX
        return self.platform in (HostPlatform.ANY, platform)


class HeadSource(BaseModel):
    """Development checkout; needs `./autogen.sh` and autotools."""

    url: str
    branch: str = "master"
    dependencies: List[Dependency] = Field(default_factory=list)


class Livecheck(BaseModel):
    """Upstream index page and the regex whose first group is a version."""

    url: str
    regex: str
    ignore_case: bool = True

    @property
    def pattern(self) -> Pattern:
        return re.compile(self.regex, re.IGNORECASE if self.ignore_case else 0)

    def versions_in(self, text: str) -> List[Version]:
        """All distinct versions the regex finds in text, ascending."""
        found = {Version(m.group(1)) for m in self.pattern.finditer(text)}
        return sorted(found)


class CompilerRestriction(BaseModel):
    """`fails_with gcc: "5"`."""

    compiler: str
    version: str
    reason: Optional[str] = None


class Deprecation(BaseModel):
    """`deprecate! date: ..., because: ...`."""

    date: datetime.date
    because: str

    def is_deprecated(self, today: Optional[datetime.date] = None) -> bool:
        return (today or datetime.date.today()) >= self.date


class ServiceDescriptor(BaseModel):
    """
    Contract with the host service supervisor.

    Rendered as a launchd plist on macOS and a systemd user unit on Linux.
    Restart policy is always-restart when keep_alive is set.
    """

    run: List[str]
    environment_variables: Dict[str, str] = Field(default_factory=dict)
    keep_alive: bool = True
    log_path: Optional[str] = None
    error_log_path: Optional[str] = None
    working_dir: Optional[str] = None

    def launchd_label(self, formula_name: str) -> str:
        return f"homebrew.mxcl.{formula_name}"

    def to_launchd_plist(self, formula_name: str) -> bytes:
        plist = {
            "Label": self.launchd_label(formula_name),
            "ProgramArguments": list(self.run),
            "RunAtLoad": True,
            "KeepAlive": self.keep_alive,
        }
        if self.environment_variables:
            plist["EnvironmentVariables"] = dict(self.environment_variables)
        if self.working_dir:
            plist["WorkingDirectory"] = self.working_dir
        if self.log_path:
            plist["StandardOutPath"] = self.log_path
        if self.error_log_path:
            plist["StandardErrorPath"] = self.error_log_path
        return plistlib.dumps(plist)

    def to_systemd_unit(self, formula_name: str) -> str:
        lines = [
            "[Unit]",
            f"Description=Homebrew generated unit for {formula_name}",
            "",
            "[Install]",
            "WantedBy=default.target",
            "",
            "[Service]",
            "Type=simple",
            f"ExecStart={' '.join(self.run)}",
        ]
        if self.keep_alive:
            lines.append("Restart=always")
        if self.working_dir:
            lines.append(f"WorkingDirectory={self.working_dir}")
        if self.log_path:
            lines.append(f"StandardOutput=append:{self.log_path}")
        if self.error_log_path:
            lines.append(f"StandardError=append:{self.error_log_path}")
        for key, value in self.environment_variables.items():
            lines.append(f'Environment="{key}={value}"')
        return "\n".join(lines) + "\n"
