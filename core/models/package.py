"""
Package identity and physical keg layout.

A Package is identified by its family and the major-version qualifier in its
name ("postgresql@16"). Its files are written into a keg below the cellar
(the physical sandbox root) and become visible below the global prefix only
after the Installer links the keg.

Exports:
    Package: Identity and version of a formula
    Keg: Physical sandbox root plus the derived opt paths
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator

from .version import Version

_FAMILY = re.compile(r"^[a-z0-9][a-z0-9+_.-]*$")


class Package(BaseModel):
    """
    Formula identity: (family, major qualifier) plus the upstream version.

    The qualifier of an extension is the major of the engine it is built
    against, not its own major: PostGIS 3.4.2 built for PostgreSQL 16 is
    `postgis@16`.
    """

    family: str = Field(..., description="Package family, e.g. 'postgresql'")
    major: int = Field(..., ge=1, description="Major-version qualifier in the name")
    version: str = Field(..., description="Upstream version, e.g. '16.3'")
    revision: int = Field(default=0, ge=0, description="Recipe revision counter")

    @field_validator("family")
    @classmethod
    def _valid_family(cls, value: str) -> str:
        if not _FAMILY.match(value):
            raise ValueError(f"invalid package family {value!r}")
        return value

    @field_validator("version")
    @classmethod
    def _parsable_version(cls, value: str) -> str:
        Version(value)
        return value

    @property
    def name(self) -> str:
        return f"{self.family}@{self.major}"

    @property
    def parsed_version(self) -> Version:
        return Version(self.version)

    @property
    def pkg_version(self) -> str:
        """Version directory name in the cellar: "3.4.2_2" for revision 2."""
        if self.revision:
            return f"{self.version}_{self.revision}"
        return self.version


@dataclass(frozen=True)
class Keg:
    """
    Physical install tree of one package version.

    `etc` and `var` are global: the Installer never versions configuration or
    state, so they resolve below the prefix rather than the keg.
    """

    prefix: Path
    cellar: Path
    name: str
    pkg_version: str

    @property
    def root(self) -> Path:
        return self.cellar / self.name / self.pkg_version

    @property
    def bin(self) -> Path:
        return self.root / "bin"

    @property
    def lib(self) -> Path:
        return self.root / "lib"

    @property
    def include(self) -> Path:
        return self.root / "include"

    @property
    def share(self) -> Path:
        return self.root / "share"

    @property
    def man(self) -> Path:
        return self.share / "man"

    @property
    def man1(self) -> Path:
        return self.man / "man1"

    @property
    def doc(self) -> Path:
        return self.share / "doc" / self.name

    @property
    def pkgshare(self) -> Path:
        return self.share / self.name

    @property
    def etc(self) -> Path:
        return self.prefix / "etc"

    @property
    def var(self) -> Path:
        return self.prefix / "var"

    @property
    def opt_prefix(self) -> Path:
        return self.prefix / "opt" / self.name

    @property
    def opt_bin(self) -> Path:
        return self.opt_prefix / "bin"

    @property
    def opt_lib(self) -> Path:
        return self.opt_prefix / "lib"

    @property
    def opt_include(self) -> Path:
        return self.opt_prefix / "include"

    def all_dirs(self) -> List[Path]:
        return [
            self.root,
            self.bin,
            self.lib,
            self.include,
            self.share,
            self.man1,
            self.doc,
        ]
