"""
Layout override models.

A LayoutOverride is the typed replacement for the `datadir=...` strings a
recipe hands to `./configure` and `make`. Each role resolves to a root plus a
suffix; the configure-phase and install-phase overrides of the same package
share every suffix and differ only in root, which is what lets the
Installer's link step turn the physical install path into the logical one.

Exports:
    ResolvedPath: Root + suffix for one role
    LayoutOverride: Role -> ResolvedPath mapping for one phase
"""

import posixpath
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .enums import BuildPhase, LayoutRole, LayoutScope

# Roles autoconf accepts as --<role>= on the configure command line
CONFIGURE_FLAG_ROLES = frozenset({
    LayoutRole.BINDIR,
    LayoutRole.DATADIR,
    LayoutRole.LIBDIR,
    LayoutRole.INCLUDEDIR,
    LayoutRole.MANDIR,
    LayoutRole.DOCDIR,
    LayoutRole.SYSCONFDIR,
})


class ResolvedPath(BaseModel):
    """One role's path, split at the root the phase resolves it against."""

    role: LayoutRole
    scope: LayoutScope
    root: str = Field(..., description="Absolute root (prefix, opt prefix or keg)")
    suffix: str = Field(..., description="Path below root, identical across phases")

    @property
    def path(self) -> str:
        if not self.suffix:
            return self.root
        return posixpath.join(self.root, self.suffix)


class LayoutOverride(BaseModel):
    """
    Role -> path mapping for one package and one build phase.

    Iteration order of `paths` is the order roles were requested in, and
    argument lists are emitted in that order.
    """

    phase: BuildPhase
    family: str
    major: int
    paths: Dict[LayoutRole, ResolvedPath] = Field(default_factory=dict)

    @property
    def qualified_name(self) -> str:
        return f"{self.family}@{self.major}"

    @property
    def roles(self) -> List[LayoutRole]:
        return list(self.paths)

    def __contains__(self, role) -> bool:
        return LayoutRole(role) in self.paths

    def path(self, role) -> str:
        return self.paths[LayoutRole(role)].path

    def suffix(self, role) -> str:
        return self.paths[LayoutRole(role)].suffix

    def root(self, role) -> str:
        return self.paths[LayoutRole(role)].root

    def _select(self, roles: Optional[Iterable]) -> List[LayoutRole]:
        if roles is None:
            return self.roles
        return [LayoutRole(r) for r in roles]

    def configure_args(self, roles: Optional[Iterable] = None) -> List[str]:
        """
        `--role=path` flags for `./configure`.

        Roles autoconf does not know (pkglibdir, includedir_server, ...) are
        make-only and are left out.
        """
        return [
            f"--{role.value}={self.path(role)}"
            for role in self._select(roles)
            if role in CONFIGURE_FLAG_ROLES
        ]

    def make_variables(self, roles: Optional[Iterable] = None) -> List[str]:
        """`role=path` variable assignments for `make`."""
        return [f"{role.value}={self.path(role)}" for role in self._select(roles)]

    def as_dict(self) -> Dict[str, str]:
        return {role.value: resolved.path for role, resolved in self.paths.items()}
