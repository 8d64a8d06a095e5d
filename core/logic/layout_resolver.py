"""
Layout Override Resolver.

Pure function of (prefix, family, major, phase) producing the directory
overrides a recipe passes to `./configure` and `make`.

Two phases exist because the Installer builds in one place and runs from
another. CONFIGURE paths are logical: they are compiled into the binaries and
point below the global prefix, where the engine looks for extensions at
runtime. INSTALL paths are physical: `make install` may only write into the
keg. For every role both phases use the same suffix, so linking the keg into
the prefix turns each install path into its configure path.

Exports:
    RoleSpec: Scope and suffix template of one role
    ROLE_TABLE: Recognised roles
    phase_roots: Root directory of each scope for a phase
    resolve_layout: Compute a LayoutOverride
"""

import posixpath
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from core.models.enums import BuildPhase, LayoutRole, LayoutScope
from core.models.layout import LayoutOverride, ResolvedPath
from exceptions import ContractViolationError
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.RESOLVER, "layout_resolver")


@dataclass(frozen=True)
class RoleSpec:
    """Scope and suffix template (`{qualified}`, `{package}` placeholders)."""

    scope: LayoutScope
    suffix: str

    def render(self, qualified_name: str, package_name: str) -> str:
        return self.suffix.format(qualified=qualified_name, package=package_name)


ROLE_TABLE: Dict[LayoutRole, RoleSpec] = {
    LayoutRole.DATADIR: RoleSpec(LayoutScope.SHARED, "share/{qualified}"),
    LayoutRole.PG_SHAREDIR: RoleSpec(LayoutScope.SHARED, "share/{qualified}"),
    LayoutRole.LIBDIR: RoleSpec(LayoutScope.SHARED, "lib/{qualified}"),
    LayoutRole.PKGLIBDIR: RoleSpec(LayoutScope.SHARED, "lib/{qualified}"),
    LayoutRole.INCLUDEDIR: RoleSpec(LayoutScope.OPT, "include"),
    LayoutRole.PKGINCLUDEDIR: RoleSpec(LayoutScope.OPT, "include/postgresql"),
    LayoutRole.INCLUDEDIR_SERVER: RoleSpec(LayoutScope.OPT, "include/postgresql/server"),
    LayoutRole.INCLUDEDIR_INTERNAL: RoleSpec(LayoutScope.OPT, "include/postgresql/internal"),
    LayoutRole.BINDIR: RoleSpec(LayoutScope.OPT, "bin"),
    LayoutRole.MANDIR: RoleSpec(LayoutScope.OPT, "share/man"),
    LayoutRole.DOCDIR: RoleSpec(LayoutScope.KEG, "share/doc/{package}"),
    LayoutRole.SYSCONFDIR: RoleSpec(LayoutScope.GLOBAL, "etc"),
}


def _normalize_root(path) -> str:
    path = str(path)
    if not posixpath.isabs(path):
        raise ContractViolationError(f"Layout root must be absolute, got {path!r}")
    return posixpath.normpath(path)


def phase_roots(
    prefix,
    package_name: str,
    phase: BuildPhase,
    keg_root=None,
) -> Dict[LayoutScope, Optional[str]]:
    """
    Root of every scope for one phase.

    KEG scope is None when no keg root is known; resolving a KEG role then
    fails. INSTALL phase always needs the keg root.
    """
    phase = BuildPhase(phase)
    prefix = _normalize_root(prefix)
    keg = _normalize_root(keg_root) if keg_root is not None else None

    if phase == BuildPhase.INSTALL:
        if keg is None:
            raise ContractViolationError(
                f"Install-phase layout for {package_name} requires a keg root"
            )
        return {
            LayoutScope.SHARED: keg,
            LayoutScope.OPT: keg,
            LayoutScope.KEG: keg,
            LayoutScope.GLOBAL: prefix,
        }

    return {
        LayoutScope.SHARED: prefix,
        LayoutScope.OPT: posixpath.join(prefix, "opt", package_name),
        LayoutScope.KEG: keg,
        LayoutScope.GLOBAL: prefix,
    }


def resolve_layout(
    prefix,
    family: str,
    major: int,
    phase: BuildPhase,
    keg_root=None,
    package_name: Optional[str] = None,
    roles: Optional[Iterable] = None,
) -> LayoutOverride:
    """
    Resolve directory overrides for one package and phase.

    Args:
        prefix: Global install prefix (e.g. /opt/homebrew)
        family: Package family ("postgresql"); qualifies the shared roles
        major: Major-version qualifier of the engine the files belong to
        phase: CONFIGURE (logical paths) or INSTALL (keg paths)
        keg_root: Physical sandbox root; required for INSTALL and for docdir
        package_name: Name used for opt and doc paths; defaults to family@major
        roles: Roles to resolve, in output order; defaults to every known role

    Returns:
        LayoutOverride with one ResolvedPath per recognised requested role

    Raises:
        ContractViolationError: INSTALL phase (or a keg-scoped role) without
            keg_root, or a relative root
    """
    phase = BuildPhase(phase)
    qualified = f"{family}@{major}"
    package_name = package_name or qualified
    roots = phase_roots(prefix, package_name, phase, keg_root)

    requested = list(ROLE_TABLE) if roles is None else list(roles)
    paths: Dict[LayoutRole, ResolvedPath] = {}

    for raw_role in requested:
        try:
            role = LayoutRole(raw_role)
        except ValueError:
            logger.warning(f"Skipping unrecognised layout role {raw_role!r} for {qualified}")
            continue

        entry = ROLE_TABLE[role]
        root = roots[entry.scope]
        if root is None:
            raise ContractViolationError(
                f"Role {role.value} of {package_name} is keg-scoped; keg_root is required"
            )
        paths[role] = ResolvedPath(
            role=role,
            scope=entry.scope,
            root=root,
            suffix=entry.render(qualified, package_name),
        )

    logger.debug(
        f"Resolved {len(paths)} {phase.value} roles for {package_name}",
        extra={'custom_dimensions': {'phase': phase.value, 'roles': [r.value for r in paths]}},
    )
    return LayoutOverride(phase=phase, family=family, major=major, paths=paths)
