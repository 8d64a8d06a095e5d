"""
Pure Enumeration Types for the Formula Layer.

No business logic - pure type definitions only.

Exports:
    LayoutRole: Directory roles the upstream build systems accept as overrides
    LayoutScope: Which root a role is resolved against
    BuildPhase: Phase a layout override is computed for
    DependencyScope: When a dependency is needed
    HostPlatform: Platform a dependency or flag is conditional on
"""

from enum import Enum


class LayoutRole(str, Enum):
    """
    Directory roles understood by the engine's autoconf/PGXS build system.

    Values are the literal variable names passed to `make` (and, for the
    subset autoconf knows, to `./configure` as `--<value>=`).
    """

    BINDIR = "bindir"
    DATADIR = "datadir"
    LIBDIR = "libdir"
    PKGLIBDIR = "pkglibdir"
    INCLUDEDIR = "includedir"
    PKGINCLUDEDIR = "pkgincludedir"
    INCLUDEDIR_SERVER = "includedir_server"
    INCLUDEDIR_INTERNAL = "includedir_internal"
    MANDIR = "mandir"
    DOCDIR = "docdir"
    SYSCONFDIR = "sysconfdir"
    PG_SHAREDIR = "PG_SHAREDIR"  # PGXS alias of datadir


class LayoutScope(str, Enum):
    """
    Root a layout role is resolved against.

    - SHARED: {prefix} at configure, {keg} at install, qualified by family@major
    - OPT: {prefix}/opt/{name} at configure, {keg} at install
    - KEG: {keg} in both phases
    - GLOBAL: {prefix} in both phases
    """

    SHARED = "shared"
    OPT = "opt"
    KEG = "keg"
    GLOBAL = "global"


class BuildPhase(str, Enum):
    """
    Phase a layout override is computed for.

    CONFIGURE values are baked into the binaries (and used for `make`);
    INSTALL values only decide where `make install` writes.
    """

    CONFIGURE = "configure"
    INSTALL = "install"


class DependencyScope(str, Enum):
    """When a dependency has to be present."""

    BUILD = "build"                  # `=> :build`
    BUILD_AND_RUN = "build_and_run"  # default


class HostPlatform(str, Enum):
    """Platform condition attached to a dependency."""

    ANY = "any"
    MACOS = "macos"
    LINUX = "linux"
