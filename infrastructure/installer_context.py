"""
Installer Context.

Facts a recipe asks the external Installer for: where kegs and opt links
live, which platform and compiler it is building on, whether this is a
head (development branch) build, and what its dependencies pull in
transitively. The Installer owns dependency resolution; the recipes only
read the resulting graph.

Exports:
    InstallerContext: Path derivation, host facts and dependency graph
"""

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from config import InstallerConfig, get_config
from core.models.package import Keg, Package


class InstallerContext:
    """
    Read-only view of the Installer for one build.

    Args:
        config: Installer configuration; defaults to get_config().installer
        head: Build from the development branch instead of the release archive
        dependency_graph: Formula name -> direct dependency names, as resolved
            by the Installer (may include formulae this repository does not
            define, e.g. llvm pulled in by sfcgal)
    """

    def __init__(
        self,
        config: Optional[InstallerConfig] = None,
        head: bool = False,
        dependency_graph: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self.config = config or get_config().installer
        self.head = head
        self._graph: Dict[str, List[str]] = {
            name: list(deps) for name, deps in (dependency_graph or {}).items()
        }

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def prefix(self) -> Path:
        return Path(self.config.prefix)

    @property
    def cellar(self) -> Path:
        return Path(self.config.cellar)

    @property
    def cache_dir(self) -> Path:
        return Path(self.config.cache_dir)

    def keg_for(self, package: Package) -> Keg:
        return Keg(
            prefix=self.prefix,
            cellar=self.cellar,
            name=package.name,
            pkg_version=package.pkg_version,
        )

    def opt_prefix(self, name: str) -> Path:
        return self.prefix / "opt" / name

    def opt_bin(self, name: str) -> Path:
        return self.opt_prefix(name) / "bin"

    def opt_lib(self, name: str) -> Path:
        return self.opt_prefix(name) / "lib"

    def opt_include(self, name: str) -> Path:
        return self.opt_prefix(name) / "include"

    # ------------------------------------------------------------------
    # Host facts
    # ------------------------------------------------------------------

    @property
    def host_platform(self) -> str:
        return self.config.host_platform

    @property
    def is_macos(self) -> bool:
        return self.config.is_macos

    @property
    def is_linux(self) -> bool:
        return self.config.is_linux

    @property
    def clang_build_version(self) -> Optional[int]:
        return self.config.clang_build_version

    @property
    def github_actions(self) -> bool:
        return self.config.github_actions

    @property
    def tap_user(self) -> str:
        return self.config.tap_user

    @property
    def sdk_path(self) -> Optional[str]:
        return self.config.sdk_path

    # ------------------------------------------------------------------
    # Dependency graph
    # ------------------------------------------------------------------

    def add_dependencies(self, name: str, dependencies: Iterable[str]) -> None:
        """Record direct dependencies of name (merged with what is known)."""
        known = self._graph.setdefault(name, [])
        for dep in dependencies:
            if dep not in known:
                known.append(dep)

    def direct_dependencies(self, name: str) -> List[str]:
        return list(self._graph.get(name, []))

    def recursive_dependencies(self, roots: Iterable[str]) -> List[str]:
        """
        Transitive closure of roots, depth first, each name once.

        Roots themselves are included.
        """
        seen: List[str] = []
        stack = list(reversed(list(roots)))
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.append(name)
            stack.extend(reversed(self._graph.get(name, [])))
        return seen
