"""
FormulaBase - Abstract base class for all formulae.

Enforces the interface the build orchestration expects. Metadata is
declared as class attributes; build logic lives in `install` and `test`.

Interface Contract:
    1. install() -> None                      (build + install into the keg)
    2. test(t: SmokeTestHarness) -> None      (post-install smoke test)
    Optional:
    3. post_install() -> None
    4. caveats() -> Optional[str]
    5. service() -> Optional[ServiceDescriptor]

Exports:
    FormulaBase: Abstract base class (ABC)
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from core.models.enums import DependencyScope
from core.models.package import Keg, Package
from core.models.recipe import (
    CompilerRestriction,
    Dependency,
    Deprecation,
    HeadSource,
    Livecheck,
    ServiceDescriptor,
    SourceArchive,
)
from infrastructure.build_environment import BuildEnvironment
from infrastructure.command_runner import CommandResult, CommandRunner
from infrastructure.installer_context import InstallerContext
from util_logger import ComponentType, LoggerFactory


class FormulaBase(ABC):
    """
    Abstract base class enforcing the formula interface.

    Required class attributes:
        package (Package): Family, major qualifier, version, revision
        desc (str): One-line description
        homepage (str): Upstream homepage
        license (str): SPDX license expression
        source (SourceArchive): Release archive and checksum

    Optional class attributes:
        head (HeadSource): Development branch checkout
        livecheck (Livecheck): Upstream version discovery
        dependencies (List[Dependency]): Declared dependencies
        fails_with (List[CompilerRestriction]): Unsupported compilers
        deprecation (Deprecation): End of support

    Instances are bound to one InstallerContext, one CommandRunner and one
    BuildEnvironment; every command a formula runs gets that environment.
    """

    # Class attributes (validated by registry)
    package: Package
    desc: str
    homepage: str
    license: str
    source: SourceArchive
    head: Optional[HeadSource] = None
    livecheck: Optional[Livecheck] = None
    dependencies: List[Dependency] = []
    fails_with: List[CompilerRestriction] = []
    deprecation: Optional[Deprecation] = None

    def __init__(
        self,
        context: InstallerContext,
        runner: Optional[CommandRunner] = None,
        env: Optional[BuildEnvironment] = None,
        buildpath: Optional[Path] = None,
    ):
        self.context = context
        self.runner = runner or CommandRunner()
        self.env = env or BuildEnvironment()
        self.buildpath = Path(buildpath) if buildpath else None
        self.keg: Keg = context.keg_for(self.package)
        self.logger = LoggerFactory.create_with_context(
            ComponentType.FORMULA,
            type(self).__name__,
            formula=self.name,
            version=self.package.pkg_version,
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @classmethod
    def formula_name(cls) -> str:
        return cls.package.name

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def version(self):
        return self.package.parsed_version

    # ------------------------------------------------------------------
    # Paths (keg, opt, prefix)
    # ------------------------------------------------------------------

    @property
    def homebrew_prefix(self) -> Path:
        return self.context.prefix

    @property
    def prefix(self) -> Path:
        return self.keg.root

    @property
    def bin(self) -> Path:
        return self.keg.bin

    @property
    def lib(self) -> Path:
        return self.keg.lib

    @property
    def include(self) -> Path:
        return self.keg.include

    @property
    def share(self) -> Path:
        return self.keg.share

    @property
    def man(self) -> Path:
        return self.keg.man

    @property
    def man1(self) -> Path:
        return self.keg.man1

    @property
    def doc(self) -> Path:
        return self.keg.doc

    @property
    def pkgshare(self) -> Path:
        return self.keg.pkgshare

    @property
    def etc(self) -> Path:
        return self.keg.etc

    @property
    def var(self) -> Path:
        return self.keg.var

    @property
    def opt_prefix(self) -> Path:
        return self.keg.opt_prefix

    @property
    def opt_bin(self) -> Path:
        return self.keg.opt_bin

    @property
    def opt_lib(self) -> Path:
        return self.keg.opt_lib

    @property
    def opt_include(self) -> Path:
        return self.keg.opt_include

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    @classmethod
    def active_dependencies(cls, platform: str, head: bool = False,
                            include_build: bool = True) -> List[Dependency]:
        """Dependencies that apply on platform (head adds the head-only ones)."""
        declared = list(cls.dependencies)
        if head and cls.head is not None:
            declared += cls.head.dependencies
        return [
            dep for dep in declared
            if dep.applies_to(platform)
            and (include_build or dep.scope != DependencyScope.BUILD)
        ]

    def dependency_names(self, include_build: bool = True) -> List[str]:
        return [
            dep.name for dep in self.active_dependencies(
                self.context.host_platform, self.context.head, include_build
            )
        ]

    # ------------------------------------------------------------------
    # Build helpers
    # ------------------------------------------------------------------

    def std_configure_args(self) -> List[str]:
        return [
            "--disable-debug",
            "--disable-dependency-tracking",
            f"--prefix={self.prefix}",
            f"--libdir={self.lib}",
        ]

    def prepare_environment(self) -> None:
        """Adjust self.env before the first build command."""
        pass

    def build_commands(self) -> List[List[str]]:
        """argv of every build command install() runs, in order."""
        return []

    def system(self, *args, cwd=None) -> CommandResult:
        """Run a build command in buildpath with the formula's environment."""
        return self.runner.system(*args, env=self.env, cwd=cwd or self.buildpath)

    # ------------------------------------------------------------------
    # Interface
    # ------------------------------------------------------------------

    @abstractmethod
    def install(self) -> None:
        """Build from buildpath and install into the keg."""
        pass

    @abstractmethod
    def test(self, t) -> None:
        """
        Smoke test against the installed keg.

        Args:
            t: SmokeTestHarness that is already entered
        """
        pass

    def post_install(self) -> None:
        pass

    def caveats(self) -> Optional[str]:
        return None

    def service(self) -> Optional[ServiceDescriptor]:
        return None
