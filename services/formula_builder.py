"""
Formula Build Orchestration.

Drives one formula through the steps the Installer would: fetch and verify
the source, unpack it, install inside a scoped build environment, run
post-install, and run the smoke test inside a fresh harness.

Failures propagate unchanged and nothing is retried. The one exception is
`run_smoke_tests`, which records each formula's outcome separately so that
a failing smoke test does not keep the others from running.

Exports:
    FormulaBuild: One formula's build pipeline
    SmokeTestOutcome: Result of one formula's smoke test
    run_smoke_tests: Smoke-test several formulae independently
"""

import tarfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel

from config import HarnessConfig, get_config
from exceptions import BusinessLogicError, FetchError
from formulae import FormulaBase, build_order, get_formula_class
from infrastructure.build_environment import BuildEnvironment
from infrastructure.command_runner import CommandRunner
from infrastructure.installer_context import InstallerContext
from infrastructure.source_fetcher import SourceFetcher
from services.smoke_test_harness import SmokeTestHarness
from util_logger import ComponentType, LoggerFactory, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "formula_builder")


class SmokeTestOutcome(BaseModel):
    """Pass/fail of one formula's smoke test."""

    formula: str
    passed: bool
    error_type: Optional[str] = None
    error: Optional[str] = None


class FormulaBuild:
    """
    Build pipeline for one formula class.

    Args:
        formula_class: Registered formula class
        context: Installer context shared by every step
        runner: Command runner for build and test commands
        env: Build environment; each install runs in env.scoped()
        fetcher: Source fetcher; created from the context's cache dir when omitted
        harness_config: Smoke-test settings; defaults to get_config().harness
        probe_factory: Passed through to the smoke-test harness
    """

    def __init__(
        self,
        formula_class,
        context: InstallerContext,
        runner: Optional[CommandRunner] = None,
        env: Optional[BuildEnvironment] = None,
        fetcher: Optional[SourceFetcher] = None,
        harness_config: Optional[HarnessConfig] = None,
        probe_factory: Optional[Callable] = None,
    ):
        self.formula_class = formula_class
        self.context = context
        self.runner = runner or CommandRunner()
        self.env = env or BuildEnvironment()
        self._fetcher = fetcher
        self.harness_config = harness_config
        self.probe_factory = probe_factory
        self.name = formula_class.formula_name()

    def formula(self, buildpath=None) -> FormulaBase:
        return self.formula_class(self.context, self.runner, self.env, buildpath)

    # ------------------------------------------------------------------
    # Source
    # ------------------------------------------------------------------

    def fetch(self) -> Path:
        fetcher = self._fetcher or SourceFetcher(self.context.cache_dir)
        try:
            return fetcher.fetch(self.formula_class.source)
        finally:
            if self._fetcher is None:
                fetcher.close()

    def unpack(self, archive: Path, workdir: Path) -> Path:
        """
        Extract archive into workdir and return the source root.

        Release tarballs hold a single top-level directory; that directory is
        the buildpath.
        """
        workdir.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive) as tar:
                tar.extractall(workdir, filter="data")
        except tarfile.TarError as e:
            raise FetchError(f"Cannot unpack {archive}: {e}") from e

        entries = [p for p in workdir.iterdir() if not p.name.startswith(".")]
        if len(entries) == 1 and entries[0].is_dir():
            return entries[0]
        return workdir

    def checkout_head(self, workdir: Path) -> Path:
        head = self.formula_class.head
        if head is None:
            raise FetchError(f"{self.name} has no head source")
        target = workdir / self.name
        self.runner.system(
            "git", "clone", "--depth", "1", "--branch", head.branch, head.url, target,
            env=self.env,
        )
        return target

    def prepare_source(self, workdir) -> Path:
        workdir = Path(workdir)
        if self.context.head:
            return self.checkout_head(workdir)
        return self.unpack(self.fetch(), workdir)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @log_exceptions(ComponentType.SERVICE, "FormulaBuild")
    def install(self, buildpath) -> FormulaBase:
        """Run formula.install() with environment changes confined to the step."""
        formula = self.formula(buildpath)
        logger.info(f"Installing {self.name} into {formula.prefix}")
        with self.env.scoped():
            formula.install()
        return formula

    @log_exceptions(ComponentType.SERVICE, "FormulaBuild")
    def post_install(self, formula: Optional[FormulaBase] = None) -> FormulaBase:
        formula = formula or self.formula()
        formula.post_install()
        caveats = formula.caveats()
        if caveats:
            logger.info(caveats.rstrip())
        return formula

    @log_exceptions(ComponentType.SERVICE, "FormulaBuild")
    def test(self) -> None:
        """Smoke-test the installed keg in a fresh testpath."""
        formula = self.formula()
        harness = SmokeTestHarness(
            runner=self.runner,
            config=self.harness_config or get_config().harness,
            env=BuildEnvironment(self.env.to_dict()),
            probe_factory=self.probe_factory,
            name=self.name,
        )
        with harness as t:
            formula.test(t)
        logger.info(f"Smoke test passed for {self.name}")

    def run(self, workdir, test: bool = False) -> FormulaBase:
        """fetch/unpack -> install -> post_install (-> test)."""
        buildpath = self.prepare_source(workdir)
        formula = self.install(buildpath)
        self.post_install(formula)
        if test:
            self.test()
        return formula


def run_smoke_tests(
    names: Optional[Iterable[str]],
    context: InstallerContext,
    runner: Optional[CommandRunner] = None,
    harness_config: Optional[HarnessConfig] = None,
    probe_factory: Optional[Callable] = None,
) -> List[SmokeTestOutcome]:
    """
    Smoke-test formulae one after another, dependencies first.

    A failure ends that formula's test only; the next formula still runs.
    Contract violations are bugs and propagate.
    """
    requested = None if names is None else set(names)
    outcomes = []
    for name in build_order(None if requested is None else sorted(requested), context.host_platform):
        if requested is not None and name not in requested:
            continue
        build = FormulaBuild(
            get_formula_class(name),
            context,
            runner=runner,
            harness_config=harness_config,
            probe_factory=probe_factory,
        )
        try:
            build.test()
        except BusinessLogicError as e:
            logger.error(f"Smoke test failed for {name}: {e}")
            outcomes.append(SmokeTestOutcome(
                formula=name, passed=False, error_type=type(e).__name__, error=str(e)
            ))
        else:
            outcomes.append(SmokeTestOutcome(formula=name, passed=True))
    return outcomes
