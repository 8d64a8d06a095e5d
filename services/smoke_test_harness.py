"""
Smoke-Test Harness.

Post-install functional checks run in an ephemeral `testpath` directory:
assertions over command output and installed files, base64 fixtures, and a
throwaway database cluster on a free port.

Contract:
    - All state lives under testpath, which is removed on exit unless
      FORMULA_KEEP_TESTPATH is set
    - The first failing assertion raises SmokeTestFailure and ends the run
    - A cluster that was started is always stopped before the block exits,
      on success and on failure

Exports:
    ClusterHandle: Data directory, port and log of a running cluster
    SmokeTestHarness: Context manager providing the test primitives
"""

import base64
import re
import shutil
import socket
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional, Pattern, Union

from config import HarnessConfig, get_config
from config.defaults import HarnessDefaults
from exceptions import BuildError, SmokeTestFailure
from infrastructure.build_environment import BuildEnvironment
from infrastructure.command_runner import CommandResult, CommandRunner
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.HARNESS, "smoke_test_harness")


@dataclass(frozen=True)
class ClusterHandle:
    """A started throwaway cluster."""
    datadir: Path
    port: int
    logfile: Path


def free_port(host: str = "127.0.0.1") -> int:
    """Ask the kernel for an unused TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


class SmokeTestHarness:
    """
    `with SmokeTestHarness(runner) as t: formula.test(t)`

    Args:
        runner: Command runner; a fresh CommandRunner when omitted
        config: Harness settings; defaults to get_config().harness
        env: Environment for every command; a copy of the process env when omitted
        probe_factory: Callable (port, host, dbname) -> object with
            installed_version(extname); used for post-load verification
        name: Formula name, used in the testpath prefix and logs
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        config: Optional[HarnessConfig] = None,
        env: Optional[BuildEnvironment] = None,
        probe_factory: Optional[Callable] = None,
        name: str = "formula",
    ):
        self.runner = runner or CommandRunner()
        self.config = config or get_config().harness
        self.env = env or BuildEnvironment()
        self.probe_factory = probe_factory
        self.name = name
        self._testpath: Optional[Path] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> "SmokeTestHarness":
        prefix = f"{HarnessDefaults.TESTPATH_PREFIX}{self.name.replace('@', '-')}-"
        self._testpath = Path(tempfile.mkdtemp(prefix=prefix))
        logger.info(f"Smoke test for {self.name} in {self._testpath}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        testpath, self._testpath = self._testpath, None
        if testpath is None:
            return
        if self.config.keep_testpath:
            logger.info(f"Keeping {testpath}")
        else:
            shutil.rmtree(testpath, ignore_errors=True)

    @property
    def testpath(self) -> Path:
        if self._testpath is None:
            raise RuntimeError("SmokeTestHarness used outside its with-block")
        return self._testpath

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def system(self, *args, cwd=None) -> CommandResult:
        return self.runner.system(*args, env=self.env, cwd=cwd or self.testpath)

    def shell_output(self, *args, cwd=None) -> str:
        return self.runner.shell_output(*args, env=self.env, cwd=cwd or self.testpath)

    @staticmethod
    def free_port() -> int:
        return free_port()

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def assert_equal(self, expected, actual, check: str = "assert_equal") -> None:
        if expected != actual:
            logger.error(f"{check} failed: expected {expected!r}, got {actual!r}")
            raise SmokeTestFailure(check, str(expected), str(actual))

    def assert_match(self, pattern: Union[str, Pattern], text: str,
                     check: str = "assert_match") -> None:
        """
        Search text for pattern.

        A plain string is matched literally; pass a compiled pattern for
        regular expressions.
        """
        if isinstance(pattern, str):
            found = pattern in text
            expected = pattern
        else:
            found = pattern.search(text) is not None
            expected = pattern.pattern
        if not found:
            excerpt = text if len(text) <= 500 else text[:500] + "..."
            logger.error(f"{check} failed: {expected!r} not found")
            raise SmokeTestFailure(check, expected, excerpt,
                                   message=f"{check}: {expected!r} not found in output")

    def assert_file_match(self, pattern: Union[str, Pattern], path,
                          check: str = "assert_file_match") -> None:
        path = Path(path)
        if not path.is_file():
            raise SmokeTestFailure(check, str(path), "missing",
                                   message=f"{check}: {path} does not exist")
        self.assert_match(pattern, path.read_text(encoding="utf-8", errors="replace"), check)

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    def write_base64(self, name: str, data: str) -> Path:
        """Decode a base64 fixture into testpath/name."""
        path = self.testpath / name
        path.write_bytes(base64.b64decode(re.sub(r"\s+", "", data)))
        return path

    def append_lines(self, path, text: str) -> None:
        with Path(path).open("a", encoding="utf-8") as handle:
            handle.write(text)

    # ------------------------------------------------------------------
    # Throwaway cluster
    # ------------------------------------------------------------------

    @contextmanager
    def ephemeral_cluster(
        self,
        pg_ctl,
        port: Optional[int] = None,
        settings: Optional[Mapping[str, str]] = None,
    ) -> Iterator[ClusterHandle]:
        """
        initdb, configure, start; stop when the block exits.

        `settings` are appended to postgresql.conf before `port`. If start
        fails, the cluster is stopped only when a postmaster.pid was left
        behind; if the body fails the cluster is stopped and the body's
        exception propagates.
        """
        port = port or self.free_port()
        datadir = self.testpath / self.config.cluster_dirname
        logfile = self.testpath / self.config.log_filename

        self.system(pg_ctl, "initdb", "-D", datadir)

        lines = [f"{key} = {value}" for key, value in (settings or {}).items()]
        lines.append(f"port = {port}")
        self.append_lines(datadir / "postgresql.conf", "\n" + "\n".join(lines) + "\n")

        cluster = ClusterHandle(datadir=datadir, port=port, logfile=logfile)
        try:
            self.system(pg_ctl, "start", "-D", datadir, "-l", logfile)
        except BuildError:
            # pg_ctl can give up waiting after the postmaster has forked
            if (datadir / "postmaster.pid").exists():
                self._stop_after_failure(pg_ctl, datadir)
            raise
        logger.info(f"Cluster started on port {port}")

        try:
            yield cluster
        except BaseException:
            self._stop_after_failure(pg_ctl, datadir)
            raise
        self.system(pg_ctl, "stop", "-D", datadir)
        logger.info(f"Cluster on port {port} stopped")

    def _stop_after_failure(self, pg_ctl, datadir: Path) -> None:
        # The body's exception is the one to report
        try:
            self.system(pg_ctl, "stop", "-D", datadir)
        except BuildError as e:
            logger.error(f"Failed to stop cluster in {datadir}: {e}")
        else:
            logger.info(f"Cluster in {datadir} stopped after failure")

    def extension_probe(self, port: int):
        """Probe for pg_extension on the cluster at port (psycopg)."""
        factory = self.probe_factory
        if factory is None:
            from infrastructure.postgresql import ExtensionProbe
            factory = ExtensionProbe
        return factory(port=port, host=self.config.host, dbname=self.config.database)
