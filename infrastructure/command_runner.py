"""
External Command Runner.

Every configure, make, initdb, pg_ctl, psql and shp2pgsql invocation goes
through CommandRunner so that each argv is logged and every non-zero exit
becomes a BuildError carrying the captured output. Commands are never
retried.

Exports:
    CommandResult: argv, exit status and captured output
    CommandRunner: subprocess wrapper with `system` and `shell_output`
"""

import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

from exceptions import BuildError
from infrastructure.build_environment import BuildEnvironment
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.RUNNER, "command_runner")

EnvLike = Union[Mapping[str, str], BuildEnvironment]


@dataclass
class CommandResult:
    """Outcome of one finished command."""
    args: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _env_dict(env) -> Optional[dict]:
    if env is None:
        return None
    if hasattr(env, "to_dict"):
        return env.to_dict()
    return dict(env)


class CommandRunner:
    """
    Runs external commands to completion, one at a time.

    Args:
        timeout: Optional per-command timeout in seconds; None waits forever
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, *args, env: Optional[EnvLike] = None, cwd=None,
            input: Optional[str] = None) -> CommandResult:
        """Run a command and return its result without checking the exit status."""
        argv = [str(a) for a in args]
        logger.debug(
            f"Running: {' '.join(argv)}",
            extra={'custom_dimensions': {'argv': argv, 'cwd': str(cwd) if cwd else None}},
        )

        try:
            completed = subprocess.run(
                argv,
                env=_env_dict(env),
                cwd=str(cwd) if cwd else None,
                input=input,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {argv[0]}")
            return CommandResult(argv, 127, "", str(e))
        except OSError as e:
            # Not executable, or cwd is not a directory
            logger.error(f"Cannot execute {argv[0]}: {e}")
            return CommandResult(argv, 126, "", str(e))

        logger.debug(f"Exit status {completed.returncode}: {argv[0]}")
        return CommandResult(argv, completed.returncode, completed.stdout, completed.stderr)

    def system(self, *args, env: Optional[EnvLike] = None, cwd=None,
               input: Optional[str] = None) -> CommandResult:
        """
        Run a command and require exit status 0.

        Raises:
            BuildError: Non-zero exit (127 when the executable is missing,
                126 when it cannot be executed)
        """
        result = self.run(*args, env=env, cwd=cwd, input=input)
        if not result.ok:
            logger.error(
                f"Command failed with exit status {result.returncode}: {' '.join(result.args)}",
                extra={'custom_dimensions': {'stderr': result.stderr[-2000:]}},
            )
            raise BuildError(result.args, result.returncode, result.stdout, result.stderr)
        return result

    def shell_output(self, *args, env: Optional[EnvLike] = None, cwd=None,
                     input: Optional[str] = None) -> str:
        """Run a command, require exit status 0 and return its stdout."""
        return self.system(*args, env=env, cwd=cwd, input=input).stdout
