"""
Infrastructure Package - Lazy Loading Implementation.

Side-effecting collaborators of the formulae: the build environment, the
command runner, the Installer context, the source fetcher (httpx) and the
extension probe (psycopg).

Imports are deferred until a name is first accessed, so importing a formula
module does not pull in httpx or psycopg and does not read configuration.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .build_environment import BuildEnvironment as _BuildEnvironment
    from .command_runner import CommandRunner as _CommandRunner
    from .command_runner import CommandResult as _CommandResult
    from .installer_context import InstallerContext as _InstallerContext
    from .source_fetcher import SourceFetcher as _SourceFetcher
    from .postgresql import ExtensionProbe as _ExtensionProbe


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "BuildEnvironment":
        from .build_environment import BuildEnvironment
        return BuildEnvironment

    elif name == "CommandRunner":
        from .command_runner import CommandRunner
        return CommandRunner
    elif name == "CommandResult":
        from .command_runner import CommandResult
        return CommandResult

    elif name == "InstallerContext":
        from .installer_context import InstallerContext
        return InstallerContext

    elif name == "SourceFetcher":
        from .source_fetcher import SourceFetcher
        return SourceFetcher

    elif name == "ExtensionProbe":
        from .postgresql import ExtensionProbe
        return ExtensionProbe

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BuildEnvironment",
    "CommandRunner",
    "CommandResult",
    "InstallerContext",
    "SourceFetcher",
    "ExtensionProbe",
]
