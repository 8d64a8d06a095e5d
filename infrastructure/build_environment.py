"""
Scoped Build Environment.

The environment variables a recipe hands to configure, make and friends.

Recipes used to mutate the process environment directly (delete
PKG_CONFIG_LIBDIR, prepend to LDFLAGS, strip a linker search path, force
serial make). Here the mapping is an explicit value: it is passed to every
command the runner spawns, and `scoped()` restores the previous contents when
the block exits. `os.environ` is read once at construction and never written.

Usage:
    env = BuildEnvironment()
    with env.scoped():
        env.delete("PKG_CONFIG_LIBDIR")
        env.prepend("LDFLAGS", "-L/opt/homebrew/opt/openssl@3/lib")
        runner.system("./configure", *args, env=env)
    # LDFLAGS and PKG_CONFIG_LIBDIR are back to what they were

Exports:
    BuildEnvironment: Explicit, restorable variable mapping
"""

import os
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping, Optional

from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.RUNNER, "build_environment")


class BuildEnvironment:
    """
    Mutable mapping of build variables with scoped restore.

    Flag variables (CFLAGS, LDFLAGS, ...) are joined with spaces;
    search-path variables with ':' (pass sep explicitly).
    """

    def __init__(self, base: Optional[Mapping[str, str]] = None):
        source = os.environ if base is None else base
        self._vars: Dict[str, str] = {str(k): str(v) for k, v in source.items()}

    # ------------------------------------------------------------------
    # Mapping access
    # ------------------------------------------------------------------

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._vars.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self._vars[key]

    def __setitem__(self, key: str, value) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def to_dict(self) -> Dict[str, str]:
        """Copy suitable for subprocess `env=`."""
        return dict(self._vars)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set(self, key: str, value) -> None:
        logger.debug(f"ENV {key}={value}")
        self._vars[key] = str(value)

    def delete(self, key: str) -> None:
        """Remove key; missing keys are ignored."""
        if self._vars.pop(key, None) is not None:
            logger.debug(f"ENV unset {key}")

    def append(self, key: str, value: str, sep: str = " ") -> None:
        current = self._vars.get(key)
        self.set(key, f"{current}{sep}{value}" if current else value)

    def prepend(self, key: str, value: str, sep: str = " ") -> None:
        current = self._vars.get(key)
        self.set(key, f"{value}{sep}{current}" if current else value)

    def remove_path_entry(self, key: str, entry, sep: str = ":") -> bool:
        """
        Drop every occurrence of entry from a separated list variable.

        The variable is deleted when nothing is left. Returns True when
        something was removed.
        """
        current = self._vars.get(key)
        if not current:
            return False
        entry = str(entry)
        parts = current.split(sep)
        kept = [part for part in parts if part != entry]
        if len(kept) == len(parts):
            return False
        if kept:
            self.set(key, sep.join(kept))
        else:
            self.delete(key)
        return True

    def deparallelize(self) -> None:
        """Force serial make for build systems that break under -j."""
        self.set("MAKEFLAGS", "-j1")
        self.set("HOMEBREW_MAKE_JOBS", "1")

    # ------------------------------------------------------------------
    # Scoping
    # ------------------------------------------------------------------

    @contextmanager
    def scoped(self) -> Iterator["BuildEnvironment"]:
        """Restore the variables present on entry when the block exits."""
        snapshot = dict(self._vars)
        try:
            yield self
        finally:
            self._vars = snapshot
            logger.debug("Build environment restored")
