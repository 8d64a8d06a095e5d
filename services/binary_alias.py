"""
Binary Alias Linker.

PostGIS's build scripts look for the `postgres` executable next to
`pg_config`'s bindir of the package being built, which is the extension's
own keg. BinaryAliasLink puts a symlink to the engine's executable there
for the duration of the build and removes it afterwards, whether the build
succeeded or not.

The link target is not checked: a missing engine executable yields a
dangling link, and the build step that executes it fails.

Exports:
    BinaryAliasLink: Scoped symlink context manager
"""

from pathlib import Path
from typing import Optional

from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.LINKER, "binary_alias")


class BinaryAliasLink:
    """
    `with BinaryAliasLink(keg.bin, engine_opt_bin / "postgres"):`

    Creates bin_dir when needed and exactly one link, `bin_dir/<name>`,
    pointing at executable. The link is removed on every exit path; bin_dir
    itself is left in place.
    """

    def __init__(self, bin_dir, executable, name: Optional[str] = None):
        self.bin_dir = Path(bin_dir)
        self.executable = Path(executable)
        self.link_path = self.bin_dir / (name or self.executable.name)
        self._created = False

    def __enter__(self) -> Path:
        self.bin_dir.mkdir(parents=True, exist_ok=True)
        if self.link_path.is_symlink() or self.link_path.exists():
            raise FileExistsError(f"Refusing to replace existing {self.link_path}")
        self.link_path.symlink_to(self.executable)
        self._created = True
        if not self.executable.exists():
            logger.warning(f"Alias target {self.executable} does not exist")
        logger.info(f"Linked {self.link_path} -> {self.executable}")
        return self.link_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._created and self.link_path.is_symlink():
            self.link_path.unlink()
            logger.info(f"Removed alias {self.link_path}")
        self._created = False
