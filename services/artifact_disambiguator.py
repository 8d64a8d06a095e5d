"""
Artifact Disambiguator.

Renames installed executables and man pages so that several
`postgis@<major>` kegs can be linked into one prefix side by side:
`shp2pgsql` -> `shp2pgsql-16`, `shp2pgsql.1` -> `shp2pgsql-16.1`.

Every entry present in a directory when disambiguation starts is renamed;
entries created afterwards are not. There is no re-entrancy guard: running
it again over already-suffixed names suffixes them again.

Exports:
    ArtifactDisambiguator: Rename files with a fixed suffix
"""

from pathlib import Path
from typing import Iterable, List

from core.logic.disambiguation import suffixed_name
from core.models.artifact import Artifact
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.DISAMBIGUATOR, "artifact_disambiguator")


class ArtifactDisambiguator:
    """Renames artifacts in place with `suffixed_name(name, suffix)`."""

    def __init__(self, suffix):
        suffix = str(suffix)
        if not suffix:
            raise ValueError("Disambiguation suffix must not be empty")
        self.suffix = suffix

    def rename(self, path) -> Artifact:
        path = Path(path)
        target = path.with_name(suffixed_name(path.name, self.suffix))
        if target.exists() or target.is_symlink():
            raise FileExistsError(f"Cannot rename {path.name}: {target} already exists")
        path.rename(target)
        logger.debug(f"Renamed {path.name} -> {target.name}")
        return Artifact(original_path=path, path=target, suffix=self.suffix)

    def disambiguate(self, paths: Iterable) -> List[Artifact]:
        """Rename each given path that exists; missing paths are skipped."""
        artifacts = []
        for path in paths:
            path = Path(path)
            if not (path.exists() or path.is_symlink()):
                logger.debug(f"Skipping missing artifact {path}")
                continue
            artifacts.append(self.rename(path))
        return artifacts

    def disambiguate_directory(self, directory) -> List[Artifact]:
        """
        Rename every child of directory.

        The listing is taken once, before the first rename. A missing
        directory yields no artifacts.
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.info(f"No {directory} to disambiguate")
            return []
        children = sorted(directory.iterdir())
        artifacts = self.disambiguate(children)
        logger.info(f"Disambiguated {len(artifacts)} entries in {directory} with -{self.suffix}")
        return artifacts
