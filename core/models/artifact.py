"""
Installed artifact records.

Exports:
    Artifact: One renamed file (original path, final path, suffix)
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Artifact(BaseModel):
    """
    A file produced by `make install` (or installed by the recipe itself).

    After disambiguation `path` carries the suffix and `original_path` keeps
    the name the build system gave it.
    """

    original_path: Path = Field(..., description="Path as installed by the build")
    path: Path = Field(..., description="Current path on disk")
    suffix: Optional[str] = Field(default=None, description="Disambiguation suffix, if renamed")

    @property
    def original_name(self) -> str:
        return self.original_path.name

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def renamed(self) -> bool:
        return self.path != self.original_path
