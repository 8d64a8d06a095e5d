"""
Dotted version numbers.

Exports:
    Version: Parsed, ordered version ("16.3", "3.4.2")
"""

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Tuple

_NUMERIC_PREFIX = re.compile(r"^\d+(?:\.\d+)*")


@total_ordering
@dataclass(frozen=True)
class Version:
    """
    Dotted version string with numeric comparison.

    Only the leading numeric components take part in ordering; anything after
    them ("16beta1" -> "beta1") is kept in `raw` but ignored when comparing.
    """

    raw: str
    parts: Tuple[int, ...] = field(init=False, compare=False)

    def __post_init__(self):
        match = _NUMERIC_PREFIX.match(self.raw)
        if not match:
            raise ValueError(f"Not a version: {self.raw!r}")
        object.__setattr__(self, "parts", tuple(int(p) for p in match.group(0).split(".")))

    @property
    def major(self) -> int:
        return self.parts[0]

    @property
    def minor(self) -> int:
        return self.parts[1] if len(self.parts) > 1 else 0

    @property
    def major_minor(self) -> str:
        """Major and minor, e.g. 3.4 for 3.4.2."""
        return f"{self.major}.{self.minor}"

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.parts == other.parts

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.parts < other.parts

    def __hash__(self):
        return hash(self.parts)

    def __str__(self) -> str:
        return self.raw
