"""
Artifact name disambiguation.

Exports:
    suffixed_name: Insert a suffix before a file name's last extension
"""

from pathlib import PurePosixPath


def suffixed_name(name: str, suffix: str) -> str:
    """
    Insert `-{suffix}` before the last extension of name.

    "shp2pgsql" -> "shp2pgsql-16", "shp2pgsql.1" -> "shp2pgsql-16.1",
    "postgis_restore.pl" -> "postgis_restore-16.pl".

    Not idempotent: "a-16" becomes "a-16-16".
    """
    if not suffix:
        raise ValueError("Disambiguation suffix must not be empty")
    path = PurePosixPath(name)
    if path.name != name:
        raise ValueError(f"Expected a bare file name, got {name!r}")
    return f"{path.stem}-{suffix}{path.suffix}"
