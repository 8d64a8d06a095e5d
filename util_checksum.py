"""
Source Archive Checksum Utilities.

SHA-256 digests for downloaded source tarballs. Recipes pin the hex digest
of the release archive; a mismatch is fatal before any build step runs.

Usage:
    from util_checksum import compute_sha256_file, verify_sha256_file

    digest = compute_sha256_file(tarball_path)
    verify_sha256_file(tarball_path, formula.source.sha256)  # raises on mismatch

Exports:
    compute_sha256: SHA-256 hex digest of bytes
    compute_sha256_file: Streaming SHA-256 hex digest of a file
    verify_sha256_file: Raise ChecksumMismatchError when digests differ
    CHUNK_SIZE: Read size used when hashing files
"""

import hashlib
import time
from pathlib import Path
from typing import Union

from exceptions import ChecksumMismatchError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.FETCHER, "checksum")

CHUNK_SIZE = 1024 * 1024


def compute_sha256(data: Union[bytes, memoryview]) -> str:
    """Return the lowercase SHA-256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


def compute_sha256_file(path: Union[str, Path], log_performance: bool = False) -> str:
    """
    Compute the SHA-256 of a file without loading it into memory.

    Args:
        path: File to hash
        log_performance: If True, log computation time

    Returns:
        Lowercase hex digest
    """
    path = Path(path)
    start_time = time.time()

    hasher = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            hasher.update(chunk)

    if log_performance:
        elapsed = time.time() - start_time
        size_mb = path.stat().st_size / (1024 * 1024)
        logger.info(f"Computed SHA256 of {path.name}: {size_mb:.1f} MB in {elapsed:.2f}s")

    return hasher.hexdigest()


def verify_sha256_file(path: Union[str, Path], expected: str) -> str:
    """
    Verify a file against its pinned SHA-256.

    Args:
        path: File to verify
        expected: Hex digest from the recipe

    Returns:
        The computed digest (equal to expected)

    Raises:
        ChecksumMismatchError: If the digests differ
    """
    actual = compute_sha256_file(path)
    if actual != expected.lower():
        logger.error(f"Checksum mismatch for {path}: expected {expected}, got {actual}")
        raise ChecksumMismatchError(str(path), expected, actual)
    logger.debug(f"Checksum verified for {path}")
    return actual
