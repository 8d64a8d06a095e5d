"""
Source Archive Fetcher.

Downloads release archives into the Installer's cache and verifies their
pinned SHA-256 before any build step runs. A cached file is reused only if
it still verifies. Downloads are attempted once.

Usage:
    with SourceFetcher(cache_dir) as fetcher:
        tarball = fetcher.fetch(PostgresqlAt16.source)

Exports:
    SourceFetcher: httpx download + checksum verification
"""

from pathlib import Path
from typing import Optional

import httpx

from core.models.recipe import SourceArchive
from exceptions import ChecksumMismatchError, FetchError
from util_checksum import compute_sha256, verify_sha256_file
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.FETCHER, "source_fetcher")

DEFAULT_TIMEOUT = 60.0


class SourceFetcher:
    """
    Fetch and verify source archives.

    Args:
        cache_dir: Download cache (HOMEBREW_CACHE)
        client: httpx client to use; one is created (and owned) when omitted
    """

    def __init__(self, cache_dir, client: Optional[httpx.Client] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.cache_dir = Path(cache_dir)
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "SourceFetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def cached_path(self, archive: SourceArchive) -> Path:
        """`downloads/<sha256 of url>--<filename>` below the cache dir."""
        url_digest = compute_sha256(archive.url.encode("utf-8"))
        return self.cache_dir / "downloads" / f"{url_digest}--{archive.filename}"

    def fetch(self, archive: SourceArchive) -> Path:
        """
        Return a verified local copy of archive.

        Raises:
            FetchError: Download failed
            ChecksumMismatchError: Downloaded bytes do not match archive.sha256
        """
        target = self.cached_path(archive)

        if target.exists():
            try:
                verify_sha256_file(target, archive.sha256)
                logger.info(f"Using cached {target.name}")
                return target
            except ChecksumMismatchError:
                logger.warning(f"Cached {target.name} does not verify, downloading again")
                target.unlink()

        target.parent.mkdir(parents=True, exist_ok=True)
        partial = target.with_name(target.name + ".incomplete")

        logger.info(f"Downloading {archive.url}")
        try:
            with self._client.stream("GET", archive.url) as response:
                response.raise_for_status()
                with partial.open("wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
        except httpx.HTTPError as e:
            if partial.exists():
                partial.unlink()
            raise FetchError(f"Failed to download {archive.url}: {e}") from e

        try:
            verify_sha256_file(partial, archive.sha256)
        except ChecksumMismatchError:
            partial.unlink()
            raise

        partial.rename(target)
        logger.info(f"Fetched {target.name}")
        return target
