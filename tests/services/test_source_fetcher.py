"""
Source fetcher tests over httpx.MockTransport.
"""

import httpx
import pytest

from core.models.recipe import SourceArchive
from exceptions import ChecksumMismatchError, FetchError
from infrastructure.source_fetcher import SourceFetcher

URL = "https://ftp.example.org/pub/source/v16.3/postgresql-16.3.tar.bz2"
PAYLOAD = b"BZh91AY&SY fake release tarball"


class Transport:
    """MockTransport handler that counts requests."""

    def __init__(self, status=200, content=PAYLOAD):
        self.status = status
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, content=self.content)


@pytest.fixture
def archive(make_sha256):
    return SourceArchive(url=URL, sha256=make_sha256(PAYLOAD))


def _fetcher(tmp_path, transport):
    return SourceFetcher(tmp_path / "cache", client=httpx.Client(transport=httpx.MockTransport(transport)))


class TestFetch:
    def test_downloads_and_verifies(self, tmp_path, archive):
        transport = Transport()
        with _fetcher(tmp_path, transport) as fetcher:
            path = fetcher.fetch(archive)
        assert path.read_bytes() == PAYLOAD
        assert path.name.endswith("--postgresql-16.3.tar.bz2")
        assert path.parent == tmp_path / "cache" / "downloads"
        assert str(transport.requests[0].url) == URL

    def test_cached_copy_reused(self, tmp_path, archive):
        transport = Transport()
        with _fetcher(tmp_path, transport) as fetcher:
            first = fetcher.fetch(archive)
            second = fetcher.fetch(archive)
        assert first == second
        assert len(transport.requests) == 1

    def test_corrupt_cache_downloaded_again(self, tmp_path, archive):
        transport = Transport()
        with _fetcher(tmp_path, transport) as fetcher:
            cached = fetcher.cached_path(archive)
            cached.parent.mkdir(parents=True)
            cached.write_bytes(b"truncated")
            path = fetcher.fetch(archive)
        assert path.read_bytes() == PAYLOAD
        assert len(transport.requests) == 1

    def test_checksum_mismatch_leaves_nothing_behind(self, tmp_path, archive):
        transport = Transport(content=b"tampered")
        with _fetcher(tmp_path, transport) as fetcher:
            with pytest.raises(ChecksumMismatchError):
                fetcher.fetch(archive)
            downloads = fetcher.cached_path(archive).parent
        assert list(downloads.iterdir()) == []

    def test_http_error_is_fetch_error(self, tmp_path, archive):
        transport = Transport(status=404, content=b"not found")
        with _fetcher(tmp_path, transport) as fetcher:
            with pytest.raises(FetchError):
                fetcher.fetch(archive)
        assert len(transport.requests) == 1

    def test_transport_failure_not_retried(self, tmp_path, archive):
        calls = []

        def refuse(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with SourceFetcher(tmp_path, client=httpx.Client(transport=httpx.MockTransport(refuse))) as fetcher:
            with pytest.raises(FetchError):
                fetcher.fetch(archive)
        assert len(calls) == 1

    def test_cache_key_depends_on_url(self, tmp_path, archive):
        other = archive.model_copy(update={"url": URL.replace("ftp.", "mirror.")})
        fetcher = SourceFetcher(tmp_path, client=httpx.Client(transport=httpx.MockTransport(Transport())))
        try:
            assert fetcher.cached_path(archive) != fetcher.cached_path(other)
        finally:
            fetcher.close()
