"""
Livecheck service tests over httpx.MockTransport.
"""

import httpx
import pytest

from exceptions import FetchError
from formulae.postgis_at_16 import PostgisAt16
from formulae.postgresql_at_16 import PostgresqlAt16
from services.livecheck_service import LivecheckResult, LivecheckService


def _service(pages, status=200):
    def handler(request):
        return httpx.Response(status, text=pages.get(str(request.url), ""))
    return LivecheckService(client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestLivecheckService:
    def test_up_to_date(self):
        pages = {PostgresqlAt16.livecheck.url: '<a href="v16.2/">v16.2</a><a href="v16.3/">v16.3</a>'}
        with _service(pages) as service:
            result = service.check(PostgresqlAt16)
        assert result.latest == "16.3"
        assert not result.outdated

    def test_outdated(self):
        pages = {PostgisAt16.livecheck.url: '<a href="postgis-3.4.3.tar.gz">postgis-3.4.3.tar.gz</a>'}
        with _service(pages) as service:
            result = service.check(PostgisAt16)
        assert result.formula == "postgis@16"
        assert result.current == "3.4.2"
        assert result.outdated

    def test_nothing_matched(self):
        with _service({}) as service:
            result = service.check(PostgresqlAt16)
        assert result.latest is None
        assert not result.outdated

    def test_http_error(self):
        with _service({}, status=503) as service:
            with pytest.raises(FetchError):
                service.check(PostgresqlAt16)

    def test_formula_without_livecheck(self):
        class NoLivecheck:
            livecheck = None

            @classmethod
            def formula_name(cls):
                return "nothing@1"

        with _service({}) as service:
            with pytest.raises(ValueError):
                service.check(NoLivecheck)


class TestLivecheckResult:
    def test_numeric_comparison(self):
        result = LivecheckResult(formula="postgresql@16", current="16.9", latest="16.10", url="u")
        assert result.outdated
