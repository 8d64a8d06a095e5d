"""
Livecheck Service.

Finds the newest upstream release of a formula by fetching its livecheck
index page and applying the formula's version regex.

Exports:
    LivecheckResult: Current vs latest version of one formula
    LivecheckService: httpx-backed version discovery
"""

from typing import Optional

import httpx
from pydantic import BaseModel, Field

from core.models.recipe import Livecheck
from core.models.version import Version
from exceptions import FetchError
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "livecheck")


class LivecheckResult(BaseModel):
    """Outcome of one livecheck."""

    formula: str
    current: str
    latest: Optional[str] = Field(default=None, description="Highest version found upstream")
    url: str

    @property
    def outdated(self) -> bool:
        return self.latest is not None and Version(self.latest) > Version(self.current)


class LivecheckService:
    """
    Args:
        client: httpx client; one is created (and owned) when omitted
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "LivecheckService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def latest_version(self, livecheck: Livecheck) -> Optional[Version]:
        """
        Highest version on the livecheck page, or None if the regex finds nothing.

        Raises:
            FetchError: The page could not be retrieved
        """
        try:
            response = self._client.get(livecheck.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(f"Livecheck request to {livecheck.url} failed: {e}") from e

        versions = livecheck.versions_in(response.text)
        logger.debug(f"{livecheck.url}: {len(versions)} versions matched")
        return versions[-1] if versions else None

    def check(self, formula_class) -> LivecheckResult:
        """Livecheck a registered formula class."""
        name = formula_class.formula_name()
        livecheck = formula_class.livecheck
        if livecheck is None:
            raise ValueError(f"{name} declares no livecheck")

        latest = self.latest_version(livecheck)
        result = LivecheckResult(
            formula=name,
            current=formula_class.package.version,
            latest=str(latest) if latest else None,
            url=livecheck.url,
        )
        if result.outdated:
            logger.info(f"{name} is outdated: {result.current} < {result.latest}")
        else:
            logger.info(f"{name} is up to date ({result.current})")
        return result
