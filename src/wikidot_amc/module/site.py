"""Site domain object."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
import re
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup
import httpx

from ..connector.types import AMCRequestBody, AMCResponse
from ..errors import NoElementError, NotFoundError, UnexpectedError
from ..util.http import fetch_with_retry
from ..util.quick_module import QMCUser, member_lookup
from .site_member import MemberGroup, SiteMember


if TYPE_CHECKING:
    from .client import Client


logger = logging.getLogger(__name__)

_SITE_ID = re.compile(r"WIKIREQUEST\.info\.siteId\s*=\s*(\d+)")
_SITE_UNIX_NAME = re.compile(r"WIKIREQUEST\.info\.siteUnixName\s*=\s*[\"']([^\"']+)[\"']")
_SITE_DOMAIN = re.compile(r"WIKIREQUEST\.info\.domain\s*=\s*[\"']([^\"']+)[\"']")
TITLE_SUFFIX = " - Wikidot"


@dataclass(eq=False)
class Site:
    """A Wikidot site (subsite of the platform domain)."""

    client: Client = field(repr=False)
    id: int
    title: str
    unix_name: str
    domain: str
    ssl_supported: bool

    @property
    def base_url(self) -> str:
        protocol = "https" if self.ssl_supported else "http"
        return f"{protocol}://{self.domain}"

    async def amc_request(self, bodies: Sequence[AMCRequestBody], *, return_exceptions: bool = False) -> list[Any]:
        """Send a batch of AMC requests to this site."""
        return await self.client.amc_client.request(
            bodies,
            self.unix_name,
            self.ssl_supported,
            return_exceptions=return_exceptions,
        )

    async def amc_request_single(self, body: AMCRequestBody) -> AMCResponse:
        responses = await self.amc_request([body])
        if not responses:
            raise UnexpectedError("AMC request returned empty response")
        return responses[0]

    async def members(self, group: MemberGroup = "") -> list[SiteMember]:
        """List site members; ``group`` is ``""`` (everyone), ``"admins"`` or ``"moderators"``."""
        return await SiteMember.get_members(self, group)

    async def member_lookup(self, query: str) -> list[QMCUser]:
        return await member_lookup(self.client.amc_client, self.id, query)

    @classmethod
    async def from_unix_name(cls, client: Client, unix_name: str) -> Site:
        """Load a site by scraping the ``WIKIREQUEST.info`` block of its front page.

        Raises:
            NotFoundError: The site does not exist
            NoElementError: The page carries no site id
            UnexpectedError: The page could not be fetched
        """
        amc_client = client.amc_client
        url = f"https://{unix_name}.{amc_client.domain}"
        try:
            response = await fetch_with_retry(
                amc_client.http_client,
                url,
                amc_client.config,
                check_ok=False,
                limiter=amc_client.limiter,
                headers=amc_client.header.get_headers(),
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise UnexpectedError(f"Failed to get site {unix_name}: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"Site not found: {unix_name}")
        if not response.is_success:
            raise UnexpectedError(f"Failed to fetch site: {response.status_code}")

        soup = BeautifulSoup(response.text, "html.parser")

        site_id: int | None = None
        site_unix_name: str | None = None
        site_domain: str | None = None
        for script in soup.find_all("script"):
            content = script.string or ""
            if "WIKIREQUEST" not in content:
                continue
            if match := _SITE_ID.search(content):
                site_id = int(match.group(1))
            if match := _SITE_UNIX_NAME.search(content):
                site_unix_name = match.group(1)
            if match := _SITE_DOMAIN.search(content):
                site_domain = match.group(1)

        if site_id is None:
            raise NoElementError("Site ID not found in WIKIREQUEST")

        title_elem = soup.find("title")
        title = title_elem.get_text(strip=True) if title_elem else ""
        title = title.removesuffix(TITLE_SUFFIX).strip()

        site = cls(
            client=client,
            id=site_id,
            title=title or unix_name,
            unix_name=site_unix_name or unix_name,
            domain=site_domain or f"{unix_name}.{amc_client.domain}",
            # The front page was just served over https
            ssl_supported=True,
        )
        logger.debug("Loaded site %s (id=%d)", site.unix_name, site.id)
        return site
