"""QuickModule lookups via ``quickmodule.php``, the platform's lightweight search endpoint."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Literal

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import NotFoundError, UnexpectedError
from .http import fetch_with_retry


if TYPE_CHECKING:
    from ..connector.amc_client import AMCClient


logger = logging.getLogger(__name__)

QuickModuleName = Literal["MemberLookupQModule", "UserLookupQModule", "PageLookupQModule"]


@dataclass(frozen=True)
class QMCUser:
    id: int
    name: str


@dataclass(frozen=True)
class QMCPage:
    title: str
    unix_name: str


class _RawUser(BaseModel):
    user_id: int | str
    name: str


class _RawPage(BaseModel):
    title: str
    unix_name: str


class _UserLookupResponse(BaseModel):
    users: list[_RawUser] | Literal[False]


class _PageLookupResponse(BaseModel):
    pages: list[_RawPage] | Literal[False]


async def request_quick_module(
    amc_client: AMCClient,
    module_name: QuickModuleName,
    site_id: int,
    query: str,
) -> Any:
    """Call quickmodule.php and return the decoded JSON payload.

    Raises:
        NotFoundError: The endpoint answers 500 for an unknown site id
        UnexpectedError: Any other non-2xx answer or transport failure
    """
    url = f"https://www.{amc_client.domain}/quickmodule.php"
    params = {"module": module_name, "s": str(site_id), "q": query}
    try:
        response = await fetch_with_retry(
            amc_client.http_client,
            url,
            amc_client.config,
            check_ok=False,
            limiter=amc_client.limiter,
            params=params,
            headers={"Accept": "application/json"},
        )
    except httpx.HTTPError as exc:
        raise UnexpectedError(f"QuickModule request failed: {exc}") from exc

    if response.status_code == 500:
        raise NotFoundError(f"Site not found: site_id={site_id}")
    if not response.is_success:
        raise UnexpectedError(f"QuickModule request failed: {response.status_code}")

    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedError(f"QuickModule returned invalid JSON: {exc}") from exc


async def _lookup_users(amc_client: AMCClient, module_name: QuickModuleName, site_id: int, query: str) -> list[QMCUser]:
    data = await request_quick_module(amc_client, module_name, site_id, query)
    try:
        parsed = _UserLookupResponse.model_validate(data)
    except ValidationError as exc:
        raise UnexpectedError(f"Unexpected {module_name} payload: {exc}") from exc
    if parsed.users is False:
        return []
    return [QMCUser(id=int(user.user_id), name=user.name) for user in parsed.users]


async def member_lookup(amc_client: AMCClient, site_id: int, query: str) -> list[QMCUser]:
    """Search the members of one site by partial username."""
    return await _lookup_users(amc_client, "MemberLookupQModule", site_id, query)


async def user_lookup(amc_client: AMCClient, site_id: int, query: str) -> list[QMCUser]:
    """Search users across the whole platform (any valid site id works)."""
    return await _lookup_users(amc_client, "UserLookupQModule", site_id, query)


async def page_lookup(amc_client: AMCClient, site_id: int, query: str) -> list[QMCPage]:
    """Search the pages of one site by partial name."""
    data = await request_quick_module(amc_client, "PageLookupQModule", site_id, query)
    try:
        parsed = _PageLookupResponse.model_validate(data)
    except ValidationError as exc:
        raise UnexpectedError(f"Unexpected PageLookupQModule payload: {exc}") from exc
    if parsed.pages is False:
        return []
    return [QMCPage(title=page.title, unix_name=page.unix_name) for page in parsed.pages]
