"""Site membership listing and group management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import TYPE_CHECKING, Literal

from bs4 import BeautifulSoup

from ..errors import TargetError, WikidotStatusError
from ..util.parser import parse_odate, parse_user
from .decorators import login_required


if TYPE_CHECKING:
    from .site import Site
    from .user import AbstractUser


logger = logging.getLogger(__name__)

MemberGroup = Literal["", "admins", "moderators"]
GroupEvent = Literal["toModerators", "removeModerator", "toAdmins", "removeAdmin"]

MEMBERS_LIST_MODULE = "membership/MembersListModule"


@dataclass(eq=False)
class SiteMember:
    site: Site
    user: AbstractUser
    joined_at: datetime | None = None

    @staticmethod
    def _parse(site: Site, html: str) -> list[SiteMember]:
        soup = BeautifulSoup(html, "html.parser")
        members: list[SiteMember] = []
        for row in soup.select("table tr"):
            tds = row.find_all("td")
            if not tds:
                continue
            user_elem = tds[0].select_one(".printuser")
            if user_elem is None:
                continue

            joined_at = None
            if len(tds) >= 2 and (odate_elem := tds[1].select_one(".odate")) is not None:
                joined_at = parse_odate(odate_elem)

            members.append(SiteMember(site=site, user=parse_user(site.client, user_elem), joined_at=joined_at))
        return members

    @staticmethod
    def _last_page(html: str) -> int:
        # The last pager link is "next"; the one before it holds the last page number
        pager_links = BeautifulSoup(html, "html.parser").select("div.pager a")
        if len(pager_links) < 2:
            return 1
        text = pager_links[-2].get_text(strip=True)
        return int(text) if text.isdigit() else 1

    @classmethod
    async def get_members(cls, site: Site, group: MemberGroup = "") -> list[SiteMember]:
        """Fetch every member of ``group``: the first page, then all remaining pages in one batch."""
        first = await site.amc_request_single({"moduleName": MEMBERS_LIST_MODULE, "page": 1, "group": group})
        first_html = str(first.get("body") or "")
        members = cls._parse(site, first_html)

        last_page = cls._last_page(first_html)
        if last_page <= 1:
            return members

        logger.debug("Fetching %d more member pages of %s", last_page - 1, site.unix_name)
        responses = await site.amc_request(
            [{"moduleName": MEMBERS_LIST_MODULE, "page": page, "group": group} for page in range(2, last_page + 1)]
        )
        for response in responses:
            members.extend(cls._parse(site, str(response.get("body") or "")))
        return members

    @login_required
    async def _change_group(self, event: GroupEvent) -> None:
        body = {
            "action": "ManageSiteMembershipAction",
            "event": event,
            "user_id": self.user.id,
            "moduleName": "",
        }
        try:
            await self.site.amc_request([body])
        except WikidotStatusError as exc:
            if exc.status_code == "not_already":
                raise TargetError(f"User is not moderator/admin: {self.user.name}") from exc
            if exc.status_code in ("already_admin", "already_moderator"):
                role = exc.status_code.removeprefix("already_")
                raise TargetError(f"User is already {role}: {self.user.name}") from exc
            raise

    async def to_moderator(self) -> None:
        await self._change_group("toModerators")

    async def remove_moderator(self) -> None:
        await self._change_group("removeModerator")

    async def to_admin(self) -> None:
        await self._change_group("toAdmins")

    async def remove_admin(self) -> None:
        await self._change_group("removeAdmin")
