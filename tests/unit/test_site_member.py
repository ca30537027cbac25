"""Unit tests for member listing and group changes."""

from datetime import datetime, timezone

import pytest

from tests.helpers import amc_json, form_of
from wikidot_amc.errors import ForbiddenError, LoginRequiredError, TargetError
from wikidot_amc.module.site import Site
from wikidot_amc.module.site_member import MEMBERS_LIST_MODULE, SiteMember
from wikidot_amc.module.user import User


def member_row(user_id: int, name: str, joined: int) -> str:
    unix_name = name.lower()
    return (
        "<tr>"
        f'<td><span class="printuser"><a href="http://www.wikidot.com/user:info/{unix_name}" '
        f'onclick="WIKIDOT.page.listeners.userInfo({user_id}); return false;">{name}</a></span></td>'
        f'<td><span class="odate time_{joined}">date</span></td>'
        "</tr>"
    )


def members_page(rows: list[str], pager: str = "") -> str:
    return f"<table>{''.join(rows)}</table>{pager}"


PAGER_OF_THREE = (
    '<div class="pager"><span class="pager-no">page 1 of 3</span><span class="current">1</span>'
    '<span class="target"><a href="javascript:;">2</a></span>'
    '<span class="target"><a href="javascript:;">3</a></span>'
    '<span class="target"><a href="javascript:;">next &raquo;</a></span></div>'
)


def _site(client) -> Site:
    return Site(client=client, id=1, title="Test", unix_name="test", domain="test.wikidot.com", ssl_supported=True)


class TestGetMembers:
    @pytest.mark.asyncio
    async def test_single_page(self, make_client):
        calls = []

        def handler(request):
            calls.append(form_of(request))
            return amc_json(body=members_page([member_row(1, "Alice", 1700000000)]))

        site = _site(make_client(handler))
        members = await site.members()

        assert len(calls) == 1
        assert calls[0]["moduleName"] == [MEMBERS_LIST_MODULE]
        assert calls[0]["page"] == ["1"]
        assert calls[0]["group"] == [""]
        assert [m.user.name for m in members] == ["Alice"]
        assert members[0].user.id == 1
        assert members[0].joined_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert members[0].site is site

    @pytest.mark.asyncio
    async def test_paginates_remaining_pages(self, make_client):
        pages = {
            "1": members_page([member_row(1, "Alice", 1)], PAGER_OF_THREE),
            "2": members_page([member_row(2, "Bob", 2)]),
            "3": members_page([member_row(3, "Carol", 3)]),
        }
        requested = []

        def handler(request):
            form = form_of(request)
            requested.append((form["page"][0], form["group"][0]))
            return amc_json(body=pages[form["page"][0]])

        site = _site(make_client(handler))
        members = await SiteMember.get_members(site, "admins")

        assert [m.user.name for m in members] == ["Alice", "Bob", "Carol"]
        assert sorted(requested) == [("1", "admins"), ("2", "admins"), ("3", "admins")]

    @pytest.mark.asyncio
    async def test_rows_without_printuser_are_skipped(self, make_client):
        body = members_page(["<tr><th>User</th><th>Joined</th></tr>", member_row(1, "Alice", 1)])
        site = _site(make_client(lambda request: amc_json(body=body)))

        members = await site.members("moderators")

        assert [m.user.name for m in members] == ["Alice"]


class TestChangeGroup:
    def _member(self, client) -> SiteMember:
        site = _site(client)
        return SiteMember(site=site, user=User(client, id=77, name="Bob"))

    @pytest.mark.asyncio
    async def test_requires_login(self, make_client):
        client = make_client(lambda request: pytest.fail("no request expected"))

        with pytest.raises(LoginRequiredError):
            await self._member(client).to_moderator()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "event"),
        [
            ("to_moderator", "toModerators"),
            ("remove_moderator", "removeModerator"),
            ("to_admin", "toAdmins"),
            ("remove_admin", "removeAdmin"),
        ],
    )
    async def test_sends_event(self, make_client, method, event):
        captured = {}

        def handler(request):
            captured.update(form_of(request))
            return amc_json()

        member = self._member(make_client(handler, username="admin"))
        await getattr(member, method)()

        assert captured["action"] == ["ManageSiteMembershipAction"]
        assert captured["event"] == [event]
        assert captured["user_id"] == ["77"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "message"),
        [
            ("not_already", "not moderator/admin"),
            ("already_admin", "already admin"),
            ("already_moderator", "already moderator"),
        ],
    )
    async def test_status_mapped_to_target_error(self, make_client, status, message):
        member = self._member(make_client(lambda request: amc_json(status), username="admin"))

        with pytest.raises(TargetError, match=message):
            await member.to_admin()

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, make_client):
        member = self._member(make_client(lambda request: amc_json("no_permission"), username="admin"))

        with pytest.raises(ForbiddenError):
            await member.remove_admin()
