"""Unit tests for quickmodule.php lookups."""

import httpx
import pytest

from wikidot_amc.errors import NotFoundError, UnexpectedError
from wikidot_amc.util.quick_module import QMCPage, QMCUser, member_lookup, page_lookup, user_lookup


class TestQuickModule:
    @pytest.mark.asyncio
    async def test_member_lookup(self, make_amc_client):
        captured = {}

        def handler(request):
            captured["url"] = request.url
            return httpx.Response(200, json={"users": [{"user_id": "123", "name": "Alice"}, {"user_id": 7, "name": "Bob"}]})

        client = make_amc_client(handler)
        users = await member_lookup(client, 42, "al")

        assert users == [QMCUser(id=123, name="Alice"), QMCUser(id=7, name="Bob")]
        assert captured["url"].host == "www.wikidot.com"
        assert captured["url"].path == "/quickmodule.php"
        assert captured["url"].params["module"] == "MemberLookupQModule"
        assert captured["url"].params["s"] == "42"
        assert captured["url"].params["q"] == "al"

    @pytest.mark.asyncio
    async def test_user_lookup_no_results(self, make_amc_client):
        client = make_amc_client(lambda request: httpx.Response(200, json={"users": False}))
        assert await user_lookup(client, 1, "nobody") == []

    @pytest.mark.asyncio
    async def test_page_lookup(self, make_amc_client):
        def handler(request):
            assert request.url.params["module"] == "PageLookupQModule"
            return httpx.Response(200, json={"pages": [{"title": "Main", "unix_name": "start"}]})

        client = make_amc_client(handler)
        assert await page_lookup(client, 1, "st") == [QMCPage(title="Main", unix_name="start")]

    @pytest.mark.asyncio
    async def test_unknown_site(self, make_amc_client):
        client = make_amc_client(lambda request: httpx.Response(500))
        with pytest.raises(NotFoundError):
            await member_lookup(client, 999999, "x")

    @pytest.mark.asyncio
    async def test_other_http_error(self, make_amc_client):
        client = make_amc_client(lambda request: httpx.Response(403))
        with pytest.raises(UnexpectedError):
            await page_lookup(client, 1, "x")

    @pytest.mark.asyncio
    async def test_unexpected_payload(self, make_amc_client):
        client = make_amc_client(lambda request: httpx.Response(200, json={"something": "else"}))
        with pytest.raises(UnexpectedError):
            await user_lookup(client, 1, "x")
