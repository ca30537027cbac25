"""Builders for fake AMC traffic."""

from urllib.parse import parse_qs

import httpx


def amc_json(status: str = "ok", **fields) -> httpx.Response:
    """Build an AMC JSON response."""
    return httpx.Response(200, json={"status": status, **fields})


def form_of(request: httpx.Request) -> dict[str, list[str]]:
    """Decode the urlencoded form of an outgoing request."""
    return parse_qs(request.content.decode("utf-8"), keep_blank_values=True)


MISSING_PROFILE_PAGE = '<html><body><div class="error-block">User does not exist.</div></body></html>'


def profile_page(user_id: int, name: str) -> str:
    """Minimal user:info page."""
    return (
        "<html><body>"
        f'<h1 class="profile-title"><img src="https://www.wikidot.com/avatar.php?userid={user_id}"/> {name}</h1>'
        f'<a class="btn btn-default btn-xs" href="http://www.wikidot.com/account/messages#/new/{user_id}">'
        "Write private message</a>"
        "</body></html>"
    )


def profile_handler(known: dict[str, tuple[int, str]]):
    """Serve user:info pages for ``known`` unix names and an error block for anything else."""

    def handler(request: httpx.Request) -> httpx.Response:
        unix_name = request.url.path.rsplit("/", 1)[-1]
        if unix_name in known:
            return httpx.Response(200, text=profile_page(*known[unix_name]))
        return httpx.Response(200, text=MISSING_PROFILE_PAGE)

    return handler
