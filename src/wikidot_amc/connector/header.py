"""Session header state for AMC requests."""

from __future__ import annotations


DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"
DEFAULT_USER_AGENT = "wikidot-amc"
DEFAULT_REFERER = "https://www.wikidot.com/"

# The remote service expects this cookie (and the matching form field) on every request.
WIKIDOT_TOKEN7 = "123456"
TOKEN_COOKIE_NAME = "wikidot_token7"
SESSION_COOKIE_NAME = "WIKIDOT_SESSION_ID"


class AMCHeader:
    """Cookie jar plus the fixed headers sent with every AMC request.

    Only the login/logout flow mutates the jar; request construction reads it through
    :meth:`get_headers`, so a cookie change takes effect on the next request.
    """

    def __init__(
        self,
        content_type: str = DEFAULT_CONTENT_TYPE,
        user_agent: str = DEFAULT_USER_AGENT,
        referer: str = DEFAULT_REFERER,
    ):
        self.content_type = content_type
        self.user_agent = user_agent
        self.referer = referer
        self._cookies: dict[str, str] = {TOKEN_COOKIE_NAME: WIKIDOT_TOKEN7}

    def set_cookie(self, name: str, value: str) -> None:
        self._cookies[name] = value

    def delete_cookie(self, name: str) -> None:
        """Drop a cookie; the fixed ``wikidot_token7`` cookie cannot be removed."""
        if name == TOKEN_COOKIE_NAME:
            return
        self._cookies.pop(name, None)

    def get_cookie(self, name: str) -> str | None:
        return self._cookies.get(name)

    @property
    def cookies(self) -> dict[str, str]:
        """Snapshot of the cookie jar."""
        return dict(self._cookies)

    def get_headers(self) -> dict[str, str]:
        """Materialize the headers for an outgoing request."""
        cookie_string = "; ".join(f"{name}={value}" for name, value in self._cookies.items())
        return {
            "Content-Type": self.content_type,
            "User-Agent": self.user_agent,
            "Referer": self.referer,
            "Cookie": cookie_string,
        }
