"""Login/logout flows that populate the AMC session cookie."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..errors import SessionCreateError, WikidotError
from .header import SESSION_COOKIE_NAME


if TYPE_CHECKING:
    from .amc_client import AMCClient


logger = logging.getLogger(__name__)

LOGIN_PATH = "/default--flow/login__LoginPopupScreen"
INVALID_CREDENTIALS_MARKER = "The login and password do not match"


def login_url(domain: str) -> str:
    return f"https://www.{domain}{LOGIN_PATH}"


async def login(amc_client: AMCClient, username: str, password: str) -> None:
    """Log in and store the session cookie in the client's header state.

    Raises:
        SessionCreateError: On HTTP failure, rejected credentials or a missing session cookie
    """
    form = {
        "login": username,
        "password": password,
        "action": "Login2Action",
        "event": "login",
    }
    try:
        async with amc_client.limiter:
            response = await amc_client.http_client.post(
                login_url(amc_client.domain),
                headers=amc_client.header.get_headers(),
                data=form,
            )
    except httpx.HTTPError as exc:
        raise SessionCreateError(f"Login failed: {exc}") from exc

    if not response.is_success:
        raise SessionCreateError(f"Login attempt failed due to HTTP status code: {response.status_code}")

    if INVALID_CREDENTIALS_MARKER in response.text:
        raise SessionCreateError("Login attempt failed due to invalid username or password")

    session_id = response.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        raise SessionCreateError(f"Login attempt failed due to missing {SESSION_COOKIE_NAME} cookie")

    amc_client.header.set_cookie(SESSION_COOKIE_NAME, session_id)
    logger.info("Logged in as %s", username)


async def logout(amc_client: AMCClient) -> None:
    """Log out remotely (best effort) and always drop the local session cookie."""
    try:
        await amc_client.request([{"moduleName": "Empty", "action": "Login2Action", "event": "logout"}])
    except WikidotError as exc:
        logger.warning("Remote logout failed, clearing local session anyway: %s", exc)
    finally:
        amc_client.header.delete_cookie(SESSION_COOKIE_NAME)
