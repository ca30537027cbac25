"""Client facade: the entry point that owns the AMC pipeline and the login session."""

from __future__ import annotations

from collections.abc import Iterable
import logging

import httpx

from ..config import AMCConfig
from ..connector.amc_client import AMCClient
from ..connector.auth import login, logout
from ..errors import LoginRequiredError, NotFoundError, SessionCreateError, WikidotError
from .site import Site
from .user import User, UserCollection


logger = logging.getLogger(__name__)


class UserAccessor:
    """User lookups bound to a client."""

    def __init__(self, client: Client):
        self.client = client

    async def get(self, name: str, *, raise_when_not_found: bool = False) -> User | None:
        user = await User.from_name(self.client, name)
        if user is None and raise_when_not_found:
            raise NotFoundError(f"User not found: {name}")
        return user

    async def get_many(self, names: Iterable[str], *, raise_when_not_found: bool = False) -> UserCollection:
        names = list(names)
        collection = await User.from_names(self.client, names)
        if raise_when_not_found:
            missing = [name for name, user in zip(names, collection, strict=True) if user is None]
            if missing:
                raise NotFoundError(f"Users not found: {', '.join(missing)}")
        return collection


class SiteAccessor:
    """Site lookups bound to a client."""

    def __init__(self, client: Client):
        self.client = client

    async def get(self, unix_name: str) -> Site:
        return await Site.from_unix_name(self.client, unix_name)


class Client:
    """Entry point of the library.

    Use :meth:`create` to build one; it logs in when credentials are given. The client
    owns its :class:`AMCClient` (and through it the HTTP connection pool), so close it
    with :meth:`close` or use it as an async context manager.
    """

    def __init__(self, amc_client: AMCClient, username: str | None = None):
        self.amc_client = amc_client
        self.username = username
        self.me: User | None = None
        self.user = UserAccessor(self)
        self.site = SiteAccessor(self)

    @property
    def domain(self) -> str:
        return self.amc_client.domain

    @classmethod
    async def create(
        cls,
        username: str | None = None,
        password: str | None = None,
        config: AMCConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Client:
        """Build a client, logging in when both credentials are present.

        Raises:
            LoginRequiredError: If the login attempt fails
        """
        amc_client = AMCClient(config, transport=transport)
        if not (username and password):
            return cls(amc_client)

        try:
            await login(amc_client, username, password)
        except SessionCreateError as exc:
            await amc_client.aclose()
            raise LoginRequiredError(f"Failed to create client: {exc}") from exc

        client = cls(amc_client, username)
        try:
            client.me = await User.from_name(client, username)
        except WikidotError as exc:
            logger.warning("Logged in as %s but could not load the profile: %s", username, exc)
        return client

    def is_logged_in(self) -> bool:
        return self.username is not None

    def require_login(self) -> None:
        if not self.is_logged_in():
            raise LoginRequiredError()

    async def close(self) -> None:
        """Log out (when logged in) and release the HTTP connection pool."""
        try:
            if self.is_logged_in():
                await logout(self.amc_client)
                self.username = None
                self.me = None
        finally:
            await self.amc_client.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Client(domain={self.domain!r}, username={self.username!r})"
