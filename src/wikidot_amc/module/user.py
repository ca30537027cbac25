"""User domain objects.

Users hold a non-owning reference to the :class:`~wikidot_amc.module.client.Client`
they were loaded through; they never touch the AMC pipeline directly.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, ClassVar, Literal

from bs4 import BeautifulSoup
import httpx

from ..errors import NoElementError, UnexpectedError
from ..util.http import fetch_with_retry
from ..util.string_util import to_unix


if TYPE_CHECKING:
    from collections.abc import Iterable

    from .client import Client


logger = logging.getLogger(__name__)

UserType = Literal["user", "deleted", "anonymous", "guest", "wikidot"]


DEFAULT_DOMAIN = "wikidot.com"


def avatar_url_for(user_id: int, domain: str = DEFAULT_DOMAIN) -> str:
    return f"https://www.{domain}/avatar.php?userid={user_id}"


def domain_of(client: Client | None) -> str:
    """Platform domain the client talks to, or the public one when there is no client."""
    return client.amc_client.domain if client is not None else DEFAULT_DOMAIN


@dataclass(eq=False)
class AbstractUser:
    """Common shape of every kind of author the platform can render."""

    client: Client | None = field(repr=False)
    id: int = 0
    name: str = ""
    unix_name: str | None = None
    avatar_url: str | None = None
    ip: str | None = None

    user_type: ClassVar[UserType]

    def is_user(self) -> bool:
        return self.user_type == "user"

    def is_deleted_user(self) -> bool:
        return self.user_type == "deleted"

    def is_anonymous_user(self) -> bool:
        return self.user_type == "anonymous"

    def is_guest_user(self) -> bool:
        return self.user_type == "guest"

    def is_wikidot_user(self) -> bool:
        return self.user_type == "wikidot"


@dataclass(eq=False)
class User(AbstractUser):
    """A registered account."""

    display_name: str | None = None

    user_type: ClassVar[UserType] = "user"

    def __post_init__(self) -> None:
        if self.unix_name is None:
            self.unix_name = to_unix(self.name)
        if self.avatar_url is None:
            self.avatar_url = avatar_url_for(self.id, domain_of(self.client))

    @classmethod
    async def from_name(cls, client: Client, name: str) -> User | None:
        """Load a user from their profile page.

        Returns:
            The user, or None when the profile page reports that the account does not exist

        Raises:
            NoElementError: The profile page is missing the id or name element
            UnexpectedError: The profile page could not be fetched
        """
        unix_name = to_unix(name)
        url = f"https://www.{client.amc_client.domain}/user:info/{unix_name}"
        try:
            response = await fetch_with_retry(
                client.amc_client.http_client,
                url,
                client.amc_client.config,
                check_ok=False,
                limiter=client.amc_client.limiter,
            )
        except httpx.HTTPError as exc:
            raise UnexpectedError(f"Failed to fetch user info for {name}: {exc}") from exc
        if not response.is_success:
            raise UnexpectedError(f"Failed to fetch user info: {response.status_code}")

        soup = BeautifulSoup(response.text, "html.parser")
        if soup.select_one("div.error-block") is not None:
            logger.debug("User %s does not exist", name)
            return None

        id_elem = soup.select_one("a.btn.btn-default.btn-xs")
        if id_elem is None or not id_elem.get("href"):
            raise NoElementError("User ID element not found")
        user_id = int(str(id_elem["href"]).rstrip("/").split("/")[-1])

        name_elem = soup.select_one("h1.profile-title")
        if name_elem is None:
            raise NoElementError("User name element not found")

        return cls(client=client, id=user_id, name=name_elem.get_text(strip=True), unix_name=unix_name)

    @classmethod
    async def from_names(cls, client: Client, names: Iterable[str]) -> UserCollection:
        """Load many users concurrently; failed or unknown names become ``None``.

        Each profile fetch holds a slot of the client's shared limiter.
        """

        async def _load(name: str) -> User | None:
            try:
                return await cls.from_name(client, name)
            except (NoElementError, UnexpectedError) as exc:
                logger.warning("Failed to load user %s: %s", name, exc)
                return None

        return UserCollection(await asyncio.gather(*(_load(name) for name in names)))


@dataclass(eq=False)
class DeletedUser(AbstractUser):
    name: str = "account deleted"
    unix_name: str | None = "account_deleted"

    user_type: ClassVar[UserType] = "deleted"


@dataclass(eq=False)
class AnonymousUser(AbstractUser):
    name: str = "Anonymous"
    unix_name: str | None = "anonymous"

    user_type: ClassVar[UserType] = "anonymous"


@dataclass(eq=False)
class GuestUser(AbstractUser):
    """A non-registered commenter identified by name and (usually) a Gravatar."""

    user_type: ClassVar[UserType] = "guest"


@dataclass(eq=False)
class WikidotUser(AbstractUser):
    """The platform's own system account."""

    name: str = "Wikidot"
    unix_name: str | None = "wikidot"

    user_type: ClassVar[UserType] = "wikidot"


class UserCollection(list):
    """Positional list of users where unresolved entries are ``None``."""

    def find_by_name(self, name: str) -> User | None:
        lowered = name.lower()
        for user in self:
            if user is not None and user.name.lower() == lowered:
                return user
        return None

    def find_by_id(self, user_id: int) -> User | None:
        for user in self:
            if user is not None and user.id == user_id:
                return user
        return None

    def filter_non_null(self) -> list[User]:
        return [user for user in self if user is not None]
