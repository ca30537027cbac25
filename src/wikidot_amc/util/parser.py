"""Parsers for the recurring HTML fragments inside AMC response bodies."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import re
from typing import TYPE_CHECKING

from ..module.user import (
    AbstractUser,
    AnonymousUser,
    DeletedUser,
    GuestUser,
    User,
    WikidotUser,
    avatar_url_for,
    domain_of,
)


if TYPE_CHECKING:
    from bs4 import Tag

    from ..module.client import Client


logger = logging.getLogger(__name__)

_ODATE_TIME = re.compile(r"time_(\d+)")
_USER_INFO_ID = re.compile(r"userInfo\((\d+)\)")
_USER_INFO_HREF = re.compile(r"^.*/user:info/")


def parse_odate(elem: Tag) -> datetime | None:
    """Parse an ``odate`` element into an aware UTC datetime.

    The timestamp is read from the ``time_<unix>`` class; the element text is used as a
    fallback. Returns None (and logs a warning) when neither can be parsed.
    """
    class_attr = " ".join(elem.get("class") or [])
    match = _ODATE_TIME.search(class_attr)
    if match:
        return datetime.fromtimestamp(int(match.group(1)), tz=timezone.utc)

    text = elem.get_text(strip=True)
    for fmt in ("%d %b %Y %H:%M", "%d %b %Y, %H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    logger.warning('Failed to parse odate element: class="%s", text="%s"', class_attr, text)
    return None


def parse_user(client: Client | None, elem: Tag) -> AbstractUser:
    """Parse a ``printuser`` element into the matching user object."""
    classes = elem.get("class") or []
    text = elem.get_text(strip=True)

    if "deleted" in classes:
        data_id = elem.get("data-id")
        return DeletedUser(client, id=int(data_id) if data_id else 0)

    if text == "(user deleted)":
        return DeletedUser(client, id=0)

    if "anonymous" in classes:
        ip_elem = elem.select_one("span.ip")
        ip = ip_elem.get_text().replace("(", "").replace(")", "").strip() if ip_elem else ""
        return AnonymousUser(client, ip=ip)

    img = elem.find("img")
    if img is not None and "gravatar.com" in str(img.get("src", "")):
        guest_name = text.split(" ")[0] if text else "Guest"
        return GuestUser(client, name=guest_name, avatar_url=str(img["src"]))

    if text == "Wikidot":
        return WikidotUser(client)

    links = elem.find_all("a")
    if not links:
        return DeletedUser(client, id=0)

    user_link = links[-1]
    href = str(user_link.get("href", ""))
    onclick = str(user_link.get("onclick", ""))

    unix_name = _USER_INFO_HREF.sub("", href).rstrip("/")
    id_match = _USER_INFO_ID.search(onclick)
    user_id = int(id_match.group(1)) if id_match else 0

    return User(
        client,
        id=user_id,
        name=user_link.get_text(strip=True),
        unix_name=unix_name,
        avatar_url=avatar_url_for(user_id, domain_of(client)) if user_id > 0 else None,
    )
