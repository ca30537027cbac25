"""Decorators shared by domain objects."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import functools
from typing import Any, TypeVar

from ..errors import LoginRequiredError


T = TypeVar("T")


def _resolve_client(obj: Any) -> Any:
    client = getattr(obj, "client", None)
    if client is not None:
        return client
    site = getattr(obj, "site", None)
    return getattr(site, "client", None)


def login_required(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Require a logged-in client before running a coroutine method.

    The client is looked up on ``self.client`` first, then on ``self.site.client``.

    Raises:
        LoginRequiredError: If no client is reachable or it has no session
    """

    @functools.wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        client = _resolve_client(self)
        if client is None:
            raise LoginRequiredError("Client reference not found")
        client.require_login()
        return await func(self, *args, **kwargs)

    return wrapper
