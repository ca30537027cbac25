"""Shared test fixtures."""

from collections.abc import Callable

import httpx
import pytest

from wikidot_amc.config import AMCConfig
from wikidot_amc.connector.amc_client import AMCClient
from wikidot_amc.module.client import Client


@pytest.fixture
def amc_config():
    """Fast, deterministic configuration (no .env file, tiny backoff)."""
    return AMCConfig(
        _env_file=None,
        retry_limit=3,
        retry_interval=0.001,
        backoff_factor=2.0,
        max_backoff=0.01,
        semaphore_limit=10,
    )


@pytest.fixture
def make_amc_client(amc_config) -> Callable[..., AMCClient]:
    """Factory building an AMCClient whose network is the given handler."""

    def _make(handler, config: AMCConfig | None = None, **kwargs) -> AMCClient:
        return AMCClient(config or amc_config, transport=httpx.MockTransport(handler), **kwargs)

    return _make


@pytest.fixture
def make_client(make_amc_client) -> Callable[..., Client]:
    """Factory building a Client (optionally marked as logged in) over the given handler."""

    def _make(handler, username: str | None = None) -> Client:
        return Client(make_amc_client(handler), username)

    return _make
