"""Ajax Module Connector (AMC) client.

Every programmatic interaction with the platform is a form POST to
``{scheme}://{site}.{domain}/ajax-module-connector.php``. This module turns a batch of
such request bodies into HTTP exchanges:

- the scheme is resolved once per subsite by an SSL probe and cached for the client's lifetime
- bodies fan out concurrently, bounded by a :class:`ConcurrencyLimiter`
- transport failures and ``try_again`` responses are retried with exponential backoff
- every other outcome becomes a typed :class:`~wikidot_amc.errors.WikidotError`
- results come back in input order, either fail-fast or with per-item errors
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
import logging
import random
from typing import Any

import httpx
from opentelemetry.trace import SpanKind

from ..config import AMCConfig
from ..errors import (
    AMCHttpError,
    ForbiddenError,
    NotFoundError,
    ResponseDataError,
    UnexpectedError,
    WikidotError,
    WikidotStatusError,
)
from ..observability.metrics import AMC_REQUEST_COUNT, AMC_REQUEST_LATENCY, AMC_RETRY_COUNT, track_latency
from ..observability.tracing import create_span
from .backoff import calculate_backoff
from .header import WIKIDOT_TOKEN7, AMCHeader
from .limiter import ConcurrencyLimiter
from .types import AMCRequestBody, AMCResponse, describe_target, parse_amc_response


ROOT_SITE = "www"

SENSITIVE_KEYS = ("password", "login", "WIKIDOT_SESSION_ID", "wikidot_token7")
MASKED_VALUE = "***MASKED***"


def mask_sensitive_data(body: AMCRequestBody) -> dict[str, Any]:
    """Return a copy of ``body`` that is safe to log."""
    masked = dict(body)
    for key in SENSITIVE_KEYS:
        if key in masked:
            masked[key] = MASKED_VALUE
    return masked


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_request_body(body: AMCRequestBody) -> dict[str, str | list[str]]:
    """Flatten a request body into form fields, injecting the fixed ``wikidot_token7``.

    ``None`` values are dropped and sequences become repeated fields. Nested mappings
    are rejected: callers must JSON-encode them first.
    """
    form: dict[str, str | list[str]] = {}
    for key, value in {**body, "wikidot_token7": WIKIDOT_TOKEN7}.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            raise TypeError(f"AMC request field {key!r} is a mapping; serialize it before sending")
        if isinstance(value, (list, tuple)):
            form[key] = [_encode_scalar(item) for item in value if item is not None]
        else:
            form[key] = _encode_scalar(value)
    return form


class AMCClient:
    """Client for the AMC endpoint of one platform domain.

    Owns the session header state, the SSL cache and the concurrency limiter. It holds
    no reference to domain objects; it only deals in request and response bodies.
    """

    def __init__(
        self,
        config: AMCConfig | None = None,
        *,
        header: AMCHeader | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
        rng: random.Random | None = None,
    ):
        """Initialize the client.

        Args:
            config: Pipeline configuration (defaults are loaded from the environment)
            header: Session header state; a fresh one is built from ``config`` when omitted
            transport: Optional httpx transport (used by tests to fake the remote service)
            logger: Log sink for diagnostics; defaults to this module's logger
            rng: Random source for backoff jitter
        """
        self.config = config or AMCConfig()
        self.header = header or AMCHeader(user_agent=self.config.user_agent, referer=self.config.referer)
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._transport = transport
        self._rng = rng
        self._limiter = ConcurrencyLimiter(self.config.semaphore_limit)
        self._http_client: httpx.AsyncClient | None = None

        # The root subsite always supports SSL
        self._ssl_cache: dict[str, bool] = {ROOT_SITE: True}

    @property
    def domain(self) -> str:
        return self.config.domain

    @property
    def limiter(self) -> ConcurrencyLimiter:
        return self._limiter

    @property
    def ssl_cache(self) -> dict[str, bool]:
        """Snapshot of the resolved SSL support per subsite."""
        return dict(self._ssl_cache)

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Shared httpx client, created on first use."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=False,
                transport=self._transport,
            )
        return self._http_client

    async def __aenter__(self) -> AMCClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ------------------------------------------------------------------
    # SSL / domain resolution
    # ------------------------------------------------------------------

    async def check_site_ssl(self, site_name: str) -> bool:
        """Return whether ``site_name`` is served over HTTPS.

        The answer is probed once with an unredirected GET on the plain-HTTP origin and
        cached for the life of the client.

        Raises:
            NotFoundError: If the subsite does not exist (HTTP 404)
            UnexpectedError: If the probe itself fails at the transport level
        """
        cached = self._ssl_cache.get(site_name)
        if cached is not None:
            return cached

        url = f"http://{site_name}.{self.domain}"
        async with self._limiter:
            with create_span("amc.ssl_probe", kind=SpanKind.CLIENT, attributes={"amc.site": site_name}):
                try:
                    response = await self.http_client.get(
                        url,
                        headers={"User-Agent": self.header.user_agent},
                        follow_redirects=False,
                    )
                except httpx.HTTPError as exc:
                    raise UnexpectedError(f"Failed to check SSL for {site_name}: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"Site is not found: {site_name}.{self.domain}")

        location = response.headers.get("Location", "")
        is_ssl = response.status_code == 301 and location.startswith("https")
        self.logger.debug("SSL probe for %s: status=%s ssl=%s", site_name, response.status_code, is_ssl)

        # A concurrent probe may have won the race; both saw the same answer
        return self._ssl_cache.setdefault(site_name, is_ssl)

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    async def request(
        self,
        bodies: Sequence[AMCRequestBody],
        site_name: str = ROOT_SITE,
        ssl_supported: bool | None = None,
        *,
        return_exceptions: bool = False,
    ) -> list[Any]:
        """Execute a batch of AMC requests.

        Args:
            bodies: Request bodies; each carries ``moduleName`` or an ``action``/``event`` pair
            site_name: Target subsite
            ssl_supported: Force the scheme instead of probing the subsite
            return_exceptions: When False, the positionally first terminal error is raised.
                When True, each failed position holds its ``WikidotError`` instead.

        Returns:
            One response mapping (or error, see ``return_exceptions``) per body, in input order
        """
        if ssl_supported is None:
            ssl_supported = await self.check_site_ssl(site_name)

        url = self.config.amc_url(site_name, ssl_supported)

        with create_span(
            "amc.request",
            attributes={"amc.site": site_name, "amc.batch_size": len(bodies)},
        ):
            results = await asyncio.gather(
                *(self._single_request(body, url, site_name) for body in bodies),
                return_exceptions=True,
            )

        outcomes: list[AMCResponse | WikidotError] = []
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, WikidotError):
                raise result
            outcomes.append(result)

        if not return_exceptions:
            for outcome in outcomes:
                if isinstance(outcome, WikidotError):
                    raise outcome
        return outcomes

    async def _single_request(self, body: AMCRequestBody, url: str, site_name: str) -> AMCResponse:
        """Drive one request body through the bounded retry state machine."""
        form = encode_request_body(body)
        target = describe_target(body)
        retry_limit = self.config.retry_limit
        self.logger.debug("AMC request to %s: %s", url, mask_sensitive_data(body))

        for attempt in range(1, retry_limit + 1):
            try:
                response = await self._exchange(form, url, site_name, attempt)
            except httpx.HTTPError as exc:
                if attempt >= retry_limit:
                    status_code = (
                        exc.response.status_code
                        if isinstance(exc, httpx.HTTPStatusError)
                        else self.config.fallback_status_code
                    )
                    self._record_outcome(site_name, "http_error", target)
                    raise AMCHttpError(f"AMC request failed: {exc}", status_code) from exc
                self.logger.warning(
                    "AMC exchange failed for %s (attempt %d/%d): %s", target, attempt, retry_limit, exc
                )
                await self._backoff(attempt, site_name, "http_error")
                continue
            except ResponseDataError:
                self._record_outcome(site_name, "response_data_error", target)
                raise

            status = response["status"]
            if status == "ok":
                self._record_outcome(site_name, "ok", target)
                return response

            if status == "try_again":
                if attempt >= retry_limit:
                    self._record_outcome(site_name, "try_again", target)
                    raise WikidotStatusError("AMC responded with try_again", "try_again")
                self.logger.warning("AMC asked to try again for %s (attempt %d/%d)", target, attempt, retry_limit)
                await self._backoff(attempt, site_name, "try_again")
                continue

            if status == "no_permission":
                self._record_outcome(site_name, "no_permission", target)
                raise ForbiddenError(f"Your account has no permission to perform this action: {target}")

            self._record_outcome(site_name, "status_error", target)
            raise WikidotStatusError(f'AMC responded with error status: "{status}"', status)

        raise UnexpectedError(f"AMC retry loop ended without an outcome for {target}")

    async def _exchange(
        self,
        form: dict[str, str | list[str]],
        url: str,
        site_name: str,
        attempt: int,
    ) -> AMCResponse:
        """Perform one HTTP exchange while holding a concurrency slot."""
        async with self._limiter:
            with (
                create_span(
                    "amc.exchange",
                    kind=SpanKind.CLIENT,
                    attributes={"amc.site": site_name, "amc.attempt": attempt},
                ),
                track_latency(AMC_REQUEST_LATENCY, site=site_name),
            ):
                response = await self.http_client.post(url, headers=self.header.get_headers(), data=form)
                response.raise_for_status()
        return parse_amc_response(response.content)

    async def _backoff(self, attempt: int, site_name: str, reason: str) -> None:
        AMC_RETRY_COUNT.labels(site=site_name, reason=reason).inc()
        delay = calculate_backoff(
            attempt,
            self.config.retry_interval,
            self.config.backoff_factor,
            self.config.max_backoff,
            rng=self._rng,
        )
        await asyncio.sleep(delay)

    def _record_outcome(self, site_name: str, outcome: str, target: str) -> None:
        AMC_REQUEST_COUNT.labels(site=site_name, outcome=outcome).inc()
        if outcome != "ok":
            self.logger.info("AMC request for %s on %s ended with %s", target, site_name, outcome)
