"""OpenTelemetry spans around AMC requests, exchanges and SSL probes."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from wikidot_amc.observability.context import set_span_id


if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from opentelemetry.sdk.trace import SpanProcessor
    from opentelemetry.trace import Span, Tracer


logger = logging.getLogger(__name__)

ATTRIBUTE_PREFIX = "amc."

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "wikidot-amc",
    *,
    span_processors: Sequence[SpanProcessor] = (),
    set_global: bool = False,
) -> TracerProvider:
    """Create the tracer used by the AMC pipeline.

    Args:
        service_name: ``service.name`` resource attribute
        span_processors: Processors (exporters) to attach to the provider
        set_global: Also install the provider as the process-wide default
    """
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in span_processors:
        provider.add_span_processor(processor)
    if set_global:
        trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = provider.get_tracer("wikidot_amc")
    logger.debug("Tracing initialized for service %s with %d processors", service_name, len(span_processors))
    return provider


def get_tracer() -> Tracer:
    if _tracer_holder["tracer"] is None:
        init_tracing()
    return _tracer_holder["tracer"]  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Open a span named ``name`` and make it the current span for log correlation.

    Attribute keys are namespaced under ``amc.`` unless they already are. A failure
    inside the block marks the span as errored; a ``status_code`` carried by the
    exception (HTTP or AMC status) is recorded as ``amc.error.status_code``.
    """
    with get_tracer().start_as_current_span(
        name, kind=kind, record_exception=False, set_status_on_exception=False
    ) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key if key.startswith(ATTRIBUTE_PREFIX) else ATTRIBUTE_PREFIX + key, value)

        set_span_id(format(span.get_span_context().span_id, "016x"))

        try:
            yield span
        except Exception as exc:
            status_code = getattr(exc, "status_code", None)
            if status_code is not None:
                span.set_attribute(f"{ATTRIBUTE_PREFIX}error.status_code", str(status_code))
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            span.record_exception(exc)
            raise
