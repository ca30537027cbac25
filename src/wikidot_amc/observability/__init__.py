"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from wikidot_amc.observability.context import TraceIds, bind_trace, current_trace
from wikidot_amc.observability.logging import JsonFormatter, configure_logging
from wikidot_amc.observability.metrics import (
    AMC_IN_FLIGHT,
    AMC_REQUEST_COUNT,
    AMC_REQUEST_LATENCY,
    AMC_RETRY_COUNT,
    get_metrics,
    init_metrics,
    track_latency,
)
from wikidot_amc.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "AMC_IN_FLIGHT",
    "AMC_REQUEST_COUNT",
    "AMC_REQUEST_LATENCY",
    "AMC_RETRY_COUNT",
    "JsonFormatter",
    "TraceIds",
    "bind_trace",
    "configure_logging",
    "create_span",
    "current_trace",
    "get_metrics",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "track_latency",
]
