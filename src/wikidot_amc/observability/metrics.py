"""Prometheus metrics for the AMC pipeline, mirrored onto OpenTelemetry instruments.

Each metric is declared once through :func:`_counter`, :func:`_histogram` or
:func:`_up_down`; the factory registers the Prometheus collector and lazily creates
the matching OTel instrument on first use.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Sequence

    from opentelemetry.sdk.metrics.export import MetricReader


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}

LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0)


def init_metrics(
    service_name: str = "wikidot-amc",
    metric_readers: list[MetricReader] | None = None,
) -> MeterProvider:
    """Create the meter provider backing the OTel side of every AMC metric (idempotent)."""
    provider = _meter_holder["provider"]
    if provider is not None:
        return provider

    provider = MeterProvider(
        resource=Resource.create({"service.name": service_name}),
        metric_readers=metric_readers or [],
    )
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = provider.get_meter("wikidot_amc")
    return provider


def _meter():
    if _meter_holder["meter"] is None:
        init_metrics()
    return _meter_holder["meter"]


class BridgedMetric:
    """A Prometheus collector plus a lazily created OTel instrument with the same labels."""

    def __init__(self, prom_metric: Counter | Gauge | Histogram, make_instrument: Callable[[Any], Any]):
        self._prom_metric = prom_metric
        self._make_instrument = make_instrument
        self._instrument = None

    @property
    def instrument(self) -> Any:
        if self._instrument is None:
            self._instrument = self._make_instrument(_meter())
        return self._instrument

    def labels(self, **labels: str) -> BoundMetric:
        return BoundMetric(self, labels)


class BoundMetric:
    """A :class:`BridgedMetric` with its label values fixed."""

    def __init__(self, metric: BridgedMetric, labels: dict[str, str]):
        self._metric = metric
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._metric._prom_metric.labels(**self._labels).inc(amount)
        self._metric.instrument.add(amount, self._labels)

    def observe(self, value: float) -> None:
        self._metric._prom_metric.labels(**self._labels).observe(value)
        self._metric.instrument.record(value, self._labels)


def _counter(name: str, documentation: str, labelnames: Sequence[str]) -> BridgedMetric:
    return BridgedMetric(
        Counter(name, documentation, labelnames),
        lambda meter: meter.create_counter(name, description=documentation),
    )


def _histogram(name: str, documentation: str, labelnames: Sequence[str]) -> BridgedMetric:
    return BridgedMetric(
        Histogram(name, documentation, labelnames, buckets=LATENCY_BUCKETS),
        lambda meter: meter.create_histogram(name, unit="s", description=documentation),
    )


def _up_down(name: str, documentation: str, labelnames: Sequence[str]) -> BridgedMetric:
    # Only ever moved by relative amounts, so an up-down counter matches the gauge exactly
    return BridgedMetric(
        Gauge(name, documentation, labelnames),
        lambda meter: meter.create_up_down_counter(name, description=documentation),
    )


AMC_REQUEST_COUNT = _counter("amc_requests_total", "Logical AMC requests by terminal outcome", ["site", "outcome"])
AMC_RETRY_COUNT = _counter("amc_retries_total", "AMC exchange retries by reason", ["site", "reason"])
AMC_REQUEST_LATENCY = _histogram("amc_exchange_latency_seconds", "Latency of a single AMC HTTP exchange", ["site"])
AMC_IN_FLIGHT = _up_down(
    "amc_in_flight_exchanges", "AMC HTTP exchanges currently holding a concurrency slot", ["limiter"]
)


@contextmanager
def track_latency(histogram: BridgedMetric, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the enclosed block, even when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Prometheus text exposition of the default registry."""
    return generate_latest()
