"""Metrics for work queues, one set per queue name."""

from __future__ import annotations

from typing import Optional

from stdkit.promutils.metrics import (
    DEFAULT_BUCKETS,
    Counter,
    Gauge,
    Histogram,
    Metric,
    Registry,
    default_registry,
)


def _full_name(subsystem: str, name: str) -> str:
    return "_".join(part for part in (subsystem, name) if part)


class PrometheusMetricsProvider:
    """Creates and registers the metrics a work queue reports."""

    def __init__(self, registry: Optional[Registry] = None) -> None:
        self.registry = default_registry if registry is None else registry

    def _register(self, metric: Metric) -> Metric:
        return self.registry.register(metric)

    def _gauge(self, subsystem: str, name: str, help_text: str) -> Gauge:
        return self._register(Gauge(_full_name(subsystem, name), help_text))

    def _counter(self, subsystem: str, name: str, help_text: str) -> Counter:
        return self._register(Counter(_full_name(subsystem, name), help_text))

    def _histogram(self, subsystem: str, name: str, help_text: str) -> Histogram:
        return self._register(Histogram(_full_name(subsystem, name), help_text, DEFAULT_BUCKETS))

    def new_longest_running_processor_seconds_metric(self, name: str) -> Gauge:
        return self._gauge(
            name,
            "longest_running_processor_s",
            "How many microseconds longest running processor from workqueue" + name + " takes.",
        )

    def new_unfinished_work_seconds_metric(self, name: str) -> Gauge:
        return self._gauge(
            name,
            "unfinished_work_s",
            "How many seconds of work in progress in workqueue: " + name,
        )

    def new_longest_running_processor_microseconds_metric(self, name: str) -> Gauge:
        return self._gauge(
            name,
            "longest_running_processor_us",
            "How many microseconds longest running processor from workqueue" + name + " takes.",
        )

    def new_depth_metric(self, name: str) -> Gauge:
        return self._gauge(name, "depth", "Current depth of workqueue: " + name)

    def new_adds_metric(self, name: str) -> Counter:
        return self._counter(name, "adds", "Total number of adds handled by workqueue: " + name)

    def new_latency_metric(self, name: str) -> Histogram:
        return self._histogram(
            name,
            "queue_latency_us",
            "How long an item stays in workqueue" + name + " before being requested.",
        )

    def new_work_duration_metric(self, name: str) -> Histogram:
        return self._histogram(
            name,
            "work_duration_us",
            "How long processing an item from workqueue" + name + " takes.",
        )

    def new_retries_metric(self, name: str) -> Counter:
        return self._counter(
            name, "retries", "Total number of retries handled by workqueue: " + name
        )