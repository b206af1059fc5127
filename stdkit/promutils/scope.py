"""Nestable metric name prefixes and stopwatches that time into summaries."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Union

from stdkit.promutils.metrics import (
    DEFAULT_BUCKETS,
    Counter,
    CounterVec,
    Gauge,
    GaugeVec,
    Histogram,
    HistogramVec,
    Registry,
    Summary,
    SummaryVec,
    default_registry,
)

Duration = Union[timedelta, float, int]

_SCOPE_DELIMITER = ":"
_METRIC_DELIMITER = "_"
_RANDOM_CHARSET = "bcdfghjklmnpqrstvwxz2456789"

DEFAULT_OBJECTIVES: Dict[float, float] = {0.5: 0.05, 0.9: 0.01, 0.99: 0.001}

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN


def _to_nanoseconds(duration: Duration) -> int:
    """Convert a timedelta, or a number of seconds, to whole nanoseconds."""
    if isinstance(duration, timedelta):
        return (duration.days * 86_400 + duration.seconds) * _NS_PER_S + duration.microseconds * _NS_PER_US
    return round(duration * _NS_PER_S)


def _scaled(observed_ns: int, scale: Duration) -> float:
    scale_ns = _to_nanoseconds(scale)
    if scale_ns == 0:
        return 0.0
    return float(observed_ns // scale_ns)


@dataclass(frozen=True)
class SummaryOptions:
    """Options for a summary: target quantiles with their allowed errors."""

    objectives: Mapping[float, float] = field(default_factory=lambda: dict(DEFAULT_OBJECTIVES))


@dataclass
class Timer:
    """A running timer; stopping it records the elapsed time, scaled."""

    observer: Summary
    output_scale: Duration
    start_ns: int = field(default_factory=time.monotonic_ns)

    def stop(self) -> float:
        """Record and return the elapsed time in units of the output scale."""
        value = _scaled(time.monotonic_ns() - self.start_ns, self.output_scale)
        self.observer.observe(value)
        return value

    def __enter__(self) -> "Timer":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()


@dataclass(frozen=True)
class StopWatch:
    """Times operations into a summary, in units of ``output_scale``."""

    observer: Summary
    output_scale: Duration

    def start(self) -> Timer:
        return Timer(self.observer, self.output_scale)

    def observe(self, start: Any, end: Any) -> None:
        """Record the duration between two points in time."""
        self.observer.observe(_scaled(_to_nanoseconds(end - start), self.output_scale))

    def time(self, func: Callable[[], Any]) -> Any:
        """Call ``func``, record how long it took and return its result."""
        with self.start():
            return func()


@dataclass(frozen=True)
class StopWatchVec:
    """Stopwatches partitioned by label values."""

    summary_vec: SummaryVec
    output_scale: Duration

    def with_label_values(self, *values: str) -> StopWatch:
        return StopWatch(self.summary_vec.with_label_values(*values), self.output_scale)

    def get_metric_with(self, labels: Mapping[str, str]) -> StopWatch:
        return StopWatch(self.summary_vec.get_metric_with(labels), self.output_scale)


def sanitize_metric_name(name: str) -> str:
    """Keep only characters a metric name allows; dashes become underscores."""
    out = []
    for index, ch in enumerate(name):
        if ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch in "_:" or ("0" <= ch <= "9" and index > 0):
            out.append(ch)
        elif ch == "-":
            out.append("_")
    return "".join(out)


def duration_to_string(duration: Duration) -> str:
    """Return the unit suffix matching the scale of a duration."""
    ns = _to_nanoseconds(duration)
    if ns >= _NS_PER_HOUR:
        return "h"
    if ns >= _NS_PER_MIN:
        return "m"
    if ns >= _NS_PER_S:
        return "s"
    if ns >= _NS_PER_MS:
        return "ms"
    if ns >= _NS_PER_US:
        return "us"
    return "ns"


def _with_suffix(name: str, suffix: str) -> str:
    return name if name.endswith(suffix) else name + suffix


class Scope:
    """A metric name prefix; metrics created through it are registered under it."""

    def __init__(self, name: str, registry: Optional[Registry] = None) -> None:
        if not name:
            raise ValueError("base scope for a metric cannot be an empty string")
        self._scope = sanitize_metric_name(_with_suffix(name, _SCOPE_DELIMITER))
        self.registry = default_registry if registry is None else registry

    def __repr__(self) -> str:
        return f"Scope({self._scope!r})"

    def current_scope(self) -> str:
        return self._scope

    def new_scoped_metric_name(self, name: str) -> str:
        if not name:
            raise ValueError("metric name cannot be an empty string")
        return sanitize_metric_name(self._scope + name)

    def new_sub_scope(self, name: str) -> "Scope":
        if not name:
            raise ValueError("scope name cannot be an empty string")
        return Scope(self._scope + _with_suffix(name, _SCOPE_DELIMITER), self.registry)

    def new_gauge(self, name: str, description: str) -> Gauge:
        return self.registry.register(Gauge(self.new_scoped_metric_name(name), description))

    def new_gauge_vec(self, name: str, description: str, *label_names: str) -> GaugeVec:
        return self.registry.register(GaugeVec(self.new_scoped_metric_name(name), description, label_names))

    def new_summary(self, name: str, description: str) -> Summary:
        return self.new_summary_with_options(name, description, SummaryOptions())

    def new_summary_with_options(self, name: str, description: str, options: SummaryOptions) -> Summary:
        return self.registry.register(
            Summary(self.new_scoped_metric_name(name), description, options.objectives)
        )

    def new_summary_vec(self, name: str, description: str, *label_names: str) -> SummaryVec:
        return self.registry.register(
            SummaryVec(self.new_scoped_metric_name(name), description, label_names, DEFAULT_OBJECTIVES)
        )

    def new_histogram(self, name: str, description: str) -> Histogram:
        return self.registry.register(
            Histogram(self.new_scoped_metric_name(name), description, DEFAULT_BUCKETS)
        )

    def new_histogram_vec(self, name: str, description: str, *label_names: str) -> HistogramVec:
        return self.registry.register(
            HistogramVec(self.new_scoped_metric_name(name), description, label_names, DEFAULT_BUCKETS)
        )

    def new_counter(self, name: str, description: str) -> Counter:
        return self.registry.register(Counter(self.new_scoped_metric_name(name), description))

    def new_counter_vec(self, name: str, description: str, *label_names: str) -> CounterVec:
        return self.registry.register(CounterVec(self.new_scoped_metric_name(name), description, label_names))

    def new_stop_watch(self, name: str, description: str, scale: Duration) -> StopWatch:
        """Create a stopwatch whose metric name is suffixed with the scale's unit."""
        name = _with_suffix(name, _METRIC_DELIMITER) + duration_to_string(scale)
        return StopWatch(self.new_summary(name, description), scale)

    def new_stop_watch_vec(
        self, name: str, description: str, scale: Duration, *label_names: str
    ) -> StopWatchVec:
        name = _with_suffix(name, _METRIC_DELIMITER) + duration_to_string(scale)
        return StopWatchVec(self.new_summary_vec(name, description, *label_names), scale)


def new_test_scope() -> Scope:
    """Return a randomly named scope, for use in tests."""
    suffix = "".join(random.choice(_RANDOM_CHARSET) for _ in range(6))
    return Scope("test" + suffix)