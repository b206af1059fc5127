"""In-process metrics: counters, gauges, summaries, histograms and a registry."""

from __future__ import annotations

import bisect
import json
import math
import re
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

DEFAULT_BUCKETS: Tuple[float, ...] = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10)
DEFAULT_MAX_AGE = 600.0

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class DuplicateMetricError(ValueError):
    """Raised when a metric with the same name is already registered."""


class LabelError(ValueError):
    """Raised when label names or label values do not match a metric vector."""


@dataclass(frozen=True)
class Sample:
    """One exposed value of a metric."""

    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _escape_help(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n")


def _describe(name: str, help_text: str, label_names: Sequence[str]) -> str:
    return (
        f"Desc{{fqName: {json.dumps(name, ensure_ascii=False)}, "
        f"help: {json.dumps(help_text, ensure_ascii=False)}, constLabels: {{}}, "
        f"variableLabels: [{' '.join(label_names)}]}}"
    )


def _format_sample(sample: Sample) -> str:
    if sample.labels:
        pairs = ",".join(f'{k}="{_escape_label(v)}"' for k, v in sample.labels.items())
        return f"{sample.name}{{{pairs}}} {_format_float(sample.value)}"
    return f"{sample.name} {_format_float(sample.value)}"


def _expose(name: str, help_text: str, type_name: str, samples: Iterable[Sample]) -> str:
    lines = [f"# HELP {name} {_escape_help(help_text)}", f"# TYPE {name} {type_name}"]
    lines.extend(_format_sample(sample) for sample in samples)
    return "\n".join(lines) + "\n"


def _check_metric_name(name: str) -> None:
    if not _METRIC_NAME_RE.match(name):
        raise ValueError(f"{name!r} is not a valid metric name")


class Metric(ABC):
    """A named metric that can describe itself and report its samples."""

    type_name = "untyped"

    def __init__(self, name: str, help_text: str) -> None:
        _check_metric_name(name)
        self.name = name
        self.help_text = help_text
        self._lock = threading.Lock()

    @property
    def label_names(self) -> Tuple[str, ...]:
        return ()

    def describe(self) -> str:
        """Return a description of the metric's name, help and labels."""
        return _describe(self.name, self.help_text, self.label_names)

    def collect(self) -> List[Sample]:
        """Return the current samples of the metric."""
        with self._lock:
            return list(self._samples())

    def expose(self) -> str:
        """Return the metric in the text exposition format."""
        return _expose(self.name, self.help_text, self.type_name, self.collect())

    @abstractmethod
    def _samples(self) -> Iterable[Sample]:
        """Produce samples; called with the lock held."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Counter(Metric):
    """A cumulative value that only ever increases."""

    type_name = "counter"

    def __init__(self, name: str, help_text: str) -> None:
        super().__init__(name, help_text)
        self._value = 0.0

    def inc(self) -> None:
        self.add(1.0)

    def add(self, value: float) -> None:
        if value < 0:
            raise ValueError("counter cannot decrease in value")
        with self._lock:
            self._value += value

    def _samples(self) -> Iterable[Sample]:
        return [Sample(self.name, {}, self._value)]


class Gauge(Metric):
    """A value that can go up and down."""

    type_name = "gauge"

    def __init__(self, name: str, help_text: str) -> None:
        super().__init__(name, help_text)
        self._value = 0.0

    def inc(self) -> None:
        self.add(1.0)

    def dec(self) -> None:
        self.add(-1.0)

    def add(self, value: float) -> None:
        with self._lock:
            self._value += value

    def sub(self, value: float) -> None:
        self.add(-value)

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def set_to_current_time(self) -> None:
        self.set(time.time())

    def _samples(self) -> Iterable[Sample]:
        return [Sample(self.name, {}, self._value)]


class Summary(Metric):
    """Tracks observations and reports quantiles over a sliding time window."""

    type_name = "summary"
    max_age = DEFAULT_MAX_AGE

    def __init__(
        self,
        name: str,
        help_text: str,
        objectives: Optional[Mapping[float, float]] = None,
    ) -> None:
        super().__init__(name, help_text)
        objectives = dict(objectives or {})
        for quantile, error in objectives.items():
            if not 0 <= quantile <= 1:
                raise ValueError(f"quantile {quantile} must be between 0 and 1")
            if error < 0:
                raise ValueError(f"allowed error {error} must not be negative")
        self.objectives: Dict[float, float] = dict(sorted(objectives.items()))
        self._window: Deque[Tuple[float, float]] = deque()
        self._sum = 0.0
        self._count = 0

    def observe(self, value: float) -> None:
        with self._lock:
            self._window.append((time.monotonic(), float(value)))
            self._sum += value
            self._count += 1

    def _quantile(self, ordered: List[float], quantile: float) -> float:
        if not ordered:
            return math.nan
        rank = min(max(math.ceil(quantile * len(ordered)), 1), len(ordered))
        return ordered[rank - 1]

    def _samples(self) -> Iterable[Sample]:
        cutoff = time.monotonic() - self.max_age
        while self._window and self._window[0][0] < cutoff:
            self._window.popleft()
        ordered = sorted(value for _, value in self._window)
        samples = [
            Sample(self.name, {"quantile": _format_float(q)}, self._quantile(ordered, q))
            for q in self.objectives
        ]
        samples.append(Sample(f"{self.name}_sum", {}, self._sum))
        samples.append(Sample(f"{self.name}_count", {}, float(self._count)))
        return samples


class Histogram(Metric):
    """Counts observations into cumulative buckets."""

    type_name = "histogram"

    def __init__(self, name: str, help_text: str, buckets: Optional[Sequence[float]] = None) -> None:
        super().__init__(name, help_text)
        bounds = [float(b) for b in (DEFAULT_BUCKETS if buckets is None else buckets)]
        if bounds and math.isinf(bounds[-1]) and bounds[-1] > 0:
            bounds.pop()
        if any(a >= b for a, b in zip(bounds, bounds[1:])):
            raise ValueError("histogram buckets must be in strictly increasing order")
        self.buckets: Tuple[float, ...] = tuple(bounds)
        self._counts = [0] * (len(bounds) + 1)
        self._sum = 0.0
        self._count = 0

    def observe(self, value: float) -> None:
        index = bisect.bisect_left(self.buckets, value)
        with self._lock:
            self._counts[index] += 1
            self._sum += value
            self._count += 1

    def _samples(self) -> Iterable[Sample]:
        samples = []
        running = 0
        for bound, count in zip(self.buckets + (math.inf,), self._counts):
            running += count
            samples.append(Sample(f"{self.name}_bucket", {"le": _format_float(bound)}, float(running)))
        samples.append(Sample(f"{self.name}_sum", {}, self._sum))
        samples.append(Sample(f"{self.name}_count", {}, float(self._count)))
        return samples


class MetricVec(Metric):
    """A family of metrics of one kind, told apart by label values."""

    _reserved_labels: Tuple[str, ...] = ()

    def __init__(
        self,
        name: str,
        help_text: str,
        label_names: Sequence[str],
        factory: Callable[[str, str], Metric],
    ) -> None:
        super().__init__(name, help_text)
        label_names = tuple(label_names)
        for label in label_names:
            if not _LABEL_NAME_RE.match(label) or label.startswith("__"):
                raise LabelError(f"{label!r} is not a valid label name")
            if label in self._reserved_labels:
                raise LabelError(f"{label!r} is a reserved label name")
        if len(set(label_names)) != len(label_names):
            raise LabelError(f"duplicate label names in {list(label_names)}")
        self._label_names = label_names
        self._factory = factory
        self._children: Dict[Tuple[str, ...], Metric] = {}
        self.type_name = getattr(factory, "type_name", self.type_name)

    @property
    def label_names(self) -> Tuple[str, ...]:
        return self._label_names

    def with_label_values(self, *values: str) -> Metric:
        """Return the metric for these label values, creating it if needed."""
        if len(values) != len(self._label_names):
            raise LabelError(
                f"inconsistent label cardinality: expected {len(self._label_names)} "
                f"label values but got {len(values)} in {list(values)}"
            )
        for value in values:
            if not isinstance(value, str):
                raise LabelError(f"label value {value!r} is not a string")
        with self._lock:
            child = self._children.get(values)
            if child is None:
                child = self._factory(self.name, self.help_text)
                self._children[values] = child
            return child

    def get_metric_with(self, labels: Mapping[str, str]) -> Metric:
        """Return the metric for a mapping of label names to values."""
        if set(labels) != set(self._label_names):
            raise LabelError(
                f"label names {sorted(labels)} do not match {sorted(self._label_names)}"
            )
        return self.with_label_values(*(labels[name] for name in self._label_names))

    def collect(self) -> List[Sample]:
        with self._lock:
            children = sorted(self._children.items())
        order = sorted(range(len(self._label_names)), key=lambda i: self._label_names[i])
        samples = []
        for values, child in children:
            base = {self._label_names[i]: values[i] for i in order}
            for sample in child.collect():
                samples.append(Sample(sample.name, {**base, **sample.labels}, sample.value))
        return samples

    def _samples(self) -> Iterable[Sample]:
        return []


class CounterVec(MetricVec):
    """Counters partitioned by label values."""

    def __init__(self, name: str, help_text: str, label_names: Sequence[str]) -> None:
        super().__init__(name, help_text, label_names, Counter)


class GaugeVec(MetricVec):
    """Gauges partitioned by label values."""

    def __init__(self, name: str, help_text: str, label_names: Sequence[str]) -> None:
        super().__init__(name, help_text, label_names, Gauge)


class SummaryVec(MetricVec):
    """Summaries partitioned by label values."""

    _reserved_labels = ("quantile",)

    def __init__(
        self,
        name: str,
        help_text: str,
        label_names: Sequence[str],
        objectives: Optional[Mapping[float, float]] = None,
    ) -> None:
        objectives = dict(objectives or {})
        super().__init__(
            name, help_text, label_names, lambda n, h: Summary(n, h, objectives)
        )
        self.type_name = Summary.type_name
        self.objectives = objectives


class HistogramVec(MetricVec):
    """Histograms partitioned by label values."""

    _reserved_labels = ("le",)

    def __init__(
        self,
        name: str,
        help_text: str,
        label_names: Sequence[str],
        buckets: Optional[Sequence[float]] = None,
    ) -> None:
        super().__init__(
            name, help_text, label_names, lambda n, h: Histogram(n, h, buckets)
        )
        self.type_name = Histogram.type_name


class Registry:
    """Holds metrics by name and exposes them together."""

    def __init__(self) -> None:
        self._metrics: Dict[str, Metric] = {}
        self._lock = threading.Lock()

    def register(self, metric: Metric) -> Metric:
        """Add a metric; raise DuplicateMetricError if its name is taken."""
        with self._lock:
            if metric.name in self._metrics:
                raise DuplicateMetricError(
                    f"duplicate metrics collector registration attempted: {metric.name}"
                )
            self._metrics[metric.name] = metric
        return metric

    def unregister(self, metric: Metric) -> bool:
        """Remove a metric; return whether it was registered."""
        with self._lock:
            if self._metrics.get(metric.name) is metric:
                del self._metrics[metric.name]
                return True
            return False

    def __contains__(self, name: object) -> bool:
        return name in self._metrics

    def _sorted(self) -> List[Metric]:
        with self._lock:
            return [self._metrics[name] for name in sorted(self._metrics)]

    def collect(self) -> List[Sample]:
        return [sample for metric in self._sorted() for sample in metric.collect()]

    def expose(self) -> str:
        return "".join(metric.expose() for metric in self._sorted())


default_registry = Registry()