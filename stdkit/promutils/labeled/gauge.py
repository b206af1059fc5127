"""A gauge labeled with values taken from a context."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from stdkit.promutils.labeled.keys import (
    MetricKeysNeverSetError,
    get_unlabeled_metric_name,
    label_values,
    metric_keys,
)
from stdkit.promutils.labeled.options import (
    AdditionalLabelsOption,
    EmitUnlabeledMetricOption,
    MetricOption,
)
from stdkit.promutils.metrics import Gauge as _PlainGauge
from stdkit.promutils.metrics import GaugeVec
from stdkit.promutils.scope import Scope, sanitize_metric_name

Context = Optional[Mapping[str, Any]]


class Gauge:
    """A gauge whose data points are labeled from the context's values.

    With the unlabeled option, a second gauge named with an ``_unlabeled``
    suffix receives every update too.
    """

    def __init__(self, name: str, description: str, scope: Scope, *options: MetricOption) -> None:
        keys = metric_keys()
        if not keys:
            raise MetricKeysNeverSetError()

        name = sanitize_metric_name(name)
        self.unlabeled: Optional[_PlainGauge] = None
        self.vec: Optional[GaugeVec] = None
        self._additional_labels: tuple = ()
        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_gauge(get_unlabeled_metric_name(name), description)
            elif isinstance(option, AdditionalLabelsOption):
                self.vec = scope.new_gauge_vec(name, description, *keys, *option.labels)
                self._additional_labels = option.labels
        if self.vec is None:
            self.vec = scope.new_gauge_vec(name, description, *keys)

    def _child(self, ctx: Context) -> _PlainGauge:
        return self.vec.get_metric_with(label_values(ctx, self._additional_labels))

    def inc(self, ctx: Context) -> None:
        self._child(ctx).inc()
        if self.unlabeled is not None:
            self.unlabeled.inc()

    def add(self, ctx: Context, value: float) -> None:
        self._child(ctx).add(value)
        if self.unlabeled is not None:
            self.unlabeled.add(value)

    def set(self, ctx: Context, value: float) -> None:
        self._child(ctx).set(value)
        if self.unlabeled is not None:
            self.unlabeled.set(value)

    def dec(self, ctx: Context) -> None:
        self._child(ctx).dec()
        if self.unlabeled is not None:
            self.unlabeled.dec()

    def sub(self, ctx: Context, value: float) -> None:
        self._child(ctx).sub(value)
        if self.unlabeled is not None:
            self.unlabeled.sub(value)

    def set_to_current_time(self, ctx: Context) -> None:
        """Set the gauge to the current Unix time; labels use the metric keys only."""
        self.vec.get_metric_with(label_values(ctx)).set_to_current_time()
        if self.unlabeled is not None:
            self.unlabeled.set_to_current_time()