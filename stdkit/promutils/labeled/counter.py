"""A counter labeled with values taken from a context."""

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
from stdkit.promutils.metrics import Counter as _PlainCounter
from stdkit.promutils.metrics import CounterVec
from stdkit.promutils.scope import Scope, sanitize_metric_name


class Counter:
    """A counter whose data points are labeled from the context's values.

    Metric keys must be set with ``set_metric_keys`` first.
    """

    def __init__(self, name: str, description: str, scope: Scope, *options: MetricOption) -> None:
        keys = metric_keys()
        if not keys:
            raise MetricKeysNeverSetError()

        name = sanitize_metric_name(name)
        self.unlabeled: Optional[_PlainCounter] = None
        self.vec: Optional[CounterVec] = None
        self._additional_labels: tuple = ()
        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_counter(get_unlabeled_metric_name(name), description)
            elif isinstance(option, AdditionalLabelsOption):
                self.vec = scope.new_counter_vec(name, description, *keys, *option.labels)
                self._additional_labels = option.labels
        if self.vec is None:
            self.vec = scope.new_counter_vec(name, description, *keys)

    def _child(self, ctx: Optional[Mapping[str, Any]]) -> _PlainCounter:
        return self.vec.get_metric_with(label_values(ctx, self._additional_labels))

    def inc(self, ctx: Optional[Mapping[str, Any]]) -> None:
        self._child(ctx).inc()
        if self.unlabeled is not None:
            self.unlabeled.inc()

    def add(self, ctx: Optional[Mapping[str, Any]], value: float) -> None:
        """Add a non-negative value; raise ValueError if it is negative."""
        self._child(ctx).add(value)
        if self.unlabeled is not None:
            self.unlabeled.add(value)