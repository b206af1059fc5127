"""A summary labeled with values taken from a context."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

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
from stdkit.promutils.metrics import Summary as _PlainSummary
from stdkit.promutils.metrics import SummaryVec
from stdkit.promutils.scope import Scope

Context = Optional[Mapping[str, Any]]


class Summary:
    """A summary whose observations are labeled from the context's values.

    With the unlabeled option, a second summary named with an ``_unlabeled``
    suffix receives every observation too.
    """

    def __init__(self, name: str, description: str, scope: Scope, *options: MetricOption) -> None:
        keys = metric_keys()
        if not keys:
            raise MetricKeysNeverSetError()

        self.unlabeled: Optional[_PlainSummary] = None
        self.vec: Optional[SummaryVec] = None
        self._additional_labels: Tuple[str, ...] = ()
        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_summary(get_unlabeled_metric_name(name), description)
            elif isinstance(option, AdditionalLabelsOption):
                self.vec = scope.new_summary_vec(name, description, *keys, *option.labels)
                self._additional_labels = option.labels
        if self.vec is None:
            self.vec = scope.new_summary_vec(name, description, *keys)

    def observe(self, ctx: Context, value: float) -> None:
        """Add a single observation."""
        self.vec.get_metric_with(label_values(ctx, self._additional_labels)).observe(value)
        if self.unlabeled is not None:
            self.unlabeled.observe(value)