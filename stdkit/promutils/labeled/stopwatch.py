"""A stopwatch labeled with values taken from a context."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Tuple, Union

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
    MultiTimer,
)
from stdkit.promutils.scope import Duration, Scope, StopWatchVec, sanitize_metric_name
from stdkit.promutils.scope import StopWatch as _PlainStopWatch
from stdkit.promutils.scope import Timer as _PlainTimer

Context = Optional[Mapping[str, Any]]


class StopWatch:
    """Times operations into a summary whose data points are labeled from the context.

    Percentiles are computed per label combination. With the unlabeled option,
    a second stopwatch without labels records every observation as well, so
    that percentiles across all label values are available too.
    """

    def __init__(
        self,
        name: str,
        description: str,
        scale: Duration,
        scope: Scope,
        *options: MetricOption,
    ) -> None:
        keys = metric_keys()
        if not keys:
            raise MetricKeysNeverSetError()

        name = sanitize_metric_name(name)
        self.unlabeled: Optional[_PlainStopWatch] = None
        self.vec: Optional[StopWatchVec] = None
        self._additional_labels: Tuple[str, ...] = ()
        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_stop_watch(
                    get_unlabeled_metric_name(name), description, scale
                )
            elif isinstance(option, AdditionalLabelsOption):
                self.vec = scope.new_stop_watch_vec(
                    name, description, scale, *keys, *option.labels
                )
                self._additional_labels = option.labels
        if self.vec is None:
            self.vec = scope.new_stop_watch_vec(name, description, scale, *keys)

    def _labeled(self, ctx: Context) -> _PlainStopWatch:
        return self.vec.get_metric_with(label_values(ctx, self._additional_labels))

    def start(self, ctx: Context) -> Union[_PlainTimer, MultiTimer]:
        """Start a timer; stopping it records the elapsed time."""
        timer = self._labeled(ctx).start()
        if self.unlabeled is None:
            return timer
        return MultiTimer([timer, self.unlabeled.start()])

    def observe(self, ctx: Context, start: Any, end: Any) -> None:
        """Record the duration between two points in time."""
        self._labeled(ctx).observe(start, end)
        if self.unlabeled is not None:
            self.unlabeled.observe(start, end)

    def time(self, ctx: Context, func: Callable[[], Any]) -> Any:
        """Call ``func``, record how long it took and return its result."""
        timer = self.start(ctx)
        try:
            return func()
        finally:
            timer.stop()