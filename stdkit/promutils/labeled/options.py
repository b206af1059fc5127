"""Options for labeled metrics, and a timer that stops several timers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple


class MetricOption:
    """Base of the options that customise an emitted labeled metric."""


@dataclass(frozen=True)
class EmitUnlabeledMetricOption(MetricOption):
    """Also emit an unlabeled metric alongside the labeled one."""


EMIT_UNLABELED_METRIC = EmitUnlabeledMetricOption()


@dataclass(frozen=True)
class AdditionalLabelsOption(MetricOption):
    """Extra labels, looked up in the context, for this metric only."""

    labels: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))


class Timer(Protocol):
    """Anything that can be stopped to record an observation."""

    def stop(self) -> float:
        """Stop the timer and report the observation."""
        ...


class MultiTimer:
    """Stops several timers together."""

    def __init__(self, timers: Iterable[Timer]) -> None:
        self.timers = list(timers)

    def stop(self) -> float:
        """Stop every timer and return the last one's observation."""
        result = 0.0
        for timer in self.timers:
            result = timer.stop()
        return result

    def __enter__(self) -> "MultiTimer":
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()