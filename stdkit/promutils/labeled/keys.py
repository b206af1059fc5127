"""The process-wide keys whose context values label labeled metrics."""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


class MetricKeysAlreadySetError(RuntimeError):
    """Raised when metric keys are set again to different keys."""

    def __init__(self, message: str = "cannot set metric keys more than once") -> None:
        super().__init__(message)


class MetricKeysEmptyError(ValueError):
    """Raised when metric keys are set to an empty set."""

    def __init__(self, message: str = "cannot set metric keys to an empty set") -> None:
        super().__init__(message)


class MetricKeysNeverSetError(RuntimeError):
    """Raised when a labeled metric is created before metric keys are set."""

    def __init__(
        self, message: str = "must call set_metric_keys prior to using labeled package"
    ) -> None:
        super().__init__(message)


_lock = threading.Lock()
_keys: Tuple[str, ...] = ()
_is_set = False


def set_metric_keys(*keys: Any) -> None:
    """Set the keys to label metrics with; setting the same keys again is allowed."""
    global _keys, _is_set
    if not keys:
        raise MetricKeysEmptyError()
    names = tuple(str(key) for key in keys)
    with _lock:
        if not _is_set:
            _keys = names
            _is_set = True
            return
        if names != _keys:
            raise MetricKeysAlreadySetError()


def unset_metric_keys() -> None:
    """Forget the metric keys. Meant for tests."""
    global _keys, _is_set
    with _lock:
        _keys = ()
        _is_set = False


def metric_keys() -> Tuple[str, ...]:
    """Return the metric keys currently set."""
    return _keys


def get_unlabeled_metric_name(metric_name: str) -> str:
    return metric_name + "_unlabeled"


def label_values(
    ctx: Optional[Mapping[str, Any]], additional_labels: Iterable[str] = ()
) -> Dict[str, str]:
    """Map each metric key and additional label to its value in ``ctx``, or ""."""
    ctx = ctx or {}
    values: Dict[str, str] = {}
    for key in (*metric_keys(), *additional_labels):
        value = ctx.get(key)
        values[key] = "" if value is None else str(value)
    return values