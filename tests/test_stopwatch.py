from datetime import datetime, timedelta

import pytest

from stdkit.promutils.labeled.keys import (
    MetricKeysNeverSetError,
    set_metric_keys,
    unset_metric_keys,
)
from stdkit.promutils.labeled.options import (
    EMIT_UNLABELED_METRIC,
    AdditionalLabelsOption,
    MultiTimer,
)
from stdkit.promutils.labeled.stopwatch import StopWatch
from stdkit.promutils.metrics import DuplicateMetricError, Registry
from stdkit.promutils.scope import Scope


@pytest.fixture(autouse=True)
def keys():
    unset_metric_keys()
    set_metric_keys("project", "domain", "wf", "task")
    yield
    unset_metric_keys()


@pytest.fixture
def scope():
    return Scope("testsw", registry=Registry())


def _labels(project="", domain="", wf="", task=""):
    return {"domain": domain, "project": project, "task": task, "wf": wf}


def _value(metric, name, labels):
    matches = [s.value for s in metric.collect() if s.name == name and s.labels == labels]
    assert len(matches) == 1
    return matches[0]


def test_always_labeled(scope):
    sw = StopWatch("lbl_counter", "help", timedelta(seconds=1), scope)
    vec = sw.vec.summary_vec
    assert vec.name == "testsw:lbl_counter_s"

    sw.start({}).stop()
    assert _value(vec, "testsw:lbl_counter_s_count", _labels()) == 1

    ctx = {"project": "project", "domain": "domain"}
    sw.start(ctx).stop()
    assert _value(vec, "testsw:lbl_counter_s_count", _labels("project", "domain")) == 1

    ctx = {**ctx, "task": "task"}
    sw.start(ctx).stop()
    labels = _labels("project", "domain", task="task")
    assert _value(vec, "testsw:lbl_counter_s_count", labels) == 1

    now = datetime.now()
    sw.observe(ctx, now, now + timedelta(seconds=1))
    assert _value(vec, "testsw:lbl_counter_s_count", labels) == 2
    assert _value(vec, "testsw:lbl_counter_s_sum", labels) == 1.0


def test_time_returns_result_and_records(scope):
    sw = StopWatch("timed", "help", timedelta(seconds=1), scope)
    assert sw.time({"project": "p"}, lambda: "done") == "done"
    assert _value(sw.vec.summary_vec, "testsw:timed_s_count", _labels("p")) == 1


def test_unlabeled(scope):
    sw = StopWatch("lbl_counter_2", "help", timedelta(seconds=1), scope, EMIT_UNLABELED_METRIC)
    assert "testsw:lbl_counter_2_unlabeled_s" in scope.registry
    timer = sw.start({})
    assert isinstance(timer, MultiTimer)
    assert len(timer.timers) == 2
    timer.stop()
    assert _value(sw.unlabeled.observer, "testsw:lbl_counter_2_unlabeled_s_count", {}) == 1
    assert _value(sw.vec.summary_vec, "testsw:lbl_counter_2_s_count", _labels()) == 1


def test_unlabeled_observe(scope):
    sw = StopWatch("obs", "help", timedelta(milliseconds=1), scope, EMIT_UNLABELED_METRIC)
    now = datetime.now()
    sw.observe({"domain": "d"}, now, now + timedelta(seconds=1))
    assert _value(sw.unlabeled.observer, "testsw:obs_unlabeled_ms_sum", {}) == 1000.0
    assert _value(sw.vec.summary_vec, "testsw:obs_ms_sum", _labels(domain="d")) == 1000.0


def test_additional_labels(scope):
    sw = StopWatch(
        "extra", "help", timedelta(seconds=1), scope, AdditionalLabelsOption(labels=("method",))
    )
    sw.start({"method": "GET"}).stop()
    labels = {**_labels(), "method": "GET"}
    assert _value(sw.vec.summary_vec, "testsw:extra_s_count", labels) == 1


def test_name_is_sanitized(scope):
    sw = StopWatch("my-watch", "help", timedelta(seconds=1), scope)
    assert sw.vec.summary_vec.name == "testsw:my_watch_s"


def test_duplicate_name_raises(scope):
    StopWatch("dup", "help", timedelta(seconds=1), scope)
    with pytest.raises(DuplicateMetricError):
        StopWatch("dup", "help", timedelta(seconds=1), scope)


def test_requires_metric_keys(scope):
    unset_metric_keys()
    with pytest.raises(MetricKeysNeverSetError):
        StopWatch("never", "help", timedelta(seconds=1), scope)