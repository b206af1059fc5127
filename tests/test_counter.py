import pytest

from stdkit.promutils.labeled.counter import Counter
from stdkit.promutils.labeled.keys import (
    MetricKeysNeverSetError,
    set_metric_keys,
    unset_metric_keys,
)
from stdkit.promutils.labeled.options import EMIT_UNLABELED_METRIC, AdditionalLabelsOption
from stdkit.promutils.metrics import Registry
from stdkit.promutils.scope import Scope

KEYS = ("project", "domain", "wf", "task", "lp")


@pytest.fixture(autouse=True)
def _keys():
    unset_metric_keys()
    set_metric_keys(*KEYS)
    yield
    unset_metric_keys()


@pytest.fixture
def scope():
    return Scope("testcounter", Registry())


def _values(vec):
    return {tuple(sorted(s.labels.items())): s.value for s in vec.collect()}


def _labels(**kw):
    base = {k: "" for k in KEYS}
    base.update(kw)
    return tuple(sorted(base.items()))


def test_labeled_counter(scope):
    c = Counter("lbl_counter", "help", scope)
    ctx = {}
    c.inc(ctx)
    c.add(ctx, 1.0)

    ctx = {**ctx, "project": "project", "domain": "domain"}
    c.inc(ctx)
    c.add(ctx, 1.0)

    ctx = {**ctx, "task": "task"}
    c.inc(ctx)
    c.add(ctx, 1.0)

    ctx = {**ctx, "lp": "lp"}
    c.inc(ctx)
    c.add(ctx, 1.0)

    assert _values(c.vec) == {
        _labels(): 2.0,
        _labels(project="project", domain="domain"): 2.0,
        _labels(project="project", domain="domain", task="task"): 2.0,
        _labels(project="project", domain="domain", task="task", lp="lp"): 2.0,
    }
    assert c.vec.name == "testcounter:lbl_counter"


def test_unlabeled_counter(scope):
    c = Counter("lbl-counter", "help", scope, EMIT_UNLABELED_METRIC)
    c.inc({"project": "a"})
    c.add({"project": "b"}, 2.0)
    assert c.unlabeled.name == "testcounter:lbl_counter_unlabeled"
    assert c.unlabeled.collect()[0].value == 3.0


def test_additional_labels(scope):
    c = Counter("req", "help", scope, AdditionalLabelsOption(["method"]))
    c.inc({"method": "GET"})
    c.inc({"method": "GET"})
    c.inc({"method": "POST"})
    values = _values(c.vec)
    get_key = tuple(sorted({**dict(_labels()), "method": "GET"}.items()))
    post_key = tuple(sorted({**dict(_labels()), "method": "POST"}.items()))
    assert values == {get_key: 2.0, post_key: 1.0}


def test_negative_add_raises(scope):
    c = Counter("neg", "help", scope)
    with pytest.raises(ValueError):
        c.add({}, -1.0)


def test_never_set_raises(scope):
    unset_metric_keys()
    with pytest.raises(MetricKeysNeverSetError):
        Counter("x", "help", scope)