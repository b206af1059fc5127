import pytest

from stdkit.promutils.labeled.keys import (
    MetricKeysAlreadySetError,
    MetricKeysEmptyError,
    get_unlabeled_metric_name,
    label_values,
    metric_keys,
    set_metric_keys,
    unset_metric_keys,
)

KEYS = ("project", "domain", "wf", "task", "lp")


@pytest.fixture(autouse=True)
def _reset_keys():
    unset_metric_keys()
    yield
    unset_metric_keys()


def test_set_metric_keys():
    set_metric_keys(*KEYS)
    assert metric_keys() == KEYS
    set_metric_keys(*KEYS)
    assert metric_keys() == KEYS
    with pytest.raises(MetricKeysAlreadySetError):
        set_metric_keys("domain")


def test_empty_keys_raise():
    with pytest.raises(MetricKeysEmptyError):
        set_metric_keys()


def test_unset_allows_new_keys():
    set_metric_keys("a")
    unset_metric_keys()
    assert metric_keys() == ()
    set_metric_keys("b")
    assert metric_keys() == ("b",)


def test_unlabeled_name():
    assert get_unlabeled_metric_name("x") == "x_unlabeled"


def test_label_values():
    set_metric_keys(*KEYS)
    values = label_values({"project": "flyte", "domain": "dev", "other": "y"}, ["bearing"])
    assert values == {
        "project": "flyte",
        "domain": "dev",
        "wf": "",
        "task": "",
        "lp": "",
        "bearing": "",
    }
    assert list(values) == [*KEYS, "bearing"]


def test_label_values_without_context():
    set_metric_keys("project")
    assert label_values(None) == {"project": ""}