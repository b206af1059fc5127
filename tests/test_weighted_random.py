import random
from dataclasses import dataclass

import pytest

from stdkit.weighted_random import Entry, WeightedRandomList


@dataclass(frozen=True)
class Item:
    key: str
    val: int = 0

    def __lt__(self, other):
        if "sort" in self.key:
            return self.key < other.key
        return self.val < other.val


class FixedRandom(random.Random):
    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def test_string_ordering_and_weights():
    item1 = Item("sort_key1", 1)
    item2 = Item("sort_key2", 2)
    wr = WeightedRandomList([Entry(item1, 0.4), Entry(item2, 0.6)])
    assert wr.items() == [item1, item2]
    assert wr.get_with_seed(FixedRandom(0.1)) is item1
    assert wr.get_with_seed(FixedRandom(0.4)) is item1
    assert wr.get_with_seed(FixedRandom(0.9)) is item2


def test_int_ordering_and_weights():
    item1 = Item("key1", 4)
    item2 = Item("key2", 3)
    wr = WeightedRandomList([Entry(item1, 0.4), Entry(item2, 0.6)])
    assert wr.items() == [item2, item1]
    assert wr.get_with_seed(FixedRandom(0.5)) is item2
    assert wr.get_with_seed(FixedRandom(0.7)) is item1


def test_same_seed_gives_same_item():
    item1 = Item("sort_key1", 1)
    item2 = Item("sort_key2", 2)
    wr = WeightedRandomList([Entry(item1, 0.4), Entry(item2, 0.6)])
    first = wr.get_with_seed(10)
    assert all(wr.get_with_seed(10) == first for _ in range(10))
    assert {wr.get_with_seed(seed) for seed in range(200)} == {item1, item2}


def test_few_zero_weight_never_selects_zero_entry():
    item1 = Item("key1", 4)
    item2 = Item("key2", 3)
    wr = WeightedRandomList([Entry(item1, 0.4), Entry(item2)])
    assert wr.get_with_seed(20) == item1
    assert all(wr.get_with_seed(seed) == item1 for seed in range(100))
    assert len(wr) == 1


def test_all_zero_weights_are_equal():
    item1 = Item("sort_key1", 4)
    item2 = Item("sort_key2", 3)
    wr = WeightedRandomList([Entry(item1), Entry(item2)])
    assert wr.items() == [item1, item2]
    assert wr.get_with_seed(FixedRandom(0.3)) is item1
    assert wr.get_with_seed(FixedRandom(0.7)) is item2
    assert {wr.get_with_seed(seed) for seed in range(200)} == {item1, item2}


def test_list_drops_zero_weight():
    item1 = Item("key1", 4)
    item2 = Item("key2", 3)
    wr = WeightedRandomList([Entry(item1, 0.3), Entry(item2)])
    assert wr.items() == [item1]


def test_list_all_zero_weights():
    item1 = Item("key1", 4)
    item2 = Item("key2", 3)
    wr = WeightedRandomList([Entry(item1), Entry(item2)])
    assert wr.items() == [item2, item1]


def test_len():
    wr = WeightedRandomList([Entry(Item("key1")), Entry(Item("key2"))])
    assert len(wr) == 2


def test_get_returns_eligible_item():
    item1 = Item("key1", 4)
    item2 = Item("key2", 3)
    wr = WeightedRandomList([Entry(item1, 0.5), Entry(item2)])
    assert all(wr.get() == item1 for _ in range(20))


def test_invalid_negative_weight():
    entries = [Entry(Item("key1", 4), -3.0), Entry(Item("key2", 3))]
    with pytest.raises(ValueError) as info:
        WeightedRandomList(entries)
    assert str(info.value) == "invalid weight -3.000000, index 0"


def test_invalid_weight_above_one():
    entries = [Entry(Item("key1", 4), 0.2), Entry(Item("key2", 3), 1.5)]
    with pytest.raises(ValueError) as info:
        WeightedRandomList(entries)
    assert str(info.value) == "invalid weight 1.500000, index 1"


def test_invalid_nil_entry():
    entries = [Entry(None), Entry(Item("key2", 3))]
    with pytest.raises(ValueError) as info:
        WeightedRandomList(entries)
    assert str(info.value) == "invalid entry: nil, index 0"


def test_empty_entries():
    with pytest.raises(ValueError) as info:
        WeightedRandomList([])
    assert str(info.value) == "entries is empty"