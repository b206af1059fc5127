"""Random selection from a list of items weighted between 0 and 1."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple, Union

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entry:
    """An item to select from and its weight, between 0 and 1."""

    item: Any
    weight: float = 0.0


def _validate(entries: List[Entry]) -> None:
    if not entries:
        raise ValueError("entries is empty")
    for index, entry in enumerate(entries):
        if entry.item is None:
            raise ValueError(f"invalid entry: nil, index {index}")
        if entry.weight < 0 or entry.weight > 1:
            raise ValueError(f"invalid weight {entry.weight:f}, index {index}")


class WeightedRandomList:
    """Selects items at random, taking their weights into account.

    Items are ordered with ``<``. Entries with zero weight are never selected,
    unless every weight is zero, in which case all items are equally likely.
    Selection is deterministic for a given seed.
    """

    def __init__(self, entries: Iterable[Entry]) -> None:
        entries = list(entries)
        _validate(entries)
        ordered = sorted(entries, key=lambda e: e.item)
        total_weight = sum(e.weight for e in ordered)

        self._entries: List[Tuple[Any, float]] = []
        current_total = 0.0
        for entry in ordered:
            if total_weight == 0:
                current_total += 1.0 / len(ordered)
            elif entry.weight == 0:
                _log.debug("ignoring entry due to empty weight %r", entry)
                continue
            current_total += entry.weight
            self._entries.append((entry.item, current_total))
        self._total_weight = current_total

    def _pick(self, generator: random.Random) -> Any:
        target = generator.random() * self._total_weight
        for item, running_total in self._entries:
            if running_total >= target and running_total > 0:
                return item
        return self._entries[-1][0]

    def get(self) -> Any:
        """Return a random item according to the weights."""
        return self._pick(random.Random())

    def get_with_seed(self, seed: Union[int, random.Random]) -> Any:
        """Return an item chosen with the given seed or generator; the same seed gives the same item."""
        generator = seed if isinstance(seed, random.Random) else random.Random(seed)
        return self._pick(generator)

    def items(self) -> List[Any]:
        """Return the items eligible for selection, in order."""
        return [item for item, _ in self._entries]

    def __len__(self) -> int:
        return len(self._entries)