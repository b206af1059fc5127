"""A set of objects keyed by their identifiers."""

from __future__ import annotations

from typing import Dict, Iterator, List, Protocol, runtime_checkable


@runtime_checkable
class SetObject(Protocol):
    """An object that can be stored in a GenericSet."""

    def get_id(self) -> str:
        """Return the identifier the set keys the object by."""
        ...


class GenericSet:
    """A set of objects where membership is decided by ``get_id()``."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, *items: SetObject) -> None:
        self._items: Dict[str, SetObject] = {}
        self.insert(*items)

    def insert(self, *items: SetObject) -> None:
        for item in items:
            self._items[item.get_id()] = item

    def delete(self, *items: SetObject) -> None:
        for item in items:
            self._items.pop(item.get_id(), None)

    def has(self, item: SetObject) -> bool:
        return item.get_id() in self._items

    def has_all(self, *items: SetObject) -> bool:
        return all(self.has(item) for item in items)

    def has_any(self, *items: SetObject) -> bool:
        return any(self.has(item) for item in items)

    def difference(self, other: "GenericSet") -> "GenericSet":
        """Return the objects of this set that are not in ``other``."""
        return GenericSet(*(item for item in self if not other.has(item)))

    def union(self, other: "GenericSet") -> "GenericSet":
        return GenericSet(*self, *other)

    def intersection(self, other: "GenericSet") -> "GenericSet":
        walk, probe = (self, other) if len(self) < len(other) else (other, self)
        return GenericSet(*(item for item in walk if probe.has(item)))

    def is_superset(self, other: "GenericSet") -> bool:
        return all(self.has(item) for item in other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenericSet):
            return NotImplemented
        return len(self) == len(other) and self.is_superset(other)

    def sorted_keys(self) -> List[str]:
        return sorted(self._items)

    def sorted_items(self) -> List[SetObject]:
        return [self._items[key] for key in self.sorted_keys()]

    def unsorted_keys(self) -> List[str]:
        return list(self._items)

    def unsorted_items(self) -> List[SetObject]:
        return list(self._items.values())

    def pop_any(self) -> SetObject:
        """Remove and return some object; raise KeyError if the set is empty."""
        if not self._items:
            raise KeyError("pop from an empty set")
        key = next(iter(self._items))
        return self._items.pop(key)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return isinstance(item, SetObject) and self.has(item)

    def __iter__(self) -> Iterator[SetObject]:
        return iter(list(self._items.values()))

    def __repr__(self) -> str:
        return f"GenericSet({', '.join(map(repr, self.sorted_items()))})"