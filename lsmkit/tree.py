"""Ordered key-value index with B+ tree semantics and storage references."""

from __future__ import annotations

from bisect import bisect_left, bisect_right, insort
from typing import Any, Optional

from lsmkit.index_types import (
    IndexKeyValue,
    KeyNotFoundError,
    StorageReference,
    TreeOps,
)

_MIN_ORDER = 3


class BPlusTree(TreeOps):
    """An ordered index supporting point lookups and range queries.

    Keys are kept sorted; each key maps to an optional in-memory value and
    an optional reference to where the value is stored on disk.
    """

    def __init__(self, order: int) -> None:
        if order < _MIN_ORDER:
            raise ValueError("B+ tree order must be at least 3")
        self._order = order
        self._keys: list[Any] = []
        self._storage: dict[Any, tuple[Any, Optional[StorageReference]]] = {}

    @property
    def order(self) -> int:
        """Maximum number of children per node."""
        return self._order

    def find(self, key: Any) -> Optional[IndexKeyValue]:
        """Return the entry for ``key``, or None if it is absent."""
        try:
            value, storage_ref = self._storage[key]
        except KeyError:
            return None
        return IndexKeyValue(key, value, storage_ref)

    def insert(
        self, key: Any, value: Any, storage_ref: Optional[StorageReference] = None
    ) -> None:
        """Insert ``key``, replacing its value and storage reference if present."""
        if key not in self._storage:
            insort(self._keys, key)
        self._storage[key] = (value, storage_ref)

    def delete(self, key: Any) -> None:
        """Remove ``key``; raise KeyNotFoundError if it is absent."""
        if key not in self._storage:
            raise KeyNotFoundError(key)
        del self._storage[key]
        del self._keys[bisect_left(self._keys, key)]

    def range(
        self,
        start: Any = None,
        end: Any = None,
        start_inclusive: bool = True,
        end_inclusive: bool = False,
    ) -> list[IndexKeyValue]:
        """Entries with keys between ``start`` and ``end``, in key order.

        A bound of None is unbounded.
        """
        if start is None:
            lo = 0
        elif start_inclusive:
            lo = bisect_left(self._keys, start)
        else:
            lo = bisect_right(self._keys, start)

        if end is None:
            hi = len(self._keys)
        elif end_inclusive:
            hi = bisect_right(self._keys, end)
        else:
            hi = bisect_left(self._keys, end)

        result = []
        for key in self._keys[lo:hi]:
            value, storage_ref = self._storage[key]
            result.append(IndexKeyValue(key, value, storage_ref))
        return result

    def __len__(self) -> int:
        return len(self._keys)

    def is_empty(self) -> bool:
        """True if the tree holds no keys."""
        return not self._keys

    def clear(self) -> None:
        """Remove every entry."""
        self._keys.clear()
        self._storage.clear()

    def __contains__(self, key: Any) -> bool:
        return key in self._storage

    def __repr__(self) -> str:
        return f"BPlusTree(order={self._order}, len={len(self._keys)})"