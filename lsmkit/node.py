"""A single node of a B+ tree: sorted entries, splitting and leaf linking."""

from __future__ import annotations

import enum
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Any, Optional

from lsmkit.index_types import IndexKeyValue, InvalidOperationError, StorageReference


class NodeType(enum.Enum):
    """Whether a node holds data (leaf) or routes to children (internal)."""

    LEAF = "leaf"
    INTERNAL = "internal"


@dataclass
class IndexEntry:
    """A key-value pair, with a child pointer in internal nodes."""

    kv: IndexKeyValue
    child: Optional["BPTreeNode"] = None


def _entry_key(entry: IndexEntry) -> Any:
    return entry.kv.key


class BPTreeNode:
    """A B+ tree node whose entries are kept sorted by key."""

    def __init__(self, node_type: NodeType, max_entries: int) -> None:
        self.node_type = node_type
        self.max_entries = max_entries
        self.entries: list[IndexEntry] = []
        self.next_leaf: Optional[BPTreeNode] = None

    def find_position(self, key: Any) -> int:
        """Index where ``key`` is, or where it would be inserted."""
        return bisect_left(self.entries, key, key=_entry_key)

    def _holds_key_at(self, pos: int, key: Any) -> bool:
        return pos < len(self.entries) and self.entries[pos].kv.key == key

    def insert(
        self,
        key: Any,
        value: Any = None,
        storage_ref: Optional[StorageReference] = None,
    ) -> Optional[tuple[Any, "BPTreeNode"]]:
        """Insert or update ``key``.

        Returns ``(separator_key, right_node)`` if the node overflowed and
        was split, otherwise None.
        """
        pos = self.find_position(key)
        if self._holds_key_at(pos, key):
            kv = self.entries[pos].kv
            kv.value = value
            kv.storage_ref = storage_ref
            return None

        self.entries.insert(pos, IndexEntry(IndexKeyValue(key, value, storage_ref)))
        if len(self.entries) > self.max_entries:
            return self.split()
        return None

    def split(self) -> tuple[Any, "BPTreeNode"]:
        """Move the upper half of the entries into a new right sibling.

        Returns the separator key for the parent and the new right node.
        """
        if len(self.entries) < 2:
            raise InvalidOperationError("cannot split a node with fewer than two entries")

        split_point = len(self.entries) // 2
        right = BPTreeNode(self.node_type, self.max_entries)
        right.entries = self.entries[split_point:]
        self.entries = self.entries[:split_point]

        if self.node_type is NodeType.INTERNAL:
            median = self.entries.pop()
            median_key = median.kv.key
            if median.child is not None:
                right.entries.insert(
                    0, IndexEntry(IndexKeyValue(median_key), median.child)
                )
            return median_key, right

        median_key = right.entries[0].kv.key
        right.next_leaf = self.next_leaf
        self.next_leaf = right
        return median_key, right

    def range(
        self,
        start: Any = None,
        end: Any = None,
        start_inclusive: bool = True,
        end_inclusive: bool = False,
    ) -> list[IndexEntry]:
        """Entries whose keys fall between ``start`` and ``end``.

        A bound of None is unbounded.
        """
        if start is None:
            start_pos = 0
        elif start_inclusive:
            start_pos = bisect_left(self.entries, start, key=_entry_key)
        else:
            start_pos = bisect_right(self.entries, start, key=_entry_key)

        if end is None:
            end_pos = len(self.entries)
        elif end_inclusive:
            end_pos = bisect_right(self.entries, end, key=_entry_key)
        else:
            end_pos = bisect_left(self.entries, end, key=_entry_key)

        return self.entries[start_pos:end_pos]

    def __repr__(self) -> str:
        keys = [entry.kv.key for entry in self.entries]
        return f"BPTreeNode({self.node_type.name}, max_entries={self.max_entries}, keys={keys!r})"