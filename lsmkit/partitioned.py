"""Bloom filter split into independent partitions selected by a keyed hash."""

from __future__ import annotations

import os
from typing import Any, Iterable, Optional, Sequence

from lsmkit.bloom import BloomFilter, item_bytes, sip_hash

_MAX_PARTITIONS = 64
_PARTITION_KEYS = (0xDEADBEEF, 0xCAFEBABE)


class PartitionedBloomFilter:
    """A logical Bloom filter made of several smaller filters.

    Each item is routed to exactly one partition, so partitions can be
    queried independently of one another.
    """

    def __init__(
        self,
        expected_elements: int,
        false_positive_rate: float,
        num_partitions: int,
    ) -> None:
        if num_partitions <= 0:
            num_partitions = os.cpu_count() or 1
        num_partitions = min(num_partitions, _MAX_PARTITIONS)

        per_partition = -(-max(expected_elements, 0) // num_partitions)
        self._partitions = [
            BloomFilter(per_partition, false_positive_rate) for _ in range(num_partitions)
        ]
        self.expected_elements = expected_elements
        self.target_false_positive_rate = false_positive_rate

    @property
    def num_partitions(self) -> int:
        """Number of partitions."""
        return len(self._partitions)

    def _partition_for(self, item: Any) -> BloomFilter:
        digest = sip_hash(item_bytes(item), *_PARTITION_KEYS)
        return self._partitions[digest % len(self._partitions)]

    def insert(self, item: Any) -> None:
        """Add an item to its partition."""
        self._partition_for(item).insert(item)

    def insert_bulk(self, items: Iterable[Any]) -> None:
        """Add every item from ``items``."""
        for item in items:
            self.insert(item)

    def may_contain(self, item: Any) -> bool:
        """Return False if the item is certainly absent, True if it may be present."""
        return self._partition_for(item).may_contain(item)

    def __contains__(self, item: Any) -> bool:
        return self.may_contain(item)

    def may_contain_many(self, items: Iterable[Any]) -> list[bool]:
        """Check each item, returning one result per item in order."""
        return [self.may_contain(item) for item in items]

    def may_contain_any(self, items: Iterable[Any]) -> bool:
        """True if at least one of the items may be present."""
        return any(self.may_contain(item) for item in items)

    def may_contain_all(self, items: Iterable[Any]) -> bool:
        """True if every item may be present."""
        return all(self.may_contain(item) for item in items)

    def clear(self) -> None:
        """Empty every partition."""
        for partition in self._partitions:
            partition.clear()

    def get_partition(self, index: int) -> Optional[BloomFilter]:
        """Return the partition at ``index``, or None if there is none."""
        if 0 <= index < len(self._partitions):
            return self._partitions[index]
        return None

    def set_partitions(self, partitions: Sequence[BloomFilter]) -> None:
        """Replace the partitions, e.g. after deserialization."""
        partitions = list(partitions)
        if not partitions:
            raise ValueError("a partitioned bloom filter needs at least one partition")
        self._partitions = partitions

    def false_positive_rate(self, num_elements: int) -> float:
        """Average estimated false positive rate across partitions."""
        count = len(self._partitions)
        per_partition = num_elements // count
        return sum(p.false_positive_rate(per_partition) for p in self._partitions) / count

    def __repr__(self) -> str:
        return f"PartitionedBloomFilter(num_partitions={len(self._partitions)})"