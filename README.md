# lsmkit

Building blocks for log-structured storage engines. It is written in pure
Python and needs no third-party packages.

- `lsmkit.bloom.BloomFilter` is a Bloom filter. Its size comes from an
  expected element count and a target false positive rate. It uses double
  hashing over two keyed SipHash-2-4 hashes. The same module also provides
  `sip_hash(data, k0, k1)` and `item_bytes(item)`.
- `lsmkit.partitioned.PartitionedBloomFilter` splits one logical filter into
  independent partitions. A keyed hash routes each item to exactly one
  partition.
- `lsmkit.tree.BPlusTree` is an ordered index. It maps each key to a value and
  an optional `StorageReference`, and answers point lookups and range queries.
- `lsmkit.node.BPTreeNode` is a single B+ tree node. It keeps its entries
  sorted, splits itself on overflow and links leaves to their right
  siblings.
- `lsmkit.index_types` holds the shared pieces:
  - `StorageReference`
  - `IndexKeyValue`
  - the `TreeOps` abstract interface
  - the errors `TreeIndexError`, `KeyNotFoundError` and `InvalidOperationError`

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Bloom filters

```python
from lsmkit.bloom import BloomFilter

f = BloomFilter(1000, 0.01)
f.insert("apple")
f.insert("banana")

assert f.may_contain("apple")
assert "banana" in f
print(f.size_bits, f.num_hashes)
print(f.false_positive_rate(500))
```

Parameters are clamped to safe ranges:

| Parameter | Limit |
|---|---|
| Expected element count | 1 to 10 million |
| False positive rate | must lie in (0, 1), otherwise 0.01 is used |
| Bit array size | at most 100 million bits |
| Hash count | 1 to 20 |

Items may be strings, integers, booleans, byte strings, or tuples of these.
Any other type raises `TypeError`.

Other operations:

- `merge(other)` ORs another filter of the same size and hash count into this
  one. It raises `ValueError` if the two filters differ in either.
- `clear()` empties the filter.
- The `bits` property exposes the raw bit array for serialization.
- `BloomFilter.from_parts(bits, size_bits, num_hashes)` rebuilds a filter from
  those parts.
- `set_parameters(size_bits, num_hashes)` overrides the two values on an
  existing filter.

```python
from lsmkit.partitioned import PartitionedBloomFilter

p = PartitionedBloomFilter(1000, 0.01, 4)
p.insert_bulk(["apple", "cherry"])

print(p.may_contain_many(["apple", "cherry"]))  # [True, True]
print(p.may_contain_any(["banana", "cherry"]))  # True
print("apple" in p)                             # True
```

- A partition count of 0 or less means one partition per CPU.
- The partition count is capped at 64.
- The expected element count is shared out evenly between partitions.
- `get_partition(index)` returns a partition, or `None` if the index is out
  of range.
- `set_partitions(filters)` replaces the partitions. It raises `ValueError`
  for an empty list.

Lookups on absent items can return false positives, like any Bloom filter
query. Batch lookups run one after another, not in parallel.

## B+ tree index

```python
from lsmkit.tree import BPlusTree
from lsmkit.index_types import StorageReference, KeyNotFoundError

tree = BPlusTree(4)
tree.insert(1, "one")
tree.insert(2, "two", StorageReference("data.sst", 0, False))

print(tree.find(1).value)                   # one
print(tree.find(3))                         # None

print([kv.key for kv in tree.range(1, 3)])  # [1, 2]; the end is exclusive by default
print([kv.key for kv in tree.range(1, 2, end_inclusive=True)])  # [1, 2]

tree.delete(1)
try:
    tree.delete(1)
except KeyNotFoundError:
    pass

print(len(tree), tree.is_empty(), 2 in tree)
```

- `range(start, end, start_inclusive=True, end_inclusive=False)` accepts
  `None` for either bound, which leaves that side unbounded.
- Inserting an existing key replaces its value and storage reference.
- An order below 3 raises `ValueError`.
- `BPlusTree` keeps its keys in a sorted list. It does not build a tree of
  `BPTreeNode` objects.

## B+ tree nodes

```python
from lsmkit.node import BPTreeNode, NodeType

node = BPTreeNode(NodeType.LEAF, 2)
node.insert(10, "ten")
node.insert(20, "twenty")
separator, right = node.insert(30, "thirty")  # overflow splits the node

print(separator)                           # 20
print([e.kv.key for e in node.entries])    # [10]
print([e.kv.key for e in right.entries])   # [20, 30]
print(node.next_leaf is right)             # True
```

When a node splits, the separator key depends on the node type:

- In a leaf, the separator is the first key of the new right node.
- In an internal node, the median entry moves up as the separator.

`split()` raises `InvalidOperationError` on a node with fewer than two
entries. `find_position(key)` and `range(...)` work within a single node.

## What lsmkit does not do

lsmkit only provides in-memory structures. It does not read or write any
files. In particular it has no:

- on-disk sorted tables
- write-ahead log
- memtable
- compaction
- crash recovery

A `StorageReference` only records a file path, an offset and a tombstone
flag. Nothing in the package follows it to load a value.