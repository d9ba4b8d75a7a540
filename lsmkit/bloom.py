"""Bloom filter using double hashing over two keyed SipHash-2-4 hashes."""

from __future__ import annotations

import math
from typing import Any, Iterable

_MASK64 = (1 << 64) - 1

_MAX_EXPECTED_ELEMENTS = 10_000_000
_MAX_BLOOM_FILTER_BITS = 100_000_000
_MAX_HASH_FUNCTIONS = 20
_DEFAULT_FALSE_POSITIVE_RATE = 0.01

_HASH1_KEYS = (0x0123456789ABCDEF, 0xFEDCBA9876543210)
_HASH2_KEYS = (0xABCDEF0123456789, 0x0123456789ABCDEF)


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _sip_round(v0: int, v1: int, v2: int, v3: int) -> tuple[int, int, int, int]:
    v0 = (v0 + v1) & _MASK64
    v1 = _rotl(v1, 13) ^ v0
    v0 = _rotl(v0, 32)
    v2 = (v2 + v3) & _MASK64
    v3 = _rotl(v3, 16) ^ v2
    v0 = (v0 + v3) & _MASK64
    v3 = _rotl(v3, 21) ^ v0
    v2 = (v2 + v1) & _MASK64
    v1 = _rotl(v1, 17) ^ v2
    v2 = _rotl(v2, 32)
    return v0, v1, v2, v3


def sip_hash(data: bytes, k0: int, k1: int) -> int:
    """Return the 64-bit SipHash-2-4 of ``data`` under the key ``(k0, k1)``."""
    k0 &= _MASK64
    k1 &= _MASK64
    v0 = k0 ^ 0x736F6D6570736575
    v1 = k1 ^ 0x646F72616E646F6D
    v2 = k0 ^ 0x6C7967656E657261
    v3 = k1 ^ 0x7465646279746573

    data = bytes(data)
    full = len(data) - len(data) % 8
    for offset in range(0, full, 8):
        m = int.from_bytes(data[offset:offset + 8], "little")
        v3 ^= m
        v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
        v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
        v0 ^= m

    tail = data[full:] + bytes(7 - (len(data) - full))
    m = int.from_bytes(tail + bytes([len(data) & 0xFF]), "little")
    v3 ^= m
    v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
    v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
    v0 ^= m

    v2 ^= 0xFF
    for _ in range(4):
        v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
    return v0 ^ v1 ^ v2 ^ v3


def _int_bytes(value: int) -> bytes:
    if -(1 << 63) <= value < (1 << 64):
        return (value & _MASK64).to_bytes(8, "little")
    length = (value.bit_length() + 8) // 8
    return length.to_bytes(8, "little") + value.to_bytes(length, "little", signed=True)


def item_bytes(item: Any) -> bytes:
    """Encode an item as a stable byte string for hashing.

    Strings, integers, booleans, byte strings and tuples of these are supported.
    """
    if isinstance(item, bool):
        return b"\x01" if item else b"\x00"
    if isinstance(item, int):
        return _int_bytes(item)
    if isinstance(item, str):
        return item.encode("utf-8") + b"\xff"
    if isinstance(item, (bytes, bytearray, memoryview)):
        raw = bytes(item)
        return len(raw).to_bytes(8, "little") + raw
    if isinstance(item, tuple):
        return b"".join(item_bytes(part) for part in item)
    raise TypeError(f"cannot hash item of type {type(item).__name__}")


class BloomFilter:
    """Space-efficient probabilistic set: no false negatives, some false positives."""

    def __init__(self, expected_elements: int, false_positive_rate: float) -> None:
        if expected_elements <= 0:
            expected_elements = 1
        elif expected_elements > _MAX_EXPECTED_ELEMENTS:
            expected_elements = _MAX_EXPECTED_ELEMENTS

        if not 0.0 < false_positive_rate < 1.0:
            false_positive_rate = _DEFAULT_FALSE_POSITIVE_RATE

        ln2_squared = math.log(2) ** 2
        size_bits = math.ceil(-expected_elements * math.log(false_positive_rate) / ln2_squared)
        size_bits = min(size_bits, _MAX_BLOOM_FILTER_BITS)

        num_hashes = math.ceil(size_bits / expected_elements * math.log(2))
        num_hashes = max(1, min(num_hashes, _MAX_HASH_FUNCTIONS))

        self._bits = bytearray((size_bits + 7) // 8)
        self._size_bits = size_bits
        self._num_hashes = num_hashes

    @classmethod
    def from_parts(cls, bits: bytes, size_bits: int, num_hashes: int) -> "BloomFilter":
        """Rebuild a filter from a serialized bit array and its parameters."""
        bits = bytearray(bits)
        if size_bits == 0:
            size_bits = len(bits) * 8
        else:
            size_bits = min(size_bits, _MAX_BLOOM_FILTER_BITS)
        filt = cls.__new__(cls)
        filt._bits = bits
        filt._size_bits = size_bits
        filt._num_hashes = max(1, min(num_hashes, _MAX_HASH_FUNCTIONS))
        return filt

    @property
    def size_bits(self) -> int:
        """Size of the filter in bits."""
        return self._size_bits

    @property
    def num_hashes(self) -> int:
        """Number of hash functions applied per item."""
        return self._num_hashes

    @property
    def bits(self) -> bytes:
        """The raw bit array, for serialization."""
        return bytes(self._bits)

    @bits.setter
    def bits(self, value: bytes) -> None:
        self._bits = bytearray(value)

    def set_parameters(self, size_bits: int, num_hashes: int) -> None:
        """Set the size and hash count of a deserialized filter."""
        self._size_bits = size_bits
        self._num_hashes = num_hashes

    def _indexes(self, item: Any) -> Iterable[int]:
        if self._size_bits == 0:
            raise ValueError("bloom filter has zero size")
        data = item_bytes(item)
        h1 = sip_hash(data, *_HASH1_KEYS)
        h2 = sip_hash(data, *_HASH2_KEYS)
        if h2 % 2 == 0:
            h2 += 1
        for i in range(self._num_hashes):
            yield ((h1 + i * h2) & _MASK64) % self._size_bits

    def insert(self, item: Any) -> None:
        """Add an item to the filter."""
        for index in self._indexes(item):
            self._bits[index // 8] |= 1 << (index % 8)

    def may_contain(self, item: Any) -> bool:
        """Return False if the item is certainly absent, True if it may be present."""
        return all(
            self._bits[index // 8] & (1 << (index % 8)) for index in self._indexes(item)
        )

    def __contains__(self, item: Any) -> bool:
        return self.may_contain(item)

    def false_positive_rate(self, num_elements: int) -> float:
        """Estimated false positive rate after ``num_elements`` insertions."""
        k = float(self._num_hashes)
        m = float(self._size_bits)
        n = float(num_elements)
        return (1.0 - math.exp(-k * n / m)) ** k

    def merge(self, other: "BloomFilter") -> None:
        """OR another filter of identical shape into this one."""
        if self._size_bits != other._size_bits or self._num_hashes != other._num_hashes:
            raise ValueError("Cannot merge Bloom filters of different sizes or hash counts")
        for i, byte in enumerate(other._bits):
            self._bits[i] |= byte

    def clear(self) -> None:
        """Remove every element from the filter."""
        self._bits[:] = bytes(len(self._bits))

    def __repr__(self) -> str:
        return f"BloomFilter(size_bits={self._size_bits}, num_hashes={self._num_hashes})"