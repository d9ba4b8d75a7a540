import pytest

from lsmkit.bloom import BloomFilter, item_bytes, sip_hash

_REF_K0 = int.from_bytes(bytes(range(8)), "little")
_REF_K1 = int.from_bytes(bytes(range(8, 16)), "little")


def test_sip_hash_reference_vectors():
    assert sip_hash(b"", _REF_K0, _REF_K1) == 0x726FDB47DD0E0E31
    assert sip_hash(bytes(range(8)), _REF_K0, _REF_K1) == 0x93F5F5799A932462
    assert sip_hash(bytes(range(15)), _REF_K0, _REF_K1) == 0xA129CA6149BE45E5


def test_sip_hash_depends_on_key():
    hashes = {
        sip_hash(b"apple", 1, 2),
        sip_hash(b"apple", 2, 1),
        sip_hash(b"apple", 3, 4),
    }
    assert len(hashes) == 3
    assert sip_hash(b"apple", 1, 2) == sip_hash(b"apple", 1, 2)
    assert all(0 <= h < 2**64 for h in hashes)


def test_item_bytes_encodings():
    assert item_bytes("ab") == b"ab\xff"
    assert item_bytes(1) == b"\x01" + bytes(7)
    assert item_bytes(b"xy") == (2).to_bytes(8, "little") + b"xy"
    assert item_bytes(("a", 1)) == b"a\xff" + b"\x01" + bytes(7)
    assert item_bytes(True) == b"\x01"


def test_item_bytes_rejects_unsupported():
    with pytest.raises(TypeError):
        item_bytes(1.5)


def test_bloom_filter_empty():
    filt = BloomFilter(100, 0.01)
    assert not filt.may_contain("test")


def test_bloom_filter_insert_and_check():
    filt = BloomFilter(100, 0.01)
    for word in ("apple", "banana", "cherry"):
        filt.insert(word)
    assert filt.may_contain("apple")
    assert filt.may_contain("banana")
    assert "cherry" in filt
    assert not filt.may_contain("grape")


def test_bloom_filter_false_positive_rate():
    expected = 1000
    target = 0.05
    filt = BloomFilter(expected, target)
    for i in range(expected):
        filt.insert(i)
    assert all(filt.may_contain(i) for i in range(expected))
    false_positives = sum(1 for i in range(expected, 2 * expected) if filt.may_contain(i))
    assert false_positives / expected < target * 2.0


def test_bloom_filter_merge():
    first = BloomFilter(100, 0.01)
    second = BloomFilter(100, 0.01)
    first.insert("apple")
    first.insert("banana")
    second.insert("cherry")
    second.insert("date")
    first.merge(second)
    for word in ("apple", "banana", "cherry", "date"):
        assert first.may_contain(word)


def test_bloom_filter_merge_incompatible():
    first = BloomFilter(100, 0.01)
    second = BloomFilter(1000, 0.01)
    with pytest.raises(ValueError):
        first.merge(second)


def test_bloom_filter_clear():
    filt = BloomFilter(100, 0.01)
    filt.insert("apple")
    filt.insert("banana")
    assert filt.may_contain("apple")
    filt.clear()
    assert not filt.may_contain("apple")
    assert not filt.may_contain("banana")
    assert set(filt.bits) == {0}


def test_bloom_filter_serialization():
    filt = BloomFilter(100, 0.01)
    filt.insert("apple")
    filt.insert("banana")
    restored = BloomFilter.from_parts(filt.bits, filt.size_bits, filt.num_hashes)
    assert restored.may_contain("apple")
    assert restored.may_contain("banana")
    assert not restored.may_contain("grape")
    assert restored.bits == filt.bits


def test_bit_array_length_matches_size():
    filt = BloomFilter(1000, 0.01)
    assert len(filt.bits) == (filt.size_bits + 7) // 8
    assert 1 <= filt.num_hashes <= 20


def test_parameter_defaults():
    assert BloomFilter(0, 0.01).size_bits == BloomFilter(1, 0.01).size_bits
    assert BloomFilter(100, 0.0).size_bits == BloomFilter(100, 0.01).size_bits
    assert BloomFilter(100, 1.5).num_hashes == BloomFilter(100, 0.01).num_hashes


def test_size_cap():
    filt = BloomFilter(10**9, 1e-10)
    assert filt.size_bits == 100_000_000


def test_from_parts_example():
    filt = BloomFilter.from_parts(bytes(13), 100, 7)
    assert filt.size_bits == 100
    assert filt.num_hashes == 7


def test_from_parts_clamps():
    filt = BloomFilter.from_parts(bytes(4), 0, 0)
    assert filt.size_bits == 32
    assert filt.num_hashes == 1
    assert BloomFilter.from_parts(bytes(4), 32, 50).num_hashes == 20


def test_set_parameters_and_bits():
    filt = BloomFilter(100, 0.01)
    filt.set_parameters(1000, 7)
    assert filt.size_bits == 1000
    assert filt.num_hashes == 7
    filt.bits = bytes(125)
    assert len(filt.bits) == 125
    filt.insert("x")
    assert filt.may_contain("x")


def test_false_positive_rate_estimate():
    filt = BloomFilter(1000, 0.01)
    assert filt.false_positive_rate(0) == 0.0
    rate = filt.false_positive_rate(500)
    assert 0.0 < rate <= 1.0
    assert filt.false_positive_rate(1000) > rate