import random

import pytest

from hll_core.hashing import MAX_HASH, Blake2bHasher, Xxh64Hasher
from hll_core.sketches import HyperLogLog, SketchConfig

P = 14
NUM_REGISTERS = 1 << P
# six standard errors keeps the accuracy checks stable
MARGIN = 1.04 / NUM_REGISTERS**0.5 * 6.0


def _assert_near(got: int, expected: int) -> None:
    diff = abs(got - expected) / expected
    assert diff <= MARGIN, (
        f"{got} is not within {MARGIN:.4f} of {expected} "
        f"({expected * (1 - MARGIN):.1f}, {expected * (1 + MARGIN):.1f})"
    )


def _random_sketch(n: int, seed: int, precision: int = P) -> HyperLogLog:
    rng = random.Random(seed)
    sketch = HyperLogLog.new(precision)
    for _ in range(n):
        sketch.add_hash(rng.getrandbits(64))
    return sketch


def test_empty_sketch_counts_zero() -> None:
    assert HyperLogLog.new(P).count() == 0
    assert HyperLogLog().count() == 0


def test_single_hash_counts_one() -> None:
    sketch = HyperLogLog.new(P)
    sketch.add_hash(1)
    assert sketch.count() == 1


@pytest.mark.parametrize("n", [1, 100, 1_000, 10_000, 100_000, 1_000_000])
def test_count_within_error_bound(n: int) -> None:
    _assert_near(_random_sketch(n, seed=n).count(), n)


@pytest.mark.parametrize("hasher", [Blake2bHasher(), Xxh64Hasher(), Xxh64Hasher(seed=0x12345678)])
@pytest.mark.parametrize("n", [100, 1_000, 10_000])
def test_count_of_hashed_integers(hasher, n: int) -> None:
    sketch = HyperLogLog.new(P)
    for i in range(n):
        sketch.add_object(i, hasher)
    _assert_near(sketch.count(), n)


def test_count_of_strings_with_default_hasher() -> None:
    sketch = HyperLogLog.new(P)
    sketch.add_many(f"user-{i}" for i in range(5_000))
    _assert_near(sketch.count(), 5_000)


def test_repetition_does_not_inflate_count() -> None:
    sketch = HyperLogLog.new(P)
    for i in range(100_000):
        sketch.add_object(i % 1000)
    _assert_near(sketch.count(), 1000)


def test_add_hash_is_idempotent() -> None:
    sketch = HyperLogLog.new(P)
    sketch.add_hash(0xDEADBEEF)
    snapshot = sketch.copy()
    sketch.add_hash(0xDEADBEEF)
    assert sketch == snapshot


def test_index_and_rank_extraction() -> None:
    sketch = HyperLogLog.new(4)
    sketch.add_hash((0b1 << 4) | 5)
    sketch.add_hash((0b100 << 4) | 3)
    sketch.add_hash(0)
    assert sketch.registers[5] == 1
    assert sketch.registers[3] == 3
    # no set bit above the index: rank is capped at Q + 1
    assert sketch.registers[0] == 61


@pytest.mark.parametrize("hash_value", [-1, 1 << 64, (1 << 64) | (0b10 << 4) | 7])
def test_add_hash_rejects_values_outside_64_bits(hash_value: int) -> None:
    sketch = HyperLogLog.new(4)
    with pytest.raises(ValueError):
        sketch.add_hash(hash_value)
    assert sketch.num_empty_registers() == sketch.number_registers()


def test_add_hash_accepts_full_64_bit_range() -> None:
    sketch = HyperLogLog.new(4)
    sketch.add_hash(0)
    sketch.add_hash(MAX_HASH)
    assert sketch.registers[0] == sketch.config.max_rank
    assert sketch.registers[15] == 1


def test_merge_with_empty_is_identity() -> None:
    sketch = _random_sketch(1_000, seed=1)
    before = sketch.copy()
    sketch.merge(HyperLogLog.new(P))
    assert sketch == before


def test_merge_with_self_is_idempotent() -> None:
    sketch = _random_sketch(1_000, seed=2)
    before = sketch.copy()
    sketch.merge(before)
    assert sketch == before


def test_merge_is_commutative() -> None:
    a = _random_sketch(2_000, seed=3)
    b = _random_sketch(3_000, seed=4)
    ab = a.copy()
    ab.merge(b)
    ba = b.copy()
    ba.merge(a)
    assert ab == ba
    _assert_near(ab.count(), 5_000)


def test_empty_merge_counts_zero() -> None:
    sketch = HyperLogLog.new(P)
    sketch.merge(HyperLogLog.new(P))
    assert sketch.count() == 0


def test_merge_overlapped() -> None:
    sketch = HyperLogLog.new(P)
    other = HyperLogLog.new(P)
    for i in range(1000):
        sketch.add_object(i)
        other.add_object(i)
    sketch.merge(other)
    _assert_near(sketch.count(), 1000)


def test_merge_rejects_precision_mismatch() -> None:
    with pytest.raises(ValueError):
        HyperLogLog.new(10).merge(HyperLogLog.new(11))


def test_merge_rejects_foreign_type() -> None:
    with pytest.raises(TypeError):
        HyperLogLog.new(10).merge(object())  # type: ignore[arg-type]


@pytest.mark.parametrize("precision", [3, 19])
def test_new_rejects_invalid_precision(precision: int) -> None:
    with pytest.raises(ValueError):
        HyperLogLog.new(precision)


def test_with_registers_rejects_wrong_length() -> None:
    with pytest.raises(ValueError):
        HyperLogLog.with_registers(bytes(NUM_REGISTERS - 1), P)


def test_with_registers_wraps_buffer() -> None:
    sketch = HyperLogLog.with_registers(bytes([1]) * NUM_REGISTERS, P)
    assert sketch.num_empty_registers() == 0
    assert sketch.histogram()[1] == NUM_REGISTERS


def test_size_helpers() -> None:
    sketch = HyperLogLog.new(P)
    assert sketch.number_registers() == NUM_REGISTERS
    assert sketch.max_byte_size() == NUM_REGISTERS
    assert sketch.error_rate() == pytest.approx(1.04 / 128)
    assert sketch.num_empty_registers() == NUM_REGISTERS


def test_equality_requires_same_precision() -> None:
    assert HyperLogLog.new(10) == HyperLogLog(SketchConfig(10))
    assert HyperLogLog.new(10) != HyperLogLog.new(11)


def test_add_object_rejects_unsupported_types() -> None:
    with pytest.raises(TypeError):
        HyperLogLog.new(P).add_object(["not", "hashable"])  # type: ignore[arg-type]


def test_datasketches_agrees_within_bounds() -> None:
    datasketches = pytest.importorskip("datasketches")
    n = 50_000
    reference = datasketches.hll_sketch(P)
    sketch = HyperLogLog.new(P)
    for i in range(n):
        reference.update(i)
        sketch.add_object(i)
    _assert_near(round(reference.get_estimate()), n)
    _assert_near(sketch.count(), n)
    # both sketches share P, so their estimates sit within two error bands of each other
    assert abs(sketch.count() - round(reference.get_estimate())) / n <= 2 * MARGIN
